"""Customer sign-up, email verification and login."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Optional

import bcrypt
import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .. import errors
from ..errors import MailDeliveryError
from ..models import Customer
from .mailer import Mailer

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("email", "username", "password", "full_name", "address_line1", "city", "state", "zip_code")
MAIL_WARNING = "Account created, but verification email could not be sent in this environment."
MAIL_SENT = "Account created. Check your email to verify your address."


@dataclass
class Registration:
    customer_id: int
    email: str
    username: str
    message: Optional[str] = None
    warning: Optional[str] = None


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def _find_by_login(db: Session, email: str, username: str) -> Optional[Customer]:
    stmt = select(Customer).where(
        or_(func.lower(Customer.email) == email, func.lower(Customer.username) == username)
    )
    return db.scalars(stmt).first()


def register(db: Session, payload: dict, mailer: Mailer) -> Registration:
    missing = [field for field in REQUIRED_FIELDS if not payload.get(field)]
    if missing:
        raise errors.ValidationError(
            "Missing one or more required fields: " + ", ".join(REQUIRED_FIELDS) + "."
        )

    email = str(payload["email"]).strip().lower()
    username = str(payload["username"]).strip().lower()
    verify_token = secrets.token_hex(32)

    try:
        if _find_by_login(db, email, username) is not None:
            raise errors.Conflict(
                "An account with that email or username already exists. Use a different email/username."
            )
        customer = Customer(
            full_name=payload["full_name"],
            address_line1=payload["address_line1"],
            address_line2=payload.get("address_line2") or None,
            city=payload.get("city") or None,
            state=payload.get("state") or None,
            zip_code=payload["zip_code"],
            email=email,
            username=username,
            password_hash=hash_password(payload["password"]),
            verify_token=verify_token,
        )
        db.add(customer)
        db.flush()
        customer_id = customer.customer_id
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise errors.Conflict(
            "An account with that email or username already exists. Use a different email/username."
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.StorageError("Database write error") from exc

    registration = Registration(customer_id=customer_id, email=email, username=username)
    # the account is already committed; mail is best effort
    try:
        mailer.send_verification(email, verify_token)
        registration.message = MAIL_SENT
    except MailDeliveryError as exc:
        logger.warning("verification_mail_failed", customer_id=customer_id, error=str(exc))
        registration.warning = MAIL_WARNING
    logger.info("customer_registered", customer_id=customer_id, username=username)
    return registration


def login(db: Session, username_or_email: Optional[str], password: Optional[str]) -> Customer:
    if not username_or_email or not password:
        raise errors.ValidationError("Missing usernameOrEmail or password.")

    lookup = str(username_or_email).strip().lower()
    try:
        user = _find_by_login(db, lookup, lookup)
    except SQLAlchemyError as exc:
        raise errors.StorageError("Database read error") from exc

    if user is None or not user.password_hash or not check_password(password, user.password_hash):
        raise errors.AuthenticationFailed("Invalid credentials.")
    if not user.is_verified:
        raise errors.EmailNotVerified("Email not verified. Check your inbox.", needsVerification=True)
    return user


def verify_email(db: Session, token: Optional[str]) -> None:
    if not token:
        raise errors.ValidationError("Missing verification token.")

    try:
        customer = db.scalars(select(Customer).where(Customer.verify_token == token)).first()
        if customer is None:
            raise errors.ValidationError("Invalid or expired verification token.")
        customer.is_verified = True
        customer.verify_token = None
        customer_id = customer.customer_id
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.StorageError("Database write error") from exc
    logger.info("email_verified", customer_id=customer_id)
