"""Checkout authorization and settlement over the order ledgers.

Each public operation is a single transaction: every read, check and write
it performs commits together or not at all. A storage failure rolls the
session back and surfaces as ``StorageError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import errors, models
from ..config import get_settings
from ..models import Authorization, Order, Settlement
from . import ledger
from .gateway import GATEWAY_RESPONSES, OutcomeGenerator, generate_auth_token

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")
# largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")
BACKFILL_GATEWAY_CODE = "00"
BACKFILL_GATEWAY_MESSAGE = "Approved for settlement"


@dataclass(frozen=True)
class CheckoutResult:
    order_id: str
    result: str
    status: str
    outcome: str


@dataclass(frozen=True)
class SettlementResult:
    order_id: str
    payment_status: str


def _require_order_id(order_id: Any) -> str:
    if order_id is None or not str(order_id).strip():
        raise errors.ValidationError("Missing fields")
    return str(order_id).strip()


def _require_customer_id(customer_id: Any) -> int:
    if customer_id is None or str(customer_id).strip() == "":
        raise errors.ValidationError("Missing fields")
    if isinstance(customer_id, bool):
        raise errors.ValidationError("Invalid customerId")
    try:
        value = int(str(customer_id).strip())
    except ValueError as exc:
        raise errors.ValidationError("Invalid customerId") from exc
    # 0 counts as absent
    if value == 0:
        raise errors.ValidationError("Missing fields")
    return value


def _parse_amount(amount: Any) -> Decimal:
    if amount is None:
        raise errors.ValidationError("Missing fields")
    if isinstance(amount, bool):
        raise errors.ValidationError("Invalid amount")
    try:
        value = Decimal(str(amount))
        if not value.is_finite() or value <= 0 or value > MAX_AMOUNT:
            raise errors.ValidationError("Invalid amount")
        value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise errors.ValidationError("Invalid amount") from exc
    if value <= 0:
        raise errors.ValidationError("Invalid amount")
    return value


def _mask_card(last4: Optional[str]) -> Optional[str]:
    return f"****{str(last4)[-4:]}" if last4 else None


def authorize(
    db: Session,
    order_id: Any,
    customer_id: Any,
    amount: Any,
    generator: OutcomeGenerator,
    last4: Optional[str] = None,
) -> CheckoutResult:
    """Run a mock authorization and record it against the order.

    Re-checkout of a known ``order_id`` overwrites the order's customer,
    status and amount; every attempt appends a new authorization row.
    """
    order_id = _require_order_id(order_id)
    customer_id = _require_customer_id(customer_id)
    total = _parse_amount(amount)

    label = generator.next_outcome()
    response = GATEWAY_RESPONSES[label]
    now = models.utcnow()

    auth_token = auth_expires_at = None
    if response.auth_outcome == models.AUTH_SUCCESS:
        auth_token, auth_expires_at = generate_auth_token(
            order_id, now=now, ttl_days=get_settings().auth_token_ttl_days
        )

    try:
        order = ledger.find_order(db, order_id, for_update=True)
        if order is None:
            order = Order(
                order_id=order_id,
                customer_id=customer_id,
                status=response.order_status,
                total_amount=total,
                created_at=now,
                updated_at=now,
            )
            db.add(order)
        else:
            order.customer_id = customer_id
            order.status = response.order_status
            order.total_amount = total
            order.updated_at = now
        db.flush()

        db.add(
            Authorization(
                order_id=order_id,
                outcome=response.auth_outcome,
                gateway_code=response.gateway_code,
                gateway_message=response.gateway_message,
                amount=total,
                auth_token=auth_token,
                auth_expires_at=auth_expires_at,
                created_at=now,
            )
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("checkout_storage_failed", order_id=order_id, error=str(exc))
        raise errors.StorageError("Database write error") from exc

    logger.info(
        "checkout_completed",
        order_id=order_id,
        result=label,
        status=response.order_status,
        card=_mask_card(last4),
    )
    return CheckoutResult(
        order_id=order_id,
        result=label,
        status=response.order_status,
        outcome=response.auth_outcome,
    )


def _ensure_authorization(db: Session, order: Order) -> Authorization:
    existing = ledger.latest_authorization(db, order.order_id)
    if existing is not None:
        return existing

    now = models.utcnow()
    token, expires_at = generate_auth_token(
        order.order_id, now=now, ttl_days=get_settings().auth_token_ttl_days
    )
    backfill = Authorization(
        order_id=order.order_id,
        outcome=models.AUTH_SUCCESS,
        gateway_code=BACKFILL_GATEWAY_CODE,
        gateway_message=BACKFILL_GATEWAY_MESSAGE,
        amount=order.total_amount,
        auth_token=token,
        auth_expires_at=expires_at,
        created_at=now,
    )
    db.add(backfill)
    db.flush()
    logger.info("authorization_backfilled", order_id=order.order_id, auth_id=backfill.auth_id)
    return backfill


def settle(db: Session, order_id: Any, amount: Any) -> SettlementResult:
    """Capture funds for an AUTHORIZED order and mark it SETTLED.

    The amount is recorded as given; it is not compared with the order's
    ``total_amount``.
    """
    order_id = _require_order_id(order_id)
    settled_amount = _parse_amount(amount)

    try:
        order = ledger.find_order(db, order_id, for_update=True)
        if order is None:
            db.rollback()
            raise errors.NotFound("Order not found")
        if order.status != models.AUTHORIZED:
            current = order.status
            db.rollback()
            logger.info("settlement_rejected", order_id=order_id, status=current)
            raise errors.InvalidState("Order not authorized, cannot settle")

        _ensure_authorization(db, order)

        now = models.utcnow()
        db.add(Settlement(order_id=order_id, amount=settled_amount, settled_at=now))
        order.status = models.SETTLED
        order.updated_at = now
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("settlement_storage_failed", order_id=order_id, error=str(exc))
        raise errors.StorageError("Database write error") from exc

    logger.info("settlement_completed", order_id=order_id, amount=str(settled_amount))
    return SettlementResult(order_id=order_id, payment_status=models.SETTLED)
