"""Customer registration, login and email verification."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..dependencies import get_mailer
from ..services import accounts
from ..services.mailer import Mailer

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=schemas.RegisterResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: schemas.RegisterRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    registration = accounts.register(db, payload.model_dump(), mailer)
    return schemas.RegisterResponse(
        customer_id=registration.customer_id,
        email=registration.email,
        username=registration.username,
        message=registration.message,
        warning=registration.warning,
    )


@router.post("/login", response_model=schemas.LoginResponse)
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    user = accounts.login(db, payload.username_or_email, payload.password)
    return schemas.LoginResponse(
        user=schemas.UserOut(
            customer_id=user.customer_id,
            full_name=user.full_name,
            email=user.email,
            username=user.username,
        )
    )


@router.get("/verify-email", response_model=schemas.VerifyResponse)
def verify_email(token: Optional[str] = Query(None), db: Session = Depends(get_db)):
    accounts.verify_email(db, token)
    return schemas.VerifyResponse(message="Email verified successfully. You can now log in.")
