"""Order checkout and lookup API."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import schemas
from ..config import get_settings
from ..database import get_db
from ..dependencies import get_outcome_generator
from ..services import checkout, ledger
from ..services.gateway import OutcomeGenerator

settings = get_settings()
router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("", response_model=List[schemas.OrderOut])
def list_orders(
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return ledger.list_orders(db, limit=limit, offset=offset)


@router.post("/checkout", response_model=schemas.CheckoutResponse)
def checkout_order(
    payload: schemas.CheckoutRequest,
    db: Session = Depends(get_db),
    generator: OutcomeGenerator = Depends(get_outcome_generator),
):
    result = checkout.authorize(
        db,
        order_id=payload.order_id,
        customer_id=payload.customer_id,
        amount=payload.amount,
        generator=generator,
        last4=payload.last4,
    )
    return schemas.CheckoutResponse(
        order_id=result.order_id,
        result=result.result,
        status=result.status,
        outcome=result.outcome,
    )


@router.get("/{order_id}", response_model=schemas.OrderDetailOut)
def get_order(order_id: str, db: Session = Depends(get_db)):
    detail = ledger.get_order_detail(db, order_id)
    return schemas.OrderDetailOut(
        order=detail.order,
        last_authorization=detail.last_authorization,
        last_settlement=detail.last_settlement,
    )
