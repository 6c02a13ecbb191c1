"""Settlement API."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import checkout

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/settle", response_model=schemas.SettleResponse)
def settle_payment(payload: schemas.SettleRequest, db: Session = Depends(get_db)):
    result = checkout.settle(db, order_id=payload.order_id, amount=payload.amount)
    return schemas.SettleResponse(order_id=result.order_id, payment_status=result.payment_status)
