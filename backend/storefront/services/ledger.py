"""Reads and appends over the orders, authorizations and settlements tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import errors
from ..models import Authorization, Order, Settlement


@dataclass
class OrderDetail:
    order: Order
    last_authorization: Optional[Authorization]
    last_settlement: Optional[Settlement]


def newest_orders_first():
    return (Order.created_at.desc(), Order.id.desc())


def find_order(db: Session, order_id: str, for_update: bool = False) -> Optional[Order]:
    stmt = select(Order).where(Order.order_id == order_id)
    if for_update:
        stmt = stmt.with_for_update()
    return db.scalars(stmt).one_or_none()


def latest_authorization(db: Session, order_id: str) -> Optional[Authorization]:
    stmt = (
        select(Authorization)
        .where(Authorization.order_id == order_id)
        .order_by(Authorization.created_at.desc(), Authorization.auth_id.desc())
        .limit(1)
    )
    return db.scalars(stmt).first()


def latest_settlement(db: Session, order_id: str) -> Optional[Settlement]:
    stmt = (
        select(Settlement)
        .where(Settlement.order_id == order_id)
        .order_by(Settlement.settled_at.desc(), Settlement.settlement_id.desc())
        .limit(1)
    )
    return db.scalars(stmt).first()


def count_authorizations(db: Session, order_id: str) -> int:
    stmt = select(func.count()).select_from(Authorization).where(Authorization.order_id == order_id)
    return db.scalar(stmt) or 0


def get_order_detail(db: Session, order_id: str) -> OrderDetail:
    try:
        order = find_order(db, order_id)
        if order is None:
            raise errors.NotFound("Order not found")
        return OrderDetail(
            order=order,
            last_authorization=latest_authorization(db, order_id),
            last_settlement=latest_settlement(db, order_id),
        )
    except SQLAlchemyError as exc:
        raise errors.StorageError(str(exc)) from exc


def list_orders(db: Session, limit: int = 200, offset: int = 0) -> List[Order]:
    try:
        stmt = select(Order).order_by(*newest_orders_first()).offset(offset).limit(limit)
        return list(db.scalars(stmt).all())
    except SQLAlchemyError as exc:
        raise errors.StorageError(str(exc)) from exc
