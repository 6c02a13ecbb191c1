"""Read-only rollups for the dashboard and ``GET /stats``."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import errors
from ..models import Order, Settlement
from .ledger import newest_orders_first


def collect_stats(db: Session, recent_limit: int = 5) -> dict:
    try:
        status_rows = db.execute(select(Order.status, func.count()).group_by(Order.status)).all()
        total = db.scalar(select(func.count()).select_from(Order)) or 0
        settled_total = db.scalar(select(func.coalesce(func.sum(Settlement.amount), 0))) or 0
        recent = db.scalars(select(Order).order_by(*newest_orders_first()).limit(recent_limit)).all()
    except SQLAlchemyError as exc:
        raise errors.StorageError(str(exc)) from exc

    totals = {row[0]: row[1] for row in status_rows}
    totals["ALL"] = total
    return {
        "totals": totals,
        "recentOrders": list(recent),
        "settled_total": float(settled_total),
    }
