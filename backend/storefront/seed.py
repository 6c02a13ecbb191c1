"""Demo data for local runs and the admin dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import errors, models
from .services import ledger

logger = structlog.get_logger(__name__)

DEMO_CUSTOMERS = (
    (1, "Alice Johnson", "123 Main St", "Apt 4B", "Atlanta", "GA", "30301"),
    (2, "Bob Smith", "456 Oak Ave", None, "Marietta", "GA", "30060"),
    (3, "Carol Lee", "789 Pine Rd", "Unit 12", "Kennesaw", "GA", "30144"),
    (4, "Dan Rivera", "22 Peachtree Ct", None, "Decatur", "GA", "30030"),
)

DEMO_ORDERS = (
    ("ORD1001", 1, models.PENDING, "75.50"),
    ("ORD1002", 1, models.AUTHORIZED, "49.99"),
    ("ORD1003", 2, models.DECLINED, "120.00"),
    ("ORD1004", 3, models.SETTLED, "200.00"),
)

DEMO_AUTHORIZATIONS = (
    ("ORD1002", models.AUTH_SUCCESS, "00", "Approved", "49.99"),
    ("ORD1003", models.AUTH_DECLINED, "05", "Do not honor", "120.00"),
    ("ORD1004", models.AUTH_SUCCESS, "00", "Approved", "200.00"),
)

DEMO_SETTLEMENTS = (("ORD1004", "200.00"),)

SAMPLE_ORDERS = (
    ("ORD9001", 1, models.AUTHORIZED, "45.50"),
    ("ORD9002", 2, models.DECLINED, "78.20"),
    ("ORD9003", 3, models.SETTLED, "23.99"),
    ("ORD9004", 4, models.ERROR, "51.77"),
    ("ORD9005", 1, models.AUTHORIZED, "67.40"),
    ("ORD9006", 2, models.AUTHORIZED, "15.99"),
    ("ORD9007", 3, models.DECLINED, "90.10"),
    ("ORD9008", 4, models.AUTHORIZED, "12.30"),
    ("ORD9009", 1, models.ERROR, "120.00"),
    ("ORD9010", 2, models.AUTHORIZED, "44.44"),
)


@dataclass
class SeedStats:
    created: int = 0
    skipped: int = 0

    def __iadd__(self, other: "SeedStats") -> "SeedStats":
        self.created += other.created
        self.skipped += other.skipped
        return self


def _seed_customers(db: Session) -> SeedStats:
    stats = SeedStats()
    existing = set(db.scalars(select(models.Customer.customer_id)))
    for customer_id, full_name, line1, line2, city, state, zip_code in DEMO_CUSTOMERS:
        if customer_id in existing:
            stats.skipped += 1
            continue
        db.add(
            models.Customer(
                customer_id=customer_id,
                full_name=full_name,
                address_line1=line1,
                address_line2=line2,
                city=city,
                state=state,
                zip_code=zip_code,
            )
        )
        stats.created += 1
    return stats


def _seed_orders(db: Session) -> SeedStats:
    stats = SeedStats()
    existing = set(db.scalars(select(models.Order.order_id)))
    fresh = set()
    for order_id, customer_id, status, amount in DEMO_ORDERS:
        if order_id in existing:
            stats.skipped += 1
            continue
        db.add(models.Order(order_id=order_id, customer_id=customer_id, status=status, total_amount=Decimal(amount)))
        fresh.add(order_id)
        stats.created += 1
    db.flush()

    # ledger rows only accompany orders created by this run
    for order_id, outcome, code, message, amount in DEMO_AUTHORIZATIONS:
        if order_id in fresh:
            db.add(
                models.Authorization(
                    order_id=order_id,
                    outcome=outcome,
                    gateway_code=code,
                    gateway_message=message,
                    amount=Decimal(amount),
                )
            )
    for order_id, amount in DEMO_SETTLEMENTS:
        if order_id in fresh:
            db.add(models.Settlement(order_id=order_id, amount=Decimal(amount)))
    return stats


def seed_demo_data(db: Session) -> SeedStats:
    try:
        stats = _seed_customers(db)
        db.flush()
        stats += _seed_orders(db)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.StorageError("Database write error (seed)") from exc
    logger.info("demo_data_seeded", created=stats.created, skipped=stats.skipped)
    return stats


def upsert_sample_orders(db: Session) -> int:
    """Insert or overwrite the sample orders; no authorization rows are written."""

    now = models.utcnow()
    try:
        for order_id, customer_id, status, amount in SAMPLE_ORDERS:
            order = ledger.find_order(db, order_id)
            if order is None:
                db.add(
                    models.Order(
                        order_id=order_id,
                        customer_id=customer_id,
                        status=status,
                        total_amount=Decimal(amount),
                        created_at=now,
                        updated_at=now,
                    )
                )
            else:
                order.customer_id = customer_id
                order.status = status
                order.total_amount = Decimal(amount)
                order.updated_at = now
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.StorageError("Database write error (orders)") from exc
    logger.info("sample_orders_upserted", count=len(SAMPLE_ORDERS))
    return len(SAMPLE_ORDERS)
