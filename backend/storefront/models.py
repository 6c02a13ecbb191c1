"""SQLAlchemy models."""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)

from .database import Base

PENDING = "PENDING"
AUTHORIZED = "AUTHORIZED"
DECLINED = "DECLINED"
ERROR = "ERROR"
SETTLED = "SETTLED"
ORDER_STATUSES = (PENDING, AUTHORIZED, DECLINED, ERROR, SETTLED)

AUTH_SUCCESS = "SUCCESS"
AUTH_DECLINED = "DECLINED"
AUTH_ERROR = "ERROR"
AUTH_OUTCOMES = (AUTH_SUCCESS, AUTH_DECLINED, AUTH_ERROR)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _in_list(column: str, values) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


class Customer(Base):
    __tablename__ = "customers"

    customer_id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(120), nullable=False)
    address_line1 = Column(String(200), nullable=False)
    address_line2 = Column(String(200), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(64), nullable=True)
    zip_code = Column(String(16), nullable=False)
    email = Column(String(254), nullable=True, unique=True)
    username = Column(String(64), nullable=True, unique=True)
    password_hash = Column(String(128), nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    verify_token = Column(String(64), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Customer id={self.customer_id} username={self.username!r}>"


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (CheckConstraint(_in_list("status", ORDER_STATUSES), name="ck_orders_status"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(64), nullable=False, unique=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.customer_id"), nullable=False)
    status = Column(String(16), nullable=False, default=PENDING)
    total_amount = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Order order_id={self.order_id!r} status={self.status}>"


class Authorization(Base):
    __tablename__ = "authorizations"
    __table_args__ = (CheckConstraint(_in_list("outcome", AUTH_OUTCOMES), name="ck_authorizations_outcome"),)

    auth_id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(64), ForeignKey("orders.order_id"), nullable=False, index=True)
    outcome = Column(String(16), nullable=False)
    gateway_code = Column(String(8), nullable=True)
    gateway_message = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    auth_token = Column(String(128), nullable=True)
    auth_expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


class Settlement(Base):
    __tablename__ = "settlements"

    settlement_id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(64), ForeignKey("orders.order_id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    settled_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


class SchemaMigration(Base):
    __tablename__ = "schema_migrations"

    version = Column(Integer, primary_key=True, autoincrement=False)
    description = Column(String(200), nullable=False)
    applied_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
