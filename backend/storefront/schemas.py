"""Pydantic schemas for request/response bodies."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: Optional[str] = Field(None, alias="orderId", max_length=64, description="External order id")
    customer_id: Optional[int] = Field(None, alias="customerId")
    amount: Optional[Decimal] = Field(None, description="Amount to authorize")
    last4: Optional[str] = Field(None, description="Card last four digits, logged masked")


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(..., alias="orderId")
    result: str = Field(..., description="SUCCESS, INSUFFICIENT_FUNDS, INCORRECT_DETAILS or SERVER_ERROR")
    status: str = Field(..., description="Order status after checkout")
    outcome: str = Field(..., description="Authorization outcome: SUCCESS, DECLINED or ERROR")


class SettleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: Optional[str] = Field(None, alias="orderId", max_length=64)
    amount: Optional[Decimal] = None


class SettleResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(..., alias="orderId")
    payment_status: str = Field(..., alias="paymentStatus")


class OrderOut(BaseModel):
    order_id: str
    customer_id: int
    status: str
    total_amount: float
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthorizationOut(BaseModel):
    auth_id: int
    order_id: str
    outcome: str
    gateway_code: Optional[str] = None
    gateway_message: Optional[str] = None
    amount: float
    auth_token: Optional[str] = None
    auth_expires_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SettlementOut(BaseModel):
    settlement_id: int
    order_id: str
    amount: float
    settled_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderDetailOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    order: OrderOut
    last_authorization: Optional[AuthorizationOut] = Field(None, alias="lastAuthorization")
    last_settlement: Optional[SettlementOut] = Field(None, alias="lastSettlement")


class StatsOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    totals: Dict[str, int]
    recent_orders: List[OrderOut] = Field(default_factory=list, alias="recentOrders")
    settled_total: float = 0


class SeedResult(BaseModel):
    message: str


class RegisterRequest(BaseModel):
    email: Optional[str] = Field(None, max_length=254)
    username: Optional[str] = Field(None, max_length=64)
    password: Optional[str] = None
    full_name: Optional[str] = Field(None, max_length=120)
    address_line1: Optional[str] = Field(None, max_length=200)
    address_line2: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=120)
    state: Optional[str] = Field(None, max_length=64)
    zip_code: Optional[str] = Field(None, max_length=16)


class RegisterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    customer_id: int = Field(..., alias="customerId")
    email: str
    username: str
    message: Optional[str] = None
    warning: Optional[str] = None


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username_or_email: Optional[str] = Field(None, alias="usernameOrEmail")
    password: Optional[str] = None


class UserOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: int = Field(..., alias="customerId")
    full_name: str
    email: Optional[str] = None
    username: Optional[str] = None


class LoginResponse(BaseModel):
    ok: bool = True
    user: UserOut


class VerifyResponse(BaseModel):
    ok: bool = True
    message: str
