from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from storefront import errors
from storefront.database import SessionLocal
from storefront.models import Authorization, Order
from storefront.services import checkout, gateway, ledger


def _count(model, **filters) -> int:
    stmt = select(func.count()).select_from(model)
    for column, value in filters.items():
        stmt = stmt.where(getattr(model, column) == value)
    with SessionLocal() as db:
        return db.scalar(stmt)


def _authorize(order_id, *outcomes, customer_id=1, amount=50, last4=None):
    with SessionLocal() as db:
        return checkout.authorize(
            db,
            order_id=order_id,
            customer_id=customer_id,
            amount=amount,
            generator=gateway.FixedOutcomeGenerator(*outcomes),
            last4=last4,
        )


@pytest.mark.parametrize(
    "label, status, outcome, code",
    [
        (gateway.SUCCESS, "AUTHORIZED", "SUCCESS", "00"),
        (gateway.INSUFFICIENT_FUNDS, "DECLINED", "DECLINED", "51"),
        (gateway.INCORRECT_DETAILS, "DECLINED", "DECLINED", "14"),
        (gateway.SERVER_ERROR, "ERROR", "ERROR", "XX"),
    ],
)
def test_checkout_maps_gateway_outcome(clean_db, label, status, outcome, code):
    result = _authorize("ORD-MAP", label)

    assert (result.order_id, result.result, result.status, result.outcome) == ("ORD-MAP", label, status, outcome)
    with SessionLocal() as db:
        detail = ledger.get_order_detail(db, "ORD-MAP")
        assert detail.order.status == status
        assert detail.order.total_amount == Decimal("50.00")
        assert detail.last_authorization.outcome == outcome
        assert detail.last_authorization.gateway_code == code
        assert detail.last_authorization.amount == Decimal("50.00")
        assert detail.last_settlement is None
    assert _count(Order) == 1
    assert _count(Authorization, order_id="ORD-MAP") == 1


def test_only_successful_authorizations_carry_a_token(clean_db):
    _authorize("ORD-TOK", gateway.SUCCESS)
    _authorize("ORD-NOTOK", gateway.INCORRECT_DETAILS)

    with SessionLocal() as db:
        approved = ledger.latest_authorization(db, "ORD-TOK")
        declined = ledger.latest_authorization(db, "ORD-NOTOK")
        assert approved.auth_token.startswith("ORD-TOK_")
        assert approved.auth_expires_at is not None
        assert declined.auth_token is None
        assert declined.auth_expires_at is None


def test_repeat_checkout_overwrites_order_and_appends_authorization(clean_db):
    _authorize("ORD-RETRY", gateway.INSUFFICIENT_FUNDS, customer_id=1, amount=20)
    second = _authorize("ORD-RETRY", gateway.SUCCESS, customer_id=2, amount="35.10")

    assert second.status == "AUTHORIZED"
    assert _count(Order, order_id="ORD-RETRY") == 1
    assert _count(Authorization, order_id="ORD-RETRY") == 2
    with SessionLocal() as db:
        order = ledger.find_order(db, "ORD-RETRY")
        assert order.customer_id == 2
        assert order.total_amount == Decimal("35.10")
        assert order.updated_at >= order.created_at
        latest = ledger.latest_authorization(db, "ORD-RETRY")
        assert latest.outcome == "SUCCESS"
        assert latest.amount == Decimal("35.10")


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"order_id": None}, "Missing fields"),
        ({"order_id": "   "}, "Missing fields"),
        ({"customer_id": None}, "Missing fields"),
        ({"customer_id": 0}, "Missing fields"),
        ({"customer_id": "abc"}, "Invalid customerId"),
        ({"customer_id": "1.5"}, "Invalid customerId"),
        ({"amount": None}, "Missing fields"),
        ({"amount": "1e30"}, "Invalid amount"),
        ({"amount": "10000000000"}, "Invalid amount"),
        ({"amount": 0}, "Invalid amount"),
        ({"amount": -5}, "Invalid amount"),
        ({"amount": "NaN"}, "Invalid amount"),
        ({"amount": "Infinity"}, "Invalid amount"),
        ({"amount": "ten"}, "Invalid amount"),
    ],
)
def test_checkout_validation_rejects_without_writing(clean_db, kwargs, message):
    params = {"order_id": "ORD-BAD", "customer_id": 1, "amount": 10, "last4": None}
    params.update(kwargs)
    with SessionLocal() as db:
        with pytest.raises(errors.ValidationError) as excinfo:
            checkout.authorize(db, generator=gateway.FixedOutcomeGenerator(gateway.SUCCESS), **params)
    assert excinfo.value.message == message
    assert _count(Order) == 0
    assert _count(Authorization) == 0


def test_checkout_stores_customer_id_as_integer(clean_db):
    _authorize("ORD-CUST", gateway.SUCCESS, customer_id="7")

    with SessionLocal() as db:
        assert ledger.find_order(db, "ORD-CUST").customer_id == 7


def test_checkout_accepts_card_last4(clean_db):
    result = _authorize("ORD-CARD", gateway.SUCCESS, last4="4242")
    assert result.result == gateway.SUCCESS


def test_failed_order_write_leaves_no_authorization(clean_db, monkeypatch):
    def broken_flush(*_args, **_kwargs):
        raise OperationalError("INSERT INTO orders", {}, Exception("disk I/O error"))

    with SessionLocal() as db:
        monkeypatch.setattr(db, "flush", broken_flush)
        with pytest.raises(errors.StorageError):
            checkout.authorize(
                db,
                order_id="ORD-IOERR",
                customer_id=1,
                amount=10,
                generator=gateway.FixedOutcomeGenerator(gateway.SUCCESS),
            )

    assert _count(Order) == 0
    assert _count(Authorization) == 0


def test_failed_commit_rolls_back_both_rows(clean_db, monkeypatch):
    def broken_commit(*_args, **_kwargs):
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    with SessionLocal() as db:
        monkeypatch.setattr(db, "commit", broken_commit)
        with pytest.raises(errors.StorageError):
            checkout.authorize(
                db,
                order_id="ORD-LOCKED",
                customer_id=1,
                amount=10,
                generator=gateway.FixedOutcomeGenerator(gateway.SUCCESS),
            )

    assert _count(Order) == 0
    assert _count(Authorization) == 0
