from email.message import EmailMessage

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from storefront.config import Settings
from storefront.database import SessionLocal
from storefront.dependencies import get_mailer
from storefront.errors import MailDeliveryError
from storefront.main import app
from storefront.models import Customer
from storefront.services.mailer import Mailer

client = TestClient(app)

SIGNUP = {
    "email": "  Alice@Example.com ",
    "username": "AliceJ",
    "password": "s3cret-pass",
    "full_name": "Alice Johnson",
    "address_line1": "123 Main St",
    "city": "Atlanta",
    "state": "GA",
    "zip_code": "30301",
}


class RecordingMailer:
    def __init__(self):
        self.sent = []

    def send_verification(self, to_email, token):
        self.sent.append((to_email, token))


class BrokenMailer:
    def send_verification(self, to_email, token):
        raise MailDeliveryError("SMTP host is not configured")


def _customers() -> int:
    with SessionLocal() as db:
        return db.scalar(select(func.count()).select_from(Customer))


def test_register_verify_and_login(clean_db):
    mailer = RecordingMailer()
    app.dependency_overrides[get_mailer] = lambda: mailer

    resp = client.post("/auth/register", json=SIGNUP)
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["ok"] is True
    assert body["email"] == "alice@example.com"
    assert body["username"] == "alicej"
    assert "warning" not in body
    assert mailer.sent[0][0] == "alice@example.com"

    unverified = client.post("/auth/login", json={"usernameOrEmail": "alicej", "password": "s3cret-pass"})
    assert unverified.status_code == 403
    assert unverified.json()["needsVerification"] is True

    token = mailer.sent[0][1]
    verified = client.get("/auth/verify-email", params={"token": token})
    assert verified.status_code == 200
    assert verified.json()["ok"] is True

    reused = client.get("/auth/verify-email", params={"token": token})
    assert reused.status_code == 400

    login = client.post("/auth/login", json={"usernameOrEmail": "ALICE@example.com", "password": "s3cret-pass"})
    assert login.status_code == 200
    assert login.json()["user"] == {
        "customerId": body["customerId"],
        "full_name": "Alice Johnson",
        "email": "alice@example.com",
        "username": "alicej",
    }


def test_register_rejects_missing_fields_and_duplicates(clean_db):
    app.dependency_overrides[get_mailer] = RecordingMailer

    incomplete = client.post("/auth/register", json={"email": "bob@example.com"})
    assert incomplete.status_code == 400
    assert incomplete.json()["error"].startswith("Missing one or more required fields")

    assert client.post("/auth/register", json=SIGNUP).status_code == 201
    duplicate = client.post("/auth/register", json={**SIGNUP, "email": "other@example.com"})
    assert duplicate.status_code == 409
    assert _customers() == 1


def test_mail_failure_keeps_the_account(clean_db):
    app.dependency_overrides[get_mailer] = BrokenMailer

    resp = client.post("/auth/register", json=SIGNUP)

    assert resp.status_code == 201
    assert resp.json()["warning"].startswith("Account created, but verification email could not be sent")
    assert "message" not in resp.json()
    assert _customers() == 1


def test_login_failures(clean_db):
    app.dependency_overrides[get_mailer] = RecordingMailer
    client.post("/auth/register", json=SIGNUP)

    missing = client.post("/auth/login", json={"usernameOrEmail": "alicej"})
    assert missing.status_code == 400

    wrong = client.post("/auth/login", json={"usernameOrEmail": "alicej", "password": "nope"})
    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Invalid credentials."}

    unknown = client.post("/auth/login", json={"usernameOrEmail": "nobody", "password": "nope"})
    assert unknown.status_code == 401


def test_verify_requires_token(clean_db):
    resp = client.get("/auth/verify-email")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing verification token."}


def test_mailer_without_smtp_host_raises():
    mailer = Mailer(Settings(smtp_host=None, app_base_url="https://shop.test/"))
    with pytest.raises(MailDeliveryError):
        mailer.send_verification("a@example.com", "tok")


def test_verification_message_links_to_verify_endpoint():
    mailer = Mailer(Settings(app_base_url="https://shop.test/", mail_sender="noreply@shop.test"))

    message = mailer.build_verification("a@example.com", "abc 123")

    assert isinstance(message, EmailMessage)
    assert message["To"] == "a@example.com"
    assert mailer.verification_url("abc 123") == "https://shop.test/auth/verify-email?token=abc%20123"
    html = message.get_body(preferencelist=("html",)).get_content()
    assert "https://shop.test/auth/verify-email?token=abc%20123" in html
