import re

from sqlalchemy.exc import OperationalError

from app.core.config import settings
from app.core.dependencies import get_db
from app.errors.exceptions import DeliveryError
from app.main import app
from app.models import OtpVerification, User
from app.services import otp_service

PHONE = "+919876543210"
EMAIL = "a@b.com"


class BrokenSession:
    """Stands in for a session whose database is unreachable"""

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    execute = _fail
    commit = _fail

    def add(self, obj):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


def _send_otp(client, outbox, phone=PHONE, email=EMAIL):
    response = client.post("/api/send-otp", json={"phone": phone, "email": email})
    assert response.status_code == 200
    return outbox[-1]["otp"]


def test_full_registration_flow(client, outbox, db):
    pre_existing = {u.referral_code for u in db.query(User).all()}

    response = client.post("/api/send-otp", json={"phone": PHONE, "email": EMAIL})
    assert response.status_code == 200
    body = response.json()
    assert body == {"success": True, "message": "OTP sent successfully to your email"}
    code = outbox[-1]["otp"]
    assert re.fullmatch(r"\d{6}", code)

    response = client.post("/api/verify-otp", json={"phone": PHONE, "otp": code})
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = client.post("/api/register", json={
        "phone": PHONE, "email": EMAIL, "password": "secret1", "otp": code,
    })
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["token"]
    user = body["user"]
    assert set(user) == {"id", "userId", "username", "phone", "email", "referralCode"}
    assert user["phone"] == PHONE and user["email"] == EMAIL
    assert re.fullmatch(r"[A-Z0-9]{8}", user["referralCode"])
    assert user["referralCode"] not in pre_existing


def test_send_otp_validation(client, outbox):
    response = client.post("/api/send-otp", json={"phone": "9876543210", "email": EMAIL})
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid phone number"}

    response = client.post("/api/send-otp", json={"phone": PHONE, "email": "nope"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid email address"
    assert outbox == []


def test_send_otp_rejects_email_wider_than_column(client, outbox, db):
    long_email = "x" * 248 + "@mail.in"

    response = client.post("/api/send-otp", json={"phone": PHONE, "email": long_email})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid email address"}
    assert db.query(OtpVerification).count() == 0
    assert outbox == []


def test_send_otp_wrong_json_type_is_bad_request(client):
    response = client.post("/api/send-otp", json={"phone": 919876543210, "email": EMAIL})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["errors"]


def test_send_otp_succeeds_when_email_fails(client, db, monkeypatch):
    def broken_send(to, otp, phone):
        raise DeliveryError("smtp down")

    monkeypatch.setattr(otp_service, "send_otp_email", broken_send)

    response = client.post("/api/send-otp", json={"phone": PHONE, "email": EMAIL})
    assert response.status_code == 200
    assert "otp" not in response.json()
    assert db.query(OtpVerification).count() == 1


def test_send_otp_diagnostics_path_returns_code(client, outbox, monkeypatch):
    monkeypatch.setattr(settings, "EXPOSE_OTP_IN_RESPONSE", True)

    response = client.post("/api/send-otp", json={"phone": PHONE, "email": EMAIL})
    assert response.json()["otp"] == outbox[-1]["otp"]


def test_send_otp_storage_failure(client):
    app.dependency_overrides[get_db] = lambda: BrokenSession()

    response = client.post("/api/send-otp", json={"phone": PHONE, "email": EMAIL})
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to send OTP. Please try again."}


def test_verify_otp_twice_fails_second_time(client, outbox):
    code = _send_otp(client, outbox)

    assert client.post("/api/verify-otp", json={"phone": PHONE, "otp": code}).status_code == 200

    response = client.post("/api/verify-otp", json={"phone": PHONE, "otp": code})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid or expired OTP"


def test_verify_otp_missing_fields(client):
    response = client.post("/api/verify-otp", json={"phone": PHONE})
    assert response.status_code == 400
    assert response.json()["error"] == "Phone and OTP are required"


def test_register_errors(client, outbox):
    response = client.post("/api/register", json={"phone": PHONE, "email": EMAIL})
    assert response.status_code == 400
    assert response.json()["error"] == "All fields are required"

    code = _send_otp(client, outbox)
    response = client.post("/api/register", json={
        "phone": PHONE, "email": EMAIL, "password": "secret1", "otp": "000000",
    })
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid or expired OTP"

    payload = {"phone": PHONE, "email": EMAIL, "password": "secret1", "otp": code}
    assert client.post("/api/register", json=payload).status_code == 200

    code = _send_otp(client, outbox, email="other@b.com")
    response = client.post("/api/register", json={**payload, "email": "other@b.com", "otp": code})
    assert response.status_code == 400
    assert response.json()["error"] == "User already exists with this phone or email"


def test_register_with_referral_code(client, outbox, db):
    code = _send_otp(client, outbox)
    referrer = client.post("/api/register", json={
        "phone": PHONE, "email": EMAIL, "password": "secret1", "otp": code,
    }).json()["user"]

    code = _send_otp(client, outbox, phone="+911234567890", email="new@b.com")
    response = client.post("/api/register", json={
        "phone": "+911234567890", "email": "new@b.com", "password": "secret1",
        "otp": code, "referralCode": referrer["referralCode"],
    })
    assert response.status_code == 200

    response = client.post("/api/login", json={"phone": PHONE, "password": "secret1"})
    user = response.json()["user"]
    assert user["totalBalance"] == 50.0
    assert user["availableForWithdrawal"] == 50.0


def test_login_endpoint(client, outbox):
    code = _send_otp(client, outbox)
    client.post("/api/register", json={
        "phone": PHONE, "email": EMAIL, "password": "secret1", "otp": code,
    })

    response = client.post("/api/login", json={"email": EMAIL, "password": "secret1"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True and body["token"]
    user = body["user"]
    assert user["phone"] == PHONE
    assert user["fullName"] == "a"
    assert user["totalBalance"] == 0.0
    assert user["kycStatus"] == "NOT_SUBMITTED"
    assert user["isEmailVerified"] is True and user["isPhoneVerified"] is True

    response = client.post("/api/login", json={"phone": PHONE, "password": "badpass"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid password"

    response = client.post("/api/login", json={"phone": "+910000000000", "password": "secret1"})
    assert response.status_code == 401

    response = client.post("/api/login", json={"password": "secret1"})
    assert response.status_code == 400


def test_login_lockout_returns_forbidden(client, outbox):
    code = _send_otp(client, outbox)
    client.post("/api/register", json={
        "phone": PHONE, "email": EMAIL, "password": "secret1", "otp": code,
    })

    for _ in range(settings.MAX_LOGIN_ATTEMPTS):
        client.post("/api/login", json={"phone": PHONE, "password": "badpass"})

    response = client.post("/api/login", json={"phone": PHONE, "password": "secret1"})
    assert response.status_code == 403
    assert "locked" in response.json()["error"]


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "connected"}


def test_health_reports_database_down(client):
    app.dependency_overrides[get_db] = lambda: BrokenSession()

    response = client.get("/api/health")
    assert response.status_code == 500
    assert response.json()["status"] == "unhealthy"
    assert response.json()["database"] == "disconnected"
