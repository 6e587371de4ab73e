import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="buzzpay-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["EXPOSE_OTP_IN_RESPONSE"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import app
from app.models import OtpVerification
from app.services import otp_service


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Capture OTP emails instead of talking to SMTP"""
    sent = []

    def fake_send(to, otp, phone):
        sent.append({"to": to, "otp": otp, "phone": phone})

    monkeypatch.setattr(otp_service, "send_otp_email", fake_send)
    return sent


@pytest.fixture
def client():
    app.dependency_overrides.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def issue(db):
    """Issue an OTP through the service and return the code"""
    def _issue(phone="+919876543210", email="a@b.com"):
        code, _ = otp_service.issue_otp(db, phone, email)
        return code
    return _issue


@pytest.fixture
def latest_otp(db):
    def _latest(phone="+919876543210"):
        db.expire_all()
        return (
            db.query(OtpVerification)
            .filter(OtpVerification.phone == phone)
            .order_by(OtpVerification.id.desc())
            .first()
        )
    return _latest
