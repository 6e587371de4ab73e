from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.errors.exceptions import (
    DeliveryError,
    OtpInvalid,
    PersistenceError,
    ValidationError,
)
from app.models import OtpVerification
from app.services import otp_service
from app.utils.time_utils import utc_now

PHONE = "+919876543210"
EMAIL = "a@b.com"


def test_issue_stores_row_and_sends_email(db, outbox, latest_otp):
    code, delivered = otp_service.issue_otp(db, PHONE, EMAIL)

    assert delivered is True
    assert outbox == [{"to": EMAIL, "otp": code, "phone": PHONE}]

    row = latest_otp()
    assert row.otp_code == code
    assert row.email == EMAIL
    assert row.is_verified is False
    lifetime = row.expires_at - row.created_at
    assert timedelta(minutes=9, seconds=59) < lifetime <= timedelta(minutes=10)


@pytest.mark.parametrize("phone,email,message", [
    ("9876543210", EMAIL, "Invalid phone number"),
    (None, EMAIL, "Invalid phone number"),
    (PHONE, "not-an-email", "Invalid email address"),
    (PHONE, None, "Invalid email address"),
])
def test_issue_rejects_bad_input_without_side_effects(db, outbox, phone, email, message):
    with pytest.raises(ValidationError) as excinfo:
        otp_service.issue_otp(db, phone, email)

    assert excinfo.value.message == message
    assert db.query(OtpVerification).count() == 0
    assert outbox == []


def test_delivery_failure_keeps_code_usable(db, monkeypatch):
    def broken_send(to, otp, phone):
        raise DeliveryError("smtp down")

    monkeypatch.setattr(otp_service, "send_otp_email", broken_send)

    code, delivered = otp_service.issue_otp(db, PHONE, EMAIL)

    assert delivered is False
    otp_service.verify_otp(db, PHONE, code)


def test_storage_failure_raises_persistence_error(db, monkeypatch):
    def failing_commit():
        raise OperationalError("INSERT", {}, Exception("database is down"))

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(PersistenceError):
        otp_service.issue_otp(db, PHONE, EMAIL)


def test_verify_succeeds_exactly_once(db, issue, latest_otp):
    code = issue()

    otp_service.verify_otp(db, PHONE, code)
    assert latest_otp().is_verified is True

    with pytest.raises(OtpInvalid):
        otp_service.verify_otp(db, PHONE, code)


def test_verify_after_expiry_fails(db, issue, latest_otp):
    code = issue()
    row = latest_otp()
    row.expires_at = utc_now() - timedelta(seconds=1)
    db.commit()

    with pytest.raises(OtpInvalid) as expired:
        otp_service.verify_otp(db, PHONE, code)
    with pytest.raises(OtpInvalid) as mismatch:
        otp_service.verify_otp(db, PHONE, "000000")

    assert expired.value.message == mismatch.value.message == "Invalid or expired OTP"


def test_verify_is_bound_to_phone(db, issue):
    code = issue()
    with pytest.raises(OtpInvalid):
        otp_service.verify_otp(db, "+911111111111", code)


def test_verify_requires_phone_and_code(db):
    with pytest.raises(ValidationError):
        otp_service.verify_otp(db, PHONE, None)
    with pytest.raises(ValidationError):
        otp_service.verify_otp(db, "", "123456")


def test_resend_keeps_both_codes_and_matches_newest(db, issue):
    first = issue()
    second = issue()

    row = otp_service.find_matching_otp(db, PHONE, second, utc_now())
    assert row is not None and row.otp_code == second
    # history is kept: the earlier code is still individually matchable
    assert otp_service.find_matching_otp(db, PHONE, first, utc_now()) is not None


def test_find_matching_otp_can_include_consumed(db, issue):
    code = issue()
    otp_service.verify_otp(db, PHONE, code)

    assert otp_service.find_matching_otp(db, PHONE, code, utc_now()) is None
    assert otp_service.find_matching_otp(
        db, PHONE, code, utc_now(), include_consumed=True
    ) is not None


def test_purge_expired_otps(db, issue, latest_otp):
    issue()
    stale = latest_otp()
    stale.expires_at = utc_now() - timedelta(minutes=1)
    db.commit()
    issue(phone="+919999999999")

    assert otp_service.purge_expired_otps(db) == 1
    assert db.query(OtpVerification).count() == 1
