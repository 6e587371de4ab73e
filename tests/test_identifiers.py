import re

import pytest

from app.errors.exceptions import IdentifierSpaceExhausted
from app.models import User
from app.services.registration_service import generate_unique
from app.utils import identifiers
from app.utils.validators import (
    is_valid_email,
    is_valid_password,
    is_valid_phone,
)


def test_user_id_format():
    user_id = identifiers.generate_user_id()
    assert re.fullmatch(r"BP\d{8}[1-9]\d{3}", user_id)


def test_user_id_embeds_clock(monkeypatch):
    monkeypatch.setattr(identifiers, "epoch_millis", lambda: 1734567890123)
    assert identifiers.generate_user_id()[2:10] == "67890123"


def test_username_format():
    for _ in range(50):
        assert re.fullmatch(r"BP[A-Z0-9]{5}", identifiers.generate_username())


def test_referral_code_format():
    for _ in range(50):
        assert re.fullmatch(r"[A-Z0-9]{8}", identifiers.generate_referral_code())


def test_otp_code_range():
    for _ in range(200):
        code = identifiers.generate_otp_code()
        assert len(code) == 6
        assert 100000 <= int(code) <= 999999


def test_generate_unique_skips_taken_candidates(db):
    db.add(User(
        user_id="BP000000001000", username="BPTAKEN", full_name="a",
        email="a@b.com", phone_number="+919876543210", password_hash="x",
        referral_code="TAKEN123",
    ))
    db.commit()

    candidates = iter(["BPTAKEN", "BPTAKEN", "BPFRESH"])
    assert generate_unique(db, User.username, lambda: next(candidates)) == "BPFRESH"


def test_generate_unique_gives_up(db):
    db.add(User(
        user_id="BP000000001000", username="BPTAKEN", full_name="a",
        email="a@b.com", phone_number="+919876543210", password_hash="x",
        referral_code="TAKEN123",
    ))
    db.commit()

    calls = []

    def always_taken():
        calls.append(1)
        return "BPTAKEN"

    with pytest.raises(IdentifierSpaceExhausted):
        generate_unique(db, User.username, always_taken, max_attempts=3)
    assert len(calls) == 3


@pytest.mark.parametrize("phone,ok", [
    ("+919876543210", True),
    ("919876543210", False),
    ("+91987654321", False),
    ("+9198765432100", False),
    ("+449876543210", False),
    ("+91987654321a", False),
    ("", False),
    (None, False),
])
def test_phone_format(phone, ok):
    assert is_valid_phone(phone) is ok


@pytest.mark.parametrize("email,ok", [
    ("a@b.com", True),
    ("first.last@mail.example.in", True),
    ("a@b", False),
    ("a b@c.com", False),
    ("@b.com", False),
    (None, False),
    ("x" * 247 + "@mail.in", True),
    ("x" * 248 + "@mail.in", False),
])
def test_email_format(email, ok):
    assert is_valid_email(email) is ok


def test_password_length_bounds():
    assert is_valid_password("secret")
    assert is_valid_password("x" * 20)
    assert not is_valid_password("short")
    assert not is_valid_password("x" * 21)
