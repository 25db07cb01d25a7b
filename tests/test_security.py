from datetime import timedelta

import pytest

from app.services.auth import (
    create_access_token,
    create_refresh_token,
    create_verification_token,
    decode_verification_token,
    hash_password,
    verify_password,
    verify_refresh_token,
    verify_token,
)
from app.utils.security import validate_password_strength


@pytest.mark.parametrize("password, valid", [
    ("pw123456", True),
    ("pw12345", False),
    ("password", False),
    ("12345678", False),
])
def test_validate_password_strength(password, valid):
    assert validate_password_strength(password)[0] is valid


def test_hash_and_verify_password():
    hashed = hash_password("pw123456")

    assert hashed != "pw123456"
    assert verify_password("pw123456", hashed)
    assert not verify_password("pw123457", hashed)
    assert not verify_password("pw123456", "")


def test_token_types_are_not_interchangeable():
    access = create_access_token({"sub": "u1", "sid": "s1"})
    refresh = create_refresh_token({"sub": "u1", "sid": "s1"})
    verification = create_verification_token("ann@example.com")

    assert verify_token(access)["sub"] == "u1"
    assert verify_token(refresh) is None
    assert verify_refresh_token(access) is None
    assert verify_refresh_token(refresh)["sid"] == "s1"
    assert decode_verification_token(verification) == "ann@example.com"
    assert decode_verification_token(access) is None


def test_expired_access_token():
    token = create_access_token({"sub": "u1", "sid": "s1"}, lifetime=timedelta(seconds=-5))

    assert verify_token(token) is None
