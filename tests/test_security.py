from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from study_buddy.core.config import settings
from study_buddy.core.errors import TokenRejected, Unauthenticated
from study_buddy.core.security import hash_password, issue_token, verify_password, verify_token


def test_password_hash_round_trip():
    """A stored hash verifies only the password it was made from."""
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_password_hash_is_salted():
    assert hash_password("secret123") != hash_password("secret123")


def test_verify_password_rejects_non_bcrypt_hash():
    assert not verify_password("secret123", "plain-text-not-a-hash")


def test_empty_password_cannot_be_hashed():
    with pytest.raises(ValueError):
        hash_password("")


def test_issued_token_verifies_to_user_id():
    token = issue_token(42)

    assert verify_token(token) == 42


def test_token_expires_after_one_day():
    token = issue_token(7)
    claims = jwt.get_unverified_claims(token)

    remaining = claims["exp"] - datetime.now(timezone.utc).timestamp()
    assert timedelta(hours=23, minutes=59).total_seconds() < remaining <= timedelta(hours=24).total_seconds()


def test_expired_token_is_rejected():
    """A correctly signed token past its expiry is still refused."""
    token = issue_token(42, expires_delta=timedelta(seconds=-5))

    with pytest.raises(TokenRejected) as exc:
        verify_token(token)
    assert exc.value.status_code == 403


def test_token_signed_with_other_key_is_rejected():
    forged = jwt.encode(
        {"sub": "42", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        "some-other-secret",
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(TokenRejected):
        verify_token(forged)


@pytest.mark.parametrize("token", ["garbage", "a.b.c", "Bearer"])
def test_malformed_token_is_rejected(token):
    with pytest.raises(TokenRejected):
        verify_token(token)


def test_token_without_numeric_subject_is_rejected():
    token = jwt.encode(
        {"sub": "ada", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(TokenRejected):
        verify_token(token)


@pytest.mark.parametrize("token", [None, ""])
def test_missing_token_is_unauthenticated(token):
    with pytest.raises(Unauthenticated) as exc:
        verify_token(token)
    assert not isinstance(exc.value, TokenRejected)
    assert exc.value.status_code == 401


def test_token_without_expiry_is_rejected():
    """Tokens must carry an expiry; a signed one without `exp` would never lapse."""
    token = jwt.encode({"sub": "1"}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    with pytest.raises(TokenRejected):
        verify_token(token)


def test_token_without_subject_is_rejected():
    token = jwt.encode(
        {"exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(TokenRejected):
        verify_token(token)
