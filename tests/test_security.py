from datetime import datetime, timedelta, timezone

import jwt
import pytest

from craftopia.auth.security import (
    ACCESS,
    REFRESH,
    create_access_token,
    create_refresh_token,
    create_token_pair,
    decode_token,
    hash_password,
    set_bcrypt_rounds,
    verify_password,
)

SECRET = "unit-secret"


@pytest.fixture(autouse=True)
def _fast_bcrypt():
    set_bcrypt_rounds(4)


def test_hash_and_verify():
    h = hash_password("Secret123")
    assert h != "Secret123"
    assert verify_password("Secret123", h)
    assert not verify_password("secret123", h)
    assert not verify_password("Secret123", "not-a-bcrypt-hash")
    assert not verify_password("", h)


def test_hash_blank_password_rejected():
    with pytest.raises(ValueError):
        hash_password("")


def test_access_token_claims():
    token = create_access_token(secret=SECRET, user_id="abc", email="a@mail.com", role="admin", expires_minutes=30)
    claims = decode_token(token=token, secret=SECRET)
    assert claims["id"] == "abc"
    assert claims["sub"] == "abc"
    assert claims["email"] == "a@mail.com"
    assert claims["role"] == "admin"
    assert claims["type"] == ACCESS
    assert 29 * 60 <= claims["exp"] - claims["iat"] <= 30 * 60


def test_refresh_token_lasts_seven_days():
    token = create_refresh_token(secret=SECRET, user_id="abc", email="a@mail.com", role="user")
    claims = decode_token(token=token, secret=SECRET, expected_type=REFRESH)
    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60


def test_token_types_are_not_interchangeable():
    pair = create_token_pair(secret=SECRET, user_id="abc", email="a@mail.com", role="user", expires_minutes=60)
    with pytest.raises(jwt.InvalidTokenError):
        decode_token(token=pair["refreshToken"], secret=SECRET)
    with pytest.raises(jwt.InvalidTokenError):
        decode_token(token=pair["accessToken"], secret=SECRET, expected_type=REFRESH)


def test_wrong_secret_and_expired_tokens_fail():
    token = create_access_token(secret=SECRET, user_id="abc", email="a@mail.com", role="user", expires_minutes=5)
    with pytest.raises(jwt.InvalidTokenError):
        decode_token(token=token, secret="other-secret")

    past = datetime.now(timezone.utc) - timedelta(hours=2)
    expired = jwt.encode(
        {"id": "abc", "type": ACCESS, "iat": int(past.timestamp()), "exp": int((past + timedelta(hours=1)).timestamp())},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_token(token=expired, secret=SECRET)


def test_blank_secret_refused():
    with pytest.raises(ValueError):
        create_access_token(secret="", user_id="abc", email="a@mail.com", role="user", expires_minutes=5)
    with pytest.raises(ValueError):
        decode_token(token="x.y.z", secret="")
