from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext


DEFAULT_BCRYPT_ROUNDS = 12
REFRESH_TOKEN_DAYS = 7

ACCESS = "access"
REFRESH = "refresh"

_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=DEFAULT_BCRYPT_ROUNDS)
_JWT_ALG = "HS256"


def set_bcrypt_rounds(rounds: int) -> None:
    """Change the cost factor for new hashes. Existing hashes still verify."""
    _pwd.update(bcrypt__rounds=max(4, min(31, int(rounds))))


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except Exception:
        return False


def _encode(
    *,
    secret: str,
    user_id: str,
    email: str,
    role: str,
    token_type: str,
    expires: timedelta,
) -> str:
    if not secret:
        raise ValueError("jwt_secret_blank")

    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "id": str(user_id),
        "email": email,
        "role": role,
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int((now + expires).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALG)


def create_access_token(
    *,
    secret: str,
    user_id: str,
    email: str,
    role: str,
    expires_minutes: int,
) -> str:
    return _encode(
        secret=secret,
        user_id=user_id,
        email=email,
        role=role,
        token_type=ACCESS,
        expires=timedelta(minutes=max(1, int(expires_minutes))),
    )


def create_refresh_token(*, secret: str, user_id: str, email: str, role: str) -> str:
    return _encode(
        secret=secret,
        user_id=user_id,
        email=email,
        role=role,
        token_type=REFRESH,
        expires=timedelta(days=REFRESH_TOKEN_DAYS),
    )


def create_token_pair(
    *,
    secret: str,
    user_id: str,
    email: str,
    role: str,
    expires_minutes: int,
) -> Dict[str, str]:
    return {
        "accessToken": create_access_token(
            secret=secret, user_id=user_id, email=email, role=role, expires_minutes=expires_minutes
        ),
        "refreshToken": create_refresh_token(secret=secret, user_id=user_id, email=email, role=role),
    }


def decode_token(*, token: str, secret: str, expected_type: str = ACCESS) -> Dict[str, Any]:
    """Verify signature + expiry and return the claims.

    Raises jwt.InvalidTokenError (or a subclass such as ExpiredSignatureError).
    A refresh token presented where an access token is expected is invalid, and
    vice versa.
    """
    if not token:
        raise jwt.InvalidTokenError("token_blank")
    if not secret:
        raise ValueError("jwt_secret_blank")
    payload = jwt.decode(token, secret, algorithms=[_JWT_ALG])
    if payload.get("type") != expected_type:
        raise jwt.InvalidTokenError("token_wrong_type")
    if not payload.get("id"):
        raise jwt.InvalidTokenError("token_missing_id")
    return payload
