"""
Auth security helpers: password hashing and access tokens.
"""

from __future__ import annotations

import os
import time
from functools import lru_cache
from typing import Any

import bcrypt
import jwt

from core.env import env_int

ADMIN_ROLE = "Admin"


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return os.environ.get("JWT_SECRET", "dev-change-this-secret").strip() or "dev-change-this-secret"


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG", "HS256").strip() or "HS256"


def jwt_issuer() -> str:
    return os.environ.get("JWT_ISSUER", "orbitfund-api").strip() or "orbitfund-api"


def jwt_audience() -> str:
    return os.environ.get("JWT_AUDIENCE", "orbitfund-clients").strip() or "orbitfund-clients"


def access_token_expire_minutes() -> int:
    minutes = env_int("ACCESS_TOKEN_EXPIRE_MIN", 120)
    return minutes if minutes > 0 else 120


def bcrypt_rounds() -> int:
    rounds = env_int("BCRYPT_ROUNDS", 12)
    return min(max(rounds, 4), 31)


def now_epoch_s() -> int:
    return int(time.time())


@lru_cache
def _dummy_hash() -> str:
    # Checked for unknown emails so login takes the same time either way.
    return bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=bcrypt_rounds())).decode("utf-8")


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=bcrypt_rounds())).decode("utf-8")


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or _dummy_hash()).encode("utf-8")
    if not password:
        return False
    try:
        matched = bcrypt.checkpw(password, hashed)
    except ValueError:
        return False
    return matched and bool(password_hash)


def build_access_token(*, user_id: int, username: str, email: str, is_admin: bool) -> str:
    issued_at = now_epoch_s()
    expires_at = issued_at + (access_token_expire_minutes() * 60)

    payload: dict[str, Any] = {
        "sub": str(user_id),
        "name": username,
        "email": email,
        "type": "access",
        "iss": jwt_issuer(),
        "aud": jwt_audience(),
        "iat": issued_at,
        "exp": expires_at,
    }
    # Role claim is present only for admins.
    if is_admin:
        payload["role"] = ADMIN_ROLE
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(
            raw,
            jwt_secret(),
            algorithms=[jwt_algorithm()],
            audience=jwt_audience(),
            issuer=jwt_issuer(),
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Access token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != "access":
        raise AuthSecurityError("Token is not an access token.")

    return payload
