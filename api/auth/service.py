"""
Auth business logic.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import HTTPException, status

from . import repository, schemas, security

logger = logging.getLogger(__name__)

_CONFLICT_DETAIL = "User with this email or username already exists."
_LOGIN_FAILED_DETAIL = "Invalid email or password."


async def register(payload: schemas.RegisterRequest) -> schemas.RegisterResponse:
    existing = await repository.find_user_by_email_or_username(
        email=payload.email,
        username=payload.username,
    )
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_CONFLICT_DETAIL)

    password_hash = security.hash_password(payload.password)
    try:
        user_id = await repository.create_user(
            username=payload.username,
            email=payload.email,
            password_hash=password_hash,
        )
    except asyncpg.UniqueViolationError as exc:
        # Lost a race with a concurrent registration for the same identity.
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_CONFLICT_DETAIL) from exc

    logger.info("user_registered user_id=%s", user_id)
    return schemas.RegisterResponse(message="User registered successfully!", user_id=user_id)


async def login(payload: schemas.LoginRequest) -> schemas.LoginResponse:
    user_row = await repository.get_user_by_email(payload.email)

    # Always run a bcrypt check so unknown emails and bad passwords look the same.
    stored_hash = str(user_row["password_hash"]) if user_row is not None else None
    if not security.verify_password(payload.password, stored_hash) or user_row is None:
        logger.info("login_failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_LOGIN_FAILED_DETAIL,
        )

    token = security.build_access_token(
        user_id=int(user_row["id"]),
        username=str(user_row["username"]),
        email=str(user_row["email"]),
        is_admin=user_row.get("admin_granted_at") is not None,
    )
    logger.info("user_logged_in user_id=%s", user_row["id"])
    return schemas.LoginResponse(
        token=token,
        expires_in=security.access_token_expire_minutes() * 60,
        username=str(user_row["username"]),
    )


def claims_from_access_token(access_token: str) -> dict:
    try:
        payload = security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access token subject.",
        )
    return payload


async def verify_admin(user_id: int) -> schemas.AdminStatusResponse:
    """
    Admin status comes from the database, never from the token's role claim.
    """
    granted_at = await repository.get_admin_granted_at(user_id)
    if granted_at is None:
        logger.info("verify_admin_denied user_id=%s", user_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User does not have administrative privileges.",
        )

    logger.info("verify_admin_ok user_id=%s", user_id)
    return schemas.AdminStatusResponse(is_admin=True, granted_at=granted_at)
