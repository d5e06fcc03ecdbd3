"""
Auth persistence helpers.
"""

from __future__ import annotations

from datetime import datetime

from core import db


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def find_user_by_email_or_username(*, email: str, username: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id
        FROM users
        WHERE email = $1
           OR lower(username) = lower($2)
        LIMIT 1
        """,
        normalize_email(email),
        (username or "").strip(),
    )


async def create_user(*, username: str, email: str, password_hash: str) -> int:
    user_id = await db.fetch_value(
        """
        INSERT INTO users (username, email, password_hash)
        VALUES ($1, $2, $3)
        RETURNING id
        """,
        (username or "").strip(),
        normalize_email(email),
        password_hash,
    )
    if user_id is None:
        raise RuntimeError("Failed to create user.")
    return int(user_id)


async def get_user_by_email(email: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, username, email, password_hash, created_at, admin_granted_at
        FROM users
        WHERE email = $1
        """,
        normalize_email(email),
    )


async def get_admin_granted_at(user_id: int) -> datetime | None:
    return await db.fetch_value(
        """
        SELECT admin_granted_at
        FROM users
        WHERE id = $1
        """,
        user_id,
    )
