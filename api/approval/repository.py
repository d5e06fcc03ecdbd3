"""
Read-only queries behind the admin approval screens.
"""

from __future__ import annotations

from typing import Any

from core import db

PENDING_STATUS = "Pending"

# form_submissions.id is a bigserial.
MAX_SUBMISSION_ID = 2**63 - 1


async def list_pending_ids() -> list[int]:
    rows = await db.fetch_all(
        """
        SELECT id
        FROM form_submissions
        WHERE status = $1
        ORDER BY id DESC
        """,
        PENDING_STATUS,
    )
    return [int(row["id"]) for row in rows]


async def get_submission(submission_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT id, title, description, goals, type, launch_date, team_info,
               funding_goal, duration, budget_breakdown, rewards,
               image_keys, video_keys, document_keys, status,
               submitted_by, created_at
        FROM form_submissions
        WHERE id = $1
        """,
        submission_id,
    )
