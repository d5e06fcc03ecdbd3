"""
Submission persistence.

Schema comes from the dbmate migrations in `db/migrations/`. File references
are ordered text[] columns of object keys; `status` defaults to 'Pending'.
"""

from __future__ import annotations

from core import db

from .schemas import ProposalFields


async def insert_submission(
    fields: ProposalFields,
    *,
    image_keys: list[str],
    video_keys: list[str],
    document_keys: list[str],
    submitted_by: int | None = None,
) -> int:
    submission_id = await db.fetch_value(
        """
        INSERT INTO form_submissions (
            title, description, goals, type, launch_date, team_info,
            funding_goal, duration, budget_breakdown, rewards,
            image_keys, video_keys, document_keys, submitted_by
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14)
        RETURNING id
        """,
        fields.title,
        fields.description,
        fields.goals,
        fields.type,
        fields.launch_date,
        fields.team_info,
        fields.funding_goal,
        fields.duration,
        fields.budget_breakdown,
        fields.rewards,
        image_keys,
        video_keys,
        document_keys,
        submitted_by,
    )
    if submission_id is None:
        raise RuntimeError("Failed to insert submission.")
    return int(submission_id)
