"""
Approval business logic: pending queue and submission detail.

Detail responses never expose raw storage URLs; every stored key is turned
into a short-lived signed URL so private buckets work.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from starlette.concurrency import run_in_threadpool

from core.storage import StorageBackend, presign_expire_seconds

from . import repository, schemas

logger = logging.getLogger(__name__)


async def pending_ids() -> list[int]:
    ids = await repository.list_pending_ids()
    logger.info("pending_listed count=%s", len(ids))
    return ids


async def _sign_all(storage: StorageBackend, keys: list[str] | None, *, expires_in: int) -> list[str]:
    urls: list[str] = []
    for key in keys or []:
        if not key:
            continue
        urls.append(await run_in_threadpool(storage.presigned_url, key, expires_in=expires_in))
    return urls


async def submission_detail(submission_id: int, *, storage: StorageBackend) -> schemas.SubmissionDetail:
    row = None
    if 1 <= submission_id <= repository.MAX_SUBMISSION_ID:
        row = await repository.get_submission(submission_id)
    if row is None:
        logger.info("submission_not_found submission_id=%s", submission_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Submission {submission_id} not found.",
        )

    expires_in = presign_expire_seconds()
    detail = schemas.SubmissionDetail(
        id=int(row["id"]),
        title=row.get("title"),
        description=row.get("description"),
        goals=row.get("goals"),
        type=row.get("type"),
        launch_date=row.get("launch_date"),
        team_info=row.get("team_info"),
        funding_goal=row.get("funding_goal"),
        duration=row.get("duration"),
        budget_breakdown=row.get("budget_breakdown"),
        rewards=row.get("rewards"),
        status=row.get("status"),
        submitted_by=row.get("submitted_by"),
        created_at=row.get("created_at"),
        image_urls=await _sign_all(storage, row.get("image_keys"), expires_in=expires_in),
        video_urls=await _sign_all(storage, row.get("video_keys"), expires_in=expires_in),
        document_urls=await _sign_all(storage, row.get("document_keys"), expires_in=expires_in),
        url_expires_in=expires_in,
    )
    logger.info("submission_viewed submission_id=%s", submission_id)
    return detail
