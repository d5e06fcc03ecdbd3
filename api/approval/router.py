"""
Admin-only approval endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.storage import StorageBackend, get_storage

from . import schemas, service

router = APIRouter(
    prefix="/api/approval",
    dependencies=[Depends(auth_dependencies.require_admin)],
)


@router.get("/pending-ids")
async def get_pending_ids() -> list[int]:
    """
    Ids of submissions still waiting for review, newest first.
    """
    return await service.pending_ids()


@router.get("/{submission_id}", response_model=schemas.SubmissionDetail)
async def get_submission_detail(
    submission_id: int,
    storage: StorageBackend = Depends(get_storage),
) -> schemas.SubmissionDetail:
    return await service.submission_detail(submission_id, storage=storage)
