"""
FastAPI router for mission submission intake.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from auth import dependencies as auth_dependencies
from core.storage import StorageBackend, get_storage

from . import schemas, service

router = APIRouter(prefix="/api/submission")

# Column limits: funding_goal numeric(14,2), duration integer.
MAX_FUNDING_GOAL = Decimal("1e12")
MAX_DURATION = 2**31 - 1


@router.post(
    "",
    response_model=schemas.SubmissionCreated,
    status_code=status.HTTP_201_CREATED,
)
async def submit_mission(
    title: str | None = Form(default=None, max_length=255),
    description: str | None = Form(default=None),
    goals: str | None = Form(default=None),
    type: str | None = Form(default=None, max_length=100),
    launch_date: date | None = Form(default=None, alias="launchDate"),
    team_info: str | None = Form(default=None, alias="teamInfo"),
    funding_goal: Decimal | None = Form(
        default=None, alias="fundingGoal", ge=0, lt=MAX_FUNDING_GOAL, decimal_places=2
    ),
    duration: int | None = Form(default=None, ge=0, le=MAX_DURATION),
    budget_breakdown: str | None = Form(default=None, alias="budgetBreakdown"),
    rewards: str | None = Form(default=None),
    images: list[UploadFile] | None = File(default=None),
    video: list[UploadFile] | None = File(default=None),
    documents: list[UploadFile] | None = File(default=None),
    claims: dict = Depends(auth_dependencies.get_current_claims),
    storage: StorageBackend = Depends(get_storage),
) -> schemas.SubmissionCreated:
    """
    Accept a mission proposal with optional images, videos and documents.

    Files that fail to upload are reported in `failed_files`; the proposal is
    still stored with the files that did upload.
    """
    fields = schemas.ProposalFields(
        title=title,
        description=description,
        goals=goals,
        type=type,
        launch_date=launch_date,
        team_info=team_info,
        funding_goal=funding_goal,
        duration=duration,
        budget_breakdown=budget_breakdown,
        rewards=rewards,
    )
    return await service.create_submission(
        fields,
        {"images": images or [], "videos": video or [], "documents": documents or []},
        storage=storage,
        submitted_by=auth_dependencies.current_user_id(claims),
    )
