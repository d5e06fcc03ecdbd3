"""
Approval API schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class SubmissionDetail(BaseModel):
    id: int
    title: str | None = None
    description: str | None = None
    goals: str | None = None
    type: str | None = None
    launch_date: date | None = None
    team_info: str | None = None
    funding_goal: Decimal | None = None
    duration: int | None = None
    budget_breakdown: str | None = None
    rewards: str | None = None
    status: str | None = None
    submitted_by: int | None = None
    created_at: datetime | None = None
    image_urls: list[str] = Field(default_factory=list)
    video_urls: list[str] = Field(default_factory=list)
    document_urls: list[str] = Field(default_factory=list)
    # Lifetime of the signed URLs above, in seconds.
    url_expires_in: int
