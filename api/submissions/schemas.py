"""
Submission intake schemas.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

# Form folders in upload order; each maps to one text[] column.
FOLDERS = ("images", "videos", "documents")


@dataclass(frozen=True)
class ProposalFields:
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


@dataclass
class UploadOutcome:
    keys: dict[str, list[str]]
    urls: dict[str, list[str]]
    failed_files: list[str]

    @classmethod
    def empty(cls) -> UploadOutcome:
        return cls(
            keys={folder: [] for folder in FOLDERS},
            urls={folder: [] for folder in FOLDERS},
            failed_files=[],
        )

    @property
    def partial_failure(self) -> bool:
        return bool(self.failed_files)

    def all_keys(self) -> list[str]:
        return [key for folder in FOLDERS for key in self.keys[folder]]


class SubmissionCreated(BaseModel):
    submission_id: int
    message: str
    partial_failure: bool = False
    failed_files: list[str] = Field(default_factory=list)
    image_urls: list[str] = Field(default_factory=list)
    video_urls: list[str] = Field(default_factory=list)
    document_urls: list[str] = Field(default_factory=list)
