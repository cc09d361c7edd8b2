"""
Pydantic input schemas for hierarchy and task operations.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from kushl.tasks.models import (
    BrandBrief,
    ChecklistItem,
    Compensation,
    Credential,
    RecurrenceType,
    Resource,
    TaskLabel,
    TaskPriority,
    TaskStatus,
    UserType,
)


def _reject_null(value):
    """Partial updates may omit a required field but never null it."""
    if value is None:
        raise ValueError("field may be omitted but not set to null")
    return value


class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    name: str = Field(..., min_length=1, max_length=255, description="Project name")
    description: str | None = Field(None, max_length=5000, description="Project description")


class ProjectUpdate(BaseModel):
    """Schema for renaming or describing a project. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)

    @field_validator("name")
    @classmethod
    def reject_null_name(cls, value: str | None) -> str | None:
        return _reject_null(value)


class _DatedCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def validate_date_range(self) -> "_DatedCreate":
        """Validate that the start date is not after the end date."""
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class SprintCreate(_DatedCreate):
    """Schema for creating a sprint inside a project."""


class CampaignCreate(_DatedCreate):
    """Schema for creating a campaign inside a sprint."""


class ScheduleUpdate(BaseModel):
    """Partial update for a sprint or campaign."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    start_date: datetime | None = None
    end_date: datetime | None = None

    @field_validator("name", "start_date", "end_date")
    @classmethod
    def reject_null_required(cls, value):
        return _reject_null(value)


class TaskCreate(BaseModel):
    """Schema for creating a regular task."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field("", max_length=20000)
    status: TaskStatus = TaskStatus.TO_DO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    recurrence: RecurrenceType | None = Field(
        None,
        description="Makes the task recurring; overrides status with the matching recurring column",
    )
    category: str | None = None
    price: float | None = Field(None, ge=0)
    skills: list[str] = Field(default_factory=list)
    estimated_hours: float | None = Field(None, ge=0)
    video_url: str | None = None
    standard_operating_procedure: str | None = None
    compensation: Compensation | None = None
    labels: list[TaskLabel] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    """Partial task update; only fields explicitly set are applied."""

    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = Field(None, max_length=20000)
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    assignee_id: str | None = None
    category: str | None = None
    price: float | None = Field(None, ge=0)
    skills: list[str] | None = None
    estimated_hours: float | None = Field(None, ge=0)
    video_url: str | None = None
    standard_operating_procedure: str | None = None
    compensation: Compensation | None = None
    labels: list[TaskLabel] | None = None
    checklist_items: list[ChecklistItem] | None = None
    credentials: list[Credential] | None = None
    brand_brief: BrandBrief | None = None
    resources: list[Resource] | None = None
    details_posted_to_timeline: bool | None = None

    @field_validator(
        "title",
        "status",
        "priority",
        "skills",
        "labels",
        "checklist_items",
        "credentials",
        "resources",
    )
    @classmethod
    def reject_null_required(cls, value):
        return _reject_null(value)


LibraryKind = Literal["checklist_library", "credentials_library", "brand_brief", "resource_library"]


class SpecialTaskCreate(BaseModel):
    """Schema for a library item (checklist, credentials, brand brief, resources)."""

    kind: LibraryKind
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field("", max_length=20000)
    category: str | None = None
    items: list[ChecklistItem] = Field(default_factory=list)
    credentials: list[Credential] = Field(default_factory=list)
    brand_brief: BrandBrief | None = None
    resources: list[Resource] = Field(default_factory=list)


class ReviewCreate(BaseModel):
    """Schema for a review left on a finished task."""

    reviewer_id: str = Field(..., min_length=1)
    reviewer_name: str
    reviewer_type: UserType
    recipient_id: str = Field(..., min_length=1)
    recipient_name: str
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field("", max_length=5000)


class ApplicationCreate(BaseModel):
    """Schema for a student applying to a published task."""

    student_id: str = Field(..., min_length=1)
    student_name: str
    student_email: str
    note: str = Field("", max_length=5000)
