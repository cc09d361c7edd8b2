"""
Pydantic models for the Project → Sprint → Campaign → Task hierarchy.

Documents are stored with camelCase keys. Keys that a model does not
declare are kept as extra fields so they survive a load/save cycle.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def generate_id() -> str:
    return uuid4().hex


class TaskStatus(str, Enum):
    """Kanban column a task sits in."""

    TO_DO = "to_do"
    DOING = "doing"
    DONE = "done"
    RECURRING_DAILY = "recurring_daily"
    RECURRING_WEEKLY = "recurring_weekly"
    RECURRING_MONTHLY = "recurring_monthly"
    BLOCKED = "blocked"
    CHECKLIST_LIBRARY = "checklist_library"
    CREDENTIALS_LIBRARY = "credentials_library"
    BRAND_BRIEF = "brand_brief"
    RESOURCE_LIBRARY = "resource_library"
    DRAFT = "draft"
    PUBLISHED = "published"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"
    ARCHIVED = "archived"

    @property
    def is_recurring(self) -> bool:
        return self.value.startswith("recurring_")


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class RecurrenceType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


RECURRING_STATUS_BY_TYPE: dict[RecurrenceType, TaskStatus] = {
    RecurrenceType.DAILY: TaskStatus.RECURRING_DAILY,
    RecurrenceType.WEEKLY: TaskStatus.RECURRING_WEEKLY,
    RecurrenceType.MONTHLY: TaskStatus.RECURRING_MONTHLY,
}
RECURRENCE_TYPE_BY_STATUS: dict[TaskStatus, RecurrenceType] = {
    status: kind for kind, status in RECURRING_STATUS_BY_TYPE.items()
}


class UserType(str, Enum):
    EMPLOYER = "employer"
    STUDENT = "student"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AssignmentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    REASSIGNED = "reassigned"


class StoredModel(BaseModel):
    """Base for every persisted document."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_document(self) -> dict[str, Any]:
        """Dump to the JSON-ready camelCase form used in storage."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RecurrenceHistory(StoredModel):
    completed_at: datetime
    completed_by: str
    next_due_date: datetime


class EditHistory(StoredModel):
    user_id: str
    user_name: str
    timestamp: datetime
    action: str | None = None


class TimelineMessage(StoredModel):
    id: str
    user_id: str
    user_name: str
    user_type: UserType
    content: str
    timestamp: datetime
    is_system_message: bool = False
    is_deleted: bool | None = None
    deleted_at: datetime | None = None
    related_to_message_id: str | None = None
    edited: bool | None = None
    edited_at: datetime | None = None


class TaskAssignment(StoredModel):
    student_id: str
    student_email: str
    student_name: str
    assigned_at: datetime
    status: AssignmentStatus = AssignmentStatus.ACTIVE


class TaskApplication(StoredModel):
    id: str
    student_id: str
    student_name: str
    student_email: str
    note: str = ""
    created_at: datetime
    updated_at: datetime
    status: ApplicationStatus = ApplicationStatus.PENDING


class Review(StoredModel):
    id: str
    reviewer_id: str
    reviewer_name: str
    reviewer_type: UserType
    recipient_id: str
    recipient_name: str
    task_id: str
    task_title: str
    rating: float
    comment: str = ""
    created_at: datetime


class Comment(StoredModel):
    id: str
    user_id: str
    user_name: str
    text: str
    created_at: datetime


class Compensation(StoredModel):
    amount: float
    currency: str
    type: Literal["fixed", "hourly"]


class Attachment(StoredModel):
    id: str
    name: str
    url: str
    type: str


class TaskLabel(StoredModel):
    id: str
    name: str
    color: str


class ChecklistItem(StoredModel):
    id: str
    text: str
    completed: bool = False


class Credential(StoredModel):
    id: str
    service: str
    username: str
    password: str
    notes: str | None = None


class BrandBrief(StoredModel):
    brand_name: str = ""
    client_name: str | None = None
    brand_colors: list[str] = Field(default_factory=list)
    brand_fonts: list[str] = Field(default_factory=list)
    brand_voice: str = ""
    target_audience: str = ""
    key_messages: list[str] = Field(default_factory=list)


class Resource(StoredModel):
    id: str
    name: str
    url: str
    type: str
    description: str | None = None


class Task(StoredModel):
    id: str
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.TO_DO
    priority: TaskPriority = TaskPriority.MEDIUM
    campaign_id: str
    created_at: datetime
    updated_at: datetime
    due_date: datetime | None = None
    assignee_id: str | None = None
    video_url: str | None = None
    is_published: bool = False
    published_at: datetime | None = None
    completed_at: datetime | None = None
    skills: list[str] = Field(default_factory=list)
    estimated_hours: float | None = None
    category: str | None = None
    price: float | None = None
    standard_operating_procedure: str | None = None
    edit_history: list[EditHistory] = Field(default_factory=list)
    # None means "not configured", which posts like True.
    auto_post_to_timeline: bool | None = None
    timeline_messages: list[TimelineMessage] = Field(default_factory=list)
    assignment: TaskAssignment | None = None
    comments: list[Comment] = Field(default_factory=list)
    compensation: Compensation | None = None
    attachments: list[Attachment] = Field(default_factory=list)
    applications: list[TaskApplication] = Field(default_factory=list)
    employer_review: Review | None = None
    student_review: Review | None = None
    labels: list[TaskLabel] = Field(default_factory=list)
    checklist_items: list[ChecklistItem] = Field(default_factory=list)
    credentials: list[Credential] = Field(default_factory=list)
    brand_brief: BrandBrief | None = None
    resources: list[Resource] = Field(default_factory=list)
    recurrence_type: RecurrenceType | None = None
    last_completed_at: datetime | None = None
    next_due_date: datetime | None = None
    recurrence_history: list[RecurrenceHistory] = Field(default_factory=list)
    is_recurring_completed: bool = False
    details_posted_to_timeline: bool | None = None
    created_by: str | None = None
    creator_name: str | None = None

    @property
    def is_recurring(self) -> bool:
        return self.status.is_recurring

    @property
    def recurrence(self) -> RecurrenceType | None:
        """Recurrence interval implied by the status column."""
        return RECURRENCE_TYPE_BY_STATUS.get(self.status)

    @property
    def posts_to_timeline(self) -> bool:
        return self.auto_post_to_timeline is not False

    def is_assigned_to(self, student_id: str) -> bool:
        if self.assignee_id == student_id:
            return True
        return self.assignment is not None and self.assignment.student_id == student_id

    def reviews(self) -> list[Review]:
        return [review for review in (self.employer_review, self.student_review) if review is not None]


class Campaign(StoredModel):
    id: str
    name: str
    description: str | None = None
    start_date: datetime
    end_date: datetime
    sprint_id: str
    tasks: list[Task] = Field(default_factory=list)


class Sprint(StoredModel):
    id: str
    name: str
    description: str | None = None
    start_date: datetime
    end_date: datetime
    project_id: str
    campaigns: list[Campaign] = Field(default_factory=list)

    def find_campaign(self, campaign_id: str) -> Campaign | None:
        return next((c for c in self.campaigns if c.id == campaign_id), None)


class Project(StoredModel):
    id: str
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime
    owner_id: str
    sprints: list[Sprint] = Field(default_factory=list)

    def find_sprint(self, sprint_id: str) -> Sprint | None:
        return next((s for s in self.sprints if s.id == sprint_id), None)

    def iter_tasks(self) -> Iterator[Task]:
        for sprint in self.sprints:
            for campaign in sprint.campaigns:
                yield from campaign.tasks

    @property
    def has_published_task(self) -> bool:
        return any(task.is_published for task in self.iter_tasks())
