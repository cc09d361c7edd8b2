"""
Domain exceptions shared across the marketplace core.
"""

from typing import Any


class KushlError(Exception):
    """Base exception for the marketplace core."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(KushlError):
    """An entity referenced by id does not exist."""


class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_id: str) -> None:
        super().__init__(f"Project not found: {project_id}", details={"project_id": project_id})


class SprintNotFoundError(NotFoundError):
    def __init__(self, sprint_id: str) -> None:
        super().__init__(f"Sprint not found: {sprint_id}", details={"sprint_id": sprint_id})


class CampaignNotFoundError(NotFoundError):
    def __init__(self, campaign_id: str) -> None:
        super().__init__(f"Campaign not found: {campaign_id}", details={"campaign_id": campaign_id})


class TaskNotFoundError(NotFoundError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}", details={"task_id": task_id})


class TimelineMessageNotFoundError(NotFoundError):
    def __init__(self, task_id: str, message_id: str) -> None:
        super().__init__(
            f"Timeline message not found: {message_id}",
            details={"task_id": task_id, "message_id": message_id},
        )


class ApplicationNotFoundError(NotFoundError):
    def __init__(self, task_id: str, application_id: str) -> None:
        super().__init__(
            f"Application not found: {application_id}",
            details={"task_id": task_id, "application_id": application_id},
        )


class SopNotFoundError(NotFoundError):
    def __init__(self, sop_id: str) -> None:
        super().__init__(
            f"Standard operating procedure not found: {sop_id}",
            details={"sop_id": sop_id},
        )


class ValidationError(KushlError):
    """Input or state rejected by a business rule."""


class NotRecurringTaskError(ValidationError):
    def __init__(self, task_id: str, status: str) -> None:
        super().__init__(
            "Cannot toggle completion for non-recurring task",
            details={"task_id": task_id, "status": status},
        )


class StorageError(KushlError):
    """The key-value store holds data that cannot be decoded."""
