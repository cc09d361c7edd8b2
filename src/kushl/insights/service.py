"""
Platform-wide statistics over published tasks.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone

from kushl.tasks.models import Project, Task, TaskStatus
from kushl.tasks.repository import ProjectRepository

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class PlatformStatistics:
    """Totals and averages shown on landing pages."""

    total_tasks: int = 0
    completed_tasks: int = 0
    total_payouts: float = 0.0
    average_payout: float = 0.0
    total_timeline_messages: int = 0
    average_timeline_messages: float = 0.0
    average_completion_time_hours: float = 0.0
    task_success_rate: float = 0.0
    active_projects: int = 0


@dataclass(frozen=True)
class CategoryCount:
    name: str
    count: int


def _published_at(task: Task) -> datetime:
    return task.published_at or _EPOCH


def _published(projects: list[Project]) -> list[Task]:
    return [task for project in projects for task in project.iter_tasks() if task.is_published]


def calculate_platform_statistics(projects: list[Project]) -> PlatformStatistics:
    """Aggregate published tasks across ``projects``.

    Completion time is measured from ``publishedAt`` to ``completedAt`` and
    only averaged over completed tasks that carry both stamps.
    """
    tasks = _published(projects)
    if not tasks:
        return PlatformStatistics()

    completed = [task for task in tasks if task.status is TaskStatus.COMPLETED]
    durations = [
        (task.completed_at - task.published_at).total_seconds() / 3600
        for task in completed
        if task.completed_at is not None and task.published_at is not None
    ]
    total_payouts = float(sum(task.price or 0 for task in tasks))
    total_messages = sum(len(task.timeline_messages) for task in tasks)

    return PlatformStatistics(
        total_tasks=len(tasks),
        completed_tasks=len(completed),
        total_payouts=total_payouts,
        average_payout=total_payouts / len(tasks),
        total_timeline_messages=total_messages,
        average_timeline_messages=total_messages / len(tasks),
        average_completion_time_hours=sum(durations) / len(durations) if durations else 0.0,
        task_success_rate=len(completed) / len(tasks) * 100,
        active_projects=sum(1 for project in projects if project.has_published_task),
    )


class InsightService:
    """Read-only statistics for marketing and explore pages."""

    def __init__(self, repository: ProjectRepository) -> None:
        self._repository = repository

    def platform_statistics(self) -> PlatformStatistics:
        return calculate_platform_statistics(self._repository.list_projects())

    def featured_tasks(self, limit: int = 6) -> list[Task]:
        """Most recently published tasks."""
        tasks = _published(self._repository.list_projects())
        tasks.sort(key=_published_at, reverse=True)
        return tasks[:limit]

    def tasks_by_category(self, category: str, limit: int = 4) -> list[Task]:
        tasks = [t for t in _published(self._repository.list_projects()) if t.category == category]
        tasks.sort(key=_published_at, reverse=True)
        return tasks[:limit]

    def popular_categories(self, limit: int = 6) -> list[CategoryCount]:
        """Categories with the most published tasks; ties keep first-seen order."""
        counts = Counter(t.category for t in _published(self._repository.list_projects()) if t.category)
        ranked: list[tuple[str, int]] = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [CategoryCount(name=name, count=count) for name, count in ranked[:limit]]
