"""
Student workload limits and earnings derived from assigned tasks.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from kushl.pricing import calculate_student_earnings
from kushl.tasks.models import TaskStatus
from kushl.tasks.repository import ProjectRepository, TaskLocation, iter_task_locations

DEFAULT_CATEGORY = "General"

_COMPLETED_TASK_THRESHOLDS = ((10, 2), (25, 3), (50, 4))
_EARNINGS_THRESHOLDS = (
    (10_000, 2),
    (25_000, 3),
    (50_000, 4),
    (100_000, 5),
    (250_000, 6),
    (500_000, 7),
)


def calculate_student_task_limit(completed_count: int, total_earnings: float) -> int:
    """Concurrent tasks a student may hold.

    Starts at 1 and grows with completed tasks and with net earnings; the
    higher of the two ladders wins.

    >>> calculate_student_task_limit(25, 60_000)
    4
    """
    limit = 1
    for threshold, value in _COMPLETED_TASK_THRESHOLDS:
        if completed_count >= threshold:
            limit = value
    for threshold, value in _EARNINGS_THRESHOLDS:
        if total_earnings >= threshold:
            limit = max(limit, value)
    return limit


@dataclass(frozen=True)
class EligibilityResult:
    can_apply: bool
    task_limit: int
    active_tasks: int
    reason: str | None = None


class StudentService:
    """Read-only views over the tasks assigned to a student."""

    def __init__(self, repository: ProjectRepository) -> None:
        self._repository = repository

    def assigned_tasks(self, student_id: str) -> list[TaskLocation]:
        """Every task assigned to the student, with the project it belongs to."""
        return [
            location
            for location in iter_task_locations(self._repository.list_projects())
            if location.task.is_assigned_to(student_id)
        ]

    def completed_tasks(self, student_id: str) -> list[TaskLocation]:
        return [loc for loc in self.assigned_tasks(student_id) if loc.task.status is TaskStatus.COMPLETED]

    def gross_earnings(self, student_id: str) -> float:
        return sum(loc.task.price or 0 for loc in self.completed_tasks(student_id))

    def net_earnings(self, student_id: str) -> float:
        """Completed task prices minus platform commission."""
        return sum(calculate_student_earnings(loc.task.price or 0) for loc in self.completed_tasks(student_id))

    def task_categories(self, student_id: str) -> dict[str, int]:
        counts = Counter(loc.task.category or DEFAULT_CATEGORY for loc in self.completed_tasks(student_id))
        return dict(counts)

    def employers(self, student_id: str) -> list[str]:
        """Distinct owners of projects the student completed work for, in first-seen order."""
        owners: dict[str, None] = {}
        for location in self.completed_tasks(student_id):
            owners.setdefault(location.project.owner_id, None)
        return list(owners)

    def success_rate(self, student_id: str) -> float:
        """Percentage of assigned tasks that are completed; 0 without assignments."""
        assigned = self.assigned_tasks(student_id)
        if not assigned:
            return 0.0
        completed = sum(1 for loc in assigned if loc.task.status is TaskStatus.COMPLETED)
        return completed / len(assigned) * 100

    def can_apply_for_task(self, student_id: str) -> EligibilityResult:
        """Check the student's open assignments against their task limit."""
        assigned = self.assigned_tasks(student_id)
        active = sum(1 for loc in assigned if loc.task.status is not TaskStatus.COMPLETED)
        completed = [loc for loc in assigned if loc.task.status is TaskStatus.COMPLETED]
        earnings = sum(calculate_student_earnings(loc.task.price or 0) for loc in completed)
        limit = calculate_student_task_limit(len(completed), earnings)
        if active >= limit:
            return EligibilityResult(
                can_apply=False,
                task_limit=limit,
                active_tasks=active,
                reason=(
                    f"You can only work on {limit} task(s) at a time. "
                    "Complete your current tasks to unlock more slots."
                ),
            )
        return EligibilityResult(can_apply=True, task_limit=limit, active_tasks=active)
