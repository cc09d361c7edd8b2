"""
Recurring-task completion and periodic reset.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from kushl.shared.exceptions import NotRecurringTaskError
from kushl.shared.logging import get_logger, log_with_context
from kushl.tasks.events import (
    Clock,
    IdFactory,
    post_timeline_message,
    record_edit,
    utc_now,
)
from kushl.tasks.models import RecurrenceHistory, Task, TaskStatus, generate_id
from kushl.tasks.repository import ProjectRepository, TaskLocation, iter_task_locations

logger = get_logger(__name__)

DUE_AGAIN_MESSAGE = "Task is due again"


def add_months(value: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the end of the month.

    >>> add_months(datetime(2024, 1, 31), 1)
    datetime.datetime(2024, 2, 29, 0, 0)
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def next_due_date(status: TaskStatus, base: datetime) -> datetime:
    """Next due date for a recurring status, counted from ``base``.

    Raises:
        ValueError: ``status`` is not a recurring column.
    """
    if status is TaskStatus.RECURRING_DAILY:
        return base + timedelta(days=1)
    if status is TaskStatus.RECURRING_WEEKLY:
        return base + timedelta(weeks=1)
    if status is TaskStatus.RECURRING_MONTHLY:
        return add_months(base, 1)
    raise ValueError(f"Status {status.value!r} has no recurrence interval")


@dataclass(frozen=True)
class RecurrenceSweepResult:
    """Summary returned after a sweep."""

    checked: int = 0
    reset_task_ids: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.reset_task_ids)


class RecurringTaskEngine:
    """Completes recurring tasks and resets them once they fall due."""

    def __init__(
        self,
        repository: ProjectRepository,
        clock: Clock = utc_now,
        id_factory: IdFactory = generate_id,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._id_factory = id_factory

    def toggle_completion(self, task_id: str, user_id: str, user_name: str) -> Task:
        """Flip the completed flag of a recurring task.

        Completing records a history entry and schedules the next due date
        from now. Un-completing drops the latest history entry and restores
        the completion and due date recorded before it.

        Args:
            task_id: Recurring task to toggle.
            user_id: Acting user id.
            user_name: Acting user display name.

        Returns:
            The updated task.

        Raises:
            TaskNotFoundError: No task has this id.
            NotRecurringTaskError: The task is not in a recurring column.
        """

        def _toggle(location: TaskLocation) -> Task:
            task = location.task
            if not task.is_recurring:
                raise NotRecurringTaskError(task.id, task.status.value)
            now = self._clock()
            if task.is_recurring_completed:
                self._mark_incomplete(task, user_id, user_name, now)
            else:
                self._mark_complete(task, user_id, user_name, now)
            task.updated_at = now
            return task

        task = self._repository.modify_task(task_id, _toggle)
        logger.info(
            "Recurring task toggled",
            extra={"task_id": task_id, "completed": task.is_recurring_completed},
        )
        return task

    def _mark_complete(self, task: Task, user_id: str, user_name: str, now: datetime) -> None:
        due = next_due_date(task.status, now)
        task.is_recurring_completed = True
        task.last_completed_at = now
        task.next_due_date = due
        task.recurrence_type = task.recurrence
        task.recurrence_history.append(
            RecurrenceHistory(completed_at=now, completed_by=user_name, next_due_date=due)
        )
        record_edit(
            task,
            user_id=user_id,
            user_name=user_name,
            action="Marked recurring task as completed",
            at=now,
        )
        if task.posts_to_timeline:
            post_timeline_message(
                task,
                message_id=self._id_factory(),
                user_id=user_id,
                user_name=user_name,
                content=f"Marked task as completed. Next due: {due:%Y-%m-%d}",
                at=now,
            )

    def _mark_incomplete(self, task: Task, user_id: str, user_name: str, now: datetime) -> None:
        task.is_recurring_completed = False
        if task.recurrence_history:
            task.recurrence_history.pop()
        previous = task.recurrence_history[-1] if task.recurrence_history else None
        task.last_completed_at = previous.completed_at if previous else None
        task.next_due_date = previous.next_due_date if previous else None
        record_edit(
            task,
            user_id=user_id,
            user_name=user_name,
            action="Marked recurring task as incomplete",
            at=now,
        )
        if task.posts_to_timeline:
            post_timeline_message(
                task,
                message_id=self._id_factory(),
                user_id=user_id,
                user_name=user_name,
                content="Marked task as incomplete",
                at=now,
            )

    def sweep(self) -> RecurrenceSweepResult:
        """Reset every completed recurring task whose due date has passed.

        The due date is advanced by whole intervals until it lies after
        now. Storage is only written when at least one task was reset.
        """
        now = self._clock()
        projects = self._repository.list_projects()
        checked = 0
        reset: list[str] = []
        for location in iter_task_locations(projects):
            task = location.task
            if not task.is_recurring:
                continue
            checked += 1
            if not task.is_recurring_completed or task.next_due_date is None:
                continue
            if task.next_due_date > now:
                continue
            self._reset(task, now)
            reset.append(task.id)

        if reset:
            self._repository.save_projects(projects)
            log_with_context(
                logger,
                logging.INFO,
                "Recurring tasks reset",
                checked=checked,
                reset_count=len(reset),
                task_ids=reset,
            )
        else:
            logger.debug("No recurring tasks due", extra={"checked": checked})
        return RecurrenceSweepResult(checked=checked, reset_task_ids=reset)

    def _reset(self, task: Task, now: datetime) -> None:
        due = task.next_due_date
        while due <= now:
            due = next_due_date(task.status, due)
        task.is_recurring_completed = False
        task.next_due_date = due
        post_timeline_message(task, message_id=self._id_factory(), content=DUE_AGAIN_MESSAGE, at=now)
        task.updated_at = now
