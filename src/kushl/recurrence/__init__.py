"""
Recurring task completion, reset sweep and its background loop.
"""
from kushl.recurrence.engine import (
    RecurrenceSweepResult,
    RecurringTaskEngine,
    add_months,
    next_due_date,
)
from kushl.recurrence.supervisor import RecurringTaskSupervisor

__all__ = [
    "RecurrenceSweepResult",
    "RecurringTaskEngine",
    "RecurringTaskSupervisor",
    "add_months",
    "next_due_date",
]
