"""
Helpers that stamp edit history and timeline entries onto tasks.
"""

from collections.abc import Callable
from datetime import datetime, timezone

from kushl.tasks.models import EditHistory, Task, TimelineMessage, UserType

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]

SYSTEM_USER_ID = "system"
SYSTEM_USER_NAME = "System"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def record_edit(task: Task, *, user_id: str, user_name: str, action: str, at: datetime) -> None:
    task.edit_history.append(
        EditHistory(user_id=user_id, user_name=user_name, timestamp=at, action=action)
    )


def post_timeline_message(
    task: Task,
    *,
    message_id: str,
    content: str,
    at: datetime,
    user_id: str = SYSTEM_USER_ID,
    user_name: str = SYSTEM_USER_NAME,
    user_type: UserType = UserType.EMPLOYER,
    is_system_message: bool = True,
) -> TimelineMessage:
    message = TimelineMessage(
        id=message_id,
        user_id=user_id,
        user_name=user_name,
        user_type=user_type,
        content=content,
        timestamp=at,
        is_system_message=is_system_message,
    )
    task.timeline_messages.append(message)
    return message
