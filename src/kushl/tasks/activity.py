"""
Task activity: comments, timeline messages and applications.
"""

from kushl.shared.exceptions import ApplicationNotFoundError, TimelineMessageNotFoundError
from kushl.shared.logging import get_logger
from kushl.tasks.events import (
    SYSTEM_USER_ID,
    SYSTEM_USER_NAME,
    Clock,
    IdFactory,
    post_timeline_message,
    utc_now,
)
from kushl.tasks.models import (
    ApplicationStatus,
    AssignmentStatus,
    Comment,
    TaskApplication,
    TaskAssignment,
    TimelineMessage,
    UserType,
    generate_id,
)
from kushl.tasks.repository import ProjectRepository, TaskLocation
from kushl.tasks.schemas import ApplicationCreate

logger = get_logger(__name__)

DELETED_MESSAGE_PLACEHOLDER = "This message was deleted"


class ActivityService:
    """Appends and edits the activity attached to a task."""

    def __init__(
        self,
        repository: ProjectRepository,
        clock: Clock = utc_now,
        id_factory: IdFactory = generate_id,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._id_factory = id_factory

    def add_comment(self, task_id: str, user_id: str, user_name: str, text: str) -> Comment:
        def _add(location: TaskLocation) -> Comment:
            now = self._clock()
            comment = Comment(
                id=self._id_factory(),
                user_id=user_id,
                user_name=user_name,
                text=text,
                created_at=now,
            )
            location.task.comments.append(comment)
            location.task.updated_at = now
            return comment

        return self._repository.modify_task(task_id, _add)

    def add_timeline_message(
        self,
        task_id: str,
        user_id: str,
        user_name: str,
        user_type: UserType,
        content: str,
        related_to_message_id: str | None = None,
    ) -> TimelineMessage:
        """Post a user message to a task's timeline.

        Args:
            task_id: Task to post on.
            user_id: Author id.
            user_name: Author display name.
            user_type: Whether the author is the employer or the student.
            content: Message body.
            related_to_message_id: Message this one replies to, if any.

        Returns:
            The stored message.

        Raises:
            TaskNotFoundError: No task has this id.
        """

        def _add(location: TaskLocation) -> TimelineMessage:
            now = self._clock()
            message = post_timeline_message(
                location.task,
                message_id=self._id_factory(),
                user_id=user_id,
                user_name=user_name,
                user_type=user_type,
                content=content,
                at=now,
                is_system_message=False,
            )
            message.related_to_message_id = related_to_message_id
            location.task.updated_at = now
            return message

        return self._repository.modify_task(task_id, _add)

    def edit_timeline_message(self, task_id: str, message_id: str, content: str) -> TimelineMessage:
        def _edit(location: TaskLocation) -> TimelineMessage:
            message = self._require_message(location, message_id)
            now = self._clock()
            message.content = content
            message.edited = True
            message.edited_at = now
            location.task.updated_at = now
            return message

        return self._repository.modify_task(task_id, _edit)

    def delete_timeline_message(self, task_id: str, message_id: str) -> TimelineMessage:
        """Soft-delete a message; it stays in place with placeholder content."""

        def _delete(location: TaskLocation) -> TimelineMessage:
            message = self._require_message(location, message_id)
            now = self._clock()
            message.content = DELETED_MESSAGE_PLACEHOLDER
            message.is_deleted = True
            message.deleted_at = now
            location.task.updated_at = now
            return message

        return self._repository.modify_task(task_id, _delete)

    def submit_application(self, task_id: str, data: ApplicationCreate) -> TaskApplication:
        def _submit(location: TaskLocation) -> TaskApplication:
            now = self._clock()
            application = TaskApplication(
                id=self._id_factory(),
                student_id=data.student_id,
                student_name=data.student_name,
                student_email=data.student_email,
                note=data.note,
                created_at=now,
                updated_at=now,
                status=ApplicationStatus.PENDING,
            )
            location.task.applications.append(application)
            location.task.updated_at = now
            return application

        application = self._repository.modify_task(task_id, _submit)
        logger.info(
            "Application submitted",
            extra={"task_id": task_id, "application_id": application.id, "student_id": data.student_id},
        )
        return application

    def get_student_application(self, task_id: str, student_id: str) -> TaskApplication | None:
        location = self._repository.find_task(task_id)
        if location is None:
            return None
        return next(
            (app for app in location.task.applications if app.student_id == student_id),
            None,
        )

    def update_application_status(
        self,
        task_id: str,
        application_id: str,
        status: ApplicationStatus,
        user_id: str | None = None,
        user_name: str | None = None,
    ) -> TaskApplication:
        """Approve or reject an application.

        Approval assigns the applicant to the task and announces the
        assignment on the timeline.

        Raises:
            TaskNotFoundError: No task has this id.
            ApplicationNotFoundError: The task has no such application.
        """

        def _update(location: TaskLocation) -> TaskApplication:
            task = location.task
            application = next((a for a in task.applications if a.id == application_id), None)
            if application is None:
                raise ApplicationNotFoundError(task_id, application_id)
            now = self._clock()
            application.status = status
            application.updated_at = now
            if status is ApplicationStatus.APPROVED:
                task.assignee_id = application.student_id
                task.assignment = TaskAssignment(
                    student_id=application.student_id,
                    student_email=application.student_email,
                    student_name=application.student_name,
                    assigned_at=now,
                    status=AssignmentStatus.ACTIVE,
                )
                task.details_posted_to_timeline = False
                post_timeline_message(
                    task,
                    message_id=self._id_factory(),
                    user_id=user_id or SYSTEM_USER_ID,
                    user_name=user_name or SYSTEM_USER_NAME,
                    content=f"{application.student_name} has been assigned to this task",
                    at=now,
                )
            task.updated_at = now
            return application

        application = self._repository.modify_task(task_id, _update)
        logger.info(
            "Application status updated",
            extra={"task_id": task_id, "application_id": application_id, "status": status.value},
        )
        return application

    @staticmethod
    def _require_message(location: TaskLocation, message_id: str) -> TimelineMessage:
        for message in location.task.timeline_messages:
            if message.id == message_id:
                return message
        raise TimelineMessageNotFoundError(location.task.id, message_id)
