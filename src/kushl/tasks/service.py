"""
Hierarchy manager: CRUD over projects, sprints, campaigns and tasks.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

from kushl.shared.exceptions import (
    CampaignNotFoundError,
    ProjectNotFoundError,
    SprintNotFoundError,
    ValidationError,
)
from kushl.shared.logging import get_logger
from kushl.tasks.events import (
    Clock,
    IdFactory,
    post_timeline_message,
    record_edit,
    utc_now,
)
from kushl.tasks.models import (
    RECURRING_STATUS_BY_TYPE,
    AssignmentStatus,
    BrandBrief,
    Campaign,
    Project,
    Sprint,
    Task,
    TaskPriority,
    TaskStatus,
    generate_id,
)
from kushl.tasks.repository import ProjectRepository, TaskLocation
from kushl.tasks.schemas import (
    CampaignCreate,
    ProjectCreate,
    ProjectUpdate,
    ScheduleUpdate,
    SpecialTaskCreate,
    SprintCreate,
    TaskCreate,
    TaskUpdate,
)

logger = get_logger(__name__)

DEFAULT_SCHEDULE_LENGTH = timedelta(days=30)

# Task fields that must stay present in the stored document.
_REQUIRED_TASK_FIELDS = frozenset(
    {"title", "status", "priority", "skills", "labels", "checklist_items", "credentials", "resources"}
)


def _apply_schedule_update(target: Sprint | Campaign, data: ScheduleUpdate) -> None:
    """Apply set fields, keeping the merged window in date order.

    Raises:
        ValidationError: The resulting start date is after the end date.
    """
    changes = {
        name: getattr(data, name)
        for name in data.model_fields_set
        if getattr(data, name) is not None or name == "description"
    }
    start = changes.get("start_date", target.start_date)
    end = changes.get("end_date", target.end_date)
    if start > end:
        raise ValidationError(
            "start_date must not be after end_date",
            details={"id": target.id, "start_date": start.isoformat(), "end_date": end.isoformat()},
        )
    for name, value in changes.items():
        setattr(target, name, value)


class TaskService:
    """Creates, reads, updates and deletes the nested project hierarchy."""

    def __init__(
        self,
        repository: ProjectRepository,
        clock: Clock = utc_now,
        id_factory: IdFactory = generate_id,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def list_projects(self, owner_id: str | None = None) -> list[Project]:
        return self._repository.list_projects(owner_id)

    def get_project(self, project_id: str) -> Project | None:
        return self._repository.get_project(project_id)

    def create_project(self, data: ProjectCreate, owner_id: str) -> Project:
        """Create an empty project owned by ``owner_id``."""
        now = self._clock()
        project = Project(
            id=self._id_factory(),
            name=data.name,
            description=data.description,
            created_at=now,
            updated_at=now,
            owner_id=owner_id,
        )
        self._repository.add_project(project)
        logger.info("Project created", extra={"project_id": project.id, "owner_id": owner_id})
        return project

    def create_default_project(self, user_id: str) -> Project:
        """Create a starter project with one sprint and one campaign.

        The new project becomes the user's default project.
        """
        now = self._clock()
        project_id = self._id_factory()
        sprint_id = self._id_factory()
        campaign = Campaign(
            id=self._id_factory(),
            name="Default Campaign",
            description="Automatically created campaign",
            start_date=now,
            end_date=now + DEFAULT_SCHEDULE_LENGTH,
            sprint_id=sprint_id,
        )
        sprint = Sprint(
            id=sprint_id,
            name="Default Sprint",
            description="Automatically created sprint",
            start_date=now,
            end_date=now + DEFAULT_SCHEDULE_LENGTH,
            project_id=project_id,
            campaigns=[campaign],
        )
        project = Project(
            id=project_id,
            name="My First Project",
            description="Default project created automatically",
            created_at=now,
            updated_at=now,
            owner_id=user_id,
            sprints=[sprint],
        )
        self._repository.add_project(project)
        self._repository.set_default_project_id(user_id, project_id)
        logger.info("Default project created", extra={"project_id": project_id, "owner_id": user_id})
        return project

    def get_default_project_id(self, user_id: str) -> str | None:
        return self._repository.get_default_project_id(user_id)

    def update_project(self, project_id: str, data: ProjectUpdate) -> Project:
        def _update(project: Project) -> Project:
            for name in data.model_fields_set:
                value = getattr(data, name)
                if value is None and name == "name":
                    continue
                setattr(project, name, value)
            project.updated_at = self._clock()
            return project

        return self._repository.modify_project(project_id, _update)

    def delete_project(self, project_id: str) -> None:
        if not self._repository.delete_project(project_id):
            raise ProjectNotFoundError(project_id)
        logger.info("Project deleted", extra={"project_id": project_id})

    # ------------------------------------------------------------------
    # Sprints and campaigns
    # ------------------------------------------------------------------

    def add_sprint(self, project_id: str, data: SprintCreate) -> Sprint:
        def _add(project: Project) -> Sprint:
            sprint = Sprint(
                id=self._id_factory(),
                name=data.name,
                description=data.description,
                start_date=data.start_date,
                end_date=data.end_date,
                project_id=project.id,
            )
            project.sprints.append(sprint)
            project.updated_at = self._clock()
            return sprint

        return self._repository.modify_project(project_id, _add)

    def update_sprint(self, project_id: str, sprint_id: str, data: ScheduleUpdate) -> Sprint:
        def _update(project: Project) -> Sprint:
            sprint = self._require_sprint(project, sprint_id)
            _apply_schedule_update(sprint, data)
            project.updated_at = self._clock()
            return sprint

        return self._repository.modify_project(project_id, _update)

    def delete_sprint(self, project_id: str, sprint_id: str) -> None:
        def _delete(project: Project) -> None:
            sprint = self._require_sprint(project, sprint_id)
            project.sprints.remove(sprint)
            project.updated_at = self._clock()

        self._repository.modify_project(project_id, _delete)

    def add_campaign(self, project_id: str, sprint_id: str, data: CampaignCreate) -> Campaign:
        def _add(project: Project) -> Campaign:
            sprint = self._require_sprint(project, sprint_id)
            campaign = Campaign(
                id=self._id_factory(),
                name=data.name,
                description=data.description,
                start_date=data.start_date,
                end_date=data.end_date,
                sprint_id=sprint.id,
            )
            sprint.campaigns.append(campaign)
            project.updated_at = self._clock()
            return campaign

        return self._repository.modify_project(project_id, _add)

    def update_campaign(
        self, project_id: str, sprint_id: str, campaign_id: str, data: ScheduleUpdate
    ) -> Campaign:
        def _update(project: Project) -> Campaign:
            campaign = self._require_campaign(project, sprint_id, campaign_id)
            _apply_schedule_update(campaign, data)
            project.updated_at = self._clock()
            return campaign

        return self._repository.modify_project(project_id, _update)

    def delete_campaign(self, project_id: str, sprint_id: str, campaign_id: str) -> None:
        def _delete(project: Project) -> None:
            sprint = self._require_sprint(project, sprint_id)
            campaign = self._require_campaign(project, sprint_id, campaign_id)
            sprint.campaigns.remove(campaign)
            project.updated_at = self._clock()

        self._repository.modify_project(project_id, _delete)

    # ------------------------------------------------------------------
    # Task creation
    # ------------------------------------------------------------------

    def add_task_to_campaign(self, project_id: str, sprint_id: str, campaign_id: str, task: Task) -> Task:
        """Append an already built task to a campaign."""

        def _add(project: Project) -> Task:
            campaign = self._require_campaign(project, sprint_id, campaign_id)
            task.campaign_id = campaign.id
            campaign.tasks.append(task)
            return task

        self._repository.modify_project(project_id, _add)
        logger.info(
            "Task added",
            extra={"task_id": task.id, "project_id": project_id, "campaign_id": campaign_id},
        )
        return task

    def create_task(
        self,
        project_id: str,
        sprint_id: str,
        campaign_id: str,
        data: TaskCreate,
        user_id: str,
        user_name: str,
    ) -> Task:
        """Build a task from ``data`` and add it to a campaign."""
        now = self._clock()
        status = RECURRING_STATUS_BY_TYPE[data.recurrence] if data.recurrence else data.status
        task = Task(
            id=self._id_factory(),
            title=data.title,
            description=data.description,
            status=status,
            priority=data.priority,
            campaign_id=campaign_id,
            created_at=now,
            updated_at=now,
            due_date=data.due_date,
            is_published=False,
            category=data.category,
            price=data.price,
            skills=list(data.skills),
            estimated_hours=data.estimated_hours,
            video_url=data.video_url,
            standard_operating_procedure=data.standard_operating_procedure,
            compensation=data.compensation,
            labels=list(data.labels),
            recurrence_type=data.recurrence,
            created_by=user_id,
            creator_name=user_name,
        )
        record_edit(task, user_id=user_id, user_name=user_name, action="Created task", at=now)
        return self.add_task_to_campaign(project_id, sprint_id, campaign_id, task)

    def create_special_task(
        self,
        project_id: str,
        data: SpecialTaskCreate,
        user_id: str,
        user_name: str,
        sprint_id: str | None = None,
        campaign_id: str | None = None,
    ) -> Task:
        """Create a library item, falling back to the first sprint and campaign.

        When the project has no campaign to hold the item, a "Default Sprint"
        and/or a "Library Items" campaign are created. Library items are
        never published.
        """
        now = self._clock()
        kind = TaskStatus(data.kind)
        label = kind.value.replace("_", " ", 1)

        def _create(project: Project) -> Task:
            campaign = self._resolve_library_campaign(project, sprint_id, campaign_id, now)
            task = Task(
                id=self._id_factory(),
                title=data.title,
                description=data.description,
                status=kind,
                priority=TaskPriority.MEDIUM,
                campaign_id=campaign.id,
                created_at=now,
                updated_at=now,
                is_published=False,
                created_by=user_id,
                creator_name=user_name,
            )
            record_edit(task, user_id=user_id, user_name=user_name, action=f"Created {label}", at=now)
            post_timeline_message(
                task,
                message_id=self._id_factory(),
                user_id=user_id,
                user_name=user_name,
                content=f'{label} "{data.title}" was created',
                at=now,
            )
            if kind is TaskStatus.CHECKLIST_LIBRARY:
                task.checklist_items = list(data.items)
                task.category = data.category
            elif kind is TaskStatus.CREDENTIALS_LIBRARY:
                task.credentials = list(data.credentials)
            elif kind is TaskStatus.BRAND_BRIEF:
                task.brand_brief = data.brand_brief or BrandBrief()
            elif kind is TaskStatus.RESOURCE_LIBRARY:
                task.resources = list(data.resources)
                task.category = data.category
            campaign.tasks.append(task)
            return task

        task = self._repository.modify_project(project_id, _create)
        logger.info("Library item created", extra={"task_id": task.id, "kind": kind.value})
        return task

    def _resolve_library_campaign(
        self,
        project: Project,
        sprint_id: str | None,
        campaign_id: str | None,
        now: datetime,
    ) -> Campaign:
        sprint = project.find_sprint(sprint_id) if sprint_id and campaign_id else None
        campaign = sprint.find_campaign(campaign_id) if sprint and campaign_id else None
        if campaign is not None:
            return campaign

        if sprint is None and project.sprints:
            sprint = project.sprints[0]
            if sprint.campaigns:
                return sprint.campaigns[0]

        if sprint is None:
            sprint = Sprint(
                id=self._id_factory(),
                name="Default Sprint",
                description="Automatically created sprint for library items",
                start_date=now,
                end_date=now + DEFAULT_SCHEDULE_LENGTH,
                project_id=project.id,
            )
            project.sprints.append(sprint)

        campaign = Campaign(
            id=self._id_factory(),
            name="Library Items",
            description="Automatically created campaign for library items",
            start_date=now,
            end_date=now + DEFAULT_SCHEDULE_LENGTH,
            sprint_id=sprint.id,
        )
        sprint.campaigns.append(campaign)
        return campaign

    # ------------------------------------------------------------------
    # Task reads
    # ------------------------------------------------------------------

    def get_task(self, task_id: str) -> Task | None:
        location = self._repository.find_task(task_id)
        return location.task if location else None

    def locate_task(self, task_id: str) -> TaskLocation | None:
        """Task with its project, sprint and campaign, or None."""
        return self._repository.find_task(task_id)

    def get_all_tasks(self, project_id: str) -> list[Task]:
        project = self._repository.get_project(project_id)
        if project is None:
            return []
        return list(project.iter_tasks())

    def get_published_tasks(self) -> list[Task]:
        return [
            task
            for project in self._repository.list_projects()
            for task in project.iter_tasks()
            if task.is_published
        ]

    def get_tasks_by_type(self, project_id: str, status: TaskStatus) -> list[Task]:
        return [task for task in self.get_all_tasks(project_id) if task.status == status]

    # ------------------------------------------------------------------
    # Task updates
    # ------------------------------------------------------------------

    def _update(self, task_id: str, change: Callable[[Task], None]) -> Task:
        def _apply(location: TaskLocation) -> Task:
            change(location.task)
            location.task.updated_at = self._clock()
            return location.task

        return self._repository.modify_task(task_id, _apply)

    def update_task(self, task_id: str, updates: TaskUpdate) -> Task:
        """Apply the fields explicitly set on ``updates``."""

        def _change(task: Task) -> None:
            for name in updates.model_fields_set:
                value = getattr(updates, name)
                if value is None and name in _REQUIRED_TASK_FIELDS:
                    continue
                setattr(task, name, value)

        return self._update(task_id, _change)

    def update_task_status(self, task_id: str, status: TaskStatus) -> Task:
        def _change(task: Task) -> None:
            task.status = status

        return self._update(task_id, _change)

    def update_task_priority(self, task_id: str, priority: TaskPriority) -> Task:
        def _change(task: Task) -> None:
            task.priority = priority

        return self._update(task_id, _change)

    def toggle_publish(self, task_id: str) -> Task:
        def _change(task: Task) -> None:
            task.is_published = not task.is_published
            if task.is_published:
                task.published_at = self._clock()

        return self._update(task_id, _change)

    def toggle_auto_post(self, task_id: str) -> Task:
        def _change(task: Task) -> None:
            task.auto_post_to_timeline = not task.posts_to_timeline

        return self._update(task_id, _change)

    def reassign_task(self, task_id: str, reason: str, user_id: str, user_name: str) -> Task:
        """Drop the current assignee and put the task back on the market."""

        def _change(task: Task) -> None:
            now = self._clock()
            task.assignee_id = None
            task.assignment = None
            task.is_published = True
            task.published_at = now
            action = f"Reassigned task: {reason}" if reason else "Reassigned task"
            record_edit(task, user_id=user_id, user_name=user_name, action=action, at=now)

        task = self._update(task_id, _change)
        logger.info("Task reassigned", extra={"task_id": task_id})
        return task

    def mark_task_completed(self, task_id: str, user_id: str, user_name: str) -> Task:
        def _change(task: Task) -> None:
            now = self._clock()
            task.status = TaskStatus.COMPLETED
            task.completed_at = now
            if task.assignment is not None and task.assignment.status is AssignmentStatus.ACTIVE:
                task.assignment.status = AssignmentStatus.COMPLETED
            record_edit(task, user_id=user_id, user_name=user_name, action="Marked task as completed", at=now)

        return self._update(task_id, _change)

    def delete_task(self, task_id: str) -> None:
        def _delete(location: TaskLocation) -> None:
            location.campaign.tasks.remove(location.task)

        self._repository.modify_task(task_id, _delete)
        logger.info("Task deleted", extra={"task_id": task_id})

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @staticmethod
    def _require_sprint(project: Project, sprint_id: str) -> Sprint:
        sprint = project.find_sprint(sprint_id)
        if sprint is None:
            raise SprintNotFoundError(sprint_id)
        return sprint

    @classmethod
    def _require_campaign(cls, project: Project, sprint_id: str, campaign_id: str) -> Campaign:
        campaign = cls._require_sprint(project, sprint_id).find_campaign(campaign_id)
        if campaign is None:
            raise CampaignNotFoundError(campaign_id)
        return campaign

