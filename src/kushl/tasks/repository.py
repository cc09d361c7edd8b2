"""
Project tree repository on top of the key-value store.

All projects live as one JSON list under ``PROJECTS_KEY``. Every write
loads the whole list, changes it and stores it back.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from kushl.shared.exceptions import ProjectNotFoundError, StorageError, TaskNotFoundError
from kushl.shared.logging import get_logger
from kushl.storage.store import KeyValueStore
from kushl.tasks.models import Campaign, Project, Sprint, Task

logger = get_logger(__name__)

PROJECTS_KEY = "kushl_projects"
DEFAULT_PROJECT_KEY_PREFIX = "kushl_default_project_"

_projects_adapter = TypeAdapter(list[Project])

T = TypeVar("T")


@dataclass
class TaskLocation:
    """A task together with the containers it sits in."""

    project: Project
    sprint: Sprint
    campaign: Campaign
    task: Task


def iter_task_locations(projects: list[Project]) -> Iterator[TaskLocation]:
    for project in projects:
        for sprint in project.sprints:
            for campaign in sprint.campaigns:
                for task in campaign.tasks:
                    yield TaskLocation(project=project, sprint=sprint, campaign=campaign, task=task)


def find_task(projects: list[Project], task_id: str) -> TaskLocation | None:
    """First location holding ``task_id``; duplicates further down are ignored."""
    return next((loc for loc in iter_task_locations(projects) if loc.task.id == task_id), None)


class ProjectRepository:
    """Repository for project trees stored in the key-value store."""

    def __init__(self, store: KeyValueStore) -> None:
        """Initialize repository with a key-value store.

        Args:
            store: Store holding the serialized project list.
        """
        self._store = store

    def list_projects(self, owner_id: str | None = None) -> list[Project]:
        """Load project trees.

        Args:
            owner_id: Only return projects owned by this user; None returns all.

        Returns:
            Projects in stored order.

        Raises:
            StorageError: The stored list does not describe valid projects.
        """
        raw = self._store.get(PROJECTS_KEY, default=[])
        try:
            projects = _projects_adapter.validate_python(raw)
        except PydanticValidationError as exc:
            logger.error(
                "Stored projects failed validation",
                extra={"key": PROJECTS_KEY, "errors": exc.error_count()},
            )
            raise StorageError(
                "Stored projects are malformed",
                details={"key": PROJECTS_KEY, "errors": exc.errors(include_url=False)},
            ) from exc
        if owner_id is None:
            return projects
        return [project for project in projects if project.owner_id == owner_id]

    def save_projects(self, projects: list[Project]) -> None:
        self._store.set(PROJECTS_KEY, [project.to_document() for project in projects])

    def get_project(self, project_id: str) -> Project | None:
        if not project_id:
            return None
        return next((p for p in self.list_projects() if p.id == project_id), None)

    def add_project(self, project: Project) -> Project:
        projects = self.list_projects()
        projects.append(project)
        self.save_projects(projects)
        return project

    def update_project(self, project: Project) -> Project:
        """Replace the stored project that has the same id.

        Raises:
            ProjectNotFoundError: No stored project has this id.
        """
        projects = self.list_projects()
        for index, existing in enumerate(projects):
            if existing.id == project.id:
                projects[index] = project
                self.save_projects(projects)
                return project
        raise ProjectNotFoundError(project.id)

    def delete_project(self, project_id: str) -> bool:
        projects = self.list_projects()
        kept = [project for project in projects if project.id != project_id]
        if len(kept) == len(projects):
            return False
        self.save_projects(kept)
        return True

    def modify_project(self, project_id: str, mutate: Callable[[Project], T]) -> T:
        """Load, change and save one project in a single read-modify-write.

        Raises:
            ProjectNotFoundError: No stored project has this id.
        """
        projects = self.list_projects()
        project = next((p for p in projects if p.id == project_id), None)
        if project is None:
            raise ProjectNotFoundError(project_id)
        result = mutate(project)
        self.save_projects(projects)
        return result

    def find_task(self, task_id: str) -> TaskLocation | None:
        return find_task(self.list_projects(), task_id)

    def modify_task(self, task_id: str, mutate: Callable[[TaskLocation], T]) -> T:
        """Load, change and save the task ``task_id``.

        Nothing is written when ``mutate`` raises.

        Raises:
            TaskNotFoundError: No stored task has this id.
        """
        projects = self.list_projects()
        location = find_task(projects, task_id)
        if location is None:
            raise TaskNotFoundError(task_id)
        result = mutate(location)
        self.save_projects(projects)
        return result

    def get_default_project_id(self, user_id: str) -> str | None:
        value = self._store.get(f"{DEFAULT_PROJECT_KEY_PREFIX}{user_id}")
        return str(value) if value else None

    def set_default_project_id(self, user_id: str, project_id: str) -> None:
        self._store.set(f"{DEFAULT_PROJECT_KEY_PREFIX}{user_id}", project_id)
