"""
Tests for the project tree repository.
"""

import pytest

from kushl.shared.exceptions import ProjectNotFoundError, StorageError, TaskNotFoundError
from kushl.storage import KeyValueStore
from kushl.tasks import ProjectRepository
from kushl.tasks.models import Project
from kushl.tasks.repository import PROJECTS_KEY


class TestProjectRepository:
    def test_empty_store_has_no_projects(self, repository: ProjectRepository) -> None:
        assert repository.list_projects() == []
        assert repository.get_project("") is None

    def test_malformed_projects_raise(self, repository: ProjectRepository, store: KeyValueStore) -> None:
        store.set(PROJECTS_KEY, [{"id": "p1"}])

        with pytest.raises(StorageError) as exc_info:
            repository.list_projects()
        assert exc_info.value.details["key"] == PROJECTS_KEY

    def test_update_project_replaces_by_id(self, repository: ProjectRepository, project: Project) -> None:
        project.name = "Replaced"

        repository.update_project(project)

        assert repository.get_project(project.id).name == "Replaced"

    def test_update_unknown_project(self, repository: ProjectRepository, project: Project) -> None:
        stray = project.model_copy(update={"id": "missing"})

        with pytest.raises(ProjectNotFoundError):
            repository.update_project(stray)

    def test_failed_mutation_is_not_saved(self, repository: ProjectRepository, add_task) -> None:
        task = add_task(title="Keep me")

        def _explode(location) -> None:
            location.task.title = "Changed"
            raise RuntimeError("abort")

        with pytest.raises(RuntimeError):
            repository.modify_task(task.id, _explode)

        assert repository.find_task(task.id).task.title == "Keep me"

    def test_modify_unknown_task(self, repository: ProjectRepository) -> None:
        with pytest.raises(TaskNotFoundError):
            repository.modify_task("missing", lambda location: None)

    def test_duplicate_task_ids_resolve_to_first(
        self, repository: ProjectRepository, store: KeyValueStore, add_task
    ) -> None:
        task = add_task(title="Original")
        projects = store.get(PROJECTS_KEY)
        campaign = projects[0]["sprints"][0]["campaigns"][0]
        duplicate = dict(campaign["tasks"][0], title="Duplicate")
        campaign["tasks"].append(duplicate)
        store.set(PROJECTS_KEY, projects)

        assert repository.find_task(task.id).task.title == "Original"

    def test_default_project_id(self, repository: ProjectRepository) -> None:
        assert repository.get_default_project_id("u1") is None

        repository.set_default_project_id("u1", "p1")

        assert repository.get_default_project_id("u1") == "p1"
