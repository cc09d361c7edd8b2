"""
Pytest configuration and shared fixtures.

Every test runs against an in-memory SQLite store with a fixed clock and
predictable ids.
"""
from __future__ import annotations

import itertools
from collections.abc import Generator
from datetime import datetime, timedelta, timezone

import pytest

from kushl.insights import InsightService
from kushl.recurrence import RecurringTaskEngine
from kushl.reviews import ReviewService
from kushl.shared.database import DatabaseManager
from kushl.sops import SopService
from kushl.storage import KeyValueStore
from kushl.students import StudentService
from kushl.tasks import ActivityService, ProjectRepository, TaskService
from kushl.tasks.models import Project
from kushl.tasks.schemas import TaskCreate

EMPLOYER_ID = "employer-1"
EMPLOYER_NAME = "Asha Employer"

START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture()
def database() -> Generator[DatabaseManager, None, None]:
    manager = DatabaseManager("sqlite+pysqlite:///:memory:", echo=False)
    manager.create_all()
    yield manager
    manager.close()


@pytest.fixture()
def store(database: DatabaseManager) -> KeyValueStore:
    return KeyValueStore(database)


@pytest.fixture()
def repository(store: KeyValueStore) -> ProjectRepository:
    return ProjectRepository(store)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture()
def task_service(repository: ProjectRepository, clock: FakeClock, id_factory) -> TaskService:
    return TaskService(repository, clock=clock, id_factory=id_factory)


@pytest.fixture()
def activity_service(repository: ProjectRepository, clock: FakeClock, id_factory) -> ActivityService:
    return ActivityService(repository, clock=clock, id_factory=id_factory)


@pytest.fixture()
def recurrence_engine(repository: ProjectRepository, clock: FakeClock, id_factory) -> RecurringTaskEngine:
    return RecurringTaskEngine(repository, clock=clock, id_factory=id_factory)


@pytest.fixture()
def review_service(repository: ProjectRepository, clock: FakeClock, id_factory) -> ReviewService:
    return ReviewService(repository, clock=clock, id_factory=id_factory)


@pytest.fixture()
def student_service(repository: ProjectRepository) -> StudentService:
    return StudentService(repository)


@pytest.fixture()
def insight_service(repository: ProjectRepository) -> InsightService:
    return InsightService(repository)


@pytest.fixture()
def sop_service(store: KeyValueStore, clock: FakeClock, id_factory) -> SopService:
    return SopService(store, clock=clock, id_factory=id_factory)


@pytest.fixture()
def project(task_service: TaskService) -> Project:
    """Default project with one sprint and one campaign."""
    return task_service.create_default_project(EMPLOYER_ID)


@pytest.fixture()
def add_task(task_service: TaskService, project: Project):
    """Create a task in the default campaign."""
    sprint = project.sprints[0]
    campaign = sprint.campaigns[0]

    def _add(**fields):
        fields.setdefault("title", "Design a logo")
        return task_service.create_task(
            project.id,
            sprint.id,
            campaign.id,
            TaskCreate(**fields),
            user_id=EMPLOYER_ID,
            user_name=EMPLOYER_NAME,
        )

    return _add
