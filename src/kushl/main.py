"""
Runtime wiring and the recurring sweep entry point.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from kushl.config import Settings, get_settings
from kushl.insights import InsightService
from kushl.recurrence import RecurringTaskEngine, RecurringTaskSupervisor
from kushl.reviews import ReviewService
from kushl.shared.database import DatabaseManager
from kushl.shared.logging import get_logger, setup_logging
from kushl.sops import SopService
from kushl.storage import KeyValueStore
from kushl.students import StudentService
from kushl.tasks import ActivityService, ProjectRepository, TaskService

logger = get_logger(__name__)


@dataclass
class Services:
    """Every service sharing one database and store."""

    database: DatabaseManager
    store: KeyValueStore
    repository: ProjectRepository
    tasks: TaskService
    activity: ActivityService
    recurrence: RecurringTaskEngine
    reviews: ReviewService
    students: StudentService
    insights: InsightService
    sops: SopService

    def close(self) -> None:
        self.database.close()


def build_services(settings: Settings | None = None) -> Services:
    """Wire the storage stack and services from settings.

    Tables are created if missing.
    """
    settings = settings or get_settings()
    database = DatabaseManager(settings.storage_url, echo=settings.debug)
    database.create_all()
    store = KeyValueStore(database)
    repository = ProjectRepository(store)
    return Services(
        database=database,
        store=store,
        repository=repository,
        tasks=TaskService(repository),
        activity=ActivityService(repository),
        recurrence=RecurringTaskEngine(repository),
        reviews=ReviewService(repository, page_size=settings.reviews_page_size),
        students=StudentService(repository),
        insights=InsightService(repository),
        sops=SopService(store),
    )


async def run(settings: Settings | None = None) -> None:
    """Run the recurring task sweep until cancelled."""
    settings = settings or get_settings()
    setup_logging(settings)
    logger.info("Sweeper starting", extra={"env": settings.app_env, "storage_url": settings.storage_url})

    services = build_services(settings)
    try:
        if not settings.recurring_sweep_enabled:
            logger.info("Recurring sweep disabled; running a single sweep")
            await RecurringTaskSupervisor(services.recurrence).run_once()
            return
        supervisor = RecurringTaskSupervisor(
            services.recurrence,
            interval_seconds=settings.recurring_sweep_interval_seconds,
        )
        await supervisor.run_forever()
    finally:
        services.close()
        logger.info("Sweeper stopped")


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
