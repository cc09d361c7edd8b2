"""
Review submission and aggregation across every project.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from kushl.shared.logging import get_logger
from kushl.tasks.events import Clock, IdFactory, utc_now
from kushl.tasks.models import Review, UserType, generate_id
from kushl.tasks.repository import ProjectRepository, TaskLocation, iter_task_locations
from kushl.tasks.schemas import ReviewCreate

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 6


@dataclass(frozen=True)
class ReviewPage:
    """One page of reviews."""

    reviews: list[Review] = field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total: int = 0


class ReviewService:
    """Attaches reviews to tasks and lists them for testimonial pages."""

    def __init__(
        self,
        repository: ProjectRepository,
        clock: Clock = utc_now,
        id_factory: IdFactory = generate_id,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._id_factory = id_factory
        self._page_size = page_size

    def submit_review(self, task_id: str, data: ReviewCreate) -> Review:
        """Store a review on a task.

        An employer review goes to ``employerReview`` and a student review to
        ``studentReview``; an earlier review from the same side is replaced.

        Raises:
            TaskNotFoundError: No task has this id.
        """

        def _submit(location: TaskLocation) -> Review:
            task = location.task
            now = self._clock()
            review = Review(
                id=self._id_factory(),
                reviewer_id=data.reviewer_id,
                reviewer_name=data.reviewer_name,
                reviewer_type=data.reviewer_type,
                recipient_id=data.recipient_id,
                recipient_name=data.recipient_name,
                task_id=task.id,
                task_title=task.title,
                rating=data.rating,
                comment=data.comment,
                created_at=now,
            )
            if data.reviewer_type is UserType.EMPLOYER:
                task.employer_review = review
            else:
                task.student_review = review
            task.updated_at = now
            return review

        review = self._repository.modify_task(task_id, _submit)
        logger.info(
            "Review submitted",
            extra={"task_id": task_id, "reviewer_type": data.reviewer_type.value, "rating": data.rating},
        )
        return review

    def has_user_submitted_review(self, task_id: str, user_id: str, reviewer_type: UserType) -> bool:
        location = self._repository.find_task(task_id)
        if location is None:
            return False
        task = location.task
        review = task.employer_review if reviewer_type is UserType.EMPLOYER else task.student_review
        return review is not None and review.reviewer_id == user_id

    def get_all_reviews(self) -> list[Review]:
        """Every review on every task, employer side first for each task.

        Returned copies carry the task's current title and id.
        """
        reviews: list[Review] = []
        for location in iter_task_locations(self._repository.list_projects()):
            task = location.task
            for review in task.reviews():
                reviews.append(review.model_copy(update={"task_id": task.id, "task_title": task.title}))
        return reviews

    def get_best_reviews(
        self,
        reviewer_type: UserType,
        limit: int | None = None,
        page: int = 1,
    ) -> ReviewPage:
        """Highest rated reviews from one side, newest first among equal ratings.

        Args:
            reviewer_type: Side that wrote the reviews.
            limit: Page size; defaults to the configured page size.
            page: 1-based page, clamped into ``[1, total_pages]``.

        Returns:
            The requested page. ``total_pages`` is at least 1.
        """
        if limit is None:
            limit = self._page_size
        if limit < 1:
            raise ValueError("limit must be >= 1")
        matching = [r for r in self.get_all_reviews() if r.reviewer_type is reviewer_type]
        # Two stable sorts: newest first, then by rating.
        matching.sort(key=lambda r: r.created_at, reverse=True)
        matching.sort(key=lambda r: r.rating, reverse=True)

        total_pages = max(1, math.ceil(len(matching) / limit))
        page = min(max(page, 1), total_pages)
        start = (page - 1) * limit
        return ReviewPage(
            reviews=matching[start:start + limit],
            page=page,
            total_pages=total_pages,
            total=len(matching),
        )

    def get_reviews_for_recipient(self, recipient_id: str) -> list[Review]:
        return [r for r in self.get_all_reviews() if r.recipient_id == recipient_id]

    def average_rating(self, recipient_id: str) -> float | None:
        """Mean rating received by a user, rounded to one decimal; None without reviews."""
        ratings = [r.rating for r in self.get_reviews_for_recipient(recipient_id)]
        if not ratings:
            return None
        return round(sum(ratings) / len(ratings), 1)
