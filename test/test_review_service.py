"""
Tests for review submission and aggregation.
"""

import pytest
from pydantic import ValidationError

from kushl.reviews import ReviewService
from kushl.shared.exceptions import TaskNotFoundError
from kushl.tasks import TaskService
from kushl.tasks.models import UserType
from kushl.tasks.schemas import ReviewCreate, TaskUpdate

from conftest import EMPLOYER_ID, FakeClock


def _employer_review(rating: int, recipient_id: str = "student-1", comment: str = "") -> ReviewCreate:
    return ReviewCreate(
        reviewer_id=EMPLOYER_ID,
        reviewer_name="Asha",
        reviewer_type=UserType.EMPLOYER,
        recipient_id=recipient_id,
        recipient_name="Sam",
        rating=rating,
        comment=comment,
    )


def _student_review(rating: int) -> ReviewCreate:
    return ReviewCreate(
        reviewer_id="student-1",
        reviewer_name="Sam",
        reviewer_type=UserType.STUDENT,
        recipient_id=EMPLOYER_ID,
        recipient_name="Asha",
        rating=rating,
    )


class TestSubmitReview:
    def test_employer_and_student_sides(
        self, add_task, review_service: ReviewService, task_service: TaskService
    ) -> None:
        task = add_task(title="Logo")

        review_service.submit_review(task.id, _employer_review(5))
        review_service.submit_review(task.id, _student_review(4))

        stored = task_service.get_task(task.id)
        assert stored.employer_review.rating == 5
        assert stored.student_review.rating == 4
        assert stored.employer_review.task_title == "Logo"

    def test_resubmitting_replaces_review(self, add_task, review_service: ReviewService, task_service: TaskService) -> None:
        task = add_task()

        review_service.submit_review(task.id, _employer_review(2))
        review_service.submit_review(task.id, _employer_review(4))

        assert task_service.get_task(task.id).employer_review.rating == 4
        assert len(review_service.get_all_reviews()) == 1

    def test_rating_bounds(self) -> None:
        with pytest.raises(ValidationError):
            _employer_review(6)
        with pytest.raises(ValidationError):
            _employer_review(0)

    def test_unknown_task(self, review_service: ReviewService) -> None:
        with pytest.raises(TaskNotFoundError):
            review_service.submit_review("missing", _employer_review(5))

    def test_has_user_submitted_review(self, add_task, review_service: ReviewService) -> None:
        task = add_task()
        review_service.submit_review(task.id, _employer_review(5))

        assert review_service.has_user_submitted_review(task.id, EMPLOYER_ID, UserType.EMPLOYER) is True
        assert review_service.has_user_submitted_review(task.id, EMPLOYER_ID, UserType.STUDENT) is False
        assert review_service.has_user_submitted_review(task.id, "someone", UserType.EMPLOYER) is False
        assert review_service.has_user_submitted_review("missing", EMPLOYER_ID, UserType.EMPLOYER) is False


class TestAggregation:
    def test_all_reviews_use_current_task_title(
        self, add_task, review_service: ReviewService, task_service: TaskService
    ) -> None:
        task = add_task(title="Old title")
        review_service.submit_review(task.id, _student_review(3))
        review_service.submit_review(task.id, _employer_review(5))
        task_service.update_task(task.id, TaskUpdate(title="New title"))

        reviews = review_service.get_all_reviews()

        assert [r.reviewer_type for r in reviews] == [UserType.EMPLOYER, UserType.STUDENT]
        assert {r.task_title for r in reviews} == {"New title"}
        assert {r.task_id for r in reviews} == {task.id}

    def test_best_reviews_sorted_by_rating_then_newest(
        self, add_task, review_service: ReviewService, clock: FakeClock
    ) -> None:
        older = add_task(title="Older")
        low = add_task(title="Low")
        newer = add_task(title="Newer")
        review_service.submit_review(older.id, _employer_review(5, comment="older"))
        clock.advance(hours=1)
        review_service.submit_review(low.id, _employer_review(3, comment="low"))
        clock.advance(hours=1)
        review_service.submit_review(newer.id, _employer_review(5, comment="newer"))
        review_service.submit_review(newer.id, _student_review(5))

        page = review_service.get_best_reviews(UserType.EMPLOYER)

        assert [r.comment for r in page.reviews] == ["newer", "older", "low"]
        assert page.total == 3
        assert page.total_pages == 1
        assert page.page == 1

    def test_pagination_and_clamping(self, add_task, review_service: ReviewService, clock: FakeClock) -> None:
        for rating in (1, 2, 3, 4, 5):
            task = add_task(title=f"Task {rating}")
            review_service.submit_review(task.id, _employer_review(rating))
            clock.advance(minutes=1)

        second = review_service.get_best_reviews(UserType.EMPLOYER, limit=2, page=2)
        assert [r.rating for r in second.reviews] == [3, 2]
        assert second.total_pages == 3

        beyond = review_service.get_best_reviews(UserType.EMPLOYER, limit=2, page=9)
        assert beyond.page == 3
        assert [r.rating for r in beyond.reviews] == [1]

        before = review_service.get_best_reviews(UserType.EMPLOYER, limit=2, page=0)
        assert before.page == 1

    def test_no_reviews_still_has_one_page(self, review_service: ReviewService) -> None:
        page = review_service.get_best_reviews(UserType.STUDENT, page=4)

        assert page.reviews == []
        assert page.total_pages == 1
        assert page.page == 1

    def test_default_page_size(self, add_task, repository, clock: FakeClock) -> None:
        service = ReviewService(repository, clock=clock, page_size=2)
        for rating in (3, 4, 5):
            service.submit_review(add_task().id, _employer_review(rating))

        assert len(service.get_best_reviews(UserType.EMPLOYER).reviews) == 2

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_rejected(self, review_service: ReviewService, limit: int) -> None:
        with pytest.raises(ValueError):
            review_service.get_best_reviews(UserType.EMPLOYER, limit=limit)

    def test_recipient_reviews_and_average(self, add_task, review_service: ReviewService) -> None:
        for rating in (4, 5, 5):
            review_service.submit_review(add_task().id, _employer_review(rating))
        review_service.submit_review(add_task().id, _employer_review(1, recipient_id="student-2"))

        assert len(review_service.get_reviews_for_recipient("student-1")) == 3
        assert review_service.average_rating("student-1") == 4.7
        assert review_service.average_rating("nobody") is None
