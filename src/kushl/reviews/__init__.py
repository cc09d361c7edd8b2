"""
Reviews left by employers and students on finished tasks.
"""
from kushl.reviews.service import ReviewPage, ReviewService

__all__ = ["ReviewPage", "ReviewService"]
