"""Typed access to stored reviews.

The store gives no ordering guarantee, so every list is sorted here,
newest first. Uniqueness is not checked on append; that is the
eligibility check's job, one layer up.
"""

from datetime import UTC, datetime

from ratings.review.review import Review
from ratings.storage.port import REVIEWS, StoragePort

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _created_at(review: Review) -> datetime:
    created_at = review.created_at
    if created_at is None:
        return _EPOCH
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=UTC)
    return created_at


def newest_first(reviews: list[Review]) -> list[Review]:
    return sorted(reviews, key=_created_at, reverse=True)


class ReviewRepository:
    """Review queries over a StoragePort."""

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def append(self, review: Review) -> str:
        return self.storage.append(REVIEWS, review)

    def list_by_product(self, product_id: str) -> list[Review]:
        return newest_first(self.storage.scan(REVIEWS, product_id=product_id))

    def list_by_user(self, user_id: str) -> list[Review]:
        return newest_first(self.storage.scan(REVIEWS, user_id=user_id))

    def list_all(self) -> list[Review]:
        return newest_first(self.storage.scan(REVIEWS))

    def find_by_order_and_product(self, user_id: str, order_id: str, product_id: str) -> Review | None:
        """The review for this (user, order, product), if one exists.

        Should a race have produced more than one, the oldest is returned.
        """
        matches = self.storage.scan(
            REVIEWS,
            user_id=user_id,
            order_id=order_id,
            product_id=product_id,
        )
        if not matches:
            return None
        return newest_first(matches)[-1]
