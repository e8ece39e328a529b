"""Application tests for ReviewRepository over the fake store."""

from datetime import UTC, datetime, timedelta

import pytest
from ratings.review.repository import ReviewRepository, newest_first
from ratings.review.review import Review

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _review(user_id="user-r", order_id="order-r", product_id="prod-r", rating=4, minutes=0):
    review = Review.create(
        user_id=user_id,
        order_id=order_id,
        product_id=product_id,
        rating=rating,
        shipping_rating=4,
        comment="Solid product",
    )
    review.created_at = T0 + timedelta(minutes=minutes)
    return review


@pytest.fixture()
def repository(store):
    return ReviewRepository(store)


class TestAppendAndList:
    def test_append_returns_review_id(self, repository):
        review = _review()
        assert repository.append(review) == str(review.id)

    def test_list_by_product_is_newest_first(self, repository):
        oldest = _review(order_id="o1", minutes=0)
        newest = _review(order_id="o2", minutes=10)
        middle = _review(order_id="o3", minutes=5)
        for review in (oldest, newest, middle):
            repository.append(review)

        listed = repository.list_by_product("prod-r")
        assert [r.id for r in listed] == [newest.id, middle.id, oldest.id]

    def test_list_by_product_filters(self, repository):
        repository.append(_review(product_id="prod-a"))
        repository.append(_review(product_id="prod-b"))
        assert len(repository.list_by_product("prod-a")) == 1

    def test_list_by_user(self, repository):
        repository.append(_review(user_id="user-x", product_id="p1", minutes=1))
        repository.append(_review(user_id="user-x", product_id="p2", minutes=2))
        repository.append(_review(user_id="user-y", product_id="p1"))

        listed = repository.list_by_user("user-x")
        assert [r.product_id for r in listed] == ["p2", "p1"]

    def test_list_all(self, repository):
        repository.append(_review(product_id="p1"))
        repository.append(_review(product_id="p2"))
        assert len(repository.list_all()) == 2

    def test_unknown_product_lists_nothing(self, repository):
        assert repository.list_by_product("prod-none") == []


class TestFindByOrderAndProduct:
    def test_finds_the_triple(self, repository):
        review = _review()
        repository.append(review)
        found = repository.find_by_order_and_product("user-r", "order-r", "prod-r")
        assert found.id == review.id

    def test_other_order_does_not_match(self, repository):
        repository.append(_review())
        assert repository.find_by_order_and_product("user-r", "order-other", "prod-r") is None

    def test_other_user_does_not_match(self, repository):
        repository.append(_review())
        assert repository.find_by_order_and_product("user-other", "order-r", "prod-r") is None

    def test_oldest_wins_when_duplicated(self, repository):
        first = _review(minutes=0)
        second = _review(minutes=3)
        repository.append(second)
        repository.append(first)
        assert repository.find_by_order_and_product("user-r", "order-r", "prod-r").id == first.id


class TestNewestFirst:
    def test_naive_and_missing_timestamps_sort(self):
        aware = _review(minutes=5)
        naive = _review(minutes=10)
        naive.created_at = (T0 + timedelta(minutes=1)).replace(tzinfo=None)
        missing = _review()
        missing.created_at = None

        assert [r.id for r in newest_first([missing, naive, aware])] == [aware.id, naive.id, missing.id]
