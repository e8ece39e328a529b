"""Shared BDD fixtures and step definitions for the Ratings domain."""

import pytest
from pytest_bdd import given, parsers, then
from ratings.orders.port import OrderStatus
from ratings.storage.port import REVIEW_SUMMARIES
from ratings.summary.summary import ReviewSummary, encode_distribution


@pytest.fixture()
def outcome():
    """Container for the result or error of the last action."""
    return {"review_id": None, "exc": None}


def _create(engine, user_id, product_id, order_id, rating):
    return engine.create_review(
        user_id=user_id,
        user_name=f"Customer {user_id}",
        order_id=order_id,
        product_id=product_id,
        product_name="BDD Product",
        product_image="https://cdn.example.com/bdd.jpg",
        rating=rating,
        shipping_rating=4,
        comment="Written for a scenario",
    )


@pytest.fixture()
def create_review():
    """Create a review with scenario defaults for everything but the ids and rating."""
    return _create


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('customer "{user_id}" has a delivered order "{order_id}" containing product "{product_id}"'))
def delivered_order(orders, user_id, order_id, product_id):
    orders.add_order(user_id, order_id, [product_id])


@given(parsers.cfparse('customer "{user_id}" has a shipped order "{order_id}" containing product "{product_id}"'))
def shipped_order(orders, user_id, order_id, product_id):
    orders.add_order(user_id, order_id, [product_id], status=OrderStatus.SHIPPED.value)


@given(
    parsers.cfparse('customer "{user_id}" reviewed product "{product_id}" from order "{order_id}" with rating {rating:d}')
)
def existing_review(engine, user_id, product_id, order_id, rating):
    _create(engine, user_id, product_id, order_id, rating)


@given(parsers.cfparse('the stored summary of product "{product_id}" was corrupted to {total:d} reviews'))
def corrupted_summary(store, product_id, total):
    store.collections[REVIEW_SUMMARIES][product_id] = ReviewSummary(
        product_id=product_id,
        total_reviews=total,
        average_rating=1.0,
        rating_distribution=encode_distribution({1: total}),
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the summary of product "{product_id}" shows {total:d} reviews averaging {average:f}'))
def summary_shows(engine, product_id, total, average):
    summary = engine.get_summary(product_id)
    assert summary is not None
    assert summary.total_reviews == total
    assert summary.average_rating == pytest.approx(average)


@then(parsers.cfparse('the summary of product "{product_id}" has {count:d} reviews with {stars:d} stars'))
def summary_bucket(engine, product_id, count, stars):
    summary = engine.get_summary(product_id)
    assert summary.distribution[stars] == count
    assert sum(summary.distribution.values()) == summary.total_reviews


@then(parsers.cfparse('product "{product_id}" has no summary'))
def no_summary(engine, product_id):
    assert engine.get_summary(product_id) is None
