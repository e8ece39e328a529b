"""BDD tests for review creation and summary consistency."""

from pytest_bdd import parsers, scenarios, then, when
from ratings.exceptions import DuplicateReviewError, IneligibleError

scenarios("features/review_summary.feature")


@when(
    parsers.cfparse('customer "{user_id}" reviews product "{product_id}" from order "{order_id}" with rating {rating:d}')
)
def review_product(engine, outcome, create_review, user_id, product_id, order_id, rating):
    try:
        outcome["review_id"] = create_review(engine, user_id, product_id, order_id, rating)
    except (DuplicateReviewError, IneligibleError) as exc:
        outcome["exc"] = exc


@then("the review is refused as a duplicate")
def refused_as_duplicate(outcome):
    assert isinstance(outcome["exc"], DuplicateReviewError)
    assert outcome["review_id"] is None


@then(parsers.cfparse('the review is refused because "{reason}"'))
def refused_because(outcome, reason):
    assert isinstance(outcome["exc"], IneligibleError)
    assert outcome["exc"].reason == reason
