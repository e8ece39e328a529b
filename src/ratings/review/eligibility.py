"""Eligibility: may this (user, order, product) produce a new review?

Checks run in a fixed order and stop at the first failure:

1. the user has the order;
2. the order is delivered;
3. the product is one of the order's items;
4. no review exists yet for the triple.

A negative answer is a decision, not an error. Only failures to reach the
order collaborator (OrderLookupError) or the store (StorageError) raise.
The check runs again at creation time because the answer the UI saw may be
stale by the time the review is submitted.
"""

from dataclasses import dataclass
from enum import Enum

from ratings.config import DEFAULT_DELIVERED_STATUS
from ratings.orders.port import OrderLookup
from ratings.review.repository import ReviewRepository


class EligibilityReason(Enum):
    ELIGIBLE = "eligible"
    ORDER_NOT_FOUND = "order_not_found"
    ORDER_NOT_DELIVERED = "order_not_delivered"
    PRODUCT_NOT_IN_ORDER = "product_not_in_order"
    ALREADY_REVIEWED = "already_reviewed"


@dataclass(frozen=True)
class EligibilityDecision:
    reason: EligibilityReason
    existing_review_id: str | None = None

    @property
    def eligible(self) -> bool:
        return self.reason is EligibilityReason.ELIGIBLE


class EligibilityChecker:
    def __init__(
        self,
        orders: OrderLookup,
        repository: ReviewRepository,
        delivered_status: str = DEFAULT_DELIVERED_STATUS,
    ):
        self.orders = orders
        self.repository = repository
        self.delivered_status = delivered_status

    def evaluate(self, user_id: str, product_id: str, order_id: str) -> EligibilityDecision:
        order = self.orders.get_order(str(user_id), str(order_id))
        if order is None:
            return EligibilityDecision(EligibilityReason.ORDER_NOT_FOUND)

        if order.status != self.delivered_status:
            return EligibilityDecision(EligibilityReason.ORDER_NOT_DELIVERED)

        if not order.contains(str(product_id)):
            return EligibilityDecision(EligibilityReason.PRODUCT_NOT_IN_ORDER)

        existing = self.repository.find_by_order_and_product(str(user_id), str(order_id), str(product_id))
        if existing is not None:
            return EligibilityDecision(EligibilityReason.ALREADY_REVIEWED, existing_review_id=str(existing.id))

        return EligibilityDecision(EligibilityReason.ELIGIBLE)

    def is_eligible(self, user_id: str, product_id: str, order_id: str) -> bool:
        return self.evaluate(user_id, product_id, order_id).eligible
