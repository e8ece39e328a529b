"""ReviewEngine: the query/command surface of the Ratings domain.

Wires the repository, eligibility check, cache, summary maintainer and
reconciler over one StoragePort and one OrderLookup. Build one engine per
process with build_engine() and pass it to whoever serves requests.

Creating a review is two independent writes: append the review, then
replace the product summary. They are not wrapped in a transaction. If the
second write fails, the review stands and the summary is left stale until
the next summary read repairs it.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog

from ratings.cache import ReviewCache
from ratings.config import EngineSettings
from ratings.exceptions import DuplicateReviewError, IneligibleError, OrderLookupError, StorageError
from ratings.orders.port import OrderLookup
from ratings.review.eligibility import EligibilityChecker, EligibilityReason
from ratings.review.repository import ReviewRepository
from ratings.review.review import Review
from ratings.storage.port import StoragePort
from ratings.summary.maintainer import SummaryMaintainer
from ratings.summary.reconciler import ReconciliationReport, Reconciler
from ratings.summary.summary import ReviewSummary, tally

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderItemReviewStatus:
    product_id: str
    can_review: bool
    reason: str
    review_id: str | None = None


@dataclass(frozen=True)
class ReviewStats:
    """Totals over every review in the store."""

    total_reviews: int
    average_rating: float
    rating_distribution: dict[int, int] = field(default_factory=dict)


class _KeyedLocks:
    """One lock per key, created on demand and dropped when unused."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[tuple, list] = {}  # key -> [lock, holders]

    @contextmanager
    def hold(self, key: tuple) -> Iterator[None]:
        with self._guard:
            slot = self._locks.setdefault(key, [threading.Lock(), 0])
            slot[1] += 1
        try:
            with slot[0]:
                yield
        finally:
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    self._locks.pop(key, None)


class ReviewEngine:
    def __init__(
        self,
        storage: StoragePort,
        orders: OrderLookup,
        settings: EngineSettings | None = None,
        cache: ReviewCache | None = None,
    ):
        self.settings = settings or EngineSettings()
        self.storage = storage
        self.orders = orders
        self.repository = ReviewRepository(storage)
        self.eligibility = EligibilityChecker(orders, self.repository, self.settings.delivered_status)
        self.cache = cache or ReviewCache(
            self.repository,
            ttl_seconds=self.settings.cache_ttl_seconds,
            max_entries=self.settings.cache_max_entries,
        )
        self.maintainer = SummaryMaintainer(self.repository, storage)
        self.reconciler = Reconciler(self.cache, self.maintainer)
        self._creation_locks = _KeyedLocks()

    # -------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------
    def create_review(
        self,
        user_id: str,
        user_name: str,
        order_id: str,
        product_id: str,
        product_name: str,
        product_image: str,
        rating: int,
        shipping_rating: int,
        comment: str,
    ) -> str:
        """Record a review and refresh the product's summary.

        Raises:
            ValidationError: rating out of range or comment too short.
            DuplicateReviewError: the triple has already been reviewed.
            IneligibleError: order missing, not delivered, or without the product.
            OrderLookupError: the order collaborator failed.
            StorageError: the review could not be stored.
        """
        review = Review.create(
            user_id=user_id,
            order_id=order_id,
            product_id=product_id,
            rating=rating,
            shipping_rating=shipping_rating,
            comment=comment,
            user_name=user_name,
            product_name=product_name,
            product_image=product_image,
        )
        user_id, order_id, product_id = review.triple

        # Eligibility is re-checked here; the answer the client saw may be stale.
        with self._creation_locks.hold(review.triple):
            decision = self.eligibility.evaluate(user_id, product_id, order_id)
            if decision.reason is EligibilityReason.ALREADY_REVIEWED:
                logger.info(
                    "Duplicate review rejected",
                    user_id=user_id,
                    order_id=order_id,
                    product_id=product_id,
                    existing_review_id=decision.existing_review_id,
                )
                raise DuplicateReviewError(user_id, order_id, product_id)
            if not decision.eligible:
                logger.info(
                    "Review refused",
                    user_id=user_id,
                    order_id=order_id,
                    product_id=product_id,
                    reason=decision.reason.value,
                )
                raise IneligibleError(decision.reason.value)

            review_id = self.repository.append(review)

        self.cache.invalidate(product_id)
        logger.info(
            "Review created",
            review_id=review_id,
            user_id=user_id,
            order_id=order_id,
            product_id=product_id,
            rating=review.rating,
        )

        try:
            self.maintainer.recompute(product_id)
        except StorageError as exc:
            logger.warning(
                "Summary recompute failed after review creation, read repair will converge",
                product_id=product_id,
                review_id=review_id,
                error=str(exc),
            )

        return review_id

    def force_reconcile(self, product_id: str) -> ReconciliationReport:
        return self.reconciler.force(product_id)

    def clear_cache(self, product_id: str | None = None) -> int:
        """Invalidate one product's cached reviews, or all of them."""
        if product_id is None:
            return self.cache.clear()
        self.cache.invalidate(product_id)
        return 1

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def get_reviews_for_product(self, product_id: str) -> list[Review]:
        return self.cache.get_reviews(product_id, allow_cache=True)

    def get_reviews_for_user(self, user_id: str) -> list[Review]:
        return self.repository.list_by_user(str(user_id))

    def get_summary(self, product_id: str) -> ReviewSummary | None:
        """The product's summary, read-repaired unless disabled in settings."""
        if not self.settings.reconcile_on_read:
            return self.maintainer.read(product_id)
        return self.reconciler.reconcile(product_id).summary

    def check_eligibility(self, user_id: str, product_id: str, order_id: str) -> bool:
        """True when the user may review the product for this order.

        An unreachable order service answers False, logged apart from
        ordinary refusals. Storage failures propagate.
        """
        try:
            return self.eligibility.is_eligible(user_id, product_id, order_id)
        except OrderLookupError as exc:
            logger.warning(
                "Order lookup failed, treating as ineligible",
                user_id=str(user_id),
                order_id=str(order_id),
                product_id=str(product_id),
                error=str(exc),
            )
            return False

    def review_status_for_order(self, user_id: str, order_id: str) -> list[OrderItemReviewStatus]:
        """Per line item of an order: can it still be reviewed, and by which review was it."""
        order = self.orders.get_order(str(user_id), str(order_id))
        if order is None:
            raise IneligibleError(EligibilityReason.ORDER_NOT_FOUND.value)

        statuses = []
        for product_id in order.product_ids:
            decision = self.eligibility.evaluate(user_id, product_id, order_id)
            statuses.append(
                OrderItemReviewStatus(
                    product_id=product_id,
                    can_review=decision.eligible,
                    reason=decision.reason.value,
                    review_id=decision.existing_review_id,
                )
            )
        return statuses

    def review_stats(self) -> ReviewStats:
        """Store-wide totals. Zero reviews report a 0.0 average."""
        result = tally([review.rating for review in self.repository.list_all()])
        return ReviewStats(
            total_reviews=result.total,
            average_rating=result.average,
            rating_distribution=result.distribution,
        )


def build_engine(
    settings: EngineSettings | None = None,
    storage: StoragePort | None = None,
    orders: OrderLookup | None = None,
) -> ReviewEngine:
    """Wire an engine from settings, defaulting the adapters they select."""
    settings = settings or EngineSettings.from_env()

    if storage is None:
        if settings.storage == "memory":
            from ratings.storage.fake_store import FakeStore

            storage = FakeStore()
        else:
            from ratings.storage.domain_store import DomainStore

            storage = DomainStore()

    if orders is None:
        from ratings.orders.customer_orders import ProjectionOrderLookup

        orders = ProjectionOrderLookup()

    return ReviewEngine(storage=storage, orders=orders, settings=settings)
