"""SummaryMaintainer: the single writer of each product's ReviewSummary.

Every recompute reads the product's complete review set straight from the
repository (never the cache) and replaces the stored summary in one write.
There are no incremental counters to fall out of step after a partial
write, and a failed read means nothing is written at all.
"""

import structlog

from ratings.review.repository import ReviewRepository
from ratings.storage.port import REVIEW_SUMMARIES, StoragePort
from ratings.summary.summary import ReviewSummary, summarize

logger = structlog.get_logger(__name__)


class SummaryMaintainer:
    def __init__(self, repository: ReviewRepository, storage: StoragePort):
        self.repository = repository
        self.storage = storage

    def read(self, product_id: str) -> ReviewSummary | None:
        """The persisted summary, which may be stale."""
        return self.storage.get_by_key(REVIEW_SUMMARIES, str(product_id))

    def recompute(self, product_id: str) -> ReviewSummary | None:
        """Rebuild and persist the summary; None when the product has no reviews."""
        product_id = str(product_id)
        reviews = self.repository.list_by_product(product_id)
        summary = summarize(product_id, reviews)

        self.storage.put_by_key(REVIEW_SUMMARIES, product_id, summary)

        if summary is None:
            logger.info("Review summary cleared, product has no reviews", product_id=product_id)
        else:
            logger.info(
                "Review summary recomputed",
                product_id=product_id,
                total_reviews=summary.total_reviews,
                average_rating=summary.average_rating,
            )
        return summary
