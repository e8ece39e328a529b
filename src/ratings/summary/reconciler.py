"""Reconciler: read-repair for ReviewSummary drift.

Appending a review and replacing its product's summary are two separate
writes with nothing tying them together. A crash between them, a dropped
write, or two creations racing each other's recompute can leave the stored
summary behind the reviews. Whenever a summary is read for display, the
Reconciler compares it with the uncached review set and, on any mismatch,
recomputes it.

The read path must keep working while storage is unhealthy, so an
opportunistic reconcile never raises once it holds the stored summary: a
failed comparison or repair hands back the last-known summary and records
the error on the report. force() is the operational variant and lets
errors propagate.
"""

from dataclasses import dataclass, field
from enum import Enum

import structlog

from ratings.cache import ReviewCache
from ratings.exceptions import StorageError
from ratings.summary.maintainer import SummaryMaintainer
from ratings.summary.summary import ReviewSummary, tally

logger = structlog.get_logger(__name__)

AVERAGE_EPSILON = 1e-6


class DriftKind(Enum):
    MISSING_SUMMARY = "missing_summary"
    ORPHANED_SUMMARY = "orphaned_summary"
    COUNT_MISMATCH = "count_mismatch"
    AVERAGE_MISMATCH = "average_mismatch"
    DISTRIBUTION_MISMATCH = "distribution_mismatch"


def detect_drift(stored: ReviewSummary | None, reviews: list, epsilon: float = AVERAGE_EPSILON) -> list[DriftKind]:
    """Every way the stored summary disagrees with the observed reviews."""
    if stored is None:
        return [DriftKind.MISSING_SUMMARY] if reviews else []
    if not reviews:
        return [DriftKind.ORPHANED_SUMMARY]

    expected = tally([review.rating for review in reviews])
    drift = []
    if stored.total_reviews != expected.total:
        drift.append(DriftKind.COUNT_MISMATCH)
    if stored.average_rating is None or abs(stored.average_rating - expected.average) > epsilon:
        drift.append(DriftKind.AVERAGE_MISMATCH)
    if stored.distribution != expected.distribution:
        drift.append(DriftKind.DISTRIBUTION_MISMATCH)
    return drift


def _snapshot(summary: ReviewSummary | None) -> dict | None:
    return summary.snapshot() if summary is not None else None


@dataclass(frozen=True)
class ReconciliationReport:
    """Outcome of one reconciliation, with before/after summaries for observability.

    ``summary`` is what a reader should be shown: the repaired summary when a
    repair succeeded, otherwise the stored one.
    """

    product_id: str
    before: dict | None
    after: dict | None
    drift: tuple[DriftKind, ...] = ()
    repaired: bool = False
    forced: bool = False
    error: str | None = None
    summary: ReviewSummary | None = field(default=None, compare=False, repr=False)

    @property
    def drift_detected(self) -> bool:
        return bool(self.drift)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "before": self.before,
            "after": self.after,
            "drift": [kind.value for kind in self.drift],
            "repaired": self.repaired,
            "forced": self.forced,
            "error": self.error,
        }


class Reconciler:
    def __init__(
        self,
        cache: ReviewCache,
        maintainer: SummaryMaintainer,
        epsilon: float = AVERAGE_EPSILON,
    ):
        self.cache = cache
        self.maintainer = maintainer
        self.epsilon = epsilon

    def reconcile(self, product_id: str) -> ReconciliationReport:
        """Compare the stored summary with the reviews and repair it on drift."""
        product_id = str(product_id)
        stored = self.maintainer.read(product_id)
        before = _snapshot(stored)

        try:
            observed = self.cache.get_reviews(product_id, allow_cache=False)
        except StorageError as exc:
            logger.warning("Drift check skipped, reviews unavailable", product_id=product_id, error=str(exc))
            return ReconciliationReport(product_id, before, before, error=str(exc), summary=stored)

        drift = tuple(detect_drift(stored, observed, self.epsilon))
        if not drift:
            return ReconciliationReport(product_id, before, before, summary=stored)

        logger.warning(
            "Review summary drift detected",
            product_id=product_id,
            drift=[kind.value for kind in drift],
            stored_total=stored.total_reviews if stored is not None else None,
            observed_total=len(observed),
        )

        try:
            repaired = self._repair(product_id)
        except StorageError as exc:
            logger.error("Review summary repair failed", product_id=product_id, error=str(exc))
            return ReconciliationReport(product_id, before, before, drift=drift, error=str(exc), summary=stored)

        logger.info("Review summary repaired", product_id=product_id, after=_snapshot(repaired))
        return ReconciliationReport(
            product_id,
            before,
            _snapshot(repaired),
            drift=drift,
            repaired=True,
            summary=repaired,
        )

    def force(self, product_id: str) -> ReconciliationReport:
        """Recompute unconditionally and report what changed. Errors propagate."""
        product_id = str(product_id)
        stored = self.maintainer.read(product_id)
        observed = self.cache.get_reviews(product_id, allow_cache=False)
        drift = tuple(detect_drift(stored, observed, self.epsilon))

        repaired = self._repair(product_id)

        logger.info(
            "Review summary force-reconciled",
            product_id=product_id,
            drift=[kind.value for kind in drift],
        )
        return ReconciliationReport(
            product_id,
            _snapshot(stored),
            _snapshot(repaired),
            drift=drift,
            repaired=True,
            forced=True,
            summary=repaired,
        )

    def _repair(self, product_id: str) -> ReviewSummary | None:
        self.cache.invalidate(product_id)
        self.maintainer.recompute(product_id)
        return self.maintainer.read(product_id)
