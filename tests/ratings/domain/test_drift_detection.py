"""Tests for detect_drift: every way a stored summary can disagree with the reviews."""

from types import SimpleNamespace

from ratings.summary.reconciler import DriftKind, ReconciliationReport, detect_drift
from ratings.summary.summary import ReviewSummary, encode_distribution, summarize


def _reviews(*ratings):
    return [SimpleNamespace(rating=rating) for rating in ratings]


def _summary(total, average, distribution):
    return ReviewSummary(
        product_id="prod-drift",
        total_reviews=total,
        average_rating=average,
        rating_distribution=encode_distribution(distribution),
    )


class TestDetectDrift:
    def test_no_summary_no_reviews(self):
        assert detect_drift(None, []) == []

    def test_matching_summary(self):
        reviews = _reviews(4, 5)
        assert detect_drift(summarize("prod-drift", reviews), reviews) == []

    def test_missing_summary(self):
        assert detect_drift(None, _reviews(4)) == [DriftKind.MISSING_SUMMARY]

    def test_orphaned_summary(self):
        stored = _summary(1, 4.0, {4: 1})
        assert detect_drift(stored, []) == [DriftKind.ORPHANED_SUMMARY]

    def test_stale_count_is_reported_with_its_consequences(self):
        stored = _summary(1, 4.0, {4: 1})
        drift = detect_drift(stored, _reviews(4, 5))
        assert DriftKind.COUNT_MISMATCH in drift
        assert DriftKind.AVERAGE_MISMATCH in drift
        assert DriftKind.DISTRIBUTION_MISMATCH in drift

    def test_average_only(self):
        stored = _summary(2, 4.0, {4: 1, 5: 1})
        assert detect_drift(stored, _reviews(4, 5)) == [DriftKind.AVERAGE_MISMATCH]

    def test_distribution_only(self):
        # Same count and mean, different histogram
        stored = _summary(2, 3.0, {3: 2})
        assert detect_drift(stored, _reviews(1, 5)) == [DriftKind.DISTRIBUTION_MISMATCH]

    def test_average_within_epsilon_is_not_drift(self):
        stored = _summary(2, 4.5 + 1e-9, {4: 1, 5: 1})
        assert detect_drift(stored, _reviews(4, 5)) == []


class TestReconciliationReport:
    def test_to_dict(self):
        report = ReconciliationReport(
            "prod-r",
            before=None,
            after={"total_reviews": 1},
            drift=(DriftKind.MISSING_SUMMARY,),
            repaired=True,
        )
        assert report.drift_detected
        assert report.to_dict() == {
            "product_id": "prod-r",
            "before": None,
            "after": {"total_reviews": 1},
            "drift": ["missing_summary"],
            "repaired": True,
            "forced": False,
            "error": None,
        }

    def test_no_drift(self):
        assert not ReconciliationReport("prod-r", None, None).drift_detected
