"""ReviewSummary: the materialized rating view for one product.

The summary is always derived in full from a product's review set: total,
per-star histogram and the mean rounded to one decimal. It carries no
timestamps, so summarizing the same reviews twice yields identical records.

A product without reviews has no summary at all. Callers must read absence
as "no data", never as a 0.0 average.
"""

import json
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from protean.fields import Float, Identifier, Integer, Text

from ratings.domain import ratings
from ratings.review.review import MAX_RATING, MIN_RATING

RATING_BUCKETS = tuple(range(MIN_RATING, MAX_RATING + 1))


@ratings.projection
class ReviewSummary:
    product_id = Identifier(identifier=True, required=True)
    average_rating = Float(required=True)
    total_reviews = Integer(required=True)
    rating_distribution = Text(required=True)  # JSON: {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}

    @property
    def distribution(self) -> dict[int, int]:
        """Histogram with integer star keys, every bucket present."""
        raw = json.loads(self.rating_distribution) if self.rating_distribution else {}
        return {bucket: int(raw.get(str(bucket), 0)) for bucket in RATING_BUCKETS}

    def snapshot(self) -> dict:
        """Plain-data copy, safe to keep after the record changes."""
        return {
            "product_id": str(self.product_id),
            "average_rating": self.average_rating,
            "total_reviews": self.total_reviews,
            "rating_distribution": self.distribution,
        }


@dataclass(frozen=True)
class RatingTally:
    """Count, histogram and rounded mean of a set of ratings."""

    total: int
    average: float
    distribution: dict[int, int] = field(default_factory=dict)


def round_rating(value: Decimal | float, places: int = 1) -> float:
    """Round half away from zero (2.25 -> 2.3), unlike Python's round()."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def tally(ratings_: list[int]) -> RatingTally:
    """Tally ratings into the 1..5 histogram and a one-decimal mean.

    An empty list tallies to zero everywhere; deciding what that means is
    up to the caller.
    """
    distribution = dict.fromkeys(RATING_BUCKETS, 0)
    for rating in ratings_:
        if rating not in distribution:
            raise ValueError(f"Rating {rating} is outside {MIN_RATING}..{MAX_RATING}")
        distribution[rating] += 1

    total = len(ratings_)
    if total == 0:
        return RatingTally(total=0, average=0.0, distribution=distribution)

    mean = Decimal(sum(ratings_)) / Decimal(total)
    return RatingTally(total=total, average=round_rating(mean), distribution=distribution)


def encode_distribution(distribution: dict[int, int]) -> str:
    """Canonical JSON for a histogram: string keys, all buckets, sorted."""
    return json.dumps(
        {str(bucket): int(distribution.get(bucket, 0)) for bucket in RATING_BUCKETS},
        sort_keys=True,
    )


def summarize(product_id: str, reviews: list) -> ReviewSummary | None:
    """Build the summary for a product from its complete review set."""
    if not reviews:
        return None

    result = tally([review.rating for review in reviews])
    return ReviewSummary(
        product_id=str(product_id),
        average_rating=result.average,
        total_reviews=result.total,
        rating_distribution=encode_distribution(result.distribution),
    )
