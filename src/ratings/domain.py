"""Ratings bounded context: product reviews and their rating summaries.

Owns the append-only review collection, the denormalized per-product
ReviewSummary, the time-bounded review cache, and read-repair of summaries
that drift from the reviews they are derived from. Learns about deliveries
from the Ordering domain via cross-domain events.
"""

import structlog
from protean.domain import Domain

ratings = Domain(name="ratings")

logger = structlog.get_logger(__name__)
