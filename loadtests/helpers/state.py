"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state - no cross-user sharing.
State tracks the ids returned by the sandbox and review endpoints so
follow-up requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ReviewerState:
    """Tracks a simulated customer from delivery to reviews."""

    user_id: str | None = None
    order_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    review_ids: list[str] = field(default_factory=list)
