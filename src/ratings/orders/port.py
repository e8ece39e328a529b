"""Order collaborator port (abstract interface).

Ratings only needs to know, for one customer's order, its status and which
products it contained. Adapters answer from wherever order data lives and
raise OrderLookupError when they cannot answer at all.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class OrderStatus(Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


@dataclass(frozen=True)
class OrderSnapshot:
    """What Ratings knows about an order at lookup time."""

    order_id: str
    user_id: str
    status: str
    product_ids: tuple[str, ...] = ()

    def contains(self, product_id: str) -> bool:
        return str(product_id) in self.product_ids


class OrderLookup(ABC):
    """Abstract order collaborator."""

    @abstractmethod
    def get_order(self, user_id: str, order_id: str) -> OrderSnapshot | None:
        """Return the user's order, or None when the user has no such order."""
        ...
