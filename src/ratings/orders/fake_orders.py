"""Fake order collaborator: answers from orders registered in memory."""

from ratings.exceptions import OrderLookupError
from ratings.orders.port import OrderLookup, OrderSnapshot, OrderStatus


class FakeOrderLookup(OrderLookup):
    """OrderLookup that serves orders added by the test."""

    def __init__(self):
        self.orders: dict[tuple[str, str], OrderSnapshot] = {}
        self.lookups: list[tuple[str, str]] = []
        self.should_succeed = True
        self.failure_reason = "Order service unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Order service unavailable"):
        """Configure the fake lookup behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def add_order(
        self,
        user_id: str,
        order_id: str,
        product_ids: list[str],
        status: str = OrderStatus.DELIVERED.value,
    ) -> OrderSnapshot:
        snapshot = OrderSnapshot(
            order_id=str(order_id),
            user_id=str(user_id),
            status=status,
            product_ids=tuple(str(product_id) for product_id in product_ids),
        )
        self.orders[(str(user_id), str(order_id))] = snapshot
        return snapshot

    def get_order(self, user_id: str, order_id: str) -> OrderSnapshot | None:
        self.lookups.append((str(user_id), str(order_id)))
        if not self.should_succeed:
            raise OrderLookupError(str(user_id), str(order_id), RuntimeError(self.failure_reason))
        return self.orders.get((str(user_id), str(order_id)))

    def reset(self):
        """Forget all orders (useful between tests)."""
        self.orders.clear()
        self.lookups.clear()
        self.should_succeed = True
        self.failure_reason = "Order service unavailable"
