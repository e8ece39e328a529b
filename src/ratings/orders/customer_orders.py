"""CustomerOrders: the Ratings domain's local copy of order status and items.

Populated by the Ordering events handler; read through ProjectionOrderLookup
when deciding whether a customer may review a product.
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from ratings.domain import ratings
from ratings.exceptions import OrderLookupError
from ratings.orders.port import OrderLookup, OrderSnapshot

logger = structlog.get_logger(__name__)


@ratings.projection
class CustomerOrders:
    order_id = Identifier(identifier=True, required=True)
    customer_id = String(required=True)
    status = String(required=True)
    product_ids = Text()  # JSON list of product ids
    updated_at = DateTime()

    def to_snapshot(self) -> OrderSnapshot:
        product_ids = json.loads(self.product_ids) if self.product_ids else []
        return OrderSnapshot(
            order_id=str(self.order_id),
            user_id=str(self.customer_id),
            status=self.status,
            product_ids=tuple(str(product_id) for product_id in product_ids),
        )


def product_ids_from_items(items) -> list[str]:
    """Product ids from an Ordering event's JSON item list, order kept, no repeats."""
    if not items:
        return []
    parsed = json.loads(items) if isinstance(items, str) else items
    product_ids: list[str] = []
    for item in parsed:
        product_id = item.get("product_id") if isinstance(item, dict) else None
        if product_id and str(product_id) not in product_ids:
            product_ids.append(str(product_id))
    return product_ids


class ProjectionOrderLookup(OrderLookup):
    """OrderLookup backed by the CustomerOrders projection."""

    def get_order(self, user_id: str, order_id: str) -> OrderSnapshot | None:
        try:
            record = current_domain.repository_for(CustomerOrders).get(str(order_id))
        except ObjectNotFoundError:
            return None
        except Exception as exc:
            logger.error("CustomerOrders lookup failed", order_id=str(order_id), error=str(exc))
            raise OrderLookupError(str(user_id), str(order_id), exc) from exc

        # Another customer's order is indistinguishable from a missing one
        if str(record.customer_id) != str(user_id):
            return None
        return record.to_snapshot()
