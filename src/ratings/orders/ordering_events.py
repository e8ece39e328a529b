"""Inbound cross-domain event handler: Ratings reacts to Ordering events.

Keeps the CustomerOrders projection in step with the order lifecycle so the
eligibility check can see whether an order was delivered and what it held.

Cross-domain events are imported from shared.events.ordering and registered
as external events via ratings.register_external_event().
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.ordering import OrderCancelled, OrderCreated, OrderDelivered, OrderReturned

from ratings.domain import ratings
from ratings.orders.customer_orders import CustomerOrders, product_ids_from_items
from ratings.orders.port import OrderStatus
from ratings.review.review import Review

logger = structlog.get_logger(__name__)

ratings.register_external_event(OrderCreated, "Ordering.OrderCreated.v1")
ratings.register_external_event(OrderDelivered, "Ordering.OrderDelivered.v1")
ratings.register_external_event(OrderCancelled, "Ordering.OrderCancelled.v1")
ratings.register_external_event(OrderReturned, "Ordering.OrderReturned.v1")


def _find(order_id: str) -> CustomerOrders | None:
    try:
        return current_domain.repository_for(CustomerOrders).get(order_id)
    except ObjectNotFoundError:
        return None


def _set_status(order_id: str, status: OrderStatus, occurred_at) -> bool:
    record = _find(order_id)
    if record is None:
        logger.info("Order not tracked, status change ignored", order_id=order_id, status=status.value)
        return False

    record.status = status.value
    record.updated_at = occurred_at
    current_domain.repository_for(CustomerOrders).add(record)
    return True


@ratings.event_handler(part_of=Review, stream_category="ordering::order")
class OrderingEventsHandler:
    """Reacts to Ordering domain events to track which orders can be reviewed."""

    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        order_id = str(event.order_id)
        if _find(order_id) is not None:
            return

        current_domain.repository_for(CustomerOrders).add(
            CustomerOrders(
                order_id=order_id,
                customer_id=str(event.customer_id),
                status=OrderStatus.PENDING.value,
                product_ids=json.dumps(product_ids_from_items(event.items)),
                updated_at=event.created_at,
            )
        )

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        """Mark the order delivered, creating the record if creation was missed.

        OrderDelivered may arrive without a preceding OrderCreated (for
        instance after a replay from a later position); it carries the
        customer and items in that case.
        """
        order_id = str(event.order_id)
        repo = current_domain.repository_for(CustomerOrders)
        record = _find(order_id)

        if record is None:
            if not event.customer_id:
                logger.info("OrderDelivered missing customer_id, order not tracked", order_id=order_id)
                return
            repo.add(
                CustomerOrders(
                    order_id=order_id,
                    customer_id=str(event.customer_id),
                    status=OrderStatus.DELIVERED.value,
                    product_ids=json.dumps(product_ids_from_items(event.items)),
                    updated_at=event.delivered_at,
                )
            )
            return

        record.status = OrderStatus.DELIVERED.value
        record.updated_at = event.delivered_at
        if event.items and not json.loads(record.product_ids or "[]"):
            record.product_ids = json.dumps(product_ids_from_items(event.items))
        repo.add(record)

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        _set_status(str(event.order_id), OrderStatus.CANCELLED, event.cancelled_at)

    @handle(OrderReturned)
    def on_order_returned(self, event: OrderReturned) -> None:
        """A returned order stops being reviewable. Existing reviews stay."""
        _set_status(str(event.order_id), OrderStatus.RETURNED, event.returned_at)
