"""Cross-domain event contracts for Ordering domain events.

These classes define the event shape the Ratings domain consumes to learn
which orders exist, what they contained and whether they were delivered.
They are registered as external events via domain.register_external_event()
with matching __type__ strings so Protean's stream deserialization works
correctly.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String, Text


class OrderCreated(BaseEvent):
    """A new order was placed."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of {product_id, variant_id, quantity}
    grand_total = Float(required=True)
    currency = String(default="USD")
    created_at = DateTime(required=True)


class OrderCancelled(BaseEvent):
    """An order was cancelled before delivery."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = String(required=True)
    cancelled_by = String(required=True)
    cancelled_at = DateTime(required=True)


class OrderDelivered(BaseEvent):
    """An order was delivered to the customer.

    The source event only carries order_id and delivered_at; this contract
    adds customer_id and items so consumers that missed OrderCreated can
    still act on it.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier()
    items = Text()  # JSON list of {product_id, variant_id}
    delivered_at = DateTime(required=True)


class OrderReturned(BaseEvent):
    """Returned items were received back from the customer."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier()
    returned_item_ids = Text()  # JSON list of item IDs
    items = Text()  # JSON list of {product_id, variant_id, quantity}
    returned_at = DateTime(required=True)
