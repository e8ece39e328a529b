"""Application tests for the Ordering events handler feeding CustomerOrders."""

import json
from datetime import UTC, datetime

from protean import current_domain
from ratings.orders.customer_orders import CustomerOrders
from ratings.orders.ordering_events import OrderingEventsHandler
from shared.events.ordering import OrderCancelled, OrderCreated, OrderDelivered, OrderReturned


def _record(order_id):
    return current_domain.repository_for(CustomerOrders).get(order_id)


def _items(*product_ids):
    return json.dumps([{"product_id": product_id, "quantity": 1} for product_id in product_ids])


def _created(order_id, customer_id="cust-h", items=None):
    return OrderCreated(
        order_id=order_id,
        customer_id=customer_id,
        items=items or _items("prod-h1", "prod-h2"),
        grand_total=42.0,
        created_at=datetime.now(UTC),
    )


class TestOrderCreated:
    def test_tracks_pending_order(self):
        OrderingEventsHandler().on_order_created(_created("order-h1"))

        record = _record("order-h1")
        assert record.status == "pending"
        assert record.customer_id == "cust-h"
        assert json.loads(record.product_ids) == ["prod-h1", "prod-h2"]

    def test_duplicate_product_lines_collapse(self):
        OrderingEventsHandler().on_order_created(_created("order-h2", items=_items("prod-x", "prod-x")))
        assert json.loads(_record("order-h2").product_ids) == ["prod-x"]

    def test_redelivered_event_does_not_reset_status(self):
        handler = OrderingEventsHandler()
        handler.on_order_created(_created("order-h3"))
        handler.on_order_delivered(OrderDelivered(order_id="order-h3", delivered_at=datetime.now(UTC)))

        handler.on_order_created(_created("order-h3"))

        assert _record("order-h3").status == "delivered"


class TestOrderDelivered:
    def test_marks_known_order_delivered(self):
        handler = OrderingEventsHandler()
        handler.on_order_created(_created("order-h4"))

        handler.on_order_delivered(OrderDelivered(order_id="order-h4", delivered_at=datetime.now(UTC)))

        record = _record("order-h4")
        assert record.status == "delivered"
        assert json.loads(record.product_ids) == ["prod-h1", "prod-h2"]

    def test_creates_record_when_creation_was_missed(self):
        OrderingEventsHandler().on_order_delivered(
            OrderDelivered(
                order_id="order-h5",
                customer_id="cust-h5",
                items=_items("prod-h5"),
                delivered_at=datetime.now(UTC),
            )
        )

        record = _record("order-h5")
        assert record.status == "delivered"
        assert record.customer_id == "cust-h5"

    def test_skips_unknown_order_without_customer(self):
        OrderingEventsHandler().on_order_delivered(OrderDelivered(order_id="order-h6", delivered_at=datetime.now(UTC)))

        records = current_domain.repository_for(CustomerOrders)._dao.query.filter(order_id="order-h6").all()
        assert len(records.items) == 0


class TestOrderCancelledAndReturned:
    def test_cancelled(self):
        handler = OrderingEventsHandler()
        handler.on_order_created(_created("order-h7"))

        handler.on_order_cancelled(
            OrderCancelled(
                order_id="order-h7",
                reason="Changed mind",
                cancelled_by="Customer",
                cancelled_at=datetime.now(UTC),
            )
        )

        assert _record("order-h7").status == "cancelled"

    def test_returned(self):
        handler = OrderingEventsHandler()
        handler.on_order_created(_created("order-h8"))
        handler.on_order_delivered(OrderDelivered(order_id="order-h8", delivered_at=datetime.now(UTC)))

        handler.on_order_returned(OrderReturned(order_id="order-h8", returned_at=datetime.now(UTC)))

        assert _record("order-h8").status == "returned"

    def test_untracked_order_is_ignored(self):
        OrderingEventsHandler().on_order_returned(OrderReturned(order_id="order-h9", returned_at=datetime.now(UTC)))

        records = current_domain.repository_for(CustomerOrders)._dao.query.filter(order_id="order-h9").all()
        assert len(records.items) == 0
