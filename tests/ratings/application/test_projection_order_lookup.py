"""Eligibility end to end: Ordering events -> CustomerOrders -> ProjectionOrderLookup."""

import json
from datetime import UTC, datetime

import pytest
from ratings.config import EngineSettings
from ratings.engine import ReviewEngine
from ratings.exceptions import IneligibleError
from ratings.orders.customer_orders import ProjectionOrderLookup
from ratings.orders.ordering_events import OrderingEventsHandler
from ratings.storage.domain_store import DomainStore
from shared.events.ordering import OrderCreated, OrderDelivered, OrderReturned


def _place(order_id, customer_id, *product_ids):
    OrderingEventsHandler().on_order_created(
        OrderCreated(
            order_id=order_id,
            customer_id=customer_id,
            items=json.dumps([{"product_id": p} for p in product_ids]),
            grand_total=10.0,
            created_at=datetime.now(UTC),
        )
    )


def _deliver(order_id):
    OrderingEventsHandler().on_order_delivered(OrderDelivered(order_id=order_id, delivered_at=datetime.now(UTC)))


@pytest.fixture()
def lookup():
    return ProjectionOrderLookup()


@pytest.fixture()
def domain_engine(lookup):
    return ReviewEngine(storage=DomainStore(), orders=lookup, settings=EngineSettings())


class TestProjectionOrderLookup:
    def test_snapshot(self, lookup):
        _place("order-p1", "cust-p1", "prod-a", "prod-b")

        snapshot = lookup.get_order("cust-p1", "order-p1")

        assert snapshot.status == "pending"
        assert snapshot.product_ids == ("prod-a", "prod-b")
        assert snapshot.contains("prod-b")

    def test_unknown_order(self, lookup):
        assert lookup.get_order("cust-p2", "order-unknown") is None

    def test_other_customers_order(self, lookup):
        _place("order-p3", "cust-p3", "prod-a")
        assert lookup.get_order("cust-intruder", "order-p3") is None


class TestEligibilityFromEvents:
    def test_pending_order_cannot_be_reviewed(self, domain_engine):
        _place("order-p4", "cust-p4", "prod-a")
        assert not domain_engine.check_eligibility("cust-p4", "prod-a", "order-p4")

    def test_delivered_order_can_be_reviewed(self, domain_engine):
        _place("order-p5", "cust-p5", "prod-a")
        _deliver("order-p5")
        assert domain_engine.check_eligibility("cust-p5", "prod-a", "order-p5")

    def test_returned_order_blocks_new_reviews(self, domain_engine):
        _place("order-p6", "cust-p6", "prod-a", "prod-b")
        _deliver("order-p6")
        domain_engine.create_review(
            user_id="cust-p6",
            user_name="Noor",
            order_id="order-p6",
            product_id="prod-a",
            product_name="Desk Lamp",
            product_image="",
            rating=3,
            shipping_rating=4,
            comment="Bright enough",
        )

        OrderingEventsHandler().on_order_returned(OrderReturned(order_id="order-p6", returned_at=datetime.now(UTC)))

        with pytest.raises(IneligibleError) as exc:
            domain_engine.create_review(
                user_id="cust-p6",
                user_name="Noor",
                order_id="order-p6",
                product_id="prod-b",
                product_name="Desk Fan",
                product_image="",
                rating=2,
                shipping_rating=4,
                comment="Too loud",
            )
        assert exc.value.reason == "order_not_delivered"
        # The review written before the return stays
        assert domain_engine.get_summary("prod-a").total_reviews == 1
