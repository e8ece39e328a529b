"""Sandbox endpoint for seeding delivered orders without the Ordering domain.

Only mounted outside production. It feeds a synthetic OrderDelivered through
the same handler the Ordering event stream drives, so the order becomes
visible to eligibility checks exactly as a real delivery would.
"""

import json
from datetime import UTC, datetime
from uuid import uuid4

from fastapi import APIRouter
from shared.events.ordering import OrderDelivered

from ratings.api.schemas import SandboxDeliveredOrderRequest, SandboxOrderResponse
from ratings.domain import logger
from ratings.orders.ordering_events import OrderingEventsHandler
from ratings.orders.port import OrderStatus

sandbox_router = APIRouter(prefix="/orders/sandbox", tags=["sandbox"])


@sandbox_router.post("/delivered", status_code=201, response_model=SandboxOrderResponse)
async def seed_delivered_order(body: SandboxDeliveredOrderRequest) -> SandboxOrderResponse:
    order_id = body.order_id or f"sandbox-{uuid4()}"
    event = OrderDelivered(
        order_id=order_id,
        customer_id=body.user_id,
        items=json.dumps([{"product_id": product_id} for product_id in body.product_ids]),
        delivered_at=datetime.now(UTC),
    )
    OrderingEventsHandler().on_order_delivered(event)
    logger.info("Sandbox order delivered", order_id=order_id, user_id=body.user_id, items=len(body.product_ids))
    return SandboxOrderResponse(order_id=order_id, status=OrderStatus.DELIVERED.value)
