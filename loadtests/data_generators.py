"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the Review aggregate's rules
(ratings 1-5, comment of at least 3 characters) and match the field names
expected by the Ratings API request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()


def unique_user_id() -> str:
    return f"lt-user-{uuid.uuid4().hex[:8]}"


def unique_product_id() -> str:
    return f"lt-prod-{uuid.uuid4().hex[:8]}"


def rating() -> int:
    """Skewed towards good ratings, like real storefront traffic."""
    return random.choices([1, 2, 3, 4, 5], weights=[1, 1, 2, 4, 4])[0]


def delivered_order_data(user_id: str, product_ids: list[str]) -> dict:
    return {
        "user_id": user_id,
        "product_ids": product_ids,
        "order_id": f"lt-ord-{uuid.uuid4().hex[:8]}",
    }


def review_data(user_id: str, order_id: str, product_id: str, **overrides) -> dict:
    payload = {
        "user_id": user_id,
        "user_name": fake.name()[:200],
        "order_id": order_id,
        "product_id": product_id,
        "product_name": fake.catch_phrase()[:255],
        "product_image": fake.image_url(),
        "rating": rating(),
        "shipping_rating": rating(),
        "comment": fake.sentence(nb_words=12),
    }
    payload.update(overrides)
    return payload
