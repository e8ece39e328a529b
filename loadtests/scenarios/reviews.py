"""Ratings load test scenarios.

A stateful reviewer journey plus a duplicate-submission race. Orders are
seeded through the non-production sandbox endpoint, so the server must run
with PROTEAN_ENV other than "production".
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    delivered_order_data,
    review_data,
    unique_product_id,
    unique_user_id,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ReviewerState

# A small shared catalogue so summaries receive concurrent writes
HOT_PRODUCTS = [f"lt-hot-{i}" for i in range(5)]


class ReviewerJourney(SequentialTaskSet):
    """Delivery -> Eligibility -> Review each item -> Duplicate -> Summary."""

    def on_start(self):
        self.state = ReviewerState(
            user_id=unique_user_id(),
            product_ids=[random.choice(HOT_PRODUCTS), unique_product_id()],
        )

    @task
    def seed_delivered_order(self):
        with self.client.post(
            "/orders/sandbox/delivered",
            json=delivered_order_data(self.state.user_id, self.state.product_ids),
            catch_response=True,
            name="POST /orders/sandbox/delivered",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
            else:
                resp.failure(f"Seeding order failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def check_eligibility(self):
        with self.client.get(
            "/reviews/eligibility",
            params={
                "user_id": self.state.user_id,
                "product_id": self.state.product_ids[0],
                "order_id": self.state.order_id,
            },
            catch_response=True,
            name="GET /reviews/eligibility",
        ) as resp:
            if resp.status_code != 200 or not resp.json()["eligible"]:
                resp.failure(f"Expected eligible: {resp.status_code} - {resp.text[:200]}")

    @task
    def review_items(self):
        for product_id in self.state.product_ids:
            with self.client.post(
                "/reviews",
                json=review_data(self.state.user_id, self.state.order_id, product_id),
                catch_response=True,
                name="POST /reviews",
            ) as resp:
                if resp.status_code == 201:
                    self.state.review_ids.append(resp.json()["review_id"])
                else:
                    resp.failure(f"Review failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def duplicate_is_rejected(self):
        with self.client.post(
            "/reviews",
            json=review_data(self.state.user_id, self.state.order_id, self.state.product_ids[0]),
            catch_response=True,
            name="POST /reviews (duplicate)",
        ) as resp:
            if resp.status_code == 409:
                resp.success()
            else:
                resp.failure(f"Expected 409, got {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def read_summary(self):
        with self.client.get(
            f"/reviews/products/{self.state.product_ids[0]}/summary",
            catch_response=True,
            name="GET /reviews/products/{id}/summary",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Summary read failed: {resp.status_code} - {extract_error_detail(resp)}")
                return
            summary = resp.json()
            if summary["total_reviews"] != sum(summary["rating_distribution"].values()):
                resp.failure(f"Inconsistent summary: {summary}")

    @task
    def done(self):
        self.interrupt()


class DuplicateSubmissionRace(SequentialTaskSet):
    """Fire the same review twice back to back; exactly one may win.

    Concurrency across workers of one process is serialized by the engine's
    per-triple lock. Expected: one 201, every other attempt 409.
    """

    def on_start(self):
        self.state = ReviewerState(user_id=unique_user_id(), product_ids=[random.choice(HOT_PRODUCTS)])
        resp = self.client.post(
            "/orders/sandbox/delivered",
            json=delivered_order_data(self.state.user_id, self.state.product_ids),
            name="[RACE] POST /orders/sandbox/delivered (setup)",
        )
        if resp.status_code == 201:
            self.state.order_id = resp.json()["order_id"]

    @task
    def rush_submit(self):
        if not self.state.order_id:
            self.interrupt()
            return

        payload = review_data(self.state.user_id, self.state.order_id, self.state.product_ids[0])
        for _ in range(3):
            with self.client.post(
                "/reviews",
                json=payload,
                catch_response=True,
                name="[RACE] POST /reviews",
            ) as resp:
                if resp.status_code == 201 and self.state.review_ids:
                    resp.failure(f"Duplicate review created for order {self.state.order_id}")
                elif resp.status_code == 201:
                    self.state.review_ids.append(resp.json()["review_id"])
                    resp.success()
                elif resp.status_code == 409:
                    resp.success()
                else:
                    resp.failure(f"Unexpected error: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class SummaryReader(SequentialTaskSet):
    """Read-heavy browsing of the hot products."""

    @task(4)
    def browse_reviews(self):
        self.client.get(
            f"/reviews/products/{random.choice(HOT_PRODUCTS)}",
            name="GET /reviews/products/{id}",
        )

    @task(4)
    def browse_summary(self):
        with self.client.get(
            f"/reviews/products/{random.choice(HOT_PRODUCTS)}/summary",
            catch_response=True,
            name="GET /reviews/products/{id}/summary",
        ) as resp:
            if resp.status_code in (200, 404):
                resp.success()

    @task(1)
    def done(self):
        self.interrupt()


class ReviewsUser(HttpUser):
    """Locust user simulating storefront review traffic.

    Weighted task distribution:
    - 50% Summary Reader (most common)
    - 40% Reviewer Journey
    - 10% Duplicate Submission Race
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        SummaryReader: 5,
        ReviewerJourney: 4,
        DuplicateSubmissionRace: 1,
    }
