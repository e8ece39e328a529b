"""Pydantic request/response schemas for the Ratings API.

These are separate from the domain objects (anti-corruption pattern). Range
and length rules are left to the Review aggregate so that every caller, HTTP
or not, gets the same ValidationError.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CreateReviewRequest(BaseModel):
    user_id: str
    user_name: str
    order_id: str
    product_id: str
    product_name: str
    product_image: str = ""
    rating: int
    shipping_rating: int
    comment: str


class SandboxDeliveredOrderRequest(BaseModel):
    user_id: str
    product_ids: list[str] = Field(min_length=1)
    order_id: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ReviewIdResponse(BaseModel):
    review_id: str


class ReviewResponse(BaseModel):
    review_id: str
    user_id: str
    user_name: str | None = None
    order_id: str
    product_id: str
    product_name: str | None = None
    product_image: str | None = None
    rating: int
    shipping_rating: int
    comment: str
    created_at: datetime | None = None

    @classmethod
    def from_review(cls, review) -> ReviewResponse:
        return cls(
            review_id=str(review.id),
            user_id=str(review.user_id),
            user_name=review.user_name,
            order_id=str(review.order_id),
            product_id=str(review.product_id),
            product_name=review.product_name,
            product_image=review.product_image,
            rating=review.rating,
            shipping_rating=review.shipping_rating,
            comment=review.comment,
            created_at=review.created_at,
        )


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
    count: int


class SummaryResponse(BaseModel):
    product_id: str
    average_rating: float
    total_reviews: int
    rating_distribution: dict[int, int]

    @classmethod
    def from_summary(cls, summary) -> SummaryResponse:
        return cls(
            product_id=str(summary.product_id),
            average_rating=summary.average_rating,
            total_reviews=summary.total_reviews,
            rating_distribution=summary.distribution,
        )


class EligibilityResponse(BaseModel):
    eligible: bool


class OrderItemReviewStatusResponse(BaseModel):
    product_id: str
    can_review: bool
    reason: str
    review_id: str | None = None


class OrderReviewStatusResponse(BaseModel):
    order_id: str
    items: list[OrderItemReviewStatusResponse]


class ReviewStatsResponse(BaseModel):
    total_reviews: int
    average_rating: float
    rating_distribution: dict[int, int]


class ReconciliationResponse(BaseModel):
    product_id: str
    before: dict | None = None
    after: dict | None = None
    drift: list[str] = Field(default_factory=list)
    repaired: bool
    forced: bool
    error: str | None = None


class CacheClearedResponse(BaseModel):
    cleared: int
    product_id: str | None = None


class SandboxOrderResponse(BaseModel):
    order_id: str
    status: str
