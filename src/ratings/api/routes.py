"""FastAPI routes for the Ratings bounded context.

Each route translates between Pydantic schemas (external contract) and the
ReviewEngine held on the application state.
"""

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from ratings.api.schemas import (
    CacheClearedResponse,
    CreateReviewRequest,
    EligibilityResponse,
    OrderItemReviewStatusResponse,
    OrderReviewStatusResponse,
    ReconciliationResponse,
    ReviewIdResponse,
    ReviewListResponse,
    ReviewResponse,
    ReviewStatsResponse,
    SummaryResponse,
)
from ratings.domain import logger
from ratings.engine import ReviewEngine
from ratings.exceptions import DuplicateReviewError, IneligibleError, OrderLookupError, StorageError

review_router = APIRouter(prefix="/reviews", tags=["reviews"])


def get_engine(request: Request) -> ReviewEngine:
    return request.app.state.review_engine


def _review_list(reviews) -> ReviewListResponse:
    return ReviewListResponse(
        reviews=[ReviewResponse.from_review(review) for review in reviews],
        count=len(reviews),
    )


# --- Commands ---


@review_router.post("", status_code=201, response_model=ReviewIdResponse)
async def create_review(body: CreateReviewRequest, engine: ReviewEngine = Depends(get_engine)) -> ReviewIdResponse:
    """Submit a review for a delivered order item."""
    review_id = engine.create_review(
        user_id=body.user_id,
        user_name=body.user_name,
        order_id=body.order_id,
        product_id=body.product_id,
        product_name=body.product_name,
        product_image=body.product_image,
        rating=body.rating,
        shipping_rating=body.shipping_rating,
        comment=body.comment,
    )
    return ReviewIdResponse(review_id=review_id)


@review_router.post("/products/{product_id}/reconcile", response_model=ReconciliationResponse)
async def reconcile_summary(product_id: str, engine: ReviewEngine = Depends(get_engine)) -> ReconciliationResponse:
    """Recompute a product's summary and report what changed."""
    report = engine.force_reconcile(product_id)
    return ReconciliationResponse(**report.to_dict())


@review_router.delete("/cache", response_model=CacheClearedResponse)
async def clear_cache(product_id: str | None = None, engine: ReviewEngine = Depends(get_engine)):
    cleared = engine.clear_cache(product_id)
    return CacheClearedResponse(cleared=cleared, product_id=product_id)


# --- Queries ---


@review_router.get("/products/{product_id}", response_model=ReviewListResponse)
async def reviews_for_product(product_id: str, engine: ReviewEngine = Depends(get_engine)):
    return _review_list(engine.get_reviews_for_product(product_id))


@review_router.get("/products/{product_id}/summary", response_model=SummaryResponse)
async def product_summary(product_id: str, engine: ReviewEngine = Depends(get_engine)):
    summary = engine.get_summary(product_id)
    if summary is None:
        return JSONResponse(status_code=404, content={"error": f"No reviews for product {product_id}"})
    return SummaryResponse.from_summary(summary)


@review_router.get("/users/{user_id}", response_model=ReviewListResponse)
async def reviews_for_user(user_id: str, engine: ReviewEngine = Depends(get_engine)):
    return _review_list(engine.get_reviews_for_user(user_id))


@review_router.get("/eligibility", response_model=EligibilityResponse)
async def eligibility(user_id: str, product_id: str, order_id: str, engine: ReviewEngine = Depends(get_engine)):
    return EligibilityResponse(eligible=engine.check_eligibility(user_id, product_id, order_id))


@review_router.get("/orders/{order_id}", response_model=OrderReviewStatusResponse)
async def order_review_status(order_id: str, user_id: str, engine: ReviewEngine = Depends(get_engine)):
    """Which items of an order can still be reviewed."""
    statuses = engine.review_status_for_order(user_id, order_id)
    return OrderReviewStatusResponse(
        order_id=order_id,
        items=[
            OrderItemReviewStatusResponse(
                product_id=status.product_id,
                can_review=status.can_review,
                reason=status.reason,
                review_id=status.review_id,
            )
            for status in statuses
        ],
    )


@review_router.get("/stats", response_model=ReviewStatsResponse)
async def review_stats(engine: ReviewEngine = Depends(get_engine)):
    stats = engine.review_stats()
    return ReviewStatsResponse(
        total_reviews=stats.total_reviews,
        average_rating=stats.average_rating,
        rating_distribution=stats.rating_distribution,
    )


# --- Error mapping ---


def register_ratings_error_handlers(app: FastAPI) -> None:
    """Map Ratings domain errors to HTTP responses.

    Protean's own exceptions (ValidationError and friends) are handled by
    protean.integrations.fastapi.register_exception_handlers.
    """

    @app.exception_handler(IneligibleError)
    async def _ineligible(request: Request, exc: IneligibleError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"error": exc.message, "reason": exc.reason})

    @app.exception_handler(DuplicateReviewError)
    async def _duplicate(request: Request, exc: DuplicateReviewError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"error": exc.message})

    @app.exception_handler(OrderLookupError)
    async def _order_lookup(request: Request, exc: OrderLookupError) -> JSONResponse:
        logger.error("Order lookup failed", path=request.url.path, order_id=exc.order_id, error=exc.message)
        return JSONResponse(status_code=502, content={"error": "Order service unavailable"})

    @app.exception_handler(StorageError)
    async def _storage(request: Request, exc: StorageError) -> JSONResponse:
        logger.error(
            "Storage failure",
            path=request.url.path,
            operation=exc.operation,
            collection=exc.collection,
            error=exc.message,
        )
        return JSONResponse(
            status_code=503,
            content={"error": "Service temporarily unavailable, please retry"},
            headers={"Retry-After": "1"},
        )
