"""Ratings FastAPI application.

Serves review creation, product summaries and eligibility checks. Every
request runs inside the ratings domain context, and one ReviewEngine (with
its review cache) is built at startup and shared by all requests.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (handlers fire in UoW)
#   - "production" → event_processing = "async" (handlers fire via Engine)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from ratings.domain import ratings
from ratings.utils.logging import add_context, clear_context, configure_logging, current_env

configure_logging()
ratings.init()

from ratings.api import register_ratings_error_handlers, review_router, sandbox_router  # noqa: E402
from ratings.engine import build_engine  # noqa: E402

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront Ratings API",
    description="Product reviews, rating summaries and review eligibility",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

with ratings.domain_context():
    app.state.review_engine = build_engine()


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the ratings domain context and tag log lines with the request."""
    clear_context()
    add_context(method=request.method, path=request.url.path)
    with ratings.domain_context():
        return await call_next(request)


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
app.include_router(review_router)
if current_env() != "production":
    app.include_router(sandbox_router)

register_exception_handlers(app)
register_ratings_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    stats = app.state.review_engine.cache.stats()
    return JSONResponse(
        content={
            "status": "ok",
            "domain": ratings.name,
            "cache": {"entries": stats.size, "hits": stats.hits, "misses": stats.misses},
        }
    )
