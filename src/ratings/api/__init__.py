"""Ratings domain API package."""

from ratings.api.routes import register_ratings_error_handlers, review_router
from ratings.api.sandbox import sandbox_router

__all__ = ["review_router", "sandbox_router", "register_ratings_error_handlers"]
