"""Ratings API package."""

from ratings.api.routes import (
    admin_router,
    register_error_handlers,
    review_router,
    reviewer_router,
    store_router,
)

__all__ = [
    "reviewer_router",
    "store_router",
    "review_router",
    "admin_router",
    "register_error_handlers",
]
