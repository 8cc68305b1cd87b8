"""Version 1 API endpoints."""

from .endpoints import auth_router, blogs_router, comments_router, reactions_router

__all__ = [
    "auth_router",
    "blogs_router",
    "comments_router",
    "reactions_router",
]
