"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .blogs import router as blogs_router
from .comments import router as comments_router
from .reactions import router as reactions_router

__all__ = [
    "auth_router",
    "blogs_router",
    "comments_router",
    "reactions_router",
]
