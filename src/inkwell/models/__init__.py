"""SQLAlchemy models for the Inkwell application."""

from .comment import Comment
from .post import Post
from .reaction import Reaction
from .user import User

__all__ = [
    "Comment",
    "Post",
    "Reaction",
    "User",
]
