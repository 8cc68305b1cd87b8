"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .auth import (
    AuthResponse,
    GoogleSignInRequest,
    MeResponse,
    SignInRequest,
    SignUpRequest,
    UserOut,
)
from .blog import (
    AuthorOut,
    BlogCard,
    BlogCreated,
    BlogDetail,
    BlogDetailResponse,
    BlogEditView,
    BlogEditResponse,
    BlogListResponse,
    BlogWrite,
    ContentBlockIn,
    MessageResponse,
)
from .comment import CommentCreate, CommentListResponse, CommentOut
from .reaction import ReactionRequest, ReactionSummary, ReactionToggleResponse

__all__ = [
    "AuthResponse", "GoogleSignInRequest", "MeResponse", "SignInRequest", "SignUpRequest",
    "UserOut",
    "AuthorOut", "BlogCard", "BlogCreated", "BlogDetail", "BlogDetailResponse",
    "BlogEditView", "BlogEditResponse", "BlogListResponse", "BlogWrite", "ContentBlockIn",
    "MessageResponse",
    "CommentCreate", "CommentListResponse", "CommentOut",
    "ReactionRequest", "ReactionSummary", "ReactionToggleResponse",
]
