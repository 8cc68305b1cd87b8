"""Comment-related Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel

from .blog import AuthorOut


class CommentCreate(BaseModel):
    """Schema for posting a comment."""

    comment: str = ""


class CommentOut(BaseModel):
    id: uuid.UUID
    comment: str
    commented_at: datetime
    user: AuthorOut


class CommentListResponse(BaseModel):
    comments: list[CommentOut]
