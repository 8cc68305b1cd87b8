"""Blog-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ContentBlockIn(BaseModel):
    """A submitted content block.

    The shape is deliberately loose; typing and empty-block filtering happen
    in the content normalizer.
    """

    id: str | None = None
    type: str = ""
    text: str | None = None
    src: str | None = None
    alt: str | None = None
    language: str | None = None
    code: str | None = None


class BlogWrite(BaseModel):
    """Schema for creating or replacing a post."""

    title: str = ""
    description: str = ""
    content: str = Field("", description="Legacy plain-text body")
    content_blocks: list[ContentBlockIn] | None = None
    tags: list[str] = Field(default_factory=list)
    banner: str | None = None
    draft: bool = False


class BlogCard(BaseModel):
    """Summary of a post for feeds and dashboards."""

    blog_id: str
    title: str
    description: str
    tags: list[str]
    author_name: str
    author_username: str
    author_image: str
    published_at: datetime
    total_comments: int
    total_reactions: int
    total_reads: int
    draft: bool = False


class BlogListResponse(BaseModel):
    blogs: list[BlogCard]


class AuthorOut(BaseModel):
    full_name: str
    username: str
    profile_image: str

    model_config = ConfigDict(from_attributes=True)


class BlogDetail(BaseModel):
    """Full public view of a published post."""

    blog_id: str
    title: str
    description: str
    content: str
    content_blocks: list[dict[str, str]]
    banner: str
    tags: list[str]
    published_at: datetime
    total_comments: int
    total_reactions: int
    total_reads: int
    author: AuthorOut


class BlogDetailResponse(BaseModel):
    blog: BlogDetail
    similar_blogs: list[BlogCard]


class BlogEditView(BaseModel):
    """Author-only view of a post, drafts included."""

    blog_id: str
    title: str
    description: str
    content: str
    content_blocks: list[dict[str, str]]
    banner: str
    tags: list[str]
    draft: bool
    published_at: datetime
    updated_at: datetime


class BlogEditResponse(BaseModel):
    blog: BlogEditView


class BlogCreated(BaseModel):
    blog_id: str


class MessageResponse(BaseModel):
    message: str
