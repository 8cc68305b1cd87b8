"""Reaction-related Pydantic schemas."""

from pydantic import BaseModel, Field


class ReactionRequest(BaseModel):
    """Schema for toggling a reaction."""

    emoji: str = Field("", description="One of the supported reaction emojis")


class ReactionSummary(BaseModel):
    """Aggregate reactions of a post plus the caller's own emojis."""

    counts: dict[str, int]
    total_reactions: int
    user_emojis: list[str]


class ReactionToggleResponse(BaseModel):
    """Reaction state returned after a toggle."""

    counts: dict[str, int]
    total_reactions: int
    reacted: bool
