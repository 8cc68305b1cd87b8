"""Reaction endpoints for the Inkwell API."""

from fastapi import APIRouter, HTTPException, status

from inkwell.api.v1.dependencies import (
    CurrentUserDep,
    OptionalUserDep,
    SessionDep,
    get_post_or_404,
)
from inkwell.schemas.reaction import ReactionRequest, ReactionSummary, ReactionToggleResponse
from inkwell.services.reactions import ReactionLedger, UnsupportedEmojiError

router = APIRouter(prefix="/blogs/{slug}/reactions", tags=["reactions"])


@router.get("", response_model=ReactionSummary)
async def get_reactions(
    slug: str,
    db: SessionDep,
    current_user: OptionalUserDep,
) -> ReactionSummary:
    """Return per-emoji counts and, for signed-in callers, their own emojis."""
    post = get_post_or_404(db, slug, include_drafts=False)
    ledger = ReactionLedger(db)
    return ReactionSummary(
        counts=ledger.counts(post.id),
        total_reactions=post.total_reactions,
        user_emojis=ledger.user_emojis(post.id, current_user.id) if current_user else [],
    )


@router.post("", response_model=ReactionToggleResponse)
async def toggle_reaction(
    slug: str,
    payload: ReactionRequest,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> ReactionToggleResponse:
    """Add the caller's reaction if absent, remove it if present.

    Raises:
        HTTPException: 400 for an emoji outside the allow-list, 404 for an
            unknown slug
    """
    post = get_post_or_404(db, slug, include_drafts=False)
    try:
        state = ReactionLedger(db).toggle(post, current_user.id, payload.emoji)
    except UnsupportedEmojiError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err

    return ReactionToggleResponse(
        counts=state.counts,
        total_reactions=state.total_reactions,
        reacted=state.reacted,
    )
