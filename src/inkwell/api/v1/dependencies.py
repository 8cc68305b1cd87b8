"""Shared API dependencies for authentication and common functionality."""

import logging
import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from inkwell.core.security import decode_access_token
from inkwell.db.session import get_db
from inkwell.models import Post, User

logger = logging.getLogger(__name__)

# Missing headers are reported as 401 by get_current_user rather than by the scheme.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode_user_id(subject: object) -> uuid.UUID:
    """Parse the token subject into a user id.

    Raises:
        HTTPException: If the subject is not a valid UUID.
    """
    try:
        return uuid.UUID(str(subject))
    except ValueError as err:
        raise _unauthorized("Could not validate credentials") from err


def resolve_user(token: str, db: Session) -> User:
    """Return the user a bearer token belongs to.

    Raises:
        HTTPException: 401 if the token is invalid or the user no longer exists.
    """
    try:
        payload = decode_access_token(token)
    except JWTError as err:
        raise _unauthorized("Could not validate credentials") from err

    subject = payload.get("sub")
    if subject is None:
        raise _unauthorized("Could not validate credentials")

    user = db.get(User, _decode_user_id(subject))
    if user is None:
        raise _unauthorized("User not found")
    return user


def get_current_user(credentials: CredentialsDep, db: SessionDep) -> User:
    """Get the current authenticated user from the bearer token."""
    if credentials is None:
        raise _unauthorized()
    return resolve_user(credentials.credentials, db)


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> User | None:
    """Like get_current_user, but anonymous or invalid tokens yield None."""
    if credentials is None:
        return None
    try:
        return resolve_user(credentials.credentials, db)
    except HTTPException:
        logger.debug("Ignoring invalid bearer token on an anonymous endpoint")
        return None


def get_current_admin(user: Annotated[User, Depends(get_current_user)]) -> User:
    """Require the current user to be an administrator."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can manage blogs",
        )
    return user


def get_post_or_404(db: Session, slug: str, *, include_drafts: bool = True) -> Post:
    """Return the post with ``slug`` or raise 404."""
    query = db.query(Post).filter(Post.slug == slug)
    if not include_drafts:
        query = query.filter(Post.draft.is_(False))
    post = query.first()
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog not found")
    return post


# Type aliases for user dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
AdminUserDep = Annotated[User, Depends(get_current_admin)]
