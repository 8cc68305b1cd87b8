"""Authentication endpoints for the Inkwell API."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError

from inkwell.api.v1.dependencies import CurrentUserDep, SessionDep
from inkwell.core.security import verify_password
from inkwell.models import User
from inkwell.schemas.auth import (
    AuthResponse,
    GoogleSignInRequest,
    MeResponse,
    SignInRequest,
    SignUpRequest,
    UserOut,
)
from inkwell.services.accounts import (
    create_user,
    generate_unique_username,
    get_user_by_email,
    issue_token,
    normalize_email,
    random_username,
)
from inkwell.services.google import (
    GoogleKeysUnavailableError,
    GoogleTokenError,
    GoogleTokenVerifier,
    get_google_verifier,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

MIN_FULL_NAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

GoogleVerifierDep = Annotated[GoogleTokenVerifier, Depends(get_google_verifier)]


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(token=issue_token(user), user=UserOut.model_validate(user))


@router.post("/signup", response_model=AuthResponse)
async def signup(payload: SignUpRequest, db: SessionDep) -> AuthResponse:
    """Register a new account with email and password.

    Args:
        payload: Full name, email and password
        db: Database session

    Returns:
        A bearer token and the created user

    Raises:
        HTTPException: 400 on invalid fields, 409 if the email is taken
    """
    full_name = payload.full_name.strip()
    email = normalize_email(payload.email)

    if len(full_name) < MIN_FULL_NAME_LENGTH:
        raise _bad_request("Full name must be at least 3 characters")
    if not email or "@" not in email:
        raise _bad_request("Valid email is required")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise _bad_request("Password must be at least 6 characters")

    if get_user_by_email(db, email) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")

    try:
        user = create_user(
            db,
            full_name=full_name,
            email=email,
            username=random_username(email),
            password=payload.password,
        )
    except IntegrityError as err:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already in use",
        ) from err

    return _auth_response(user)


@router.post("/signin", response_model=AuthResponse)
async def signin(payload: SignInRequest, db: SessionDep) -> AuthResponse:
    """Sign in with email and password."""
    if not payload.email.strip() or not payload.password:
        raise _bad_request("Email and password are required")

    user = get_user_by_email(db, payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("Rejected sign-in attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    logger.info("User %s signed in", user.username)
    return _auth_response(user)


@router.post("/google", response_model=AuthResponse)
def google_signin(
    payload: GoogleSignInRequest,
    db: SessionDep,
    verifier: GoogleVerifierDep,
) -> AuthResponse:
    """Sign in (or sign up) with a Google ID token.

    Declared sync so the key download in ``verifier.verify`` runs in the
    threadpool.

    Args:
        payload: The ID token issued by Google
        db: Database session
        verifier: Google ID token verifier

    Returns:
        A bearer token and the matching user

    Raises:
        HTTPException: 400 for a blank token, 401 if the token is rejected,
            500 when Google sign-in is not configured, 503 when Google's
            signing keys are unreachable
    """
    id_token = payload.id_token.strip()
    if not id_token:
        raise _bad_request("Google token is required")
    if not verifier.configured:
        logger.error("Google sign-in requested but GOOGLE_CLIENT_IDS is empty")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Google sign-in is not configured",
        )

    try:
        identity = verifier.verify(id_token)
    except GoogleKeysUnavailableError as err:
        logger.error("Google signing keys unavailable: %s", err)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google sign-in is temporarily unavailable",
        ) from err
    except GoogleTokenError as err:
        logger.warning("Rejected Google token: %s", err)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Google token",
        ) from err

    if not identity.email or not identity.email.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Google account email is missing",
        )
    if not identity.email_verified:
        logger.warning("Rejected Google token with unverified email")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Google account email is not verified",
        )

    email = normalize_email(identity.email)
    user = get_user_by_email(db, email)
    if user is None:
        full_name = (identity.name or "").strip() or email.split("@", 1)[0]
        try:
            user = create_user(
                db,
                full_name=full_name,
                email=email,
                username=generate_unique_username(db, email),
                password=None,
                profile_image=identity.picture,
            )
        except IntegrityError:
            # A concurrent first sign-in created the account.
            db.rollback()
            user = get_user_by_email(db, email)
            if user is None:
                raise
            logger.info("User %s signed in with Google", user.username)
    else:
        logger.info("User %s signed in with Google", user.username)

    return _auth_response(user)


@router.get("/me", response_model=MeResponse)
async def read_me(current_user: CurrentUserDep) -> MeResponse:
    """Return the authenticated user."""
    return MeResponse(user=UserOut.model_validate(current_user))
