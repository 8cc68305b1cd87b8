"""Authentication-related Pydantic schemas."""

import uuid

from pydantic import BaseModel, ConfigDict, Field


class SignUpRequest(BaseModel):
    """Schema for email/password registration.

    Field rules (name length, email shape, password length) are checked by the
    endpoint so that each failure gets its own message.
    """

    full_name: str = Field("", description="Display name, at least 3 characters")
    email: str = Field("", description="Email address used to sign in")
    password: str = Field("", description="Password, at least 6 characters")


class SignInRequest(BaseModel):
    """Schema for email/password sign-in."""

    email: str = ""
    password: str = ""


class GoogleSignInRequest(BaseModel):
    """Schema carrying a Google Sign-In ID token."""

    id_token: str = Field("", description="ID token returned by Google Identity Services")


class UserOut(BaseModel):
    """Public view of a user account."""

    id: uuid.UUID
    full_name: str
    username: str
    email: str
    is_admin: bool
    profile_image: str

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Response returned after any successful sign-in."""

    token: str = Field(..., description="JWT bearer token")
    user: UserOut


class MeResponse(BaseModel):
    """Response for the current-user endpoint."""

    user: UserOut
