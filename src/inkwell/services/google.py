"""Verification of Google Sign-In ID tokens.

Google signs ID tokens with rotating RSA keys published as a JWK set. The
verifier downloads that set with httpx, caches it for a while, and checks
signature, expiry, issuer and audience with python-jose.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Final

import httpx
from jose import JWTError, jwt

from inkwell.core.settings import settings

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS: Final = ("accounts.google.com", "https://accounts.google.com")
KEY_CACHE_SECONDS: Final = 3600.0


class GoogleAuthError(RuntimeError):
    """Base exception for Google sign-in failures."""


class GoogleTokenError(GoogleAuthError):
    """Raised when an ID token is malformed, expired or not meant for us."""


class GoogleKeysUnavailableError(GoogleAuthError):
    """Raised when Google's signing keys cannot be fetched."""


@dataclass(frozen=True)
class GoogleIdentity:
    """Claims extracted from a verified ID token."""

    subject: str
    email: str | None
    name: str | None
    picture: str | None
    email_verified: bool = False


def _claim_is_true(value: Any) -> bool:
    # Some Google tokens carry boolean claims as strings.
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


class GoogleTokenVerifier:
    """Validate Google ID tokens against a fixed set of OAuth client IDs."""

    def __init__(
        self,
        client_ids: list[str],
        certs_url: str,
        timeout_seconds: float = 5.0,
        cache_seconds: float = KEY_CACHE_SECONDS,
    ) -> None:
        self.client_ids = list(client_ids)
        self.certs_url = certs_url
        self.timeout_seconds = timeout_seconds
        self.cache_seconds = cache_seconds
        self._keys: dict[str, Any] | None = None
        self._keys_fetched_at = 0.0
        self._lock = threading.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.client_ids)

    def fetch_keys(self) -> dict[str, Any]:
        """Download Google's current JWK set."""
        try:
            response = httpx.get(self.certs_url, timeout=self.timeout_seconds)
            response.raise_for_status()
            keys: dict[str, Any] = response.json()
        except (httpx.HTTPError, ValueError) as err:
            raise GoogleKeysUnavailableError(f"Could not fetch Google signing keys: {err}") from err
        return keys

    def signing_keys(self) -> dict[str, Any]:
        """Return the cached JWK set, refreshing it once it is stale."""
        with self._lock:
            now = time.monotonic()
            if self._keys is None or now - self._keys_fetched_at > self.cache_seconds:
                self._keys = self.fetch_keys()
                self._keys_fetched_at = now
            return self._keys

    def verify(self, id_token: str) -> GoogleIdentity:
        """Verify ``id_token`` and return the identity it asserts.

        Raises:
            GoogleTokenError: If the token fails verification.
            GoogleKeysUnavailableError: If the signing keys cannot be fetched.
        """
        try:
            claims = jwt.decode(
                id_token,
                self.signing_keys(),
                algorithms=["RS256"],
                issuer=list(GOOGLE_ISSUERS),
                options={"verify_aud": False, "verify_at_hash": False},
            )
        except JWTError as err:
            raise GoogleTokenError(str(err)) from err

        audience = claims.get("aud")
        audiences = audience if isinstance(audience, list) else [audience]
        if not any(aud in self.client_ids for aud in audiences):
            raise GoogleTokenError("Token was issued for a different client")

        subject = claims.get("sub")
        if not subject:
            raise GoogleTokenError("Token has no subject")

        return GoogleIdentity(
            subject=str(subject),
            email=claims.get("email"),
            name=claims.get("name"),
            picture=claims.get("picture"),
            email_verified=_claim_is_true(claims.get("email_verified")),
        )


@lru_cache(maxsize=1)
def get_google_verifier() -> GoogleTokenVerifier:
    """Return the process-wide verifier built from settings."""
    return GoogleTokenVerifier(
        client_ids=settings.google_client_ids,
        certs_url=settings.google_certs_url,
        timeout_seconds=settings.google_http_timeout_seconds,
    )
