"""Verification of identity tokens issued by the external auth provider.

Production deployments point `IDENTITY_JWKS_URL` at the provider's JWKS
document and tokens are checked as RS256 JWTs. Without a JWKS URL, tokens are
HS256 JWTs signed with `SECRET_KEY`; `create_identity_token` mints those for
local development and tests.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
from jose import JWTError, jwt

from qcktlk_forum.core.settings import Settings, settings

logger = logging.getLogger(__name__)

JWKS_ALGORITHMS = ["RS256"]


class IdentityError(RuntimeError):
    """Raised when a bearer token cannot be turned into a verified identity."""


@dataclass(frozen=True)
class VerifiedIdentity:
    """Identity asserted by a valid token."""

    email: str
    uid: str
    name: str | None = None
    picture: str | None = None


class IdentityVerifier:
    """Validate ID tokens and extract the caller's email identity."""

    def __init__(
        self,
        *,
        secret_key: str,
        algorithm: str = "HS256",
        jwks_url: str | None = None,
        audience: str | None = None,
        issuer: str | None = None,
        jwks_cache_seconds: int = 3600,
        timeout_seconds: float = 5.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.jwks_url = jwks_url
        self.audience = audience
        self.issuer = issuer
        self.jwks_cache_seconds = jwks_cache_seconds
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client
        self._jwks: dict[str, Any] | None = None
        self._jwks_fetched_at = 0.0
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, config: Settings) -> IdentityVerifier:
        """Build a verifier from application settings."""
        return cls(
            secret_key=config.secret_key,
            algorithm=config.identity_algorithm,
            jwks_url=config.identity_jwks_url,
            audience=config.identity_audience,
            issuer=config.identity_issuer,
            jwks_cache_seconds=config.identity_jwks_cache_seconds,
            timeout_seconds=config.identity_http_timeout_seconds,
        )

    def verify(self, token: str) -> VerifiedIdentity:
        """Return the identity carried by `token`.

        Raises:
            IdentityError: If the token is malformed, expired, signed with an
                unknown key, issued for another audience or carries no email.
        """
        if not token:
            raise IdentityError("Missing identity token")

        key, algorithms = self._verification_key()
        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as err:
            raise IdentityError("Invalid identity token") from err

        email = claims.get("email")
        if not isinstance(email, str) or "@" not in email:
            raise IdentityError("Identity token carries no email")
        if claims.get("email_verified") is False:
            raise IdentityError("Email address is not verified")

        return VerifiedIdentity(
            email=email.strip().lower(),
            uid=str(claims.get("sub") or claims.get("user_id") or email),
            name=claims.get("name"),
            picture=claims.get("picture"),
        )

    def _verification_key(self) -> tuple[Any, list[str]]:
        if not self.jwks_url:
            return self.secret_key, [self.algorithm]
        return self._get_jwks(), JWKS_ALGORITHMS

    def _get_jwks(self) -> dict[str, Any]:
        with self._lock:
            age = time.monotonic() - self._jwks_fetched_at
            if self._jwks is not None and age < self.jwks_cache_seconds:
                return self._jwks

            try:
                response = self._fetch(self.jwks_url or "")
                response.raise_for_status()
                document = response.json()
            except (httpx.HTTPError, ValueError) as err:
                if self._jwks is not None:
                    logger.warning("JWKS refresh failed, keeping cached keys: %s", err)
                    return self._jwks
                raise IdentityError("Identity provider keys are unavailable") from err

            if not isinstance(document, dict) or "keys" not in document:
                raise IdentityError("Identity provider returned an invalid key set")

            self._jwks = document
            self._jwks_fetched_at = time.monotonic()
            logger.info("Loaded %d identity provider keys", len(document["keys"]))
            return document

    def _fetch(self, url: str) -> httpx.Response:
        if self._http_client is not None:
            return self._http_client.get(url, timeout=self.timeout_seconds)
        return httpx.get(url, timeout=self.timeout_seconds)


def create_identity_token(
    email: str,
    *,
    name: str | None = None,
    expires_in: timedelta | None = None,
    secret_key: str | None = None,
    algorithm: str | None = None,
) -> str:
    """Mint an HS256 identity token for local development and tests."""
    now = datetime.now(UTC)
    ttl = expires_in if expires_in is not None else timedelta(
        seconds=settings.identity_token_ttl_seconds
    )
    claims: dict[str, Any] = {
        "sub": uuid.uuid5(uuid.NAMESPACE_URL, f"mailto:{email}").hex,
        "email": email,
        "email_verified": True,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    if name:
        claims["name"] = name
    if settings.identity_audience:
        claims["aud"] = settings.identity_audience
    if settings.identity_issuer:
        claims["iss"] = settings.identity_issuer
    return jwt.encode(
        claims,
        secret_key or settings.secret_key,
        algorithm=algorithm or settings.identity_algorithm,
    )


_identity_verifier: IdentityVerifier | None = None


def get_identity_verifier() -> IdentityVerifier:
    """Return the shared identity verifier."""
    global _identity_verifier
    if _identity_verifier is None:
        _identity_verifier = IdentityVerifier.from_settings(settings)
    return _identity_verifier
