"""Bearer token verification.

``TokenVerifier`` is the capability the API depends on: give it the raw token
from the Authorization header, get back the verified claims or an
``Unauthenticated`` error. ``JWTVerifier`` is the production implementation
(RS256 JWTs signed by the identity provider, keys from its JWKS endpoint);
tests substitute their own.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

import jwt

from todoapi.config import Settings
from todoapi.errors import Unauthenticated
from todoapi.security.jwks import JWKSClient, JWKSError

logger = logging.getLogger(__name__)

__all__ = ["TokenVerifier", "JWTVerifier", "create_token_verifier"]


@runtime_checkable
class TokenVerifier(Protocol):
    """Verifies a bearer token and returns its claims."""

    async def verify(self, token: str) -> dict[str, Any]:
        """Return the token's claims, or raise ``Unauthenticated``."""
        ...

    async def aclose(self) -> None:
        """Release any network resources."""
        ...


class JWTVerifier:
    """Verify JWTs against a remote key set, issuer, and audience."""

    def __init__(
        self,
        jwks: JWKSClient,
        *,
        issuer: str,
        audience: str,
        algorithms: Sequence[str] = ("RS256",),
        leeway: float = 0,
    ):
        self._jwks = jwks
        self._issuer = issuer
        self._audience = audience
        self._algorithms = list(algorithms)
        self._leeway = leeway

    async def verify(self, token: str) -> dict[str, Any]:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as e:
            raise Unauthenticated("Invalid token") from e

        alg = header.get("alg")
        if alg not in self._algorithms:
            raise Unauthenticated(f"Unexpected token algorithm: {alg}")

        kid = header.get("kid")
        if not kid:
            raise Unauthenticated("Token has no key ID")

        try:
            key = await self._jwks.get_signing_key(kid)
        except JWKSError as e:
            logger.warning("Signing key lookup failed: %s", e)
            raise Unauthenticated("Unable to verify token signature") from e

        try:
            return jwt.decode(
                token,
                key,
                algorithms=self._algorithms,
                audience=self._audience or None,
                issuer=self._issuer,
                leeway=self._leeway,
                options={"require": ["exp", "iss"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise Unauthenticated("Token has expired") from e
        except jwt.InvalidAudienceError as e:
            raise Unauthenticated("Token audience mismatch") from e
        except jwt.InvalidIssuerError as e:
            raise Unauthenticated("Token issuer mismatch") from e
        except jwt.PyJWTError as e:
            logger.debug("Token rejected: %s", e)
            raise Unauthenticated("Invalid token") from e

    async def aclose(self) -> None:
        await self._jwks.aclose()


def create_token_verifier(settings: Settings) -> JWTVerifier:
    """Build the production verifier from the identity-provider settings."""
    jwks = JWKSClient(
        settings.jwks_uri,
        cache_ttl=settings.jwks_cache_ttl,
        requests_per_minute=settings.jwks_requests_per_minute,
    )
    return JWTVerifier(jwks, issuer=settings.issuer, audience=settings.auth0_audience)
