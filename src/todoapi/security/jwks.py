# JSON Web Key Set client: fetches and caches the identity provider's signing keys.
# Created: 2026-10-18
#
# Keys are cached by kid for ``cache_ttl`` seconds. A fetch happens only when a
# token names an unknown kid or the cache has gone stale, and fetches are capped
# by a token-bucket limiter (5/minute by default). When the cap is hit or the
# provider is unreachable, a stale-but-known key is still served; an unknown kid
# fails.

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
from jwt import PyJWK
from jwt.exceptions import InvalidKeyError, PyJWKError

from todoapi.security.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class JWKSError(Exception):
    """The signing key for a token could not be obtained."""


class JWKSClient:
    """Async JWKS fetcher with a per-kid key cache and a fetch rate limit."""

    def __init__(
        self,
        jwks_uri: str,
        *,
        cache_ttl: float = 600.0,
        requests_per_minute: int = 5,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.jwks_uri = jwks_uri
        self.cache_ttl = cache_ttl
        self._limiter = RateLimiter.per_minute(requests_per_minute)
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._keys: dict[str, Any] = {}
        self._fetched_at: float | None = None
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        return self._fetched_at is not None and time.monotonic() - self._fetched_at < self.cache_ttl

    async def get_signing_key(self, kid: str) -> Any:
        """Return the public key for ``kid``, fetching the key set if needed.

        Raises:
            JWKSError: if the key set cannot be fetched (or the fetch is rate
                limited) and no cached key exists, or the kid is not in the set.
        """
        if self._is_fresh() and kid in self._keys:
            return self._keys[kid]

        async with self._lock:
            # Another request may have refreshed while we waited
            if not (self._is_fresh() and kid in self._keys):
                try:
                    await self._refresh()
                except JWKSError:
                    if kid not in self._keys:
                        raise
                    logger.warning("Serving stale signing key %s after failed JWKS refresh", kid)

        key = self._keys.get(kid)
        if key is None:
            raise JWKSError(f"Signing key {kid!r} not found in JWKS")
        return key

    async def _refresh(self) -> None:
        if not self._limiter.allow(self.jwks_uri):
            wait = self._limiter.retry_after(self.jwks_uri)
            raise JWKSError(f"JWKS fetch rate limit exceeded (retry in {wait}s)")

        logger.debug("Fetching JWKS from %s", self.jwks_uri)
        try:
            resp = await self._http.get(self.jwks_uri)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("JWKS fetch from %s failed: %s", self.jwks_uri, e)
            raise JWKSError(f"Could not fetch JWKS: {e}") from e

        if not isinstance(data, dict):
            raise JWKSError("JWKS response is not a JSON object")

        keys: dict[str, Any] = {}
        for key_data in data.get("keys", []):
            kid = key_data.get("kid")
            if not kid or key_data.get("use", "sig") != "sig":
                continue
            try:
                keys[kid] = PyJWK(key_data).key
            except (PyJWKError, InvalidKeyError) as e:
                logger.warning("Skipping unusable JWK %s: %s", kid, e)

        if not keys:
            raise JWKSError("JWKS contains no usable signing keys")

        self._keys = keys
        self._fetched_at = time.monotonic()
        logger.info("Loaded %d signing key(s) from JWKS", len(keys))

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()
