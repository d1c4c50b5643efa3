"""Authentication support: bearer-token verification against a remote JWKS."""

from todoapi.security.jwks import JWKSClient, JWKSError
from todoapi.security.rate_limiter import RateLimiter
from todoapi.security.tokens import JWTVerifier, TokenVerifier, create_token_verifier

__all__ = [
    "JWKSClient",
    "JWKSError",
    "JWTVerifier",
    "RateLimiter",
    "TokenVerifier",
    "create_token_verifier",
]
