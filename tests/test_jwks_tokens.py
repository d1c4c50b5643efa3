# Tests for JWKS fetching and JWT verification.
# Created: 2026-10-18
#
# Tokens are signed with locally generated RSA keys; the key-set endpoint is an
# httpx.MockTransport so no network is touched.

import json
import time

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm

from todoapi.config import Settings
from todoapi.errors import Unauthenticated
from todoapi.security.jwks import JWKSClient, JWKSError
from todoapi.security.tokens import JWTVerifier, TokenVerifier, create_token_verifier

DOMAIN = "todo-test.eu.auth0.com"
ISSUER = f"https://{DOMAIN}/"
AUDIENCE = "https://todo-api.test"
JWKS_URI = f"https://{DOMAIN}/.well-known/jwks.json"


def _rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


# Generated once per module; RSA key generation is slow
KEY_1 = _rsa_key()
KEY_2 = _rsa_key()


def _jwk(private_key, kid):
    data = json.loads(RSAAlgorithm.to_jwk(private_key.public_key()))
    data.update({"kid": kid, "use": "sig", "alg": "RS256"})
    return data


def _token(private_key=KEY_1, kid="key-1", **overrides):
    now = int(time.time())
    claims = {
        "sub": "auth0|u1",
        "iss": ISSUER,
        "aud": AUDIENCE,
        "iat": now,
        "exp": now + 300,
    }
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, private_key, algorithm="RS256", headers={"kid": kid})


class FakeJWKSEndpoint:
    """Serves a key set and counts how often it is fetched."""

    def __init__(self, *keys):
        self.keys = list(keys)
        self.fetches = 0
        self.fail = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        assert str(request.url) == JWKS_URI
        self.fetches += 1
        if self.fail:
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, json={"keys": self.keys})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def endpoint():
    return FakeJWKSEndpoint(_jwk(KEY_1, "key-1"))


def _verifier(endpoint, **jwks_kwargs):
    jwks = JWKSClient(JWKS_URI, http_client=endpoint.client(), **jwks_kwargs)
    return JWTVerifier(jwks, issuer=ISSUER, audience=AUDIENCE)


# ============================================================================
# JWKSClient
# ============================================================================


class TestJWKSClient:
    """Tests for key fetching, caching and fetch limiting."""

    @pytest.mark.asyncio
    async def test_fetches_and_caches(self, endpoint):
        jwks = JWKSClient(JWKS_URI, http_client=endpoint.client())
        first = await jwks.get_signing_key("key-1")
        second = await jwks.get_signing_key("key-1")
        assert first is second
        assert endpoint.fetches == 1

    @pytest.mark.asyncio
    async def test_unknown_kid_triggers_refetch(self, endpoint):
        jwks = JWKSClient(JWKS_URI, http_client=endpoint.client())
        await jwks.get_signing_key("key-1")

        # Provider rotates in a new key
        endpoint.keys.append(_jwk(KEY_2, "key-2"))
        await jwks.get_signing_key("key-2")
        assert endpoint.fetches == 2

    @pytest.mark.asyncio
    async def test_unknown_kid_after_fetch_fails(self, endpoint):
        jwks = JWKSClient(JWKS_URI, http_client=endpoint.client())
        with pytest.raises(JWKSError, match="not found"):
            await jwks.get_signing_key("nope")

    @pytest.mark.asyncio
    async def test_fetch_rate_limited(self, endpoint):
        jwks = JWKSClient(JWKS_URI, http_client=endpoint.client(), requests_per_minute=2)
        for kid in ("a", "b"):
            with pytest.raises(JWKSError, match="not found"):
                await jwks.get_signing_key(kid)
        with pytest.raises(JWKSError, match="rate limit"):
            await jwks.get_signing_key("c")
        assert endpoint.fetches == 2

    @pytest.mark.asyncio
    async def test_stale_key_served_when_refresh_fails(self, endpoint):
        jwks = JWKSClient(JWKS_URI, http_client=endpoint.client(), cache_ttl=0.0)
        key = await jwks.get_signing_key("key-1")

        endpoint.fail = True
        assert await jwks.get_signing_key("key-1") is key
        assert endpoint.fetches == 2

    @pytest.mark.asyncio
    async def test_http_error(self, endpoint):
        endpoint.fail = True
        jwks = JWKSClient(JWKS_URI, http_client=endpoint.client())
        with pytest.raises(JWKSError, match="Could not fetch JWKS"):
            await jwks.get_signing_key("key-1")

    @pytest.mark.asyncio
    async def test_skips_non_signing_keys(self):
        enc_key = {**_jwk(KEY_2, "enc-key"), "use": "enc"}
        endpoint = FakeJWKSEndpoint(enc_key, {"kty": "RSA", "use": "sig"})
        jwks = JWKSClient(JWKS_URI, http_client=endpoint.client())
        with pytest.raises(JWKSError, match="no usable signing keys"):
            await jwks.get_signing_key("enc-key")

    @pytest.mark.asyncio
    async def test_unloadable_key_is_skipped(self):
        endpoint = FakeJWKSEndpoint(
            {"kid": "other", "kty": "XYZ", "use": "sig"},
            _jwk(KEY_1, "key-1"),
        )
        jwks = JWKSClient(JWKS_URI, http_client=endpoint.client())
        assert await jwks.get_signing_key("key-1") is not None
        with pytest.raises(JWKSError, match="not found"):
            await jwks.get_signing_key("other")

    @pytest.mark.asyncio
    async def test_aclose_leaves_injected_client_open(self, endpoint):
        http = endpoint.client()
        jwks = JWKSClient(JWKS_URI, http_client=http)
        await jwks.aclose()
        assert not http.is_closed
        await http.aclose()

    @pytest.mark.asyncio
    async def test_aclose_closes_own_client(self):
        jwks = JWKSClient(JWKS_URI)
        await jwks.aclose()
        assert jwks._http.is_closed


# ============================================================================
# JWTVerifier
# ============================================================================


class TestJWTVerifier:
    """Tests for token verification."""

    def test_satisfies_protocol(self, endpoint):
        assert isinstance(_verifier(endpoint), TokenVerifier)

    @pytest.mark.asyncio
    async def test_valid_token(self, endpoint):
        claims = await _verifier(endpoint).verify(_token())
        assert claims["sub"] == "auth0|u1"
        assert claims["aud"] == AUDIENCE

    @pytest.mark.asyncio
    async def test_valid_token_with_unsupported_key_in_set(self):
        endpoint = FakeJWKSEndpoint(
            {"kid": "other", "kty": "XYZ", "use": "sig"},
            _jwk(KEY_1, "key-1"),
        )
        claims = await _verifier(endpoint).verify(_token())
        assert claims["sub"] == "auth0|u1"

    @pytest.mark.asyncio
    async def test_token_without_sub_still_verifies(self, endpoint):
        claims = await _verifier(endpoint).verify(_token(sub=None))
        assert "sub" not in claims

    @pytest.mark.asyncio
    async def test_key_set_fetched_once(self, endpoint):
        verifier = _verifier(endpoint)
        for _ in range(3):
            await verifier.verify(_token())
        assert endpoint.fetches == 1

    @pytest.mark.asyncio
    async def test_garbage(self, endpoint):
        with pytest.raises(Unauthenticated, match="Invalid token"):
            await _verifier(endpoint).verify("not.a.jwt")
        assert endpoint.fetches == 0

    @pytest.mark.asyncio
    async def test_expired(self, endpoint):
        token = _token(exp=int(time.time()) - 60)
        with pytest.raises(Unauthenticated, match="expired"):
            await _verifier(endpoint).verify(token)

    @pytest.mark.asyncio
    async def test_missing_exp(self, endpoint):
        with pytest.raises(Unauthenticated, match="Invalid token"):
            await _verifier(endpoint).verify(_token(exp=None))

    @pytest.mark.asyncio
    async def test_wrong_audience(self, endpoint):
        with pytest.raises(Unauthenticated, match="audience"):
            await _verifier(endpoint).verify(_token(aud="https://other-api"))

    @pytest.mark.asyncio
    async def test_wrong_issuer(self, endpoint):
        with pytest.raises(Unauthenticated, match="issuer"):
            await _verifier(endpoint).verify(_token(iss="https://evil.example.com/"))

    @pytest.mark.asyncio
    async def test_signed_by_unknown_key(self, endpoint):
        # Right kid, wrong private key
        with pytest.raises(Unauthenticated, match="Invalid token"):
            await _verifier(endpoint).verify(_token(private_key=KEY_2))

    @pytest.mark.asyncio
    async def test_unknown_kid(self, endpoint):
        with pytest.raises(Unauthenticated, match="Unable to verify token signature"):
            await _verifier(endpoint).verify(_token(kid="rotated-away"))

    @pytest.mark.asyncio
    async def test_hs256_rejected_before_key_lookup(self, endpoint):
        token = jwt.encode(
            {"sub": "auth0|u1", "iss": ISSUER, "aud": AUDIENCE},
            "a-shared-secret-that-is-long-enough-for-hs256",
            algorithm="HS256",
            headers={"kid": "key-1"},
        )
        with pytest.raises(Unauthenticated, match="Unexpected token algorithm: HS256"):
            await _verifier(endpoint).verify(token)
        assert endpoint.fetches == 0

    @pytest.mark.asyncio
    async def test_missing_kid(self, endpoint):
        now = int(time.time())
        token = jwt.encode(
            {"sub": "auth0|u1", "iss": ISSUER, "aud": AUDIENCE, "exp": now + 300},
            KEY_1,
            algorithm="RS256",
        )
        with pytest.raises(Unauthenticated, match="no key ID"):
            await _verifier(endpoint).verify(token)


def test_create_token_verifier_from_settings():
    settings = Settings(
        environment="test",
        auth0_domain=DOMAIN,
        auth0_audience=AUDIENCE,
        jwks_requests_per_minute=3,
        jwks_cache_ttl=60,
    )
    verifier = create_token_verifier(settings)
    assert verifier._issuer == ISSUER
    assert verifier._audience == AUDIENCE
    assert verifier._jwks.jwks_uri == JWKS_URI
    assert verifier._jwks.cache_ttl == 60
    assert verifier._jwks._limiter.capacity == 3
