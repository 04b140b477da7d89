"""Unit tests for IdentityClient against a mocked identity provider."""

import httpx
import pytest

from retrosnap_gateway.clients.identity_client import DEV_IDENTITY, IdentityClient, parse_bearer
from retrosnap_gateway.errors import (
    GatewayTimeout,
    MalformedIdentity,
    Unauthenticated,
    UpstreamUnavailable
)


def make_client(handler, dev_mode=False) -> IdentityClient:
    transport = httpx.MockTransport(handler)
    return IdentityClient(
        domain="tenant.auth0.com",
        dev_mode=dev_mode,
        client=httpx.AsyncClient(transport=transport)
    )


def userinfo(claims, status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=claims)
    return handler


def failing_handler(request: httpx.Request) -> httpx.Response:
    raise AssertionError("identity provider must not be called")


class TestParseBearer:

    def test_extracts_token(self):
        assert parse_bearer("Bearer abc.def") == "abc.def"
        assert parse_bearer("bearer abc") == "abc"

    @pytest.mark.parametrize("header", [None, "", "abc", "Basic abc", "Bearer", "Bearer a b"])
    def test_rejects_malformed_headers(self, header):
        with pytest.raises(Unauthenticated):
            parse_bearer(header)


class TestResolve:

    @pytest.mark.asyncio
    async def test_valid_token_returns_identity(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json={"sub": "auth0|42", "email": " Jo@Example.com "})

        client = make_client(handler)
        identity = await client.resolve("Bearer real-token")

        assert identity.user_id == "auth0|42"
        assert identity.email == "Jo@Example.com"
        assert seen["url"] == "https://tenant.auth0.com/userinfo"
        assert seen["auth"] == "Bearer real-token"

    @pytest.mark.asyncio
    async def test_missing_header_is_unauthenticated(self):
        client = make_client(failing_handler)

        with pytest.raises(Unauthenticated):
            await client.resolve(None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403, 429, 500])
    async def test_non_2xx_is_unauthenticated(self, status):
        client = make_client(userinfo({"error": "nope"}, status=status))

        with pytest.raises(Unauthenticated) as exc_info:
            await client.resolve("Bearer bad-token")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("claims", [
        {"sub": "auth0|42"},
        {"sub": "auth0|42", "email": 12},
        {"email": "jo@example.com"},
        {"sub": "  ", "email": "jo@example.com"},
        ["not", "an", "object"],
    ])
    async def test_missing_claims_is_malformed(self, claims):
        client = make_client(userinfo(claims))

        with pytest.raises(MalformedIdentity) as exc_info:
            await client.resolve("Bearer token")

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_non_json_body_is_malformed(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(MalformedIdentity):
            await client.resolve("Bearer token")

    @pytest.mark.asyncio
    async def test_timeout_is_gateway_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)

        with pytest.raises(GatewayTimeout) as exc_info:
            await client.resolve("Bearer token")

        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_network_error_is_upstream_unavailable_not_unauthenticated(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await client.resolve("Bearer token")

        assert not isinstance(exc_info.value, Unauthenticated)
        assert exc_info.value.status_code == 500


class TestDevToken:

    @pytest.mark.asyncio
    async def test_dev_token_in_dev_context(self):
        client = make_client(failing_handler, dev_mode=True)

        identity = await client.resolve("Bearer dev-token")

        assert identity == DEV_IDENTITY
        assert identity.user_id == "dev-user"
        assert identity.email == "dev@example.com"

    @pytest.mark.asyncio
    async def test_dev_token_outside_dev_context_is_rejected(self):
        client = make_client(failing_handler, dev_mode=False)

        with pytest.raises(Unauthenticated) as exc_info:
            await client.resolve("Bearer dev-token")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_other_tokens_still_verified_in_dev_context(self):
        client = make_client(userinfo({}, status=401), dev_mode=True)

        with pytest.raises(Unauthenticated):
            await client.resolve("Bearer something-else")
