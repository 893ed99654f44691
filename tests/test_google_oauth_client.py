from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from oauth_relay.clients.google_auth import (
    EmptyCodeError,
    GoogleOAuthClient,
    OAuthTokenExchangeError,
    UserInfoError,
)
from oauth_relay.core.config import ProviderSettings

TOKEN_URL = "https://oauth.example/token"
USERINFO_URL = "https://oauth.example/userinfo"


def _settings() -> ProviderSettings:
    return ProviderSettings(
        GOOGLE_OAUTH_CLIENT_ID="client",
        GOOGLE_OAUTH_CLIENT_SECRET="secret",
        OAUTH_REDIRECT_URL="https://relay.example.com/auth/google/callback",
        OAUTH_AUTH_URL="https://oauth.example/auth",
        OAUTH_TOKEN_URL=TOKEN_URL,
        OAUTH_USERINFO_URL=USERINFO_URL,
    )


class FakeProvider:
    def __init__(
        self,
        *,
        token_response: httpx.Response | None = None,
        userinfo_response: httpx.Response | None = None,
    ) -> None:
        self.token_response = token_response or httpx.Response(
            200,
            json={
                "access_token": "access-token",
                "refresh_token": "refresh-token",
                "id_token": "id-token",
                "token_type": "Bearer",
                "expires_in": 3600,
            },
        )
        self.userinfo_response = userinfo_response or httpx.Response(
            200, json={"email": "user@example.com", "email_verified": True}
        )
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) == TOKEN_URL:
            return self.token_response
        if str(request.url) == USERINFO_URL:
            return self.userinfo_response
        return httpx.Response(404)


def _client(provider) -> GoogleOAuthClient:
    return GoogleOAuthClient(_settings(), transport=httpx.MockTransport(provider))


@pytest.mark.anyio
async def test_exchange_returns_bundle_with_user_info() -> None:
    provider = FakeProvider()

    bundle = await _client(provider).exchange("auth-code")

    assert bundle.access_token == "access-token"
    assert bundle.refresh_token == "refresh-token"
    assert bundle.id_token == "id-token"
    assert bundle.token_type == "Bearer"
    assert bundle.expiry is not None
    assert bundle.user_info == {"email": "user@example.com", "email_verified": True}
    assert bundle.email == "user@example.com"

    token_request, userinfo_request = provider.requests
    form = parse_qs(token_request.content.decode("utf-8"))
    assert form["grant_type"] == ["authorization_code"]
    assert form["code"] == ["auth-code"]
    assert form["client_id"] == ["client"]
    assert form["redirect_uri"] == ["https://relay.example.com/auth/google/callback"]
    assert userinfo_request.headers["authorization"] == "Bearer access-token"


@pytest.mark.anyio
async def test_exchange_without_id_token_is_not_an_error() -> None:
    provider = FakeProvider(
        token_response=httpx.Response(200, json={"access_token": "access-token"})
    )

    bundle = await _client(provider).exchange("auth-code")

    assert bundle.id_token is None
    assert bundle.refresh_token is None
    assert bundle.expiry is None


@pytest.mark.anyio
async def test_exchange_rejects_empty_code() -> None:
    provider = FakeProvider()

    with pytest.raises(EmptyCodeError):
        await _client(provider).exchange("")
    assert provider.requests == []


@pytest.mark.anyio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(400, json={"error": "invalid_grant"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"token_type": "Bearer"}),
        httpx.Response(200, json=["access_token"]),
        httpx.Response(200, json={"access_token": 12345}),
        httpx.Response(200, json={"access_token": "ok", "refresh_token": 7}),
        httpx.Response(200, json={"access_token": "ok", "token_type": ["Bearer"]}),
        httpx.Response(200, json={"access_token": "ok", "expires_in": 10**20}),
        httpx.Response(200, json={"access_token": "ok", "expires_in": "soon"}),
    ],
)
async def test_exchange_failures_raise_token_error(response: httpx.Response) -> None:
    with pytest.raises(OAuthTokenExchangeError):
        await _client(FakeProvider(token_response=response)).exchange("auth-code")


@pytest.mark.anyio
async def test_exchange_wraps_transport_errors() -> None:
    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(OAuthTokenExchangeError):
        await _client(broken).exchange("auth-code")


@pytest.mark.anyio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"error": "invalid_token"}),
        httpx.Response(200, text="<html>"),
        httpx.Response(200, json=["not", "an", "object"]),
    ],
)
async def test_user_info_failures_raise_user_info_error(response: httpx.Response) -> None:
    with pytest.raises(UserInfoError):
        await _client(FakeProvider(userinfo_response=response)).exchange("auth-code")


def test_build_authorization_url_carries_state() -> None:
    url = GoogleOAuthClient(_settings()).build_authorization_url(state="opaque-state")

    parts = urlsplit(url)
    query = parse_qs(parts.query)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://oauth.example/auth"
    assert query["state"] == ["opaque-state"]
    assert query["response_type"] == ["code"]
    assert query["client_id"] == ["client"]
