"""
Google OAuth utilities.

Exchanges an authorization code for tokens and fetches the user's profile.
Used only when the relay runs in the direct-exchange mode; in pass-through
mode the backend performs this exchange itself.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from fastapi import status
from pydantic import ValidationError

from oauth_relay.core.config import ProviderSettings
from oauth_relay.models.oauth import TokenBundle


class ExchangeError(Exception):
    """Base class for failures while converting a code into a token bundle."""


class EmptyCodeError(ExchangeError):
    """Raised when the authorization code is empty or missing."""


class OAuthTokenExchangeError(ExchangeError):
    """Raised when the token endpoint returns an error."""


class UserInfoError(ExchangeError):
    """Raised when the profile endpoint fails or returns a malformed body."""


class GoogleOAuthClient:
    """Build Google authorization URLs and exchange authorization codes."""

    def __init__(
        self,
        provider_settings: ProviderSettings,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._provider = provider_settings
        self._timeout = timeout
        self._transport = transport

    def build_authorization_url(self, state: str, access_type: str = "offline") -> str:
        """Construct the provider consent URL carrying ``state``."""
        params = {
            "client_id": self._provider.client_id,
            "redirect_uri": str(self._provider.redirect_uri),
            "response_type": "code",
            "scope": " ".join(self._provider.scopes),
            "access_type": access_type,
            "include_granted_scopes": "true",
            "prompt": "consent",
            "state": state,
        }
        query = urlencode(params)
        return f"{self._provider.auth_url}?{query}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def exchange(self, code: str) -> TokenBundle:
        """
        Exchange an authorization code for tokens and the user's profile.

        Single shot: nothing is cached, retried or refreshed.
        """
        if not code:
            raise EmptyCodeError("Authorization code is empty or missing.")

        async with self._client() as client:
            token_payload = await self._exchange_authorization_code(client, code)
            access_token = token_payload["access_token"]
            user_info = await self._fetch_user_info(client, access_token)

        expiry = None
        expires_in = token_payload.get("expires_in")
        if expires_in is not None:
            try:
                expiry = datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))
            except (TypeError, ValueError, OverflowError) as exc:
                raise OAuthTokenExchangeError(
                    f"Unusable expires_in returned from provider: {expires_in!r}"
                ) from exc

        id_token = token_payload.get("id_token")
        try:
            return TokenBundle(
                access_token=access_token,
                refresh_token=token_payload.get("refresh_token") or None,
                id_token=id_token if isinstance(id_token, str) and id_token else None,
                token_type=token_payload.get("token_type") or "Bearer",
                expiry=expiry,
                user_info=user_info,
            )
        except ValidationError as exc:
            raise OAuthTokenExchangeError("Malformed token payload returned from provider.") from exc

    async def _exchange_authorization_code(
        self, client: httpx.AsyncClient, code: str
    ) -> Dict[str, Any]:
        payload = {
            "code": code,
            "client_id": self._provider.client_id,
            "client_secret": self._provider.client_secret,
            "redirect_uri": str(self._provider.redirect_uri),
            "grant_type": "authorization_code",
        }

        try:
            response = await client.post(
                self._provider.token_url,
                data=payload,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise OAuthTokenExchangeError(f"Token request failed: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            raise OAuthTokenExchangeError(
                f"Token endpoint returned status {response.status_code}"
            )

        try:
            token_payload = response.json()
        except ValueError as exc:
            raise OAuthTokenExchangeError("Token endpoint returned a non-JSON body.") from exc

        if not isinstance(token_payload, dict):
            raise OAuthTokenExchangeError("Token endpoint returned a non-object body.")
        access_token = token_payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise OAuthTokenExchangeError("Incomplete token payload returned from provider.")
        return token_payload

    async def _fetch_user_info(
        self, client: httpx.AsyncClient, access_token: str
    ) -> Dict[str, Any]:
        try:
            response = await client.get(
                self._provider.userinfo_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as exc:
            raise UserInfoError(f"User info request failed: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            raise UserInfoError(f"Failed to get user info, status: {response.status_code}")

        try:
            user_info = response.json()
        except ValueError as exc:
            raise UserInfoError("User info endpoint returned a non-JSON body.") from exc

        if not isinstance(user_info, dict):
            raise UserInfoError("User info endpoint returned a non-object body.")
        return user_info


__all__ = [
    "EmptyCodeError",
    "ExchangeError",
    "GoogleOAuthClient",
    "OAuthTokenExchangeError",
    "UserInfoError",
]
