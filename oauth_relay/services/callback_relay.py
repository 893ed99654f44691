"""
Relay of provider callbacks to the backend that started the login.

Until the destination is known and trusted, failures are reported straight
to the caller and nothing is redirected. Once it is trusted every failure is
forwarded to the backend as an ``error`` query parameter instead.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Optional, Protocol

from oauth_relay.clients.google_auth import ExchangeError
from oauth_relay.clients.state_codec import InvalidStateError, StateCodec
from oauth_relay.core.logging import mask_sensitive_data
from oauth_relay.models.oauth import StateClaims, TokenBundle
from oauth_relay.schemas import CallbackResult
from oauth_relay.utils.urls import is_valid_destination, merge_query

logger = logging.getLogger(__name__)

ERROR_CODE_MISSING = "code_missing"
ERROR_EXCHANGE_FAILED = "failed_to_exchange_code"
ERROR_SERIALIZATION_FAILED = "failed_to_marshal_token_data"


class ExchangeClient(Protocol):
    async def exchange(self, code: str) -> TokenBundle: ...


class RelayRejectedError(Exception):
    """The callback cannot be routed; answer the caller directly."""

    detail = "Invalid callback request"

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class MissingStateError(RelayRejectedError):
    detail = "State parameter is missing"


class StateVerificationError(RelayRejectedError):
    detail = "Invalid state parameter"


class InvalidDestinationError(RelayRejectedError):
    detail = "Invalid callback URL in state"


class CallbackRelay:
    """Turn an inbound provider callback into a redirect to the backend."""

    def __init__(
        self,
        codec: StateCodec,
        exchange_client: Optional[ExchangeClient] = None,
        *,
        exchange_timeout: Optional[float] = None,
    ) -> None:
        self._codec = codec
        self._exchange_client = exchange_client
        self._exchange_timeout = exchange_timeout

    async def relay(self, callback: CallbackResult) -> str:
        """
        Return the URL the user agent should be redirected to.

        Raises ``RelayRejectedError`` when no trusted destination exists.
        """
        logger.info(
            "Received callback - code: %s, error: %s",
            mask_sensitive_data(callback.code),
            callback.provider_error,
        )

        claims = self._resolve_claims(callback.state)
        destination = claims.callback_endpoint
        logger.info(
            "Callback destination for service=%r env=%r: %s",
            claims.service,
            claims.environment,
            destination,
        )

        if callback.provider_error:
            logger.info("Provider error %r, forwarding to backend", callback.provider_error)
            return merge_query(destination, [("error", callback.provider_error)])

        if not callback.code:
            logger.warning("Callback carried neither code nor error")
            return merge_query(destination, [("error", ERROR_CODE_MISSING)])

        if self._exchange_client is None:
            params = [("code", callback.code)]
            if claims.redirect_endpoint:
                params.append(("redirect", claims.redirect_endpoint))
            logger.info("Forwarding authorization code to backend")
            return merge_query(destination, params)

        return await self._relay_exchanged(self._exchange_client, callback, destination)

    def _resolve_claims(self, state: Optional[str]) -> StateClaims:
        if not state:
            logger.warning("State parameter is missing")
            raise MissingStateError()

        try:
            claims = self._codec.decode(state)
        except InvalidStateError as exc:
            logger.warning("Invalid state parameter (scheme=%s)", self._codec.scheme.value)
            raise StateVerificationError() from exc

        if not is_valid_destination(claims.callback_endpoint):
            logger.warning("Invalid callback URL in state")
            raise InvalidDestinationError()
        return claims

    async def _relay_exchanged(
        self, exchange_client: ExchangeClient, callback: CallbackResult, destination: str
    ) -> str:
        logger.info("Exchanging authorization code for tokens")
        try:
            bundle = await asyncio.wait_for(
                exchange_client.exchange(callback.code or ""),
                timeout=self._exchange_timeout,
            )
        except ExchangeError as exc:
            logger.error("Code exchange failed: %s", exc)
            return merge_query(destination, [("error", ERROR_EXCHANGE_FAILED)])
        except asyncio.TimeoutError:
            logger.error("Code exchange timed out after %ss", self._exchange_timeout)
            return merge_query(destination, [("error", ERROR_EXCHANGE_FAILED)])

        if bundle.email:
            logger.info("Successfully obtained user info for email: %s", bundle.email)

        try:
            encoded = base64.b64encode(bundle.model_dump_json().encode("utf-8")).decode("ascii")
        except (TypeError, ValueError) as exc:
            logger.error("Failed to serialize token data: %s", exc)
            return merge_query(destination, [("error", ERROR_SERIALIZATION_FAILED)])

        logger.info("Redirecting to backend with token data")
        return merge_query(destination, [("code", encoded), ("state", callback.state or "")])


__all__ = [
    "CallbackRelay",
    "ERROR_CODE_MISSING",
    "ERROR_EXCHANGE_FAILED",
    "ERROR_SERIALIZATION_FAILED",
    "ExchangeClient",
    "InvalidDestinationError",
    "MissingStateError",
    "RelayRejectedError",
    "StateVerificationError",
]
