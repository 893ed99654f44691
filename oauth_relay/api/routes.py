"""
FastAPI routes for the OAuth callback relay.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import RedirectResponse

from oauth_relay.core.config import AppSettings
from oauth_relay.dependencies import get_app_settings, get_callback_relay
from oauth_relay.schemas import CallbackResult
from oauth_relay.services import CallbackRelay, RelayRejectedError
from oauth_relay.utils.http import ClientDisconnectedError, run_until_disconnected

router = APIRouter()
debug_router = APIRouter()
logger = logging.getLogger(__name__)

# Non-standard status used by proxies for a request the client abandoned.
CLIENT_CLOSED_REQUEST = 499


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok", "service": "oauth-relay"}


@debug_router.get("/debug", status_code=HTTPStatus.OK)
async def debug_request(request: Request) -> dict:
    """Echo request metadata to help diagnose provider redirect issues."""
    query_params = {key: request.query_params.getlist(key) for key in request.query_params.keys()}
    headers = dict(request.headers)
    client = request.client.host if request.client else None
    logger.debug("DEBUG: request from %s: %s %s", client, request.method, request.url)

    return {
        "debug": True,
        "url": str(request.url),
        "method": request.method,
        "client": client,
        "query_params": query_params,
        "headers": headers,
    }


@router.get("/auth/{provider}/callback", status_code=HTTPStatus.TEMPORARY_REDIRECT)
async def handle_oauth_callback(
    request: Request,
    provider: str,
    relay: Annotated[CallbackRelay, Depends(get_callback_relay)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    code: Optional[str] = Query(default=None, description="Authorization code."),
    state: Optional[str] = Query(default=None, description="Opaque state token."),
    error: Optional[str] = Query(default=None, description="Error reported by the provider."),
) -> Response:
    """Forward the provider's callback to the backend recorded in ``state``."""
    if provider != settings.provider.name:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Unknown provider.")

    client = request.client.host if request.client else None
    logger.info("Received OAuth callback for %s from %s", provider, client)

    callback = CallbackResult(code=code, state=state, error=error)
    try:
        target = await run_until_disconnected(relay.relay(callback), request.is_disconnected)
    except RelayRejectedError as exc:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=exc.detail) from exc
    except ClientDisconnectedError:
        logger.info("Client %s disconnected before the callback was relayed", client)
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    return RedirectResponse(url=target, status_code=HTTPStatus.TEMPORARY_REDIRECT)


__all__ = ["debug_router", "router"]
