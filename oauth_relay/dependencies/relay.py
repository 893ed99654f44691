"""
Factory functions providing settings, the state codec, the exchange client
and the callback relay as FastAPI dependencies.

Everything here is built once per process and is read-only afterwards, so the
same instances serve every concurrent request.
"""

from functools import lru_cache
from typing import Optional

from oauth_relay.clients import GoogleOAuthClient, StateCodec, build_state_codec
from oauth_relay.core.config import AppSettings, RelayMode, get_settings
from oauth_relay.services import CallbackRelay


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return get_settings()


@lru_cache()
def get_state_codec() -> StateCodec:
    """Provide the state codec selected by configuration."""
    return build_state_codec(get_app_settings().state)


@lru_cache()
def get_google_oauth_client() -> Optional[GoogleOAuthClient]:
    """Create the exchange client, only in direct-exchange mode."""
    settings = get_app_settings()
    if settings.relay_mode is not RelayMode.DIRECT_EXCHANGE:
        return None
    return GoogleOAuthClient(settings.provider, timeout=settings.request_timeout_seconds)


@lru_cache()
def get_callback_relay() -> CallbackRelay:
    """Provide the callback relay wired with the configured codec and mode."""
    settings = get_app_settings()
    return CallbackRelay(
        get_state_codec(),
        get_google_oauth_client(),
        exchange_timeout=settings.request_timeout_seconds,
    )


__all__ = [
    "get_app_settings",
    "get_callback_relay",
    "get_google_oauth_client",
    "get_state_codec",
]
