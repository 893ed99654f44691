"""Expose dependency helpers for FastAPI routers."""

from .relay import (
    get_app_settings,
    get_callback_relay,
    get_google_oauth_client,
    get_state_codec,
)

__all__ = [
    "get_app_settings",
    "get_callback_relay",
    "get_google_oauth_client",
    "get_state_codec",
]
