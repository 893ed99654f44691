"""Expose constructed client wrappers."""

from .google_auth import GoogleOAuthClient
from .state_codec import (
    InvalidStateError,
    LegacyURLStateCodec,
    SignedClaimsStateCodec,
    StateCodec,
    build_state_codec,
)

__all__ = [
    "GoogleOAuthClient",
    "InvalidStateError",
    "LegacyURLStateCodec",
    "SignedClaimsStateCodec",
    "StateCodec",
    "build_state_codec",
]
