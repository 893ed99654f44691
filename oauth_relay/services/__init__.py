"""Service layer exports."""

from .callback_relay import (
    CallbackRelay,
    InvalidDestinationError,
    MissingStateError,
    RelayRejectedError,
    StateVerificationError,
)

__all__ = [
    "CallbackRelay",
    "InvalidDestinationError",
    "MissingStateError",
    "RelayRejectedError",
    "StateVerificationError",
]
