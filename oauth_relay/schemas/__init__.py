"""Pydantic schemas used by the HTTP layer."""

from .auth import CallbackResult

__all__ = ["CallbackResult"]
