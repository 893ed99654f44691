"""Schemas related to OAuth flows."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class CallbackResult(BaseModel):
    """Query parameters of one inbound provider callback."""

    code: Optional[str] = Field(None, description="Authorization code returned by the provider.")
    state: Optional[str] = Field(None, description="Opaque state token issued before the login.")
    error: Optional[str] = Field(None, description="Error code reported by the provider.")

    @property
    def provider_error(self) -> Optional[str]:
        return self.error or None


__all__ = ["CallbackResult"]
