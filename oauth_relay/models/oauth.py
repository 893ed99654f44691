"""
Domain models carried through a single login round trip.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class StateClaims(BaseModel):
    """Routing intent recovered from a state token."""

    model_config = ConfigDict(frozen=True)

    service: str = Field("", description="Requesting backend, used for logging only.")
    environment: str = Field("", description="Deployment context, e.g. a preview tag.")
    callback_endpoint: str = Field(..., min_length=1, description="Backend URL receiving the code.")
    redirect_endpoint: str = Field("", description="Where the backend sends the user afterwards.")
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @field_validator("issued_at", "expires_at")
    @classmethod
    def _whole_seconds_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Token timestamps have second precision; normalize so round trips compare equal."""
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).replace(microsecond=0)

    @classmethod
    def issue(
        cls,
        *,
        callback_endpoint: str,
        ttl_seconds: int,
        service: str = "",
        environment: str = "",
        redirect_endpoint: str = "",
    ) -> "StateClaims":
        """Build claims valid from now for ``ttl_seconds``."""
        now = _utc_now()
        return cls(
            service=service,
            environment=environment,
            callback_endpoint=callback_endpoint,
            redirect_endpoint=redirect_endpoint,
            issued_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )


class TokenBundle(BaseModel):
    """Result of a direct code exchange, relayed to the backend and never stored."""

    access_token: str
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    token_type: str = "Bearer"
    expiry: Optional[datetime] = None
    user_info: dict[str, Any] = Field(default_factory=dict)

    @property
    def email(self) -> Optional[str]:
        value = self.user_info.get("email")
        return value if isinstance(value, str) else None


__all__ = ["StateClaims", "TokenBundle"]
