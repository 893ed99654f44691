"""
Application configuration models and helpers.

Settings are read once at startup from the environment (and an optional
``.env`` file), validated eagerly, and then passed explicitly into the state
codec, the callback relay and the exchange client.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Annotated, Optional

from pydantic import AnyHttpUrl, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_BASE_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    frozen=True,
    populate_by_name=True,
)


class StateScheme(str, Enum):
    """Supported encodings for the ``state`` value round-tripped via the provider."""

    LEGACY_URL = "legacy_url"
    SIGNED = "signed"


class RelayMode(str, Enum):
    """What the relay forwards to the backend on a successful callback."""

    PASS_THROUGH = "pass_through"
    DIRECT_EXCHANGE = "direct_exchange"


class StateSettings(BaseSettings):
    """Configuration for encoding and verifying state tokens."""

    model_config = _BASE_CONFIG

    scheme: StateScheme = Field(StateScheme.SIGNED, validation_alias="STATE_SCHEME")
    secret: Optional[str] = Field(
        None,
        validation_alias="STATE_SECRET",
        description="Shared HMAC secret known only to the token issuer and this relay.",
    )
    ttl_seconds: int = Field(900, validation_alias="STATE_TTL_SECONDS", gt=0)
    issuer: Optional[str] = Field(
        None,
        validation_alias="STATE_ISSUER",
        description="Optional ``iss`` claim; required on decode when configured.",
    )


class ProviderSettings(BaseSettings):
    """Identity provider client registration and endpoints."""

    model_config = _BASE_CONFIG

    name: str = Field("google", validation_alias="OAUTH_PROVIDER")
    client_id: Optional[str] = Field(None, validation_alias="GOOGLE_OAUTH_CLIENT_ID")
    client_secret: Optional[str] = Field(None, validation_alias="GOOGLE_OAUTH_CLIENT_SECRET")
    redirect_uri: Optional[AnyHttpUrl] = Field(None, validation_alias="OAUTH_REDIRECT_URL")
    auth_url: str = Field(
        "https://accounts.google.com/o/oauth2/v2/auth", validation_alias="OAUTH_AUTH_URL"
    )
    token_url: str = Field("https://oauth2.googleapis.com/token", validation_alias="OAUTH_TOKEN_URL")
    userinfo_url: str = Field(
        "https://www.googleapis.com/oauth2/v3/userinfo", validation_alias="OAUTH_USERINFO_URL"
    )
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        (
            "openid",
            "https://www.googleapis.com/auth/userinfo.email",
            "https://www.googleapis.com/auth/userinfo.profile",
        ),
        validation_alias="OAUTH_SCOPES",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(cls, value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())


class AppSettings(BaseSettings):
    """Root settings object for the relay."""

    model_config = _BASE_CONFIG

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    port: int = Field(8081, validation_alias="PORT")
    debug: bool = Field(False, validation_alias="DEBUG")
    relay_mode: RelayMode = Field(RelayMode.PASS_THROUGH, validation_alias="RELAY_MODE")
    request_timeout_seconds: float = Field(15.0, validation_alias="RELAY_REQUEST_TIMEOUT", gt=0)
    shutdown_grace_seconds: int = Field(30, validation_alias="SHUTDOWN_GRACE_SECONDS", ge=0)
    state: StateSettings = Field(default_factory=StateSettings)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)

    @model_validator(mode="after")
    def _require_mode_settings(self) -> "AppSettings":
        """Fail fast when a value required by the selected scheme or mode is missing."""
        if self.state.scheme is StateScheme.SIGNED and not self.state.secret:
            raise ValueError("STATE_SECRET is required when STATE_SCHEME=signed")
        if self.relay_mode is RelayMode.DIRECT_EXCHANGE:
            if not self.provider.client_id:
                raise ValueError("GOOGLE_OAUTH_CLIENT_ID is required")
            if not self.provider.client_secret:
                raise ValueError("GOOGLE_OAUTH_CLIENT_SECRET is required")
            if not self.provider.redirect_uri:
                raise ValueError("OAUTH_REDIRECT_URL is required")
        return self


def load_settings(env_file: Optional[str] = ".env") -> AppSettings:
    """Build settings, reading every nested group from the same ``env_file``."""
    return AppSettings(  # type: ignore[call-arg]
        _env_file=env_file,
        state=StateSettings(_env_file=env_file),  # type: ignore[call-arg]
        provider=ProviderSettings(_env_file=env_file),  # type: ignore[call-arg]
    )


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return load_settings()


__all__ = [
    "AppSettings",
    "ProviderSettings",
    "RelayMode",
    "StateScheme",
    "StateSettings",
    "get_settings",
    "load_settings",
]
