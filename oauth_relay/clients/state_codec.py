"""
State token codecs.

The ``state`` value is the only thing that survives the trip through the
identity provider, so it carries all routing intent for a login. A relay
instance commits to exactly one scheme, chosen by ``build_state_codec``:

* ``legacy_url``: standard base64 of the callback URL. No integrity
  protection at all; anyone can forge a destination. Kept only so older
  backends keep working.
* ``signed``: an HS256 JWT whose claims describe the requesting backend.
"""

from __future__ import annotations

import base64
import binascii
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict
from urllib.parse import urlsplit

import jwt
from pydantic import ValidationError

from oauth_relay.core.config import StateScheme, StateSettings
from oauth_relay.models.oauth import StateClaims

logger = logging.getLogger(__name__)


class InvalidStateError(Exception):
    """Raised for any state token that cannot be trusted."""

    def __init__(self, message: str = "Invalid state parameter") -> None:
        super().__init__(message)


class StateCodec(ABC):
    """Encode and decode OAuth state values."""

    scheme: StateScheme

    @abstractmethod
    def encode(self, claims: StateClaims) -> str:
        """Return the opaque state value for ``claims``."""

    @abstractmethod
    def decode(self, token: str) -> StateClaims:
        """Return the claims in ``token`` or raise ``InvalidStateError``."""


class LegacyURLStateCodec(StateCodec):
    """Plain reversible encoding of a single destination URL."""

    scheme = StateScheme.LEGACY_URL

    def encode(self, claims: StateClaims) -> str:
        return base64.b64encode(claims.callback_endpoint.encode("utf-8")).decode("ascii")

    def decode(self, token: str) -> StateClaims:
        try:
            raw = base64.b64decode(token.encode("ascii"), validate=True)
            url = raw.decode("utf-8")
            urlsplit(url)
        except (binascii.Error, UnicodeError, ValueError) as exc:
            raise InvalidStateError() from exc
        if not url:
            raise InvalidStateError()
        return StateClaims(callback_endpoint=url)


class SignedClaimsStateCodec(StateCodec):
    """HMAC-SHA256 signed claims carrying structured routing metadata."""

    scheme = StateScheme.SIGNED
    ALGORITHM = "HS256"
    _REQUIRED_CLAIMS = ("exp", "iat", "callback_endpoint")

    def __init__(self, secret_key: str, *, issuer: str | None = None) -> None:
        if not secret_key:
            raise ValueError("State signing secret must be provided.")
        self._secret_key = secret_key
        self._issuer = issuer

    def encode(self, claims: StateClaims) -> str:
        if claims.expires_at is None:
            raise ValueError("Signed state claims require an expiry.")
        payload: Dict[str, Any] = {
            "service": claims.service,
            "env": claims.environment,
            "callback_endpoint": claims.callback_endpoint,
            "redirect_endpoint": claims.redirect_endpoint,
            "iat": claims.issued_at or datetime.now(timezone.utc),
            "exp": claims.expires_at,
        }
        if self._issuer:
            payload["iss"] = self._issuer
        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM)

    def decode(self, token: str) -> StateClaims:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as exc:
            raise InvalidStateError() from exc

        # Checked before verification so "none" and asymmetric algorithms never
        # reach the signature step.
        if header.get("alg") != self.ALGORITHM:
            logger.warning("Rejected state token declaring algorithm %r", header.get("alg"))
            raise InvalidStateError()

        required = list(self._REQUIRED_CLAIMS)
        if self._issuer:
            required.append("iss")
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.ALGORITHM],
                issuer=self._issuer,
                options={"require": required},
            )
        except jwt.ExpiredSignatureError as exc:
            logger.info("State token expired")
            raise InvalidStateError() from exc
        except jwt.InvalidTokenError as exc:
            logger.warning("State token failed verification: %s", type(exc).__name__)
            raise InvalidStateError() from exc

        try:
            return StateClaims(
                service=payload.get("service") or "",
                environment=payload.get("env") or "",
                callback_endpoint=payload["callback_endpoint"],
                redirect_endpoint=payload.get("redirect_endpoint") or "",
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (ValidationError, TypeError, ValueError, OverflowError) as exc:
            raise InvalidStateError() from exc


def build_state_codec(settings: StateSettings) -> StateCodec:
    """Select the configured codec; the only place the scheme is consulted."""
    if settings.scheme is StateScheme.LEGACY_URL:
        logger.warning("Using legacy unsigned state tokens; destinations can be forged")
        return LegacyURLStateCodec()
    return SignedClaimsStateCodec(settings.secret or "", issuer=settings.issuer)


__all__ = [
    "InvalidStateError",
    "LegacyURLStateCodec",
    "SignedClaimsStateCodec",
    "StateCodec",
    "build_state_codec",
]
