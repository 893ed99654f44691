"""
Logging utilities for the relay.

Provides a consistent logging format and the masking helper applied to
authorization codes before they reach a log line.
"""

import logging
import sys

EMPTY_MARKER = "[EMPTY]"
REDACTED_MARKER = "[REDACTED]"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )


def mask_sensitive_data(data: str | None) -> str:
    """Mask a secret for logging, keeping at most four characters at each end."""
    if not data:
        return EMPTY_MARKER
    if len(data) <= 8:
        return REDACTED_MARKER
    return f"{data[:4]}...{data[-4:]}"


__all__ = ["EMPTY_MARKER", "REDACTED_MARKER", "configure_logging", "mask_sensitive_data"]
