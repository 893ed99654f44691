"""Test helper that normalizes sys.path and environment defaults."""

from __future__ import annotations

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


TEST_STATE_SECRET = "test-state-secret-with-at-least-32-bytes"

_DEFAULT_ENV_VARS: dict[str, str] = {
    "STATE_SCHEME": "signed",
    "STATE_SECRET": TEST_STATE_SECRET,
    "RELAY_MODE": "pass_through",
    "OAUTH_PROVIDER": "google",
    "GOOGLE_OAUTH_CLIENT_ID": "test-client-id",
    "GOOGLE_OAUTH_CLIENT_SECRET": "test-client-secret",
    "OAUTH_REDIRECT_URL": "https://relay.example.com/auth/google/callback",
    "DEBUG": "false",
}

for key, value in _DEFAULT_ENV_VARS.items():
    os.environ.setdefault(key, value)
