"""Verify that an environment file yields a valid relay configuration.

Run it before (re)starting the relay so a missing secret or client credential
is reported with a readable message instead of a crash on boot::

    python -m scripts.check_env --env-file /opt/oauth-relay/.env
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from oauth_relay.core.config import load_settings

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_RUNTIME_ERROR = 5


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate that required relay settings are present."
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Path to the environment file (default: .env in the working directory).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(f"Environment file {env_file} does not exist.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        settings = load_settings(str(env_file))
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    print(
        f"Settings OK: mode={settings.relay_mode.value} "
        f"state_scheme={settings.state.scheme.value} provider={settings.provider.name}"
    )
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
