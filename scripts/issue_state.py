"""Issue a state token for a backend, for smoke tests and manual logins.

Example::

    python -m scripts.issue_state --callback-endpoint https://api.internal/cb \
        --service billing --env pr-123 --authorize-url
"""

from __future__ import annotations

import argparse
import sys

from pydantic import ValidationError

from oauth_relay.clients import GoogleOAuthClient, build_state_codec
from oauth_relay.core.config import ProviderSettings, StateSettings
from oauth_relay.models.oauth import StateClaims

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Issue an OAuth state token.")
    parser.add_argument("--callback-endpoint", required=True, help="Backend URL receiving the code.")
    parser.add_argument("--redirect-endpoint", default="", help="Final user-facing URL.")
    parser.add_argument("--service", default="", help="Requesting backend identifier.")
    parser.add_argument("--env", dest="environment", default="", help="Deployment context tag.")
    parser.add_argument(
        "--ttl",
        type=int,
        default=None,
        help="Token lifetime in seconds (default: STATE_TTL_SECONDS).",
    )
    parser.add_argument(
        "--authorize-url",
        action="store_true",
        help="Print the provider consent URL carrying the token instead of the token.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        state_settings = StateSettings()  # type: ignore[call-arg]
        codec = build_state_codec(state_settings)
        claims = StateClaims.issue(
            callback_endpoint=args.callback_endpoint,
            redirect_endpoint=args.redirect_endpoint,
            service=args.service,
            environment=args.environment,
            ttl_seconds=args.ttl or state_settings.ttl_seconds,
        )
    except (ValidationError, ValueError) as exc:
        print(f"Cannot issue state token: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    token = codec.encode(claims)
    if args.authorize_url:
        oauth_client = GoogleOAuthClient(ProviderSettings())  # type: ignore[call-arg]
        print(oauth_client.build_authorization_url(state=token))
    else:
        print(token)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
