"""Tests for the state issuing script."""

from __future__ import annotations

import pytest

from oauth_relay.clients.state_codec import SignedClaimsStateCodec
from scripts import issue_state

SECRET = "script-signing-secret-0123456789abcdef"


@pytest.fixture(autouse=True)
def _signed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STATE_SCHEME", "signed")
    monkeypatch.setenv("STATE_SECRET", SECRET)


def test_issues_token_decodable_by_relay(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = issue_state.main(
        [
            "--callback-endpoint",
            "https://backend.example/cb",
            "--service",
            "billing",
            "--env",
            "pr-9",
            "--ttl",
            "120",
        ]
    )

    assert exit_code == issue_state.EXIT_OK
    token = capsys.readouterr().out.strip()
    claims = SignedClaimsStateCodec(SECRET).decode(token)
    assert claims.callback_endpoint == "https://backend.example/cb"
    assert claims.service == "billing"
    assert claims.environment == "pr-9"
    assert (claims.expires_at - claims.issued_at).total_seconds() == 120


def test_prints_authorization_url(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = issue_state.main(
        ["--callback-endpoint", "https://backend.example/cb", "--authorize-url"]
    )

    assert exit_code == issue_state.EXIT_OK
    assert "state=" in capsys.readouterr().out


def test_missing_secret_is_reported(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("STATE_SECRET")

    exit_code = issue_state.main(["--callback-endpoint", "https://backend.example/cb"])

    assert exit_code == issue_state.EXIT_VALIDATION_ERROR
    assert "Cannot issue state token" in capsys.readouterr().err
