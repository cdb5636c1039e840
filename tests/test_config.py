from __future__ import annotations

import logging

import pytest

from codegrant.config import ClientSettings, configure_logging


def test_settings_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_OAUTH2_CLIENT_ID", "example_foobar_whatever@example.com")
    monkeypatch.setenv("EXAMPLE_OAUTH2_CLIENT_SECRET", "super_secret")
    monkeypatch.setenv("EXAMPLE_OAUTH2_AUTH_URI", "https://example.com/v1/auth")
    monkeypatch.setenv("EXAMPLE_OAUTH2_TOKEN_URI", "https://example.com/v1/token")
    monkeypatch.setenv("EXAMPLE_OAUTH2_SCOPE", "user.profile user.me")

    settings = ClientSettings()
    auth = settings.authenticator()

    assert auth.client_id == "example_foobar_whatever@example.com"
    assert auth.client_secret == "super_secret"
    assert auth.auth_uri == "https://example.com/v1/auth"
    assert auth.token_uri == "https://example.com/v1/token"
    assert settings.scopes == ["user.profile", "user.me"]


def test_explicit_values_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_OAUTH2_CLIENT_ID", "from-env")

    settings = ClientSettings(client_id="explicit")

    assert settings.client_id == "explicit"


def test_client_gets_fresh_state() -> None:
    settings = ClientSettings(scope="a b")

    first = settings.client()
    second = settings.client()

    assert first.scope == ("a", "b")
    assert first.state and second.state
    assert first.state != second.state
    assert settings.client(with_state=False).state is None


def test_blank_secret_is_left_out_of_token_request(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_OAUTH2_CLIENT_SECRET", "")

    settings = ClientSettings()
    request = settings.client(with_state=False).with_code("C").get_access_token_request()

    assert settings.authenticator().client_secret is None
    assert "client_secret" not in request.form_params()
    assert request.form_params().single("client_id") == "someid@example.com"


def test_configure_logging_sets_root_level(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    monkeypatch.setattr(root, "level", root.level)

    configure_logging("debug")
    assert root.level == logging.DEBUG

    configure_logging("warning")
    assert root.level == logging.WARNING


def test_configure_logging_defaults_to_settings_level(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    monkeypatch.setattr(root, "level", root.level)
    monkeypatch.setattr(
        "codegrant.config.get_settings", lambda: ClientSettings(log_level="error")
    )

    configure_logging()

    assert root.level == logging.ERROR
