"""Tests for credential storage and the OAuth2 client configuration."""

from unittest.mock import Mock, patch

import pytest

from webcal_mirror.auth import (
    DEFAULT_SCOPES,
    GoogleAuthenticator,
    create_oauth2_config_file,
    load_oauth2_config,
)


@pytest.fixture(autouse=True)
def data_home(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    return tmp_path


def test_oauth2_template_round_trip(data_home):
    path = create_oauth2_config_file()

    config = load_oauth2_config()

    assert path == data_home / "webcal-mirror" / "credentials" / "oauth2_config.yaml"
    assert config.client_id == "your-client-id.apps.googleusercontent.com"
    assert config.scopes == DEFAULT_SCOPES


def test_missing_oauth2_config():
    assert load_oauth2_config() is None


class TestAuthenticate:
    def test_non_interactive_without_credentials(self):
        with pytest.raises(RuntimeError, match="webcal-mirror auth"):
            GoogleAuthenticator("work").authenticate(interactive=False)

    def test_valid_credentials_are_returned(self):
        credentials = Mock(valid=True)
        authenticator = GoogleAuthenticator("work")

        with patch.object(authenticator, "load_credentials", return_value=credentials):
            assert authenticator.authenticate(interactive=False) is credentials

    def test_expired_credentials_are_refreshed_and_saved(self):
        credentials = Mock(valid=False, expired=True, refresh_token="token")
        credentials.to_json.return_value = '{"token": "fresh"}'
        authenticator = GoogleAuthenticator("work")

        with patch.object(authenticator, "load_credentials", return_value=credentials):
            assert authenticator.authenticate(interactive=False) is credentials

        credentials.refresh.assert_called_once()
        assert authenticator.credentials_path.read_text() == '{"token": "fresh"}'

    def test_corrupt_credentials_file_is_ignored(self):
        authenticator = GoogleAuthenticator("work")
        authenticator.credentials_path.parent.mkdir(parents=True)
        authenticator.credentials_path.write_text("{not json")

        assert authenticator.load_credentials() is None
