"""
Unit tests for the OAuth token handling.
"""

import datetime
import json
from unittest.mock import MagicMock, patch

import pytest
from google.auth.exceptions import RefreshError, TransportError

from weekwidget.api.auth import AuthManager
from weekwidget.core.errors import AuthError, NetworkError


def utc_now():
    """Naive UTC now, the way google-auth stores expiry."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def make_creds(valid=True, expires_in=3600, refresh_token="refresh-1", token_json='{"token": "abc"}'):
    creds = MagicMock(name="credentials")
    creds.valid = valid
    creds.expiry = (utc_now() + datetime.timedelta(seconds=expires_in)
                    if expires_in is not None else None)
    creds.refresh_token = refresh_token
    creds.to_json.return_value = token_json
    return creds


def make_refreshing(creds):
    def refresh(request):
        creds.valid = True
        creds.expiry = utc_now() + datetime.timedelta(hours=1)
    creds.refresh.side_effect = refresh
    return creds


@pytest.fixture
def paths(tmp_path):
    credentials_file = tmp_path / "credentials.json"
    credentials_file.write_text(json.dumps({"installed": {"client_id": "id", "client_secret": "s"}}))
    return {"credentials_file": str(credentials_file), "token_file": str(tmp_path / "token.json")}


@pytest.fixture
def token_on_disk(paths):
    with open(paths["token_file"], "w") as f:
        json.dump({"token": "old", "refresh_token": "refresh-1"}, f)
    return paths


class TestGetCredentials:

    @patch("weekwidget.api.auth.Credentials")
    def test_valid_token_is_returned_without_refresh(self, mock_credentials, token_on_disk):
        creds = make_creds()
        mock_credentials.from_authorized_user_info.return_value = creds

        auth = AuthManager(**token_on_disk)

        assert auth.get_credentials() is creds
        creds.refresh.assert_not_called()

    @patch("weekwidget.api.auth.Request")
    @patch("weekwidget.api.auth.Credentials")
    def test_expiring_token_is_refreshed_and_persisted(self, mock_credentials, mock_request, token_on_disk):
        creds = make_refreshing(make_creds(expires_in=60, token_json='{"token": "new"}'))
        mock_credentials.from_authorized_user_info.return_value = creds

        auth = AuthManager(**token_on_disk)

        assert auth.get_credentials() is creds
        creds.refresh.assert_called_once()
        with open(token_on_disk["token_file"]) as f:
            assert json.load(f) == {"token": "new"}

    @patch("weekwidget.api.auth.InstalledAppFlow")
    @patch("weekwidget.api.auth.Request")
    @patch("weekwidget.api.auth.Credentials")
    def test_failed_refresh_falls_back_to_browser_sign_in(self, mock_credentials, mock_request,
                                                          mock_flow_cls, token_on_disk):
        old = make_creds(valid=False)
        old.refresh.side_effect = RefreshError("invalid_grant")
        mock_credentials.from_authorized_user_info.return_value = old
        new = make_creds(token_json='{"token": "fresh"}')
        mock_flow_cls.from_client_secrets_file.return_value.run_local_server.return_value = new

        auth = AuthManager(**token_on_disk)

        assert auth.get_credentials() is new
        with open(token_on_disk["token_file"]) as f:
            assert json.load(f) == {"token": "fresh"}

    @patch("weekwidget.api.auth.InstalledAppFlow")
    def test_sign_in_uses_pkce_and_offline_access(self, mock_flow_cls, paths):
        flow = mock_flow_cls.from_client_secrets_file.return_value
        flow.run_local_server.return_value = make_creds()

        AuthManager(**paths).get_credentials()

        args, kwargs = mock_flow_cls.from_client_secrets_file.call_args
        assert args[0] == paths["credentials_file"]
        assert kwargs["autogenerate_code_verifier"] is True
        _, run_kwargs = flow.run_local_server.call_args
        assert run_kwargs["port"] == 0
        assert run_kwargs["access_type"] == "offline"
        assert run_kwargs["prompt"] == "consent"

    def test_missing_client_file_raises_auth_error(self, tmp_path):
        auth = AuthManager(credentials_file=str(tmp_path / "missing.json"),
                           token_file=str(tmp_path / "token.json"))

        with pytest.raises(AuthError, match="missing.json"):
            auth.get_credentials()

    @patch("weekwidget.api.auth.InstalledAppFlow")
    def test_invalid_token_after_sign_in_is_never_handed_out(self, mock_flow_cls, paths):
        mock_flow_cls.from_client_secrets_file.return_value.run_local_server.return_value = \
            make_creds(valid=False)

        with pytest.raises(AuthError):
            AuthManager(**paths).get_credentials()

    @patch("weekwidget.api.auth.InstalledAppFlow")
    def test_failed_sign_in_raises_auth_error(self, mock_flow_cls, paths):
        mock_flow_cls.from_client_secrets_file.return_value.run_local_server.side_effect = \
            ValueError("state mismatch")

        with pytest.raises(AuthError, match="state mismatch"):
            AuthManager(**paths).get_credentials()

    @patch("weekwidget.api.auth.Request")
    @patch("weekwidget.api.auth.Credentials")
    def test_invalidate_forces_refresh_of_valid_token(self, mock_credentials, mock_request, token_on_disk):
        creds = make_refreshing(make_creds())
        mock_credentials.from_authorized_user_info.return_value = creds
        auth = AuthManager(**token_on_disk)

        auth.invalidate()
        auth.get_credentials()
        auth.get_credentials()

        creds.refresh.assert_called_once()

    @patch("weekwidget.api.auth.InstalledAppFlow")
    @patch("weekwidget.api.auth.Request")
    @patch("weekwidget.api.auth.Credentials")
    def test_offline_refresh_is_a_network_error(self, mock_credentials, mock_request,
                                                mock_flow_cls, token_on_disk):
        creds = make_creds(expires_in=60)
        creds.refresh.side_effect = TransportError("Failed to establish a new connection")
        mock_credentials.from_authorized_user_info.return_value = creds

        auth = AuthManager(**token_on_disk)

        with pytest.raises(NetworkError):
            auth.get_credentials()
        with pytest.raises(NetworkError):
            auth.get_credentials()
        mock_flow_cls.from_client_secrets_file.assert_not_called()
        assert auth.creds is creds

    @patch("weekwidget.api.auth.InstalledAppFlow")
    @patch("weekwidget.api.auth.Request")
    @patch("weekwidget.api.auth.Credentials")
    def test_revoked_token_after_rejection_leads_to_sign_in(self, mock_credentials, mock_request,
                                                            mock_flow_cls, token_on_disk):
        old = make_creds()
        old.refresh.side_effect = RefreshError("invalid_grant: Token has been expired or revoked.")
        mock_credentials.from_authorized_user_info.return_value = old
        flow = mock_flow_cls.from_client_secrets_file.return_value
        flow.run_local_server.side_effect = ValueError("sign-in window closed")
        auth = AuthManager(**token_on_disk)

        auth.invalidate()
        with pytest.raises(AuthError):
            auth.get_credentials()

        assert auth.creds is None
        new = make_creds(token_json='{"token": "fresh"}')
        flow.run_local_server.side_effect = None
        flow.run_local_server.return_value = new

        assert auth.get_credentials() is new
        old.refresh.assert_called_once()


class TestTokenFile:

    @patch("weekwidget.api.auth.Credentials")
    def test_malformed_token_file_is_ignored(self, mock_credentials, paths):
        with open(paths["token_file"], "w") as f:
            f.write("{not json")

        auth = AuthManager(**paths)

        assert auth.creds is None
        mock_credentials.from_authorized_user_info.assert_not_called()

    @patch("weekwidget.api.auth.Credentials")
    def test_token_missing_fields_is_ignored(self, mock_credentials, token_on_disk):
        mock_credentials.from_authorized_user_info.side_effect = ValueError("missing fields")

        assert AuthManager(**token_on_disk).creds is None


class TestServices:

    @patch("weekwidget.api.auth.build")
    @patch("weekwidget.api.auth.Credentials")
    def test_services_are_cached_per_api(self, mock_credentials, mock_build, token_on_disk):
        creds = make_creds()
        mock_credentials.from_authorized_user_info.return_value = creds
        auth = AuthManager(**token_on_disk)

        first = auth.get_service("calendar", "v3")
        second = auth.get_service("calendar", "v3")
        auth.get_service("tasks", "v1")

        assert first is second
        assert mock_build.call_count == 2
        mock_build.assert_any_call("calendar", "v3", credentials=creds, cache_discovery=False)
        mock_build.assert_any_call("tasks", "v1", credentials=creds, cache_discovery=False)

    @patch("weekwidget.api.auth.build")
    @patch("weekwidget.api.auth.Request")
    @patch("weekwidget.api.auth.Credentials")
    def test_services_are_rebuilt_after_refresh(self, mock_credentials, mock_request, mock_build,
                                                token_on_disk):
        creds = make_refreshing(make_creds())
        mock_credentials.from_authorized_user_info.return_value = creds
        auth = AuthManager(**token_on_disk)

        auth.get_service("calendar", "v3")
        auth.invalidate()
        auth.get_service("calendar", "v3")

        assert mock_build.call_count == 2
