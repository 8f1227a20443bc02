import os
import json
import logging
import datetime
from datetime import timezone
from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from oauthlib.oauth2.rfc6749.errors import OAuth2Error
from weekwidget.core.config import CREDENTIALS_FILE, TOKEN_FILE, SCOPES, TOKEN_REFRESH_BUFFER
from weekwidget.core.errors import AuthError, NetworkError

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Authorization successful! You can close this window and return to the widget."


class AuthManager:
    """Class to handle Google API authentication."""

    def __init__(self, credentials_file=CREDENTIALS_FILE, token_file=TOKEN_FILE, scopes=SCOPES):
        """Initialize the authentication manager. No network access happens here."""
        self.credentials_file = credentials_file
        self.token_file = token_file
        self.scopes = list(scopes)
        self.creds = None
        self.refresh_buffer = TOKEN_REFRESH_BUFFER
        self.services = {}
        self._force_refresh = False
        self.load_credentials()

    def load_credentials(self):
        """Load credentials from the token file, ignoring it if it is unreadable."""
        if not os.path.exists(self.token_file):
            return None
        try:
            with open(self.token_file, 'r') as token:
                info = json.load(token)
            self.creds = Credentials.from_authorized_user_info(info, self.scopes)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable token file %s: %s", self.token_file, e)
            self.creds = None
        return self.creds

    def get_credentials(self):
        """Return valid credentials, refreshing or re-authenticating as needed.

        Raises AuthError when no valid token can be obtained, so callers never
        reach the API without one.
        """
        if self.creds is None or self._needs_refresh():
            refreshed = self.refresh_token()
            if not refreshed:
                self.reauthenticate()

        if self.creds is None or not self.creds.valid:
            raise AuthError("Could not obtain a valid Google token")
        return self.creds

    def invalidate(self):
        """Force a refresh on the next call, e.g. after the API rejected the token."""
        self._force_refresh = True

    def _needs_refresh(self):
        """Check if the token is missing, expired or about to expire."""
        if self._force_refresh or not self.creds.valid:
            return True

        expiry = self.creds.expiry
        if not expiry:
            return False
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        time_until_expiry = (expiry - datetime.datetime.now(timezone.utc)).total_seconds()
        if time_until_expiry < self.refresh_buffer:
            logger.info("Token will expire soon (%.1f seconds). Refreshing...", time_until_expiry)
            return True
        return False

    def refresh_token(self):
        """Refresh the access token with the stored refresh token.

        Returns False when there is nothing to refresh with or Google refused,
        in which case the caller falls back to a full sign-in. Refused
        credentials are dropped so no later call tries them again. Being
        offline is a NetworkError, not a sign-in problem.
        """
        if not self.creds or not self.creds.refresh_token:
            return False
        try:
            self.creds.refresh(Request())
        except RefreshError as e:
            logger.warning("Error refreshing token, signing in again: %s", e)
            self.creds = None
            self.services = {}
            return False
        except TransportError as e:
            raise NetworkError(f"Could not reach Google to refresh the token: {e}") from e

        self._store(self.creds)
        return True

    def reauthenticate(self):
        """Run the browser sign-in (OAuth 2.0 with PKCE) and store the new token."""
        if not os.path.exists(self.credentials_file):
            raise AuthError(f"OAuth client file not found: {self.credentials_file}")

        logger.info("Starting Google sign-in in the browser")
        try:
            flow = InstalledAppFlow.from_client_secrets_file(
                self.credentials_file,
                self.scopes,
                autogenerate_code_verifier=True,
            )
            creds = flow.run_local_server(
                port=0,
                access_type='offline',
                prompt='consent',
                success_message=SUCCESS_MESSAGE,
            )
        except (OAuth2Error, ValueError, OSError) as e:
            raise AuthError(f"Google sign-in failed: {e}") from e

        self._store(creds)
        return creds

    def _store(self, creds):
        """Keep the new credentials and persist them to the token file."""
        self.creds = creds
        self._force_refresh = False
        self.services = {}

        directory = os.path.dirname(self.token_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = self.token_file + '.tmp'
        with open(tmp_path, 'w') as token:
            token.write(creds.to_json())
        os.replace(tmp_path, self.token_file)

    def get_service(self, service_name, version):
        """Get an authenticated service instance with caching."""
        creds = self.get_credentials()

        cache_key = f"{service_name}_{version}"
        if cache_key in self.services:
            return self.services[cache_key]

        service = build(service_name, version, credentials=creds, cache_discovery=False)
        self.services[cache_key] = service
        return service
