"""OAuth2 authentication against the Google Calendar API."""

import json
import logging
import os
from dataclasses import dataclass, field

import qrcode
import yaml
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from .config import get_credentials_path, get_oauth2_config_path

logger = logging.getLogger(__name__)

OOB_REDIRECT_URI = "urn:ietf:wg:oauth:2.0:oob"
DEFAULT_SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
]


@dataclass
class OAuth2Config:
    """OAuth2 client registration from the Google Cloud Console."""

    client_id: str
    client_secret: str
    scopes: list[str] = field(default_factory=lambda: list(DEFAULT_SCOPES))


class GoogleAuthenticator:
    """Loads, refreshes and obtains credentials for one named account."""

    def __init__(self, account_name: str, oauth2_config: OAuth2Config | None = None):
        self.account_name = account_name
        self.oauth2_config = oauth2_config
        self.credentials_path = get_credentials_path(account_name)

    def authenticate(self, interactive: bool = True) -> Credentials:
        """Return valid credentials, refreshing or re-authorizing as needed.

        Raises:
            RuntimeError: No usable credentials and ``interactive`` is False
        """
        credentials = self.load_credentials()

        if credentials and credentials.valid:
            return credentials

        if credentials and credentials.expired and credentials.refresh_token:
            try:
                credentials.refresh(Request())
                self._save_credentials(credentials)
                return credentials
            except RefreshError as e:
                logger.warning(f"⚠️  Refresh failed for {self.account_name}: {e}")

        if not interactive:
            raise RuntimeError(
                f"No valid credentials for account '{self.account_name}'; "
                "run 'webcal-mirror auth' first"
            )
        return self._authorize()

    def load_credentials(self) -> Credentials | None:
        if not self.credentials_path.exists():
            return None

        try:
            with open(self.credentials_path) as f:
                return Credentials.from_authorized_user_info(json.load(f))
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️  Error loading credentials for {self.account_name}: {e}")
            return None

    def _save_credentials(self, credentials: Credentials):
        self.credentials_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.credentials_path, "w") as f:
            f.write(credentials.to_json())
        os.chmod(self.credentials_path, 0o600)

    def _authorize(self) -> Credentials:
        """Run the installed-app flow with a pasted authorization code."""
        if not self.oauth2_config:
            raise RuntimeError("OAuth2 configuration is required to authorize")

        flow = Flow.from_client_config(
            {
                "installed": {
                    "client_id": self.oauth2_config.client_id,
                    "client_secret": self.oauth2_config.client_secret,
                    "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                    "token_uri": "https://oauth2.googleapis.com/token",
                    "redirect_uris": [OOB_REDIRECT_URI],
                }
            },
            scopes=self.oauth2_config.scopes,
        )
        flow.redirect_uri = OOB_REDIRECT_URI
        auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")

        print(f"🔐 Authorizing account {self.account_name}")
        self._print_qr_code(auth_url)
        print(f"🔗 Or open this URL: {auth_url}")

        code = input("\n📝 Enter the authorization code from Google: ").strip()
        if not code:
            raise RuntimeError("No authorization code provided")

        flow.fetch_token(code=code)
        credentials = flow.credentials
        self._save_credentials(credentials)
        logger.info(f"✅ Stored credentials for {self.account_name}")
        return credentials

    def _print_qr_code(self, auth_url: str):
        qr = qrcode.QRCode(version=1, box_size=2, border=2)
        qr.add_data(auth_url)
        qr.make(fit=True)
        qr.print_ascii(invert=True)


def create_oauth2_config_file():
    """Write a template OAuth2 configuration file and return its path."""
    config_path = get_oauth2_config_path()

    template = """# OAuth2 client for the Google Calendar API
# Fill in the credentials of a "Desktop app" client from the Cloud Console

google_oauth2:
  client_id: "your-client-id.apps.googleusercontent.com"
  client_secret: "your-client-secret"
  scopes:
    - "https://www.googleapis.com/auth/calendar.events"
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(template)

    return config_path


def load_oauth2_config() -> OAuth2Config | None:
    """Load OAuth2 configuration from file, or None when it is missing."""
    config_path = get_oauth2_config_path()
    if not config_path.exists():
        logger.warning(f"⚠️  OAuth2 configuration not found at {config_path}")
        return None

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    oauth2_data = data.get("google_oauth2", {})
    return OAuth2Config(
        client_id=oauth2_data["client_id"],
        client_secret=oauth2_data["client_secret"],
        scopes=oauth2_data.get("scopes") or list(DEFAULT_SCOPES),
    )
