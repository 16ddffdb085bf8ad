"""Service account credential resolution for Google Drive and Sheets."""

import json
import logging

from google.oauth2 import service_account

from activitycalendar.config import Settings

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


class GoogleCredentialsError(Exception):
    """Credentials are present but cannot be used."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class GoogleCredentialsMissingError(GoogleCredentialsError):
    """No credential source is configured."""


def normalize_private_key(key: str) -> str:
    """Undo the escaping private keys pick up in env files and dashboards."""
    return key.replace("\r", "").replace("\\n", "\n")


def resolve_credential_source(settings: Settings) -> str | None:
    """Name the first configured credential source, or None."""
    if settings.google_service_account_json:
        return "json"
    if settings.google_service_account_file:
        return "file"
    if settings.google_service_account_email and settings.google_private_key:
        return "env"
    return None


def load_service_account_info(settings: Settings) -> dict:
    """Build the service account info dict from the first configured source.

    Sources are tried in order: JSON blob, key file, email + private key.
    """
    source = resolve_credential_source(settings)

    if source == "json":
        try:
            info = json.loads(settings.google_service_account_json)
        except json.JSONDecodeError as e:
            raise GoogleCredentialsError(f"Service account JSON is not valid JSON: {e}") from e
    elif source == "file":
        path = settings.google_service_account_file
        try:
            info = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise GoogleCredentialsError(f"Cannot read service account file {path}: {e}") from e
    elif source == "env":
        info = {
            "type": "service_account",
            "client_email": settings.google_service_account_email,
            "private_key": settings.google_private_key,
            "token_uri": "https://oauth2.googleapis.com/token",
        }
    else:
        raise GoogleCredentialsMissingError("No Google service account credentials configured")

    if not isinstance(info, dict):
        raise GoogleCredentialsError("Service account credentials must be a JSON object")
    if info.get("private_key"):
        info["private_key"] = normalize_private_key(info["private_key"])
    info.setdefault("token_uri", "https://oauth2.googleapis.com/token")
    return info


def get_credentials(settings: Settings) -> service_account.Credentials:
    """Create scoped service account credentials.

    Raises:
        GoogleCredentialsMissingError: nothing is configured.
        GoogleCredentialsError: the configured credentials are unusable.
    """
    info = load_service_account_info(settings)
    try:
        return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    except (ValueError, KeyError) as e:
        logger.warning("Invalid service account credentials: %s", e)
        raise GoogleCredentialsError(f"Invalid service account credentials: {e}") from e
