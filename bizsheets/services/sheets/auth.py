"""
Access token providers.

The record store client never stores a credential; it calls one of these
providers (or takes an explicit token) on every operation.
"""
import json
import logging
import os
from pathlib import Path
from typing import Callable, Optional

from google.auth.transport.requests import Request
from google.oauth2.service_account import Credentials

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str]

# Google Sheets API scope
SCOPES = ['https://www.googleapis.com/auth/spreadsheets']


class StaticTokenProvider:
    """Returns a bearer token supplied up front or read from the environment."""

    def __init__(self, token: Optional[str] = None, env_var: str = "SHEETS_ACCESS_TOKEN"):
        self.token = token
        self.env_var = env_var

    def __call__(self) -> str:
        # Read the environment on every call so an externally refreshed token is picked up
        token = self.token or os.getenv(self.env_var)
        if not token:
            raise ValueError(f"No access token configured; set {self.env_var}")
        return token


class ServiceAccountTokenProvider:
    """
    Mints access tokens from a Google service account.

    Credentials are resolved the same way as the rest of the deployment:
    explicit path, then SERVICE_ACCOUNT_CREDENTIALS (JSON string), then
    GOOGLE_APPLICATION_CREDENTIALS (path).
    """

    def __init__(self, credentials_path: Optional[str] = None):
        self.credentials_path = credentials_path
        self._credentials = None

    def _get_credentials(self) -> Credentials:
        if self.credentials_path:
            return Credentials.from_service_account_file(self.credentials_path, scopes=SCOPES)

        json_env = os.getenv("SERVICE_ACCOUNT_CREDENTIALS")
        if json_env:
            return Credentials.from_service_account_info(json.loads(json_env), scopes=SCOPES)

        gac_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        if gac_path and Path(gac_path).exists():
            return Credentials.from_service_account_file(gac_path, scopes=SCOPES)

        raise ValueError(
            "No service account configured; set SERVICE_ACCOUNT_CREDENTIALS "
            "or GOOGLE_APPLICATION_CREDENTIALS"
        )

    def __call__(self) -> str:
        if self._credentials is None:
            self._credentials = self._get_credentials()
        if not self._credentials.valid:
            logger.info("Refreshing service account access token")
            self._credentials.refresh(Request())
        return self._credentials.token
