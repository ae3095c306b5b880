# airmenu/sources/airthings.py
from __future__ import annotations
import logging
import time
from typing import Any, List, Optional

import requests
from pydantic import ValidationError

from airmenu.config import AIRTHINGS_API_URL, AIRTHINGS_TOKEN_URL, HTTP_TIMEOUT_S
from airmenu.models import Device, DevicesResponse, LatestSamplesResponse, Reading
from .interface import DataSourceError

logger = logging.getLogger(__name__)

TOKEN_SCOPE = "read:device:current_values"
# Refresh the token this many seconds before the server says it expires
TOKEN_EXPIRY_MARGIN_S = 30.0


class AirthingsClient:
    """
    Airthings consumer API client.

    Authenticates with the OAuth2 client-credentials grant and caches the bearer
    token until shortly before it expires. Every failure, whether transport,
    HTTP status or payload shape, surfaces as DataSourceError.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str = AIRTHINGS_API_URL,
        token_url: str = AIRTHINGS_TOKEN_URL,
        timeout_s: Optional[float] = HTTP_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.client_id = client_id
        self._client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.token_url = token_url
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def __repr__(self) -> str:
        return f"AirthingsClient(client_id={self.client_id!r})"

    # --- auth --------------------------------------------------------------

    def _access_token(self) -> str:
        if self._token and time.time() < self._token_expires_at:
            return self._token

        try:
            response = self.session.post(
                self.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self._client_secret,
                    "scope": TOKEN_SCOPE,
                },
                timeout=self.timeout_s,
            )
        except requests.exceptions.RequestException as e:
            raise DataSourceError(f"token request failed: {e}") from e

        if response.status_code != 200:
            raise DataSourceError(f"token request failed: {response.status_code}")

        try:
            payload = response.json()
            token = payload["access_token"]
        except (ValueError, KeyError, TypeError) as e:
            raise DataSourceError(f"invalid token response: {e}") from e

        expires_in = float(payload.get("expires_in", 0) or 0)
        self._token = token
        self._token_expires_at = time.time() + max(0.0, expires_in - TOKEN_EXPIRY_MARGIN_S)
        logger.info(f"Obtained Airthings access token for client {self.client_id}")
        return token

    # --- requests ----------------------------------------------------------

    def _get(self, path: str, label: str) -> Any:
        url = f"{self.base_url}/{path}"
        headers = {"Authorization": f"Bearer {self._access_token()}"}
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout_s)
        except requests.exceptions.RequestException as e:
            raise DataSourceError(str(e)) from e

        if response.status_code == 401:
            # Token revoked server side, fetch a new one on the next call
            self._token = None

        if response.status_code != 200:
            raise DataSourceError(f"GET {label} {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise DataSourceError(f"GET {label}: invalid JSON: {e}") from e

    def list_devices(self) -> List[Device]:
        payload = self._get("devices", "devices")
        try:
            devices = DevicesResponse.model_validate(payload).devices
        except ValidationError as e:
            raise DataSourceError(f"GET devices: unexpected payload: {e}") from e
        logger.debug(f"Fetched {len(devices)} devices")
        return devices

    def latest_reading(self, device_id: str) -> Reading:
        payload = self._get(f"devices/{device_id}/latest-samples", "latest-samples")
        try:
            return LatestSamplesResponse.model_validate(payload).data
        except ValidationError as e:
            raise DataSourceError(f"GET latest-samples: unexpected payload: {e}") from e
