from __future__ import annotations
import os

# Data source mode: "real" for the Airthings API or "sim" for the built in simulator
MODE = os.getenv("AIRMENU_MODE", "real").lower()

# Directory for the settings file (credentials and selected metric)
DATA_DIR = os.path.expanduser(os.getenv("AIRMENU_DATA_DIR", os.path.join("~", ".airmenu")))
SETTINGS_FILE = os.path.join(DATA_DIR, "settings.json")

# Airthings API configuration (for real mode)
AIRTHINGS_API_URL = os.getenv("AIRTHINGS_API_URL", "https://ext-api.airthings.com/v1")
AIRTHINGS_TOKEN_URL = os.getenv("AIRTHINGS_TOKEN_URL", "https://accounts-api.airthings.com/v1/token")

# Seconds before an HTTP request gives up. Unset means requests wait indefinitely.
_timeout = os.getenv("AIRMENU_HTTP_TIMEOUT", "").strip()
HTTP_TIMEOUT_S: float | None = float(_timeout) if _timeout else None

LOG_LEVEL = os.getenv("AIRMENU_LOG_LEVEL", "INFO").upper()

# Poll cadence. Fixed on purpose, these are not read from the environment.
NO_CLIENT_RETRY_S = 1.0
ERROR_RETRY_S = 60.0
REFRESH_INTERVAL_S = 300.0

# Settings keys
CLIENT_ID_KEY = "client-id"
CLIENT_SECRET_KEY = "client-secret"
SELECTED_SENSOR_KEY = "selected-sensor"
