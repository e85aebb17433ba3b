"""Gateway configuration.

All config comes from environment variables.
Credentials are read lazily so the CLI can fail fast with a clear message.
"""

import os
from pathlib import Path
from typing import Optional, Tuple

from utils.errors import ConfigError


# ─── Server ─────────────────────────────────────────────────────
SERVER_NAME = "42-api-server"
SERVER_VERSION = "0.1.5"
PROTOCOL_VERSION = "2024-11-05"

HOST = os.environ.get("HOST", "127.0.0.1")
PORT = int(os.environ.get("PORT", 8042))

# ─── Upstream 42 API ────────────────────────────────────────────
API_BASE_URL = os.environ.get("API_BASE_URL", "https://api.intra.42.fr")
TOKEN_PATH = "/oauth/token"
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", 30))
# Seconds shaved off expires_in so a token never expires mid-flight
TOKEN_SAFETY_MARGIN = int(os.environ.get("TOKEN_SAFETY_MARGIN", 60))

# ─── Logging ────────────────────────────────────────────────────
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


def normalize_log_level(value: str) -> str:
    """Map a LOG_LEVEL value onto a name both logging and uvicorn accept."""
    level = value.strip().upper()
    level = _LEVEL_ALIASES.get(level, level)
    return level if level in LOG_LEVELS else "INFO"


LOG_LEVEL = normalize_log_level(os.environ.get("LOG_LEVEL", "INFO"))
LOGS_DIR: Optional[Path] = Path(os.environ["LOGS_DIR"]) if os.environ.get("LOGS_DIR") else None

# ─── Credentials ────────────────────────────────────────────────
# 42_CLIENT_ID is not a valid shell identifier, so FT_ aliases are accepted too
CLIENT_ID_VARS = ("42_CLIENT_ID", "FT_CLIENT_ID")
CLIENT_SECRET_VARS = ("42_CLIENT_SECRET", "FT_CLIENT_SECRET")


def _first_env(names) -> str:
    for name in names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return ""


def load_credentials() -> Tuple[str, str]:
    """Return (client_id, client_secret) or raise ConfigError."""
    client_id = _first_env(CLIENT_ID_VARS)
    client_secret = _first_env(CLIENT_SECRET_VARS)
    if not client_id or not client_secret:
        raise ConfigError(
            f"Missing {CLIENT_ID_VARS[0]} or {CLIENT_SECRET_VARS[0]} in environment"
        )
    return client_id, client_secret
