"""Paths, constants, and data directory setup."""

import logging
import os
from pathlib import Path
from urllib.parse import urlparse

# Base directories
PROJECT_ROOT = Path(__file__).parent.parent.parent


def _load_env() -> None:
    """Load .env file from project root if present. Existing env vars take priority."""
    env_file = PROJECT_ROOT / ".env"
    if not env_file.exists():
        return
    with open(env_file) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()
            if not os.environ.get(key):
                os.environ[key] = value


_env_initialized = False


def init() -> None:
    """Load .env and set env-dependent constants. Safe to call multiple times."""
    global _env_initialized
    if _env_initialized:
        return
    _load_env()
    _init_env_vars()
    _env_initialized = True


def _env_number(name: str, default, cast=float):
    """Read a numeric env var, falling back to ``default`` on garbage."""
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return cast(raw)
    except (ValueError, TypeError):
        logging.getLogger(__name__).warning(
            "Invalid %s env var %r, defaulting to %s", name, raw, default
        )
        return default


def _init_env_vars() -> None:
    """Read environment variables into module-level constants."""
    global REMOTE_URL, REMOTE_TOKEN, TOAST_DURATION_SECONDS, REMOTE_HTTP_TIMEOUT

    REMOTE_URL = os.environ.get("LINKJUMP_REMOTE_URL", "").rstrip("/")
    REMOTE_TOKEN = os.environ.get("LINKJUMP_REMOTE_TOKEN", "")
    TOAST_DURATION_SECONDS = _env_number("LINKJUMP_TOAST_SECONDS", 5.0)
    REMOTE_HTTP_TIMEOUT = _env_number("LINKJUMP_HTTP_TIMEOUT", 20, cast=int)


DATA_DIR = PROJECT_ROOT / "data"
DB_PATH = DATA_DIR / "linkjump.db"

# --- Remote sync ---
REMOTE_URL = ""
REMOTE_TOKEN = ""  # nosec B105 -- empty default, real value set by init()
REMOTE_HTTP_TIMEOUT = 20  # seconds
REMOTE_LINKS_PATH = "/links"

# --- Sync notification ---
TOAST_DURATION_SECONDS = 5.0  # how long a diff report stays visible

# --- Search ---
DEFAULT_SEARCH_LIMIT = 20


def validate_remote_url(url: str) -> str:
    """Validate a remote sync URL.

    Returns the URL unchanged if valid. Raises ValueError with a clear
    message if the URL is not an http(s) URL with a host.
    """
    parsed = urlparse(url)

    if parsed.scheme not in ("http", "https"):
        raise ValueError(
            f"Remote URL must use http or https, got '{parsed.scheme}'. URL: {url}"
        )
    if not parsed.hostname:
        raise ValueError(f"Remote URL has no hostname: {url}")

    return url


def ensure_data_dirs() -> None:
    """Create all required data directories if they don't exist."""
    init()
    DATA_DIR.mkdir(parents=True, exist_ok=True)
