"""
Configuration for PrintU Kiosk.

Settings come from the environment. A `.env.local` next to this file wins
over `.env`; both are optional.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


def env_file_path(base_dir: Path = BASE_DIR) -> Path:
    """`.env.local` if present, otherwise `.env`."""
    local = base_dir / ".env.local"
    if local.exists():
        return local
    return base_dir / ".env"


# Load env early so the class attributes below see it
load_dotenv(env_file_path())


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _env_flag(name: str) -> bool:
    """Enabled when set to anything non-empty other than 0/false/no."""
    value = os.environ.get(name, "").strip().lower()
    return value not in ("", "0", "false", "no")


class Config:
    """Default configuration for the kiosk backend (Flask)."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    MAX_CONTENT_LENGTH = 64 * 1024 * 1024  # 64 MB PDFs
    ENVIRONMENT = os.environ.get("KIOSK_ENV", "development")
    DEBUG = os.environ.get("KIOSK_DEBUG", "0") == "1"
    PORT = _env_int("PORT", 3001)

    # Transform workspace
    TMP_DIR = os.environ.get("TMP_DIR", str(BASE_DIR / "tmp"))

    # ==========================================================================
    # Consumables
    # ==========================================================================
    # INITIAL_PAPERS is the tray estimate at startup; it is NOT persisted and
    # resets every restart. Reload the tray, then restart the service.
    # LOW_PAPER: at or below this count every successful print notifies.
    # CHECK_INKS: any non-empty value enables the `ink` tool check.
    # ==========================================================================
    LOW_PAPER = _env_int("LOW_PAPER", 10)
    INITIAL_PAPERS = _env_int("INITIAL_PAPERS", 50)
    CHECK_INKS = bool(os.environ.get("CHECK_INKS"))
    INK_DEVICE = os.environ.get("INK_DEVICE", "usb")

    # Printing
    PRINT_MEDIA = os.environ.get("PRINT_MEDIA", "Letter")
    NUP_PAPERSIZE = os.environ.get("NUP_PAPERSIZE", "{21.6cm,27.9cm}")
    STRICT_SINGLE_FLIGHT = _env_flag("STRICT_SINGLE_FLIGHT")

    # Notifications (SMTP)
    SMTP_SERVER = os.environ.get("SMTP_SERVER", "")
    SMTP_PORT = _env_int("SMTP_PORT", 587)
    SMTP_USER = os.environ.get("SMTP_USER", "")
    SMTP_PASS = os.environ.get("SMTP_PASS", "")
    NOTIFY_FROM = os.environ.get("NOTIFY_FROM", "")
    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "")
    NOTIFY_SUBJECT = "PRINTU KIOSK NOTIFY"


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    ENVIRONMENT = "production"


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    CHECK_INKS = False
    STRICT_SINGLE_FLIGHT = False


class ClientConfig:
    """Settings for the kiosk page orchestrator (print_document.py)."""

    UPLOAD_SERVICE_URL = os.environ.get("UPLOAD_SERVICE_URL", "http://localhost")
    KIOSK_BACKEND_URL = os.environ.get("KIOSK_BACKEND_URL", "http://localhost:3001")

    POLL_INTERVAL_SECONDS = 1.0
    PAGE_TIMEOUT_SECONDS = 90.0
    REDIRECT_DELAY_SECONDS = 2.5
    HTTP_TIMEOUT_SECONDS = 30.0
