"""Application configuration loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


BASE_DIR = Path(__file__).parent.parent

# HTTP listener
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3001"))
PUBLIC_DIR = Path(os.getenv("PUBLIC_DIR", BASE_DIR / "public"))

# Browser
PROFILE_DIR = Path(os.getenv("PUPPETEER_PROFILE_DIR", BASE_DIR / "chrome-profile"))
EXECUTABLE_PATH = os.getenv("PUPPETEER_EXECUTABLE_PATH") or os.getenv("BROWSER_EXECUTABLE_PATH")
BROWSER_HEADLESS = _env_flag("BROWSER_HEADLESS", "true")
BROWSER_TIMEOUT = int(os.getenv("BROWSER_TIMEOUT", "60000"))
CLEAN_PROFILE_LOCKS = _env_flag("CLEAN_PROFILE_LOCKS", "true")

# Session lifecycle
AUTH_TIMEOUT_SECONDS = float(os.getenv("AUTH_TIMEOUT_SECONDS", "0"))  # 0 = wait forever
QR_MAX_RETRIES = int(os.getenv("QR_MAX_RETRIES", "0"))  # 0 = unlimited
RECONNECT_DELAY_SECONDS = float(os.getenv("RECONNECT_DELAY_SECONDS", "5"))
WATCH_INTERVAL_SECONDS = float(os.getenv("WATCH_INTERVAL_SECONDS", "1"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(os.getenv("LOG_DIR", BASE_DIR / "logs"))

# Status client
WA_BRIDGE_URL = os.getenv("WA_BRIDGE_URL", f"http://127.0.0.1:{PORT}")


def ensure_dirs():
    """Create required directories if they don't exist."""
    PROFILE_DIR.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)
