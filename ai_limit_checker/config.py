"""Application configuration loaded from environment variables."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from .exceptions import ConfigError

load_dotenv()

# Provider executables
CLAUDE_COMMAND = os.getenv("CLAUDE_COMMAND", "claude")
GEMINI_COMMAND = os.getenv("GEMINI_COMMAND", "gemini")

# Terminal sessions
TERMINAL_COLS = int(os.getenv("TERMINAL_COLS", "120"))
TERMINAL_ROWS = int(os.getenv("TERMINAL_ROWS", "40"))
POLL_INTERVAL_MS = int(os.getenv("POLL_INTERVAL_MS", "500"))

# Browser
BROWSER_HEADLESS = os.getenv("BROWSER_HEADLESS", "true").lower() == "true"
BROWSER_CHANNEL = os.getenv("BROWSER_CHANNEL", "chrome")
BROWSER_TIMEOUT = int(os.getenv("BROWSER_TIMEOUT", "30000"))

# Raw captures are only written when this is set
_debug_dir = os.getenv("DEBUG_CAPTURE_DIR", "")
DEBUG_CAPTURE_DIR: Optional[Path] = Path(_debug_dir) if _debug_dir else None


class ChromeConfig(BaseModel):
    """Paths for the persistent Chrome profile used by the Z.ai check."""

    output_dir: str
    user_data_dir: str


def _get_required_env(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise ConfigError(f"Required environment variable {key} is not set")
    return value


def is_chrome_config_available() -> bool:
    """True when both Chrome directories are configured."""
    return bool(os.getenv("CHROME_OUTPUT_DIR") and os.getenv("CHROME_USER_DATA_DIR"))


def load_chrome_config() -> ChromeConfig:
    """Build the Chrome configuration, validating that both directories exist."""
    output_dir = Path(_get_required_env("CHROME_OUTPUT_DIR")).resolve()
    user_data_dir = Path(_get_required_env("CHROME_USER_DATA_DIR")).resolve()

    for name, path in (("output-dir", output_dir), ("user-data-dir", user_data_dir)):
        if not path.exists():
            raise ConfigError(f"Chrome {name} directory does not exist: {path}")

    return ChromeConfig(output_dir=str(output_dir), user_data_dir=str(user_data_dir))


def write_debug_capture(name: str, content: str) -> Optional[Path]:
    """Save a capture under DEBUG_CAPTURE_DIR, if configured."""
    if DEBUG_CAPTURE_DIR is None:
        return None
    DEBUG_CAPTURE_DIR.mkdir(parents=True, exist_ok=True)
    path = DEBUG_CAPTURE_DIR / name
    path.write_text(content, encoding="utf-8")
    return path
