# backend/core/config.py
import os
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root (go up two levels: backend/core -> backend -> root)
root_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
load_dotenv(os.path.join(root_dir, ".env"))


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() == "true"


class Settings:
    """Process settings read from the environment (and .env)."""

    def __init__(self):
        self.TELEGRAM_BOT_TOKEN: Optional[str] = os.getenv("TELEGRAM_BOT_TOKEN") or None
        self.TELEGRAM_API_URL: str = os.getenv("TELEGRAM_API_URL", "https://api.telegram.org").rstrip("/")
        self.DEBUG: bool = _env_bool("DEBUG")

        self.POLL_TIMEOUT: int = int(os.getenv("POLL_TIMEOUT", "60"))
        self.REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "30"))
        self.RETRY_DELAY: float = float(os.getenv("RETRY_DELAY", "5"))
        self.SHUTDOWN_GRACE: float = float(os.getenv("SHUTDOWN_GRACE", "2"))


settings = Settings()
