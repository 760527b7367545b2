import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_MAX_COUNT = 5


def load_env() -> None:
    """Load .env from the working directory if present."""
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path)


def get_max_count() -> int:
    """Default number of related posts (RELATEDPOSTS_MAX_COUNT)."""
    raw = os.getenv("RELATEDPOSTS_MAX_COUNT")
    if not raw:
        return DEFAULT_MAX_COUNT
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"RELATEDPOSTS_MAX_COUNT must be an integer, got {raw!r}")
    if value < 0:
        raise ValueError(f"RELATEDPOSTS_MAX_COUNT must be >= 0, got {value}")
    return value


def get_log_level() -> str:
    return os.getenv("RELATEDPOSTS_LOG_LEVEL", "INFO")


def get_log_dir() -> Optional[Path]:
    """Directory for log files; file logging is off when unset."""
    raw = os.getenv("RELATEDPOSTS_LOG_DIR")
    return Path(raw) if raw else None
