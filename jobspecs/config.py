import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DB_PATH = "data/jobs.db"
DEFAULT_ZOMBIE_THRESHOLD_MS = 54000
DEFAULT_LOG_LEVEL = "INFO"


def load_env() -> None:
    """Load .env from the working directory if present.
    Values already set in the environment win.
    """
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


@dataclass(frozen=True)
class Settings:
    db_path: Path
    zombie_threshold: timedelta
    log_level: str


def _int_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


def get_settings() -> Settings:
    """Read settings from the environment (after ``load_env``)."""
    return Settings(
        db_path=Path(os.getenv("JOBSPECS_DB_PATH") or DEFAULT_DB_PATH),
        zombie_threshold=timedelta(
            milliseconds=_int_env("JOBSPECS_ZOMBIE_THRESHOLD_MS", DEFAULT_ZOMBIE_THRESHOLD_MS)
        ),
        log_level=(os.getenv("JOBSPECS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )
