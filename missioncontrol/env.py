import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DB_PATH = Path.home() / ".openclaw" / "workspace-dev" / "data" / "mission_control.db"


def load_env() -> None:
    """Load .env from the working directory if present.

    Variables already set in the environment take precedence.
    """
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def get_db_path() -> Path:
    """Store location: MISSION_CONTROL_DB, else the per-user default."""
    override = os.getenv("MISSION_CONTROL_DB")
    if override:
        return Path(override).expanduser()
    return DEFAULT_DB_PATH


def get_log_level() -> str:
    return os.getenv("MISSION_CONTROL_LOG_LEVEL", "INFO")


def get_log_dir() -> Optional[Path]:
    log_dir = os.getenv("MISSION_CONTROL_LOG_DIR")
    return Path(log_dir).expanduser() if log_dir else None
