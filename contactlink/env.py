import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .hubspot import DEFAULT_BASE_URL
from .matching import ACCEPTANCE_THRESHOLD, PREFIX_BOOST

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_env() -> None:
    """Load .env from project root if present.
    Values already set in the environment win.
    """
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)


def _score_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be between 0.0 and 1.0, got {value}")
    return value


def _log_level_from_env() -> str:
    level = (os.getenv("CONTACTLINK_LOG_LEVEL") or "INFO").strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(
            f"CONTACTLINK_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}"
        )
    return level


@dataclass
class Settings:
    hubspot_access_token: Optional[str] = None
    hubspot_base_url: str = DEFAULT_BASE_URL
    db_path: Path = Path("data/audit.db")
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    match_threshold: float = ACCEPTANCE_THRESHOLD
    prefix_boost: float = PREFIX_BOOST


def load_settings() -> Settings:
    """Build Settings from the process environment (call load_env first)."""
    return Settings(
        hubspot_access_token=os.getenv("HUBSPOT_ACCESS_TOKEN") or None,
        hubspot_base_url=os.getenv("HUBSPOT_BASE_URL") or DEFAULT_BASE_URL,
        db_path=Path(os.getenv("CONTACTLINK_DB_PATH") or "data/audit.db"),
        log_level=_log_level_from_env(),
        log_dir=Path(os.getenv("CONTACTLINK_LOG_DIR") or "logs"),
        match_threshold=_score_from_env("CONTACTLINK_MATCH_THRESHOLD", ACCEPTANCE_THRESHOLD),
        prefix_boost=_score_from_env("CONTACTLINK_PREFIX_BOOST", PREFIX_BOOST),
    )


def require_token(settings: Settings) -> str:
    if not settings.hubspot_access_token:
        raise ConfigurationError("HUBSPOT_ACCESS_TOKEN not set. Add it to .env or the environment.")
    return settings.hubspot_access_token
