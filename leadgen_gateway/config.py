import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.contactout.com"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_PORT = 5001
USER_AGENT = "LeadGen-Gateway/1.0.0"

# Requests per 60s window, per organization.
DEFAULT_RATE_LIMITS = {
    "people_search": 60,
    "contact_checker": 150,
    "other": 1000,
}

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    redis_url: str = ""
    rate_limit_search: int = DEFAULT_RATE_LIMITS["people_search"]
    rate_limit_contact_checker: int = DEFAULT_RATE_LIMITS["contact_checker"]
    rate_limit_other: int = DEFAULT_RATE_LIMITS["other"]
    rate_limit_fail_closed: bool = False
    degraded_mode: bool = False
    quality_batch_pause: float = 0.5
    upstream_timeout: float = DEFAULT_TIMEOUT_SECONDS
    cors_origin: str = "*"
    log_level: str = "INFO"
    audit_log_path: Path | None = None
    port: int = DEFAULT_PORT

    @property
    def rate_limits(self) -> dict[str, int]:
        return {
            "people_search": self.rate_limit_search,
            "contact_checker": self.rate_limit_contact_checker,
            "other": self.rate_limit_other,
        }


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def load_settings(dotenv_path: Path | None = None) -> Settings:
    """Build settings from the environment, loading a `.env` file first if present."""
    load_dotenv(dotenv_path=dotenv_path)

    api_key = os.getenv("CONTACTOUT_API_KEY", "").strip()
    if not api_key:
        raise ConfigError("CONTACTOUT_API_KEY environment variable is required")

    redis_url = os.getenv("REDIS_URL", "").strip()
    if not redis_url:
        logger.warning("REDIS_URL is not set; cache and rate limits are local to this process.")

    audit_raw = os.getenv("AUDIT_LOG_PATH", "").strip()

    return Settings(
        api_key=api_key,
        base_url=os.getenv("CONTACTOUT_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        redis_url=redis_url,
        rate_limit_search=_env_int(
            "CONTACTOUT_RATE_LIMIT_SEARCH", DEFAULT_RATE_LIMITS["people_search"]
        ),
        rate_limit_contact_checker=_env_int(
            "CONTACTOUT_RATE_LIMIT_CONTACT_CHECKER", DEFAULT_RATE_LIMITS["contact_checker"]
        ),
        rate_limit_other=_env_int("CONTACTOUT_RATE_LIMIT_OTHER", DEFAULT_RATE_LIMITS["other"]),
        rate_limit_fail_closed=_env_bool("RATE_LIMIT_FAIL_CLOSED"),
        degraded_mode=_env_bool("DEGRADED_MODE_ON_RATE_LIMIT"),
        quality_batch_pause=_env_float("QUALITY_BATCH_PAUSE_SECONDS", 0.5),
        upstream_timeout=_env_float("UPSTREAM_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        cors_origin=os.getenv("CORS_ORIGIN", "*"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        audit_log_path=Path(audit_raw) if audit_raw else None,
        port=_env_int("PORT", DEFAULT_PORT),
    )
