from pathlib import Path

import pytest

from leadgen_gateway.config import DEFAULT_BASE_URL, load_settings
from leadgen_gateway.errors import ConfigError

ENV_VARS = (
    "CONTACTOUT_API_KEY",
    "CONTACTOUT_BASE_URL",
    "REDIS_URL",
    "CONTACTOUT_RATE_LIMIT_SEARCH",
    "CONTACTOUT_RATE_LIMIT_CONTACT_CHECKER",
    "CONTACTOUT_RATE_LIMIT_OTHER",
    "RATE_LIMIT_FAIL_CLOSED",
    "DEGRADED_MODE_ON_RATE_LIMIT",
    "QUALITY_BATCH_PAUSE_SECONDS",
    "UPSTREAM_TIMEOUT_SECONDS",
    "CORS_ORIGIN",
    "LOG_LEVEL",
    "AUDIT_LOG_PATH",
    "PORT",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path: Path) -> Path:
    # setenv first so teardown also removes anything a .env file loads.
    for name in ENV_VARS:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    return tmp_path / ".env"


def test_missing_api_key_is_fatal(clean_env) -> None:
    with pytest.raises(ConfigError, match="CONTACTOUT_API_KEY"):
        load_settings(clean_env)


def test_defaults(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("CONTACTOUT_API_KEY", "abc")
    settings = load_settings(clean_env)

    assert settings.api_key == "abc"
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.redis_url == ""
    assert settings.rate_limits == {"people_search": 60, "contact_checker": 150, "other": 1000}
    assert settings.rate_limit_fail_closed is False
    assert settings.degraded_mode is False
    assert settings.audit_log_path is None
    assert settings.port == 5001


def test_overrides(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("CONTACTOUT_API_KEY", "abc")
    monkeypatch.setenv("CONTACTOUT_BASE_URL", "https://proxy.internal/")
    monkeypatch.setenv("CONTACTOUT_RATE_LIMIT_SEARCH", "5")
    monkeypatch.setenv("RATE_LIMIT_FAIL_CLOSED", "true")
    monkeypatch.setenv("DEGRADED_MODE_ON_RATE_LIMIT", "1")
    monkeypatch.setenv("QUALITY_BATCH_PAUSE_SECONDS", "0.25")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("AUDIT_LOG_PATH", "logs/audit.ndjson")
    settings = load_settings(clean_env)

    assert settings.base_url == "https://proxy.internal"
    assert settings.rate_limits["people_search"] == 5
    assert settings.rate_limit_fail_closed is True
    assert settings.degraded_mode is True
    assert settings.quality_batch_pause == 0.25
    assert settings.log_level == "DEBUG"
    assert settings.audit_log_path == Path("logs/audit.ndjson")


def test_bad_number_is_a_config_error(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("CONTACTOUT_API_KEY", "abc")
    monkeypatch.setenv("CONTACTOUT_RATE_LIMIT_OTHER", "lots")
    with pytest.raises(ConfigError, match="CONTACTOUT_RATE_LIMIT_OTHER"):
        load_settings(clean_env)


def test_values_come_from_dotenv_file(clean_env) -> None:
    clean_env.write_text("CONTACTOUT_API_KEY=from-file\nPORT=8080\n", encoding="utf-8")
    settings = load_settings(clean_env)
    assert settings.api_key == "from-file"
    assert settings.port == 8080
