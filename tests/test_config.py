"""Summary: Tests for configuration loading.

Importance: Ensures defaults, .env, and environment overrides behave correctly.
Alternatives: Validate configuration manually during runtime.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import replace
from pathlib import Path

import pytest

from inboxhub.config import AppConfig, load_defaults, load_dotenv, validate_config


REPO_DEFAULTS = Path(__file__).resolve().parents[1] / "config" / "defaults.json"


def _use_repo_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "config").mkdir()
    shutil.copy(REPO_DEFAULTS, tmp_path / "config" / "defaults.json")
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("INBOXHUB_"):
            monkeypatch.delenv(name)


def test_load_defaults_reads_json(tmp_path: Path) -> None:
    """Summary: Verify defaults are parsed from JSON.

    Importance: Confirms config file is the source of truth for variables.
    Alternatives: Hardcode defaults in the test.
    """

    defaults_path = tmp_path / "defaults.json"
    defaults_path.write_text("{\"db_path\": \"test.db\"}", encoding="utf-8")
    defaults = load_defaults(defaults_path)
    assert defaults["db_path"] == "test.db"


def test_load_defaults_requires_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_defaults(tmp_path / "nope.json")


def test_load_dotenv_sets_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Summary: Ensure .env values populate environment variables without overriding them.

    Importance: Validates local secret loading without external tools.
    Alternatives: Assume OS environment is always set.
    """

    env_path = tmp_path / ".env"
    env_path.write_text(
        "# local\nINBOXHUB_LOG_LEVEL=debug\nINBOXHUB_API_KEY=from-file\n", encoding="utf-8"
    )
    monkeypatch.setenv("INBOXHUB_LOG_LEVEL", "placeholder")
    monkeypatch.delenv("INBOXHUB_LOG_LEVEL")
    monkeypatch.setenv("INBOXHUB_API_KEY", "from-env")
    load_dotenv(env_path)
    assert os.getenv("INBOXHUB_LOG_LEVEL") == "debug"
    assert os.getenv("INBOXHUB_API_KEY") == "from-env"


def test_app_config_uses_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Summary: Verify AppConfig honors defaults when env is absent.

    Importance: Confirms config file remains the baseline for variables.
    Alternatives: Inline defaults directly in the AppConfig class.
    """

    _use_repo_defaults(tmp_path, monkeypatch)
    config = AppConfig.from_env()
    assert config.inbox_cache_ttl_seconds == 30.0
    assert config.provider_timeout_seconds == 8.0
    assert config.gmail_max_results == 10
    assert config.calendar_id == "primary"
    assert config.calendar_timezone == "Africa/Lagos"
    assert config.linear_api_url == "https://api.linear.app/graphql"
    assert config.api_key == ""


def test_app_config_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_repo_defaults(tmp_path, monkeypatch)
    monkeypatch.setenv("INBOXHUB_INBOX_CACHE_TTL_SECONDS", "5")
    monkeypatch.setenv("INBOXHUB_LOG_LEVEL", "debug")
    monkeypatch.setenv("INBOXHUB_API_PORT", "9001")
    config = AppConfig.from_env()
    assert config.inbox_cache_ttl_seconds == 5.0
    assert config.log_level == "DEBUG"
    assert config.api_port == 9001


def test_app_config_rejects_non_positive_ttl(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_repo_defaults(tmp_path, monkeypatch)
    monkeypatch.setenv("INBOXHUB_INBOX_CACHE_TTL_SECONDS", "0")
    with pytest.raises(ValueError, match="inbox_cache_ttl_seconds"):
        AppConfig.from_env()


def test_validate_config_rejects_bad_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_repo_defaults(tmp_path, monkeypatch)
    config = AppConfig.from_env()
    with pytest.raises(ValueError, match="provider_timeout_seconds"):
        validate_config(replace(config, provider_timeout_seconds=-1))
    with pytest.raises(ValueError, match="gmail_max_results"):
        validate_config(replace(config, gmail_max_results=0))
