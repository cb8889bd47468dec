"""Summary: Application configuration for InboxHub.

Importance: Centralizes environment, .env, and config defaults for consistent behavior.
Alternatives: Use a dedicated settings library like Pydantic Settings.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AppConfig:
    """Summary: Holds configuration values for storage, providers, and the inbox cache.

    Importance: Ensures all services derive settings from a single source of truth.
    Alternatives: Store settings in a shared config file and parse at startup.
    """

    db_path: str
    api_host: str
    api_port: int
    api_key: str
    default_user_name: str
    default_user_email: str
    log_level: str
    inbox_cache_ttl_seconds: float
    provider_timeout_seconds: float
    http_timeout_seconds: float
    gmail_max_results: int
    calendar_id: str
    calendar_timezone: str
    google_api_base_url: str
    slack_api_base_url: str
    github_api_base_url: str
    linear_api_url: str
    github_user_agent: str

    @staticmethod
    def from_env() -> "AppConfig":
        """Summary: Build configuration from defaults, .env, and environment.

        Importance: Keeps all variables defined in config defaults while allowing overrides.
        Alternatives: Parse only environment variables without a defaults file.
        """

        defaults = load_defaults(Path("config") / "defaults.json")
        load_dotenv(Path(".env"))
        config = AppConfig(
            db_path=os.getenv("INBOXHUB_DB_PATH", defaults["db_path"]),
            api_host=os.getenv("INBOXHUB_API_HOST", defaults["api_host"]),
            api_port=int(os.getenv("INBOXHUB_API_PORT", defaults["api_port"])),
            api_key=os.getenv("INBOXHUB_API_KEY", defaults["api_key"]),
            default_user_name=os.getenv(
                "INBOXHUB_DEFAULT_USER_NAME", defaults["default_user_name"]
            ),
            default_user_email=os.getenv(
                "INBOXHUB_DEFAULT_USER_EMAIL", defaults["default_user_email"]
            ),
            log_level=os.getenv("INBOXHUB_LOG_LEVEL", defaults["log_level"]).upper(),
            inbox_cache_ttl_seconds=float(
                os.getenv("INBOXHUB_INBOX_CACHE_TTL_SECONDS", defaults["inbox_cache_ttl_seconds"])
            ),
            provider_timeout_seconds=float(
                os.getenv(
                    "INBOXHUB_PROVIDER_TIMEOUT_SECONDS", defaults["provider_timeout_seconds"]
                )
            ),
            http_timeout_seconds=float(
                os.getenv("INBOXHUB_HTTP_TIMEOUT_SECONDS", defaults["http_timeout_seconds"])
            ),
            gmail_max_results=int(
                os.getenv("INBOXHUB_GMAIL_MAX_RESULTS", defaults["gmail_max_results"])
            ),
            calendar_id=os.getenv("INBOXHUB_CALENDAR_ID", defaults["calendar_id"]),
            calendar_timezone=os.getenv("INBOXHUB_CALENDAR_TIMEZONE", defaults["calendar_timezone"]),
            google_api_base_url=os.getenv("GOOGLE_API_BASE_URL", defaults["google_api_base_url"]),
            slack_api_base_url=os.getenv("SLACK_API_BASE_URL", defaults["slack_api_base_url"]),
            github_api_base_url=os.getenv("GITHUB_API_BASE_URL", defaults["github_api_base_url"]),
            linear_api_url=os.getenv("LINEAR_API_URL", defaults["linear_api_url"]),
            github_user_agent=os.getenv("GITHUB_USER_AGENT", defaults["github_user_agent"]),
        )
        validate_config(config)
        return config


def validate_config(config: AppConfig) -> None:
    """Summary: Reject configuration values the inbox pipeline cannot run with.

    Importance: Fails at startup rather than on the first poll.
    Alternatives: Clamp invalid values to defaults silently.
    """

    if config.inbox_cache_ttl_seconds <= 0:
        raise ValueError("inbox_cache_ttl_seconds must be positive")
    if config.provider_timeout_seconds <= 0:
        raise ValueError("provider_timeout_seconds must be positive")
    if config.gmail_max_results < 1:
        raise ValueError("gmail_max_results must be at least 1")


def load_defaults(path: Path) -> dict[str, str]:
    """Summary: Load configuration defaults from JSON.

    Importance: Ensures all variables exist in a single config file.
    Alternatives: Inline defaults in the AppConfig initializer.
    """

    if not path.exists():
        raise FileNotFoundError(f"Defaults file not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def load_dotenv(path: Path) -> None:
    """Summary: Load key-value pairs from a .env file into the environment.

    Importance: Keeps secrets out of code while supporting local workflows.
    Alternatives: Use python-dotenv or OS-specific secret stores.
    """

    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())
