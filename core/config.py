"""Application configuration with environment-specific profiles.

Supports dev, staging, production and test environments via APP_ENV.
All values can be overridden by environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class Settings:
    """Immutable application settings resolved from environment."""

    database_url: str
    app_env: str = "dev"
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = ("http://localhost:5173",)
    request_id_header_name: str = "X-Request-ID"

    # Rate limiting (URL imports only)
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"
    import_url_rate_limit: str = "10/minute"

    # Plan acquisition
    plan_fetch_timeout_s: float = 10.0
    plan_max_bytes: int = 2_000_000

    # Default acceptance preferences
    default_long_run_day: str = "Sunday"
    default_long_ride_day: str = "Saturday"
    default_include_strength: bool = True

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"


# -- Environment profiles --

_ENV_PROFILES: dict[str, dict] = {
    "dev": {
        "log_level": "DEBUG",
        "plan_fetch_timeout_s": 20.0,
    },
    "staging": {
        "log_level": "INFO",
    },
    "production": {
        "log_level": "WARNING",
        "plan_fetch_timeout_s": 5.0,
        "import_url_rate_limit": "5/minute",
    },
    "test": {
        "log_level": "WARNING",
        "rate_limit_enabled": False,
    },
}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_weekday(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip().title()
    return raw if raw in WEEKDAYS else default


def get_database_url() -> str:
    """Resolve database URL from the environment or a local default.

    Resolution order:
    1. DATABASE_URL environment variable
    2. Local default for common dev setups
    """
    env_url = os.getenv("DATABASE_URL")
    if env_url:
        return env_url
    return "postgresql+psycopg2://localhost:5432/plancatalog"


def get_settings() -> Settings:
    """Build Settings by merging environment profile with env-var overrides."""
    app_env = os.getenv("APP_ENV", "dev")
    profile = _ENV_PROFILES.get(app_env, _ENV_PROFILES["dev"])

    origins = os.getenv("CORS_ORIGINS")
    cors_origins = tuple(o.strip() for o in origins.split(",") if o.strip()) if origins else Settings.cors_origins

    return Settings(
        database_url=get_database_url(),
        app_env=app_env,
        log_level=os.getenv("LOG_LEVEL", profile.get("log_level", "INFO")),
        cors_origins=cors_origins,
        request_id_header_name=os.getenv("REQUEST_ID_HEADER", "X-Request-ID"),
        rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", profile.get("rate_limit_enabled", True)),
        rate_limit_storage_uri=os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
        import_url_rate_limit=os.getenv("IMPORT_URL_RATE_LIMIT", profile.get("import_url_rate_limit", "10/minute")),
        plan_fetch_timeout_s=float(os.getenv("PLAN_FETCH_TIMEOUT_S", str(profile.get("plan_fetch_timeout_s", 10.0)))),
        plan_max_bytes=int(os.getenv("PLAN_MAX_BYTES", "2000000")),
        default_long_run_day=_env_weekday("DEFAULT_LONG_RUN_DAY", "Sunday"),
        default_long_ride_day=_env_weekday("DEFAULT_LONG_RIDE_DAY", "Saturday"),
        default_include_strength=_env_bool("DEFAULT_INCLUDE_STRENGTH", True),
    )
