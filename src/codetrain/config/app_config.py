"""Application configuration loader.

Builds a single AppConfig once at startup from three layers:

1. Built-in defaults for the selected environment profile
2. Optional YAML file (config/codetrain.yaml or $CODETRAIN_CONFIG)
3. Environment variable overrides

Usage:
    from codetrain.config.app_config import load_app_config

    config = load_app_config()
    print(config.database_path, config.session_store)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("config/codetrain.yaml")

ENVIRONMENTS = ("development", "production")
SESSION_STORES = ("memory", "redis")
SAME_SITE_VALUES = ("lax", "strict", "none")

PACKAGE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CATALOG_PATH = PACKAGE_DIR / "data" / "modules_v1.yaml"
DEFAULT_STATIC_DIR = PACKAGE_DIR / "web" / "static"


class ConfigError(Exception):
    """Raised when configuration values are invalid."""


@dataclass
class AppConfig:
    """Application-wide configuration, selected once at startup."""

    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 3000
    public_url: str = ""
    allowed_origins: list[str] = field(default_factory=list)
    allowed_origin_regex: str | None = None
    cookie_name: str = "codetrain.sid"
    cookie_secure: bool = False
    cookie_same_site: str = "lax"
    cookie_domain: str | None = None
    session_secret: str = "dev-secret-change-me"
    session_ttl_seconds: int = 24 * 60 * 60
    session_store: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    database_path: Path = Path("database/students.db")
    busy_timeout_seconds: float = 5.0
    catalog_path: Path = DEFAULT_CATALOG_PATH
    static_dir: Path = DEFAULT_STATIC_DIR
    static_max_age: int = 0

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> None:
        """Check enumerated settings.

        Raises:
            ConfigError: If a value is outside its allowed set
        """
        if self.environment not in ENVIRONMENTS:
            raise ConfigError(f"Unknown environment '{self.environment}'")
        if self.session_store not in SESSION_STORES:
            raise ConfigError(f"Unknown session store '{self.session_store}'")
        if self.cookie_same_site not in SAME_SITE_VALUES:
            raise ConfigError(f"Invalid cookie_same_site '{self.cookie_same_site}'")
        if self.cookie_same_site == "none" and not self.cookie_secure:
            raise ConfigError("cookie_same_site 'none' requires cookie_secure")
        if self.session_ttl_seconds <= 0:
            raise ConfigError("session_ttl_seconds must be positive")


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults(environment: str) -> dict[str, Any]:
    """Get default configuration values for an environment profile."""
    if environment == "production":
        return {
            "environment": "production",
            "cookie_secure": True,
            "cookie_same_site": "none",
            "static_max_age": 24 * 60 * 60,
            # Hosted deployments serve from generated subdomains
            "allowed_origin_regex": r"https://.*\.up\.railway\.app",
        }
    return {
        "environment": "development",
        "cookie_secure": False,
        "cookie_same_site": "lax",
        "static_max_age": 0,
    }


def _env_overrides() -> dict[str, Any]:
    """Collect overrides from environment variables."""
    overrides: dict[str, Any] = {}

    if port := os.environ.get("PORT"):
        overrides["port"] = int(port)
    if secret := os.environ.get("CODETRAIN_SESSION_SECRET"):
        overrides["session_secret"] = secret
    if db_path := os.environ.get("CODETRAIN_DATABASE_PATH"):
        overrides["database_path"] = db_path
    if store := os.environ.get("CODETRAIN_SESSION_STORE"):
        overrides["session_store"] = store
    if redis_url := os.environ.get("CODETRAIN_REDIS_URL"):
        overrides["redis_url"] = redis_url
    if origins := os.environ.get("CODETRAIN_ALLOWED_ORIGINS"):
        overrides["allowed_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
    if public_url := os.environ.get("CODETRAIN_PUBLIC_URL"):
        overrides["public_url"] = public_url
    if domain := os.environ.get("CODETRAIN_COOKIE_DOMAIN"):
        overrides["cookie_domain"] = domain

    return overrides


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse merged configuration dictionary into AppConfig object."""
    defaults = AppConfig()

    port = int(data.get("port", defaults.port))
    public_url = (data.get("public_url") or f"http://localhost:{port}").rstrip("/")

    origins = list(data.get("allowed_origins") or [])
    for origin in (public_url, f"http://localhost:{port}"):
        if origin not in origins:
            origins.append(origin)

    config = AppConfig(
        environment=data.get("environment", defaults.environment),
        host=data.get("host", defaults.host),
        port=port,
        public_url=public_url,
        allowed_origins=origins,
        allowed_origin_regex=data.get("allowed_origin_regex"),
        cookie_name=data.get("cookie_name", defaults.cookie_name),
        cookie_secure=bool(data.get("cookie_secure", defaults.cookie_secure)),
        cookie_same_site=str(data.get("cookie_same_site", defaults.cookie_same_site)).lower(),
        cookie_domain=data.get("cookie_domain"),
        session_secret=data.get("session_secret", defaults.session_secret),
        session_ttl_seconds=int(data.get("session_ttl_seconds", defaults.session_ttl_seconds)),
        session_store=data.get("session_store", defaults.session_store),
        redis_url=data.get("redis_url", defaults.redis_url),
        database_path=Path(data.get("database_path", defaults.database_path)),
        busy_timeout_seconds=float(data.get("busy_timeout_seconds", defaults.busy_timeout_seconds)),
        catalog_path=Path(data.get("catalog_path", defaults.catalog_path)),
        static_dir=Path(data.get("static_dir", defaults.static_dir)),
        static_max_age=int(data.get("static_max_age", defaults.static_max_age)),
    )
    config.validate()
    return config


def _read_config_file() -> dict[str, Any]:
    """Read the YAML config file if one is present."""
    config_file = Path(os.environ.get("CODETRAIN_CONFIG", CONFIG_FILE))

    if not config_file.exists():
        logger.debug("config_file_not_found", path=str(config_file))
        return {}

    logger.debug("loading_app_config", source=str(config_file))
    data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file} must contain a mapping")
    return data


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config from defaults, file and environment.

    Args:
        force_reload: If True, ignore cached config and reload.

    Returns:
        AppConfig object with all settings.

    Raises:
        ConfigError: If the merged settings are invalid
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    file_data = _read_config_file()
    env_data = _env_overrides()

    environment = os.environ.get("CODETRAIN_ENV") or file_data.get("environment", "development")
    if environment not in ENVIRONMENTS:
        raise ConfigError(f"Unknown environment '{environment}'")

    data = _get_defaults(environment)
    data.update(file_data)
    data.update(env_data)
    data["environment"] = environment

    _cached_config = _parse_config(data)

    if _cached_config.is_production and _cached_config.session_secret == AppConfig.session_secret:
        logger.warning("default_session_secret_in_production")

    logger.info(
        "config_loaded",
        environment=_cached_config.environment,
        session_store=_cached_config.session_store,
        database_path=str(_cached_config.database_path),
    )
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
