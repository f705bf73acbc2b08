"""
Configuration Management.

Two sources, nothing hardcoded:

    config/.env             secrets (pydantic-settings)
        DB_PASSWORD, JWT_SECRET, STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET,
        RESEND_API_KEY, and optionally DATABASE_URL

    config/settings/*.yaml  everything else, one file per section, each
                            validated against its schema in config_schema

Both are loaded once and cached. Tests clear the caches with
get_settings.cache_clear() / get_app_config.cache_clear().
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from snack.backend.core.config_schema import (
    ApplicationSchema,
    DatabaseSchema,
    FeaturesSchema,
    IntegrationsSchema,
    LoggingSchema,
    PaymentsSchema,
    SecuritySchema,
)

PROJECT_MARKER = ".project_root"

# Section name -> (schema, file under config/settings/)
CONFIG_SECTIONS: dict[str, tuple[type[BaseModel], str]] = {
    "application": (ApplicationSchema, "application.yaml"),
    "database": (DatabaseSchema, "database.yaml"),
    "logging": (LoggingSchema, "logging.yaml"),
    "features": (FeaturesSchema, "features.yaml"),
    "security": (SecuritySchema, "security.yaml"),
    "payments": (PaymentsSchema, "payments.yaml"),
    "integrations": (IntegrationsSchema, "integrations.yaml"),
}


def find_project_root() -> Path:
    """Walk up from the working directory to the .project_root marker."""
    for directory in (Path.cwd(), *Path.cwd().parents):
        if (directory / PROJECT_MARKER).exists():
            return directory
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """find_project_root() for entry scripts: exits with a message instead of raising."""
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    config_path = find_project_root() / "config" / "settings" / filename
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets only. Names match config/.env.example."""

    db_password: str
    jwt_secret: str
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    resend_api_key: str = ""
    openai_api_key: str = ""
    revenuecat_webhook_secret: str = ""
    database_url: str = ""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class AppConfig:
    """
    Validated YAML settings, one typed attribute per section.

    Raises:
        FileNotFoundError: If a section file is missing
        ValueError: If a section fails schema validation
    """

    application: ApplicationSchema
    database: DatabaseSchema
    logging: LoggingSchema
    features: FeaturesSchema
    security: SecuritySchema
    payments: PaymentsSchema
    integrations: IntegrationsSchema

    def __init__(self) -> None:
        for section, (schema, filename) in CONFIG_SECTIONS.items():
            raw = load_yaml_config(filename)
            try:
                setattr(self, section, schema(**raw))
            except ValidationError as e:
                raise ValueError(f"Invalid configuration in {filename}:\n{e}") from e


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=str(find_project_root() / "config" / ".env"))


@lru_cache
def get_app_config() -> AppConfig:
    return AppConfig()


def _with_driver(url: str, async_driver: bool) -> str:
    scheme, sep, rest = url.partition("://")
    if scheme in ("postgres", "postgresql", "postgresql+asyncpg"):
        scheme = "postgresql+asyncpg" if async_driver else "postgresql"
    return f"{scheme}{sep}{rest}"


def get_database_url(async_driver: bool = True) -> str:
    """
    Connection URL for the primary database.

    DATABASE_URL, when set, wins over database.yaml plus DB_PASSWORD.
    Postgres URLs get the asyncpg driver when async_driver is true.
    """
    settings = get_settings()
    if settings.database_url:
        return _with_driver(settings.database_url, async_driver)

    db = get_app_config().database
    return _with_driver(
        f"postgresql://{db.user}:{settings.db_password}@{db.host}:{db.port}/{db.name}",
        async_driver,
    )
