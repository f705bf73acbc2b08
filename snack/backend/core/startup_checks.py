"""
Startup Security Validation.

Run from the FastAPI lifespan before the app accepts traffic. Every check
runs; all failures are reported together and the process refuses to start.
"""

from collections.abc import Callable, Iterator

from snack.backend.core.config import AppConfig, Settings, get_app_config, get_settings
from snack.backend.core.logging import get_logger

logger = get_logger(__name__)


class StartupSecurityError(RuntimeError):
    pass


def _secret_strength(settings: Settings, app_config: AppConfig) -> Iterator[str]:
    minimum = app_config.security.secrets_validation.jwt_secret_min_length
    if len(settings.jwt_secret) < minimum:
        yield f"JWT_SECRET is {len(settings.jwt_secret)} chars, minimum is {minimum}"


def _payment_secrets(settings: Settings, app_config: AppConfig) -> Iterator[str]:
    if not app_config.features.payments_enabled:
        return
    for name, value in (
        ("STRIPE_SECRET_KEY", settings.stripe_secret_key),
        ("STRIPE_WEBHOOK_SECRET", settings.stripe_webhook_secret),
    ):
        if not value:
            yield f"payments_enabled is true but {name} is empty"


def _production_safety(settings: Settings, app_config: AppConfig) -> Iterator[str]:
    application = app_config.application
    if application.environment != "production":
        return

    flags = {
        "debug": application.debug,
        "api_detailed_errors": app_config.features.api_detailed_errors,
        "docs_enabled": application.docs_enabled,
    }
    for flag, enabled in flags.items():
        if enabled:
            yield f"{flag} is true in production environment"

    if app_config.security.cors.enforce_in_production and app_config.features.security_cors_enforce_production:
        local = [origin for origin in application.cors.origins if "localhost" in origin]
        if local:
            yield f"CORS origins contain localhost in production: {local}"


CHECKS: list[Callable[[Settings, AppConfig], Iterator[str]]] = [
    _secret_strength,
    _payment_secrets,
    _production_safety,
]


def run_startup_checks() -> None:
    """
    Raises:
        StartupSecurityError: Listing every failed check
    """
    settings = get_settings()
    app_config = get_app_config()

    errors = [error for check in CHECKS for error in check(settings, app_config)]
    for error in errors:
        logger.error("Startup security check failed", extra={"check": error})

    if errors:
        raise StartupSecurityError(
            f"Startup blocked: {len(errors)} security check(s) failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    logger.info(
        "Startup security checks passed",
        extra={"environment": app_config.application.environment, "checks_run": len(CHECKS)},
    )
