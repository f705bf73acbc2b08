"""
Health Endpoints.

    /health           liveness, no dependencies touched
    /health/ready     503 unless the database answers within
                      application.timeouts.health_check seconds
    /health/detailed  readiness checks plus app identity, feature flags,
                      and which outbound integrations are configured
"""

import asyncio
import time
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlalchemy import text

from snack.backend.core.config import get_app_config, get_settings
from snack.backend.core.database import get_session_factory
from snack.backend.core.logging import get_logger
from snack.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"


async def check_database() -> dict[str, Any]:
    started = time.perf_counter()
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {"status": UNHEALTHY, "error": str(e)}
    return {"status": HEALTHY, "latency_ms": round((time.perf_counter() - started) * 1000)}


def integration_status() -> dict[str, str]:
    """Which third-party keys are present. No network calls are made."""
    settings = get_settings()
    features = get_app_config().features

    def state(enabled: bool, key: str) -> str:
        if not enabled:
            return "disabled"
        return "configured" if key else "missing_key"

    return {
        "stripe": state(features.payments_enabled, settings.stripe_secret_key),
        "resend": state(features.emails_enabled, settings.resend_api_key),
    }


async def _dependency_checks(timeout: float) -> dict[str, dict[str, Any]]:
    try:
        database = await asyncio.wait_for(check_database(), timeout)
    except TimeoutError:
        logger.warning("Database health check timed out", extra={"timeout": timeout})
        database = {"status": UNHEALTHY, "error": f"timed out after {timeout}s"}
    return {"database": database}


def _overall(checks: dict[str, dict[str, Any]]) -> str:
    return HEALTHY if all(c.get("status") == HEALTHY for c in checks.values()) else UNHEALTHY


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": HEALTHY}


@router.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    checks = await _dependency_checks(get_app_config().application.timeouts.health_check)
    body = {"status": _overall(checks), "checks": checks, "timestamp": utc_now().isoformat()}

    if body["status"] != HEALTHY:
        failing = [name for name, c in checks.items() if c.get("status") != HEALTHY]
        logger.warning("Readiness check failed", extra={"unhealthy": failing})
        raise HTTPException(status_code=503, detail=body)
    return body


@router.get("/health/detailed")
async def detailed_health_check() -> dict[str, Any]:
    app_config = get_app_config()
    application = app_config.application
    checks = await _dependency_checks(application.timeouts.health_check)

    return {
        "status": _overall(checks),
        "application": {
            "name": application.name,
            "env": application.environment,
            "debug": application.debug,
            "version": application.version,
        },
        "features": app_config.features.model_dump(),
        "integrations": integration_status(),
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }
