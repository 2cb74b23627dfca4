# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Tells whoever runs the harness whether the database, the attachment storage
# tables and the queue adapter work.
# =============================================================================

from datetime import datetime, timezone
from typing import Callable

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from app.application import HarnessApplication
from app.dependencies import HarnessDep
from core.migrations import storage_tables_exist

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Harness status plus what it is serving."""
    status: str
    timestamp: str
    chapter: str | None
    example: str | None


class ChecksResponse(BaseModel):
    """Result per subsystem: "healthy" or "unhealthy: <reason>"."""
    database: str
    storage: str
    jobs: str


class ReadinessResponse(BaseModel):
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _run_check(check: Callable[[], str | None]) -> str:
    """Run one readiness check; a returned string is the failure reason."""
    try:
        problem = check()
    except Exception as e:
        return f"unhealthy: {str(e)[:50]}"
    return f"unhealthy: {problem}" if problem else "healthy"


def _check_database(harness: HarnessApplication) -> None:
    with harness.database.engine.connect() as conn:
        conn.execute(text("select 1"))


def _check_storage(harness: HarnessApplication) -> str | None:
    if not storage_tables_exist(harness.database.engine):
        return "storage tables missing"
    return None


def _check_jobs(harness: HarnessApplication) -> str | None:
    result = harness.perform_later("workers.healthcheck")
    return None if result == "OK" else repr(result)


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(harness: HarnessDep):
    current = harness.examples.current
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        chapter=str(harness.manifest.root) if harness.manifest else None,
        example=current.id if current else None,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness_check(harness: HarnessDep):
    """
    Run every readiness check.

    The jobs check enqueues workers.healthcheck through the configured
    queue adapter, so it exercises a real job round trip.
    """
    checks = ChecksResponse(
        database=_run_check(lambda: _check_database(harness)),
        storage=_run_check(lambda: _check_storage(harness)),
        jobs=_run_check(lambda: _check_jobs(harness)),
    )
    all_healthy = all(value == "healthy" for value in checks.model_dump().values())

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """Whether the process is alive."""
    return LivenessResponse(status="alive", timestamp=_now())
