"""Liveness, readiness and Prometheus endpoints for the pricing service."""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Gauge, generate_latest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from resort_pricing.config import settings
from resort_pricing.infrastructure.database import get_async_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["monitoring"])

catalog_ready_gauge = Gauge(
    "pricing_catalog_ready", "1 when the rate catalog database answers, else 0"
)


@router.get("/health")
async def health() -> dict:
    """Liveness: the process is up, no dependencies checked."""
    return {"status": "healthy", "service": settings.app_name, "version": settings.app_version}


@router.get("/health/ready")
async def ready(session: AsyncSession = Depends(get_async_session)) -> JSONResponse:
    """Readiness: the rate catalog database accepts queries."""
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning(f"Readiness check failed: {e}")
        catalog_ready_gauge.set(0)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "checks": {"database": "down"}},
        )

    catalog_ready_gauge.set(1)
    return JSONResponse(content={"status": "ready", "checks": {"database": "up"}})


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
    )
