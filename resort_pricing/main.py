"""Main application entry point."""
import logging

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resort_pricing.config import settings

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

# Configure standard logging
logging.basicConfig(
    format="%(message)s",
    level=getattr(logging, settings.log_level.upper()),
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Price resolution and discount stacking for the resort platform",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event() -> None:
    """Startup event handler."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    from resort_pricing.infrastructure.database import init_db
    logger.info("Initializing database")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


@app.on_event("shutdown")
async def shutdown_event() -> None:
    """Shutdown event handler."""
    logger.info("Shutting down")

    from resort_pricing.api.dependencies import close_redemption_gateway
    from resort_pricing.infrastructure.database import close_db
    await close_redemption_gateway()
    await close_db()


# Import and include routers
from resort_pricing.api import monitoring, orders, pricing, rates  # noqa: E402

app.include_router(rates.router)
app.include_router(pricing.router)
app.include_router(orders.router)
if settings.enable_metrics:
    app.include_router(monitoring.router)
else:
    app.add_api_route("/health", monitoring.health, methods=["GET"], tags=["monitoring"])
    app.add_api_route("/health/ready", monitoring.ready, methods=["GET"], tags=["monitoring"])


@app.get("/")
async def root() -> dict:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }
