"""FastAPI application entry point for SolarQuote.

Customer pricing, public catalog and admin product routers. The health
check reports whether the pricing catalog can be loaded.
"""

import logging

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.admin_products import router as admin_products_router
from src.api.catalog import router as catalog_router
from src.api.dependencies import get_catalog_service
from src.api.pricing import router as pricing_router
from src.catalog.errors import CatalogUnavailable
from src.catalog.service import CatalogService
from src.config.settings import get_settings

APP_VERSION = "0.1.0"

settings = get_settings()

_LOG_NAME_TO_LEVEL: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# --- Structured logging ---
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if settings.ENVIRONMENT == "dev"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value],
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)
logging.basicConfig(level=_LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value])

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

# --- FastAPI app ---
app = FastAPI(
    title="SolarQuote API",
    description="Pricing catalog, rebates and quote pricing for solar, battery and EV charger systems.",
    version=APP_VERSION,
)

# --- CORS middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.ENVIRONMENT == "dev" else settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Routers ---
app.include_router(pricing_router)
app.include_router(catalog_router)
app.include_router(admin_products_router)


# --- Error handlers ---


@app.exception_handler(CatalogUnavailable)
async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailable) -> JSONResponse:
    logger.error("catalog_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"detail": "Pricing catalog is unavailable."},
    )


# --- Infrastructure Endpoints ---


@app.get("/health")
async def health_check(
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict:
    """Liveness probe with component health checks.

    Returns 200 always (degraded status if the catalog cannot be loaded).
    """
    checks: dict[str, bool] = {"api": True}
    catalog_version: str | None = None

    try:
        catalog_version = catalog.load_catalog().version
        checks["catalog"] = True
    except CatalogUnavailable as exc:
        logger.warning("health_catalog_unavailable", error=str(exc))
        checks["catalog"] = False

    all_ok = all(checks.values())

    return {
        "status": "ok" if all_ok else "degraded",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
        "catalog_version": catalog_version,
        "checks": checks,
    }


@app.get("/api/version")
async def get_version() -> dict[str, str]:
    """Return application name, version, and environment."""
    return {
        "name": "SolarQuote",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
    }
