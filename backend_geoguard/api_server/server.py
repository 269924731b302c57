"""
FastAPI server: stateless HTTP surface over the location engine.

Exposes the verification gate and the anti-spoofing evaluation to the
time-tracking subsystem. Computes on request data only; nothing is stored.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend_geoguard import __version__
from backend_geoguard.api_server.location_routes import router as location_router
from backend_geoguard.config import get_settings
from backend_geoguard.core.exceptions import GeoGuardError
from backend_geoguard.geoguard_logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load settings once at startup so a bad environment fails fast."""
    settings = get_settings()
    logger.info(
        "api_settings_loaded",
        accuracy_threshold_m=settings.accuracy_threshold_m,
        geofence_default_radius_m=settings.geofence_default_radius_m,
        risk_threshold=settings.risk_threshold,
        ip_check_enabled=settings.ip_check_enabled,
    )
    yield
    logger.info("api_shutdown")


app = FastAPI(
    title="Backend GeoGuard API",
    description="Location verification and anti-spoofing risk scoring for clock-in/out events.",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(location_router)


@app.exception_handler(GeoGuardError)
async def geoguard_error_handler(request: Request, exc: GeoGuardError) -> JSONResponse:
    logger.warning("api_geoguard_error", path=request.url.path, code=exc.code, error=str(exc))
    return JSONResponse(status_code=400, content={"detail": exc.to_dict()})


@app.get("/health")
def health():
    return {"status": "ok"}
