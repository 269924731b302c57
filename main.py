"""
Main entrypoint: FastAPI server for the GeoGuard location engine.

The engine is stateless, so the process only serves HTTP; there are no
background workers. On SIGINT/SIGTERM uvicorn shuts the server down.

Env: API_HOST, API_PORT, LOG_LEVEL, LOCATION_ACCURACY_THRESHOLD, RISK_SCORE_THRESHOLD, etc.

Equivalent: uvicorn backend_geoguard.api_server.app:app --host 0.0.0.0 --port 8000
"""

from backend_geoguard.config import get_settings
from backend_geoguard.geoguard_logging import configure_structlog, get_logger


def main() -> None:
    """Validate configuration, apply its log level, then run the FastAPI server."""
    settings = get_settings()
    # Before the app import so module loggers pick up the validated level
    configure_structlog(settings.log_level)
    logger = get_logger("main")

    from backend_geoguard.api_server.app import app
    import uvicorn

    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
