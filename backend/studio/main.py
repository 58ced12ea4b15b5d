"""
Studio Creations API
FastAPI application that accepts short-video creation jobs, drives them
through a remote generation provider and serves the finished media.

This is the main entry point that wires together all routes and services.
"""

import os
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import API_DESCRIPTION, API_TITLE, API_VERSION, CORS_ORIGINS
from .core import clear_context, get_logger, parse_bool_env, set_request_id, setup_logging
from .routes import assets_router, creations_router, sweeps_router
from .services.infrastructure.orchestration import ServiceContainer, StartupManager, build_container

# Initialize logging
log_level = os.getenv("LOG_LEVEL", "INFO")
log_file = os.getenv("LOG_FILE")
use_json_logs = parse_bool_env(os.getenv("JSON_LOGS"))

setup_logging(
    level=log_level,
    log_file=Path(log_file) if log_file else None,
    use_json=use_json_logs,
)

logger = get_logger(__name__, service="api")


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the application.

    Args:
        container: Pre-built services (tests pass one with temporary stores
            and a fake provider). Built from the environment at startup
            when omitted.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services = container or build_container()
        app.state.container = services
        startup = StartupManager(app, services)
        await startup.run_startup()
        logger.info(
            "Starting Studio Creations API",
            extra={
                "log_level": log_level,
                "json_logs": use_json_logs,
                "provider": services.provider.name,
                "sweep_enabled": services.settings.sweep_enabled,
            },
        )
        try:
            yield
        finally:
            await startup.run_shutdown()

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def add_request_correlation(request: Request, call_next):
        """Add correlation ID to every request and its log lines."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)
        path = request.url.path

        logger.info(f"{request.method} {path}", extra={"method": request.method, "path": path})

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            response.headers.setdefault("X-Content-Type-Options", "nosniff")
            logger.info(
                f"Response: {response.status_code}",
                extra={"status_code": response.status_code, "method": request.method, "path": path},
            )
            return response
        finally:
            clear_context()

    # CORS middleware for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(creations_router)
    app.include_router(assets_router)
    app.include_router(sweeps_router)

    @app.get("/")
    async def root():
        """Root endpoint - API info"""
        return {"message": API_TITLE, "version": API_VERSION}

    @app.get("/health")
    async def health_check(request: Request):
        """Liveness plus scheduler state and the configured provider."""
        services: ServiceContainer = request.app.state.container
        scheduler = services.scheduler
        last_report = scheduler.last_report
        return {
            "status": "healthy",
            "provider": services.provider.name,
            "scheduler": {
                "enabled": services.settings.sweep_enabled,
                "running": scheduler.is_running,
                "interval_seconds": scheduler.interval_seconds,
                "sweeps": scheduler.sweep_count,
                "last_sweep": last_report.to_dict() if last_report else None,
            },
            "runtime_startup": getattr(request.app.state, "runtime_report", None),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "studio.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=parse_bool_env(os.getenv("RELOAD")),
        reload_excludes=["data/*", "*.pyc", "__pycache__/*"],
    )
