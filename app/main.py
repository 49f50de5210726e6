"""
Main application entrypoint for Joplin Server.

The configuration is built once by the startup routine and handed to
``create_app``, which attaches it to ``app.state``. Route handlers receive it
through the ``get_config`` dependency rather than reading global state.

Operational endpoints:
  - /health: shallow liveness probe to confirm the process is running
  - /ready: readiness probe; the app only exists once its config is loaded
  - /metrics: Prometheus exposition endpoint for scraping

Run with ``uvicorn --factory app.main:create_app_from_environment``.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, Info, generate_latest
from starlette.responses import Response

from app.api.v1.routes import api_router
from app.core.config import Config, Env, init_config
from app.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(config: Config) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Parameters
    ----------
    config : Config
        Configuration owned by this application instance.

    Returns
    -------
    FastAPI
        Configured FastAPI app with metadata and base routes registered.
    """
    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )
    app.state.config = config

    registry = CollectorRegistry()
    readiness_gauge = Gauge("server_readiness", "Readiness state", registry=registry)
    liveness_gauge = Gauge("server_liveness", "Liveness state", registry=registry)
    app_info = Info("server_app", "Application version and environment", registry=registry)

    readiness_gauge.set(1)
    liveness_gauge.set(1)
    app_info.info({"version": config.app_version, "env": config.env.value})

    @app.get("/health", tags=["ops"])
    def health() -> dict[str, str]:
        """Return basic liveness signal."""
        return {"status": "ok"}

    @app.get("/ready", tags=["ops"])
    def ready() -> dict[str, str]:
        """Return readiness signal.

        The app is only built from a loaded config, so once it serves requests
        it is ready.
        """
        return {"status": "ready"}

    @app.get("/metrics", tags=["ops"])
    def metrics() -> Response:
        """Expose Prometheus metrics for scraping."""
        data = generate_latest(registry)
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    app.include_router(api_router, prefix="/api/v1")

    return app


def create_app_from_environment(environ: Optional[Mapping[str, str]] = None) -> FastAPI:
    """Startup routine: load the config from the environment and build the app.

    ``APP_ENV`` selects the deployment environment and defaults to ``prod``.
    """
    if environ is None:
        environ = os.environ
    env_type = Env(environ.get("APP_ENV", Env.PROD.value))

    config = init_config(env_type, environ)
    setup_logging(config)
    logger.info("Starting %s %s on port %d", config.app_name, config.app_version, config.port)
    return create_app(config)
