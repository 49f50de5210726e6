"""
Logging configuration for the server.

Log level follows the deployment environment: verbose in development, INFO
everywhere else.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from app.core.config import Config, Env


def setup_logging(config: Config, debug: Optional[bool] = None) -> None:
    """Configure logging for the application.

    Parameters
    ----------
    config : Config
        Loaded server configuration.
    debug : bool, optional
        Override debug mode. If None, debug is on in the ``dev`` environment.
    """
    if debug is None:
        debug = config.env == Env.DEV
    log_level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured",
        extra={
            "environment": config.env.value,
            "debug": debug,
            "version": config.app_version,
        },
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
