"""
Reusable dependencies: access to the configuration owned by the app.
"""

from __future__ import annotations

from fastapi import Request

from app.core.config import Config


def get_config(request: Request) -> Config:
    """Return the config attached to the running application by ``create_app``."""
    return request.app.state.config
