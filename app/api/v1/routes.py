"""
API v1 router.

Mounted under /api/v1 in app.main.
"""

from typing import Any

from fastapi import APIRouter, Depends

from app.api.v1.deps import get_config
from app.core.config import Config, show_item_urls

api_router = APIRouter()


@api_router.get("/status", tags=["api"])
def status(config: Config = Depends(get_config)) -> dict[str, Any]:
    """Lightweight API status endpoint, with the public URLs clients should use."""
    return {
        "service": config.app_name,
        "status": "ok",
        "version": config.app_version,
        "env": config.env.value,
        "base_url": config.base_url,
        "api_base_url": config.api_base_url,
        "user_content_base_url": config.user_content_base_url,
        "show_item_urls": show_item_urls(config),
    }
