"""
CDN Redirect • API v1 Router Aggregator
=======================================

    from cdnredirect.api.v1.routers import router as v1_router
    app.include_router(v1_router, prefix="/api/v1")
"""

from fastapi import APIRouter

from .uri import router as uri_router


def build_v1_router() -> APIRouter:
    """Compose every v1 sub-router under one `APIRouter`."""
    v1 = APIRouter()
    v1.include_router(uri_router)
    return v1


router = build_v1_router()

__all__ = ["router", "build_v1_router", "uri_router"]
