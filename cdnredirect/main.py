# cdnredirect/main.py
from __future__ import annotations

"""
# CDN Redirect • Application Entrypoint (FastAPI)

ASGI app factory and lifecycle for the signed-URL redirect service.

## Lifecycle
- Startup: when `CLOUDFRONT_URL` is set, activate the URI provider from
  `settings`. Configuration or key errors abort startup; the service never
  comes up half-configured. Without `CLOUDFRONT_URL` the provider stays
  inactive and the API answers 503.
- Shutdown: deactivate the provider.

## Probes
- `/healthz`: liveness (process up).
- `/readyz`: readiness (signer configuration active).
- `/metrics`: Prometheus exposition.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
import logging

from fastapi import FastAPI, Request
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import JSONResponse, Response

# -- Logging bootstrap (Loguru + stdlib intercept) ----------------------------
from cdnredirect.core import logger as _logsetup  # noqa: F401

from cdnredirect.api.v1.routers import router as api_v1_router
from cdnredirect.core.config import Settings, settings as default_settings
from cdnredirect.core.exceptions import AppException
from cdnredirect.services.uri_provider import CloudFrontSignedUrlProvider

logger = logging.getLogger("cdnredirect")


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return JSONResponse(exc.to_problem(), status_code=exc.status_code, headers=exc.headers)


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Args:
        app_settings: settings to use instead of the module singleton (tests).
    """
    cfg = app_settings or default_settings
    provider = CloudFrontSignedUrlProvider()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("✅ %s starting up", cfg.PROJECT_NAME)
        if cfg.cdn_redirect_configured:
            # errors propagate: a broken key must fail startup
            provider.activate(cfg.signer_properties())
        else:
            logger.info("CLOUDFRONT_URL not set; CDN redirects disabled")
        try:
            yield
        finally:
            provider.close()
            logger.info("🛑 %s shutting down", cfg.PROJECT_NAME)

    docs_url = "/docs" if cfg.ENABLE_DOCS else None
    app = FastAPI(
        title=cfg.PROJECT_NAME,
        version=cfg.VERSION,
        docs_url=docs_url,
        redoc_url="/redoc" if cfg.ENABLE_DOCS else None,
        openapi_url="/openapi.json" if cfg.ENABLE_DOCS else None,
        lifespan=lifespan,
    )
    app.state.uri_provider = provider
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]

    # ── Routers (versioned API) ─────────────────────────────────────────────
    app.include_router(api_v1_router, prefix=cfg.API_V1_STR, tags=["v1"])

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict[str, bool]:
        """Liveness probe. No external checks."""
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    async def readyz() -> dict[str, object]:
        """Readiness: ready once a signer configuration is active."""
        active = provider.active
        return {"ready": active, "checks": {"signer": active}}

    @app.get("/metrics", tags=["meta"], include_in_schema=False)
    async def metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn/Gunicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
__all__ = ["create_app", "app"]


# Local dev runner (prefer: `uvicorn cdnredirect.main:app --reload`)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("cdnredirect.main:app", host="0.0.0.0", port=8000)
