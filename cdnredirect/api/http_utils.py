from __future__ import annotations

"""
HTTP helpers shared by the v1 routers.

- `set_sensitive_cache`: signed URLs must never be cached by proxies.
- `get_uri_provider`: FastAPI dependency returning the app-wide provider
  stored on `app.state.uri_provider` by the lifespan.
"""

from fastapi import Request, Response

from cdnredirect.services.uri_provider import CloudFrontSignedUrlProvider


def set_sensitive_cache(response: Response) -> None:
    """Mark a response `no-store` (idempotent)."""
    response.headers.setdefault("Cache-Control", "no-store")
    response.headers.setdefault("Pragma", "no-cache")
    response.headers.setdefault("Expires", "0")


def get_uri_provider(request: Request) -> CloudFrontSignedUrlProvider:
    provider = getattr(request.app.state, "uri_provider", None)
    if provider is None:
        # never activated: an inactive provider answers "no redirect"
        provider = CloudFrontSignedUrlProvider()
        request.app.state.uri_provider = provider
    return provider


__all__ = ["set_sensitive_cache", "get_uri_provider"]
