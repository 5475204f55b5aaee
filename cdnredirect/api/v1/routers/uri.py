from __future__ import annotations

"""
CDN Redirect • Value → URI (v1)
===============================

HTTP face of `CloudFrontSignedUrlProvider.to_uri` for hosts that resolve
binaries out of process.

Route Index
-----------
- POST /uri                               → `{"uri": ..., "redirect": bool}` for a binary value
- GET  /binaries/{content_identity}?length → 307 to the signed CDN URL, 404 when not redirected

Notes
-----
- A miss (no binary, unknown size, small binary, signing failure) is never an
  error here: POST answers `uri: null`, GET answers 404 so the caller serves
  the bytes itself.
- 503 only when no signer configuration is active.
- All responses are **no-store**; signed URLs are never logged.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status
from fastapi.responses import RedirectResponse
import logging

from cdnredirect.api.http_utils import get_uri_provider, set_sensitive_cache
from cdnredirect.core.exceptions import AppException, ProviderUnavailableException
from cdnredirect.schemas.binary import BinaryValue, StaticBlob, UriRequest, UriResponse
from cdnredirect.services.uri_provider import CloudFrontSignedUrlProvider

logger = logging.getLogger(__name__)
router = APIRouter(tags=["CDN Redirect"])
__all__ = ["router"]


def _require_active(provider: CloudFrontSignedUrlProvider) -> None:
    if not provider.active:
        raise ProviderUnavailableException()


# ─────────────────────────────────────────────────────────────────────────────
# 🔗 Value → URI
# ─────────────────────────────────────────────────────────────────────────────

@router.post(
    "/uri",
    summary="Convert a binary value to a signed CDN URI",
    response_model=UriResponse,
    responses={
        200: {"description": "Conversion result (uri is null when not redirected)"},
        503: {"description": "CDN redirect not configured"},
    },
)
def convert_to_uri(
    payload: UriRequest,
    response: Response,
    provider: CloudFrontSignedUrlProvider = Depends(get_uri_provider),
) -> UriResponse:
    set_sensitive_cache(response)
    _require_active(provider)
    uri = provider.to_uri(payload.to_value())
    return UriResponse(uri=uri, redirect=uri is not None)


@router.get(
    "/binaries/{content_identity}",
    summary="Redirect to a signed CDN URL for a stored binary",
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    responses={
        307: {"description": "Redirect to the CDN"},
        404: {"description": "No CDN redirect; fetch through the default path"},
        503: {"description": "CDN redirect not configured"},
    },
)
def redirect_binary(
    content_identity: str = Path(..., min_length=1, max_length=512),
    length: Optional[int] = Query(None, description="Binary size in bytes"),
    provider: CloudFrontSignedUrlProvider = Depends(get_uri_provider),
) -> RedirectResponse:
    _require_active(provider)
    value = BinaryValue(binary=StaticBlob(size=length, content_identity=content_identity))
    uri = provider.to_uri(value)
    if uri is None:
        raise AppException(
            status_code=status.HTTP_404_NOT_FOUND,
            message="No CDN redirect",
            headers={"Cache-Control": "no-store"},
        )
    redirect = RedirectResponse(uri, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    set_sensitive_cache(redirect)
    return redirect
