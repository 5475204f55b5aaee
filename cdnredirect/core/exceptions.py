# cdnredirect/core/exceptions.py
from __future__ import annotations

"""
CDN Redirect • Exceptions
=========================
Two families:

Domain errors (plain exceptions, no HTTP knowledge)
---------------------------------------------------
- `ConfigurationError`   missing/malformed options, PEM markers, unreadable key file
- `KeyFormatError`       base64 or PKCS#8 structure that does not yield an RSA key
- `SigningError`         the key could not produce a signature
- `ContentIdentityError` identity too short to derive a storage key

Configuration and key errors are fatal at activation. Signing and identity
errors are contained by the URI provider and turn into "no redirect".

HTTP errors
-----------
`AppException` carries a structured body for the FastAPI surface.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "CdnRedirectError",
    "ConfigurationError",
    "KeyFormatError",
    "SigningError",
    "ContentIdentityError",
    "AppException",
    "ProviderUnavailableException",
]


# ──────────────────────────────────────────────────────────────
# 🔐 Domain errors
# ──────────────────────────────────────────────────────────────
class CdnRedirectError(RuntimeError):
    """Base class for all signer errors."""


class ConfigurationError(CdnRedirectError):
    """Raised when the signer cannot be configured from the supplied options."""


class KeyFormatError(CdnRedirectError):
    """Raised when private key bytes cannot be decoded into an RSA key."""


class SigningError(CdnRedirectError):
    """Raised when signing the canned policy fails."""


class ContentIdentityError(CdnRedirectError, ValueError):
    """Raised when a content identity cannot be mapped to a storage key."""


# ──────────────────────────────────────────────────────────────
# 📦 HTTP: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base HTTP exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code.
    message : str
        Human-readable error message (serialized as `detail` as well).
    code : int
        Internal error code. Defaults to `status_code`.
    details : dict | list | str | None
        Machine-readable details.
    """

    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: Optional[int] = None,
        request_id: Optional[str] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.request_id: Optional[str] = request_id
        self.details: Optional[Any] = details

    def to_problem(self, *, fallback_request_id: Optional[str] = None) -> Dict[str, Any]:
        """Return the problem-like JSON body."""
        body: Dict[str, Any] = {
            "error": True,
            "message": self.message,
            "code": self.code,
            "request_id": self.request_id or fallback_request_id or "N/A",
        }
        if self.details is not None:
            body["details"] = self.details
        return body


class ProviderUnavailableException(AppException):
    """Raised by the HTTP layer when no signer configuration is active (503)."""

    def __init__(self, *, request_id: Optional[str] = None) -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            message="CDN redirect unavailable",
            request_id=request_id,
        )
