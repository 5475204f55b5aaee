from __future__ import annotations

"""
CloudFront signed-URL provider
==============================

Adapts a `BinaryValue` to a CDN URI when its binary is large enough to be
worth redirecting. Hosts hand the URI to the client (typically as a 307) so
the bytes come from the CDN edge instead of the application server.

Lifecycle
---------
- ``activate(properties)``  parse options and the key once; fatal on error
- ``reconfigure(config)``   swap the whole `SignerConfiguration` reference
- ``deactivate()`` / ``close()``  drop the configuration (no more redirects)

Request path
------------
``to_uri(value)`` never raises. A missing binary, unknown length, missing
identity or a small binary is a silent miss; any failure while deriving the
key or signing is logged and also returns ``None`` so retrieval falls back to
the default path.

Key generation (PKCS#8, no passphrase):

    openssl genrsa -out private_key.pem 2048
    openssl pkcs8 -topk8 -inform PEM -outform PEM -nocrypt -in private_key.pem -out private_key.pkcs8
"""

import logging
import threading
import time
from typing import Any, Callable, Mapping, Optional

from cdnredirect.core.config import (
    CLOUD_FRONT_URL,
    KEY_PAIR_ID,
    MIN_SIZE,
    PRIVATE_KEY_FILE,
    TTL,
    SignerConfiguration,
)
from cdnredirect.core.metrics import inc_conversion, observe_sign_seconds
from cdnredirect.schemas.binary import BinaryValue
from cdnredirect.services.signing import issue_signed_url

logger = logging.getLogger(__name__)


class CloudFrontSignedUrlProvider:
    """Value → signed CloudFront URI, for binaries above a size threshold."""

    def __init__(
        self,
        config: Optional[SignerConfiguration] = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config: Optional[SignerConfiguration] = config
        self._lock = threading.Lock()
        self._clock = clock

    @classmethod
    def from_pem(
        cls,
        cloud_front_url: str,
        ttl: int,
        min_size: int,
        private_key_pem: str,
        key_pair_id: str,
    ) -> "CloudFrontSignedUrlProvider":
        """Build an active provider without a host lifecycle; call `close()` when done."""
        return cls(
            SignerConfiguration.create(
                base_url=cloud_front_url,
                ttl_seconds=ttl,
                min_size_kb=min_size,
                private_key_pem=private_key_pem,
                key_pair_id=key_pair_id,
            )
        )

    # ── Lifecycle ────────────────────────────────────────────────────────────

    @property
    def config(self) -> Optional[SignerConfiguration]:
        return self._config

    @property
    def active(self) -> bool:
        return self._config is not None

    def activate(self, properties: Mapping[str, Any]) -> None:
        """Configure from a property bag. On error the previous state is kept."""
        for name in (CLOUD_FRONT_URL, TTL, PRIVATE_KEY_FILE, KEY_PAIR_ID, MIN_SIZE):
            logger.debug("Property %s: %s", name, properties.get(name))
        config = SignerConfiguration.from_properties(properties)
        self.reconfigure(config)
        logger.info("CloudFront URI provider activated for %s", config.base_url)

    def reconfigure(self, config: SignerConfiguration) -> None:
        """Replace the active configuration in one reference swap."""
        with self._lock:
            self._config = config

    def deactivate(self, properties: Optional[Mapping[str, Any]] = None) -> None:
        with self._lock:
            self._config = None
        logger.info("CloudFront URI provider deactivated")

    def close(self) -> None:
        self.deactivate()

    # ── Conversion ───────────────────────────────────────────────────────────

    def to_uri(self, value: Any) -> Optional[str]:
        """Signed CDN URI for `value`, or ``None`` to use the default path.

        Anything other than a `BinaryValue` carrying a binary is a miss.
        """
        config = self._config
        if config is None:
            logger.debug("CloudFront URI provider not active; no redirect")
            inc_conversion("skipped")
            return None
        if not isinstance(value, BinaryValue) or not value.has_binary:
            inc_conversion("skipped")
            return None

        content_identity: Optional[str] = None
        started = time.perf_counter()
        try:
            blob = value.binary
            length = blob.length()
            content_identity = blob.get_content_identity()
            if length is None or length < 0 or content_identity is None:
                inc_conversion("skipped")
                return None
            if length <= config.minimum_size_bytes:
                inc_conversion("skipped")
                return None

            uri = issue_signed_url(
                content_identity,
                config.ttl_seconds,
                config.base_url,
                config.key_pair_id,
                config.private_key,
                self._clock(),
            )
        except Exception as exc:
            observe_sign_seconds("failed", time.perf_counter() - started)
            inc_conversion("failed")
            logger.error(
                "Unable to get or sign content identity %r: %s",
                content_identity,
                exc,
                exc_info=True,
            )
            return None

        observe_sign_seconds("issued", time.perf_counter() - started)
        inc_conversion("issued")
        logger.debug("Issued CDN redirect for content identity %r (%d bytes)", content_identity, length)
        return uri


__all__ = ["CloudFrontSignedUrlProvider"]
