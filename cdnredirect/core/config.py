# cdnredirect/core/config.py
from __future__ import annotations

"""
# CDN Redirect • Centralized Configuration (Pydantic v2)

Two layers:

- `Settings`: environment-driven process settings (`.env` supported). CDN
  fields are optional so imports never crash in dev.
- `SignerConfiguration`: the immutable record the URI provider signs with.
  Built once at activation (from a property bag or from `Settings`) and
  replaced as a whole, never mutated.

## Usage
    from cdnredirect.core.config import settings, SignerConfiguration

    config = SignerConfiguration.from_settings(settings)
"""

import logging
import os
from typing import Any, Callable, Literal, Mapping, Optional

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cdnredirect.core.exceptions import ConfigurationError
from cdnredirect.services.keys import normalize_pem, parse_private_key, read_private_key_file

log = logging.getLogger(__name__)
load_dotenv()  # harmless in prod; convenient in dev


# Property-bag keys accepted by `CloudFrontSignedUrlProvider.activate`
CLOUD_FRONT_URL = "cloudFrontUrl"
TTL = "ttl"
MIN_SIZE = "minSize"
PRIVATE_KEY_FILE = "privateKeyFile"
PRIVATE_KEY = "privateKey"
KEY_PAIR_ID = "keyPairId"

DEFAULT_TTL_SECONDS = 60
DEFAULT_MIN_SIZE_KB = 100


# ─────────────────────────────────────────────────────────────
# Small helpers
# ─────────────────────────────────────────────────────────────
def _normalize_base_url(v: str | None) -> str:
    """Trim and guarantee exactly one trailing slash (empty stays empty)."""
    s = (v or "").strip()
    if not s:
        return ""
    return s.rstrip("/") + "/"


def _as_int(name: str, value: Any, default: int) -> int:
    """Coerce a property to a non-negative int, or raise ConfigurationError."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer, got a boolean")
    try:
        n = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc
    if n < 0:
        raise ConfigurationError(f"{name} must not be negative, got {n}")
    return n


def _required_str(name: str, value: Any) -> str:
    s = str(value).strip() if value is not None else ""
    if not s:
        raise ConfigurationError(f"{name} is required")
    return s


def _optional_text(name: str, value: Any, *, path: bool = False) -> str:
    """Text option as a stripped str ("" when unset); paths may be os.PathLike."""
    if value is None:
        return ""
    if path and isinstance(value, os.PathLike):
        value = os.fspath(value)
    if not isinstance(value, str):
        raise ConfigurationError(f"{name} must be a string, got {type(value).__name__}")
    return value.strip()


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Process settings sourced from environment.

    Notes:
        - `CLOUDFRONT_URL` unset means the redirect provider stays inactive
          and every conversion falls back to default retrieval.
        - `CLOUDFRONT_PRIVATE_KEY_FILE` wins over `CLOUDFRONT_PRIVATE_KEY_PEM`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "CDN Redirect"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENV: Literal["development", "staging", "production"] = "development"
    ENABLE_DOCS: bool = True

    # ── CloudFront signing ────────────────────────────────────
    CLOUDFRONT_URL: Optional[str] = None  # e.g. https://d123.cloudfront.net/
    CLOUDFRONT_TTL_SECONDS: int = Field(DEFAULT_TTL_SECONDS, ge=0)
    CLOUDFRONT_MIN_SIZE_KB: int = Field(DEFAULT_MIN_SIZE_KB, ge=0)
    CLOUDFRONT_PRIVATE_KEY_FILE: Optional[str] = None
    CLOUDFRONT_PRIVATE_KEY_PEM: Optional[SecretStr] = None
    CLOUDFRONT_KEY_PAIR_ID: Optional[str] = None

    @field_validator("CLOUDFRONT_URL", mode="before")
    @classmethod
    def _normalize_cdn_url(cls, v: str | None) -> str | None:
        return _normalize_base_url(v) or None

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def cdn_redirect_configured(self) -> bool:
        """True when a CloudFront URL is set and activation should be attempted."""
        return bool(self.CLOUDFRONT_URL)

    def signer_properties(self) -> dict[str, Any]:
        """Settings rendered as the provider's property bag."""
        pem = self.CLOUDFRONT_PRIVATE_KEY_PEM
        return {
            CLOUD_FRONT_URL: self.CLOUDFRONT_URL,
            TTL: self.CLOUDFRONT_TTL_SECONDS,
            MIN_SIZE: self.CLOUDFRONT_MIN_SIZE_KB,
            PRIVATE_KEY_FILE: self.CLOUDFRONT_PRIVATE_KEY_FILE,
            PRIVATE_KEY: pem.get_secret_value() if pem is not None else None,
            KEY_PAIR_ID: self.CLOUDFRONT_KEY_PAIR_ID,
        }


# ─────────────────────────────────────────────────────────────
# Signer configuration (immutable)
# ─────────────────────────────────────────────────────────────
class SignerConfiguration(BaseModel):
    """Everything needed to sign one URL. Frozen; swap, never mutate."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    base_url: str
    ttl_seconds: int = Field(DEFAULT_TTL_SECONDS, ge=0)
    minimum_size_bytes: int = Field(DEFAULT_MIN_SIZE_KB * 1024, ge=0)
    key_pair_id: str = Field(..., min_length=1)
    private_key: RSAPrivateKey

    @field_validator("base_url", mode="before")
    @classmethod
    def _normalize_base(cls, v: str) -> str:
        s = _normalize_base_url(v)
        if not s:
            raise ValueError("base_url must not be empty")
        return s

    def __repr__(self) -> str:
        # keep the key object out of reprs and logs
        return (
            f"SignerConfiguration(base_url={self.base_url!r}, ttl_seconds={self.ttl_seconds}, "
            f"minimum_size_bytes={self.minimum_size_bytes}, key_pair_id={self.key_pair_id!r})"
        )

    __str__ = __repr__

    @classmethod
    def create(
        cls,
        *,
        base_url: str,
        ttl_seconds: int,
        min_size_kb: int,
        private_key_pem: str,
        key_pair_id: str,
    ) -> "SignerConfiguration":
        """Build from already-loaded PEM text; `min_size_kb` is kilobytes."""
        ttl_seconds = _as_int(TTL, ttl_seconds, DEFAULT_TTL_SECONDS)
        min_size_kb = _as_int(MIN_SIZE, min_size_kb, DEFAULT_MIN_SIZE_KB)
        private_key = parse_private_key(normalize_pem(private_key_pem))
        try:
            return cls(
                base_url=base_url,
                ttl_seconds=ttl_seconds,
                minimum_size_bytes=min_size_kb * 1024,
                key_pair_id=key_pair_id,
                private_key=private_key,
            )
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid signer configuration: {exc}") from exc

    @classmethod
    def from_properties(
        cls,
        properties: Mapping[str, Any],
        *,
        read_file: Callable[[str], str] = read_private_key_file,
    ) -> "SignerConfiguration":
        """
        Build from a host-supplied property bag.

        Recognized keys: `cloudFrontUrl`, `ttl` (seconds, default 60),
        `minSize` (KB, default 100), `privateKeyFile`, `privateKey` (inline
        PEM, used when no file is given), `keyPairId`.

        Raises:
            ConfigurationError: missing/invalid option or unreadable key file.
            KeyFormatError: key text present but not a usable RSA PKCS#8 key.
        """
        base_url = _required_str(CLOUD_FRONT_URL, properties.get(CLOUD_FRONT_URL))
        key_pair_id = _required_str(KEY_PAIR_ID, properties.get(KEY_PAIR_ID))
        ttl = _as_int(TTL, properties.get(TTL), DEFAULT_TTL_SECONDS)
        min_size_kb = _as_int(MIN_SIZE, properties.get(MIN_SIZE), DEFAULT_MIN_SIZE_KB)

        key_file = _optional_text(PRIVATE_KEY_FILE, properties.get(PRIVATE_KEY_FILE), path=True)
        if key_file:
            pem = read_file(key_file)
        else:
            pem = _optional_text(PRIVATE_KEY, properties.get(PRIVATE_KEY))
        if not pem.strip():
            raise ConfigurationError(f"{PRIVATE_KEY_FILE} is required")

        return cls.create(
            base_url=base_url,
            ttl_seconds=ttl,
            min_size_kb=min_size_kb,
            private_key_pem=pem,
            key_pair_id=key_pair_id,
        )

    @classmethod
    def from_settings(cls, s: "Settings") -> "SignerConfiguration":
        return cls.from_properties(s.signer_properties())


# Singleton instance
settings = Settings()
