from __future__ import annotations

"""
Binary value shapes consumed by the URI provider.

A conversion request is a `BinaryValue`: either it carries a binary (something
with ``length()`` and ``get_content_identity()``) or it does not. The storage
backend's own blob objects only need to satisfy the `Blob` protocol; the HTTP
layer uses `StaticBlob`.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_LENGTH = -1


class Blob(Protocol):
    """What the provider needs from a stored binary."""

    def length(self) -> Optional[int]:
        """Size in bytes; ``None`` or a negative number when unknown."""
        ...

    def get_content_identity(self) -> Optional[str]:
        """Backend-assigned identity, or ``None`` when the backend has none."""
        ...


@dataclass(frozen=True)
class BinaryValue:
    """A value that may or may not be backed by a binary."""

    binary: Optional[Blob] = None

    @property
    def has_binary(self) -> bool:
        return self.binary is not None

    @classmethod
    def empty(cls) -> "BinaryValue":
        return cls(binary=None)


class StaticBlob(BaseModel):
    """`Blob` with fixed metadata (request bodies, tests, adapters)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    size: Optional[int] = Field(None, alias="length", description="Size in bytes; null when unknown.")
    content_identity: Optional[str] = Field(None, description="Backend content identity.")

    def length(self) -> Optional[int]:
        return self.size

    def get_content_identity(self) -> Optional[str]:
        return self.content_identity


# ─────────────────────────────────────────────────────────────────────────────
# 📦 HTTP models
# ─────────────────────────────────────────────────────────────────────────────

class UriRequest(BaseModel):
    binary: Optional[StaticBlob] = Field(
        None,
        description="Binary metadata; omit or null for values without a binary.",
        examples=[{"length": 204800, "content_identity": "1234deadbeef"}],
    )

    def to_value(self) -> BinaryValue:
        return BinaryValue(binary=self.binary)


class UriResponse(BaseModel):
    uri: Optional[str] = None
    redirect: bool = False


__all__ = ["UNKNOWN_LENGTH", "Blob", "BinaryValue", "StaticBlob", "UriRequest", "UriResponse"]
