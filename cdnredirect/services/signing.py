from __future__ import annotations

"""
CloudFront canned-policy URL signing.

Pure functions: no logging, no global state. Given the same inputs and the
same `now`, the output is identical (RSA PKCS#1 v1.5 signatures are
deterministic); a later `now` moves `Expires` and therefore the signature.

URL shape
---------
    {base_url}{prefix}-{rest}?Expires=<epoch>&Signature=<b64>&Key-Pair-Id=<id>

`Signature` is the CloudFront flavour of base64 (``+``→``-``, ``=``→``_``,
``/``→``~``) over the canned policy:

    {"Statement":[{"Resource":"<url>","Condition":{"DateLessThan":{"AWS:EpochTime":<epoch>}}}]}
"""

from datetime import datetime, timezone
from typing import Callable

from botocore.signers import CloudFrontSigner
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from pydantic import BaseModel

from cdnredirect.core.exceptions import ContentIdentityError, SigningError

STORAGE_KEY_PREFIX_LENGTH = 4


class SignedURL(BaseModel):
    """Data returned when issuing a signed CDN URL.

    - url: resource URL plus Expires, Signature and Key-Pair-Id params.
    - expires_at: epoch seconds embedded in the canned policy.
    - storage_key: object key the URL points at.
    """

    url: str
    expires_at: int
    storage_key: str


def storage_key(content_identity: str) -> str:
    """
    Map a content identity to the object key used by the S3 backend.

    ``"ab12xyz"`` → ``"ab12-xyz"``. Identities shorter than four characters
    have no valid key and raise `ContentIdentityError`.
    """
    if content_identity is None or len(content_identity) < STORAGE_KEY_PREFIX_LENGTH:
        raise ContentIdentityError(
            f"Content identity must be at least {STORAGE_KEY_PREFIX_LENGTH} characters"
        )
    n = STORAGE_KEY_PREFIX_LENGTH
    return content_identity[:n] + "-" + content_identity[n:]


def _rsa_signer(private_key: RSAPrivateKey) -> Callable[[bytes], bytes]:
    """RSA-SHA1 per CloudFront signed URL requirements."""
    if not isinstance(private_key, RSAPrivateKey):
        raise SigningError(f"CloudFront signing needs an RSA private key, got {type(private_key).__name__}")

    def sign(message: bytes) -> bytes:
        return private_key.sign(message, padding.PKCS1v15(), hashes.SHA1())

    return sign


def _expiry_datetime(expires_at: int) -> datetime:
    return datetime.fromtimestamp(expires_at, tz=timezone.utc)


def canned_policy(resource_url: str, expires_at: int) -> str:
    """Serialized canned policy for `resource_url`, exactly as it gets signed."""
    return CloudFrontSigner("", lambda message: b"").build_policy(
        resource_url, _expiry_datetime(expires_at)
    )


def build_signed_url(
    *,
    content_identity: str,
    ttl_seconds: int,
    base_url: str,
    key_pair_id: str,
    private_key: RSAPrivateKey,
    now: float,
) -> SignedURL:
    """Sign `base_url + storage_key(content_identity)` until `now + ttl_seconds`.

    Raises:
        ContentIdentityError: identity too short.
        SigningError: the key could not sign the policy.
    """
    key = storage_key(content_identity)
    expires_at = int(now) + int(ttl_seconds)
    resource_url = f"{base_url}{key}"

    signer = CloudFrontSigner(key_pair_id, _rsa_signer(private_key))
    try:
        url = signer.generate_presigned_url(resource_url, date_less_than=_expiry_datetime(expires_at))
    except Exception as exc:
        raise SigningError(f"Unable to sign {key}: {exc}") from exc
    return SignedURL(url=url, expires_at=expires_at, storage_key=key)


def issue_signed_url(
    content_identity: str,
    ttl_seconds: int,
    base_url: str,
    key_pair_id: str,
    private_key: RSAPrivateKey,
    now: float,
) -> str:
    """String-only form of `build_signed_url`."""
    return build_signed_url(
        content_identity=content_identity,
        ttl_seconds=ttl_seconds,
        base_url=base_url,
        key_pair_id=key_pair_id,
        private_key=private_key,
        now=now,
    ).url


__all__ = [
    "SignedURL",
    "STORAGE_KEY_PREFIX_LENGTH",
    "storage_key",
    "canned_policy",
    "build_signed_url",
    "issue_signed_url",
]
