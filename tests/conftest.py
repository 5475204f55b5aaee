# tests/conftest.py
"""
Global test bootstrap
- Real RSA key material (generated once per session) in PKCS#8 PEM form
- Ready-made signer configuration and provider with a frozen clock
- `verify_signed_url` helper that checks a URL against the public key
"""

from __future__ import annotations

import base64
from urllib.parse import parse_qs, urlsplit

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from cdnredirect.core.config import SignerConfiguration
from cdnredirect.services.signing import canned_policy
from cdnredirect.services.uri_provider import CloudFrontSignedUrlProvider

BASE_URL = "https://cdn.example/"
KEY_PAIR_ID = "KID123"
FIXED_NOW = 1_700_000_000


# ──────────────────────────────────────────────────────────────────────────────
# 🔑 Key material
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def pkcs8_pem(rsa_key) -> str:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture()
def key_file(tmp_path, pkcs8_pem):
    path = tmp_path / "private_key.pkcs8"
    path.write_text(pkcs8_pem, encoding="utf-8")
    return path


# ──────────────────────────────────────────────────────────────────────────────
# ⚙️ Signer configuration / provider
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def signer_config(pkcs8_pem) -> SignerConfiguration:
    return SignerConfiguration.create(
        base_url=BASE_URL,
        ttl_seconds=60,
        min_size_kb=100,
        private_key_pem=pkcs8_pem,
        key_pair_id=KEY_PAIR_ID,
    )


@pytest.fixture()
def provider(signer_config) -> CloudFrontSignedUrlProvider:
    return CloudFrontSignedUrlProvider(signer_config, clock=lambda: FIXED_NOW)


# ──────────────────────────────────────────────────────────────────────────────
# 🔍 Signature verification
# ──────────────────────────────────────────────────────────────────────────────
def _cf_b64decode(value: str) -> bytes:
    return base64.b64decode(value.replace("-", "+").replace("_", "=").replace("~", "/"))


@pytest.fixture()
def verify_signed_url(rsa_key):
    """Return a checker: (url) -> parsed query, raising if the signature is bad."""

    def _verify(url: str) -> dict:
        parts = urlsplit(url)
        query = {k: v[0] for k, v in parse_qs(parts.query).items()}
        resource = f"{parts.scheme}://{parts.netloc}{parts.path}"
        policy = canned_policy(resource, int(query["Expires"]))
        rsa_key.public_key().verify(
            _cf_b64decode(query["Signature"]),
            policy.encode("utf-8"),
            padding.PKCS1v15(),
            hashes.SHA1(),
        )
        return query

    return _verify
