import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from cdnredirect.core.exceptions import ConfigurationError, KeyFormatError
from cdnredirect.services.keys import (
    BEGIN_PRIVATE_KEY,
    END_PRIVATE_KEY,
    normalize_pem,
    parse_private_key,
    read_private_key_file,
)


# -----------------------------------------------------------------------------
# Happy path
# -----------------------------------------------------------------------------

def test_parse_pkcs8_pem_returns_rsa_key(pkcs8_pem, rsa_key):
    key = parse_private_key(pkcs8_pem)
    assert isinstance(key, rsa.RSAPrivateKey)
    assert key.private_numbers() == rsa_key.private_numbers()


def test_parse_ignores_text_around_markers(pkcs8_pem, rsa_key):
    wrapped = "# CloudFront signing key\n\n" + pkcs8_pem + "\ntrailing junk\n"
    key = parse_private_key(wrapped)
    assert key.private_numbers() == rsa_key.private_numbers()


def test_parse_accepts_single_line_body(pkcs8_pem, rsa_key):
    body = pkcs8_pem.split(BEGIN_PRIVATE_KEY)[1].split(END_PRIVATE_KEY)[0]
    one_line = BEGIN_PRIVATE_KEY + "".join(body.split()) + END_PRIVATE_KEY
    assert parse_private_key(one_line).private_numbers() == rsa_key.private_numbers()


def test_normalize_pem_unescapes_env_newlines(pkcs8_pem, rsa_key):
    escaped = pkcs8_pem.strip().replace("\n", "\\n")
    assert "\n" not in escaped
    normalized = normalize_pem(escaped)
    assert normalized == pkcs8_pem.strip()
    assert parse_private_key(normalized).private_numbers() == rsa_key.private_numbers()


# -----------------------------------------------------------------------------
# Marker errors → ConfigurationError
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("text", [
    "",
    "MIIEvQIBADANBgkqhkiG9w0BAQEFAASC",
    f"{BEGIN_PRIVATE_KEY}\nMIIEvQIBADANBgkqhkiG9w0BAQEFAASC\n",
    f"MIIEvQIBADANBgkqhkiG9w0BAQEFAASC\n{END_PRIVATE_KEY}",
    f"{END_PRIVATE_KEY}\nMIIEvQ\n{BEGIN_PRIVATE_KEY}",
])
def test_missing_markers_is_configuration_error(text):
    with pytest.raises(ConfigurationError):
        parse_private_key(text)


def test_pkcs1_armor_is_configuration_error(rsa_key):
    pkcs1 = rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")
    assert "BEGIN RSA PRIVATE KEY" in pkcs1
    with pytest.raises(ConfigurationError):
        parse_private_key(pkcs1)


# -----------------------------------------------------------------------------
# Body errors → KeyFormatError
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("body", [
    "",
    "!!!not*base64!!!",
    "YWJj=ZA",
    "YWJjZA==",  # valid base64, not a key
])
def test_bad_body_is_key_format_error(body):
    with pytest.raises(KeyFormatError):
        parse_private_key(f"{BEGIN_PRIVATE_KEY}\n{body}\n{END_PRIVATE_KEY}")


def test_non_rsa_key_is_key_format_error():
    ec_pem = ec.generate_private_key(ec.SECP256R1()).private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")
    with pytest.raises(KeyFormatError):
        parse_private_key(ec_pem)


# -----------------------------------------------------------------------------
# Key file
# -----------------------------------------------------------------------------

def test_read_private_key_file(key_file, pkcs8_pem):
    assert read_private_key_file(str(key_file)) == pkcs8_pem


def test_read_missing_key_file_is_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError) as ei:
        read_private_key_file(str(tmp_path / "nope.pem"))
    assert "nope.pem" in str(ei.value)
