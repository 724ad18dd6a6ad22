"""Shared test fixtures for shiftauth.

Provides an isolated config environment, a mock message sink, a mock
session client, and a throwaway client certificate. These fixtures are
discovered by pytest and available to all test modules.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from shiftauth.client import RestClient
from shiftauth.output import OutputManager, reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams, so a fresh manager must
    be created for each test.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def output() -> MagicMock:
    """A message sink that records info/warning/error/debug/ask calls."""
    return MagicMock(spec=OutputManager)


@pytest.fixture
def client() -> MagicMock:
    """A session client whose broker does not support authorization tokens."""
    mock = MagicMock(spec=RestClient)
    mock.supports_sessions.return_value = False
    return mock


# ---------------------------------------------------------------------------
# Client certificate
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def cert_files(tmp_path_factory: pytest.TempPathFactory) -> dict[str, Any]:
    """A self-signed certificate and RSA key written as PEM and DER files."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "dev@example.com")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )

    directory = tmp_path_factory.mktemp("certs")
    cert_pem = directory / "client.crt"
    cert_pem.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    cert_der = directory / "client.der"
    cert_der.write_bytes(cert.public_bytes(serialization.Encoding.DER))
    key_pem = directory / "client.key"
    key_pem.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.TraditionalOpenSSL,
            serialization.NoEncryption(),
        )
    )
    garbage = directory / "garbage.pem"
    garbage.write_text("this is not a certificate\n")

    return {
        "cert": cert,
        "key": key,
        "cert_pem": str(cert_pem),
        "cert_der": str(cert_der),
        "key_pem": str(key_pem),
        "garbage": str(garbage),
        "missing": str(directory / "missing.pem"),
    }


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration and data to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    and clears every SHIFTAUTH_* environment variable.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("shiftauth.config._is_xdg_platform", lambda: True)

    for var in [
        "SHIFTAUTH_SERVER",
        "SHIFTAUTH_LOGIN",
        "SHIFTAUTH_TOKEN",
        "SHIFTAUTH_NOPROMPT",
        "SHIFTAUTH_USE_AUTHORIZATION_TOKENS",
    ]:
        monkeypatch.delenv(var, raising=False)

    return tmp_path
