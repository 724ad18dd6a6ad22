"""Client-certificate (X.509) authentication.

:class:`CertificateAuth` loads the certificate and private key named by
``ssl_client_cert_file`` and ``ssl_client_key_file`` on every call to
:meth:`~CertificateAuth.to_request`, so a renewed certificate on disk is
picked up without restarting. Both PEM and DER encodings are accepted.

The loaded objects are attached to the request as ``client_cert`` and
``client_key``; the transport presents them during the TLS handshake.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from shiftauth.auth.base import AuthResponse, AuthStrategy, SessionClient
from shiftauth.exceptions import CredentialLoadError

_T = TypeVar("_T")


def _load(path: Path, pem: Callable[[bytes], _T], der: Callable[[bytes], _T]) -> _T:
    data = path.read_bytes()
    if b"-----BEGIN" in data:
        return pem(data)
    return der(data)


def load_certificate(path: str | Path) -> x509.Certificate:
    """Load an X.509 certificate from a PEM or DER file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the content is not a certificate.
    """
    return _load(
        Path(path).expanduser(),
        x509.load_pem_x509_certificate,
        x509.load_der_x509_certificate,
    )


def load_private_key(path: str | Path) -> Any:
    """Load an unencrypted private key from a PEM or DER file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the content is not a private key.
    """
    return _load(
        Path(path).expanduser(),
        lambda data: serialization.load_pem_private_key(data, password=None),
        lambda data: serialization.load_der_private_key(data, password=None),
    )


class CertificateAuth(AuthStrategy):
    """Authenticate with a client certificate and private key."""

    @property
    def cert_paths(self) -> tuple[Optional[str], Optional[str]]:
        """The configured ``(certificate, key)`` file paths."""
        return self._options.ssl_client_cert_file, self._options.ssl_client_key_file

    def can_authenticate(self) -> bool:
        return True

    def to_request(self, request: dict[str, Any]) -> dict[str, Any]:
        """Attach freshly loaded ``client_cert`` and ``client_key`` objects.

        Raises:
            CredentialLoadError: If either file is unset, unreadable, or
                does not parse. A debug line naming the file is emitted first.
        """
        cert_file, key_file = self.cert_paths
        request["client_cert"] = self._read("certificate", cert_file, load_certificate)
        request["client_key"] = self._read("private key", key_file, load_private_key)
        return request

    def retry_auth(self, response: AuthResponse, client: SessionClient) -> bool:
        # A 403 means the certificate was accepted but lacks permission.
        return response.status_code == 401

    def expired_token_message(self) -> str:
        return (
            "Your authorization token has expired.  "
            f"Fetching a new token from {self.openshift_server}."
        )

    def get_token_message(self) -> str:
        return f"Fetching a new token from {self.openshift_server}."

    def _read(
        self, kind: str, path: Optional[str], loader: Callable[[str], _T]
    ) -> _T:
        if not path:
            self.output.debug(f"No client {kind} file is configured")
            raise CredentialLoadError(f"No client {kind} file is configured")
        try:
            return loader(path)
        except (OSError, ValueError, TypeError, UnsupportedAlgorithm) as exc:
            self.output.debug(f"Unable to load client {kind} from {path}: {exc}")
            raise CredentialLoadError(
                f"Unable to load client {kind} from {path}: {exc}"
            ) from exc
