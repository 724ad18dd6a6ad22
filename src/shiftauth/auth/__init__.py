"""Pluggable authentication strategies for the shiftauth REST client.

The HTTP layer drives every strategy through the same two calls:
:meth:`~AuthStrategy.to_request` before sending, and
:meth:`~AuthStrategy.retry_auth` after a response, to decide whether to send
again with refreshed credentials.

- :class:`AuthStrategy` -- abstract base class.
- :class:`BasicAuth` -- login/password with prompting.
- :class:`CertificateAuth` -- client certificate and key.
- :class:`TokenAuth` -- bearer token wrapping another strategy.
- :class:`TokenStore` -- on-disk token cache.
- :func:`create_auth` -- builds the chain from resolved options.

Typical usage::

    from shiftauth.auth import create_auth
    from shiftauth.config import resolve_options

    auth = create_auth(resolve_options())
    request = auth.to_request({"method": "GET", "path": "/domains"})
"""

from shiftauth.auth.base import LAZY_AUTH, AuthStrategy
from shiftauth.auth.basic import BasicAuth, Credential, CredentialOrigin
from shiftauth.auth.certificate import CertificateAuth
from shiftauth.auth.factory import create_auth, create_inner_auth
from shiftauth.auth.token import TokenAuth
from shiftauth.auth.token_store import TokenEntry, TokenStore

__all__ = [
    "LAZY_AUTH",
    "AuthStrategy",
    "BasicAuth",
    "CertificateAuth",
    "Credential",
    "CredentialOrigin",
    "TokenAuth",
    "TokenEntry",
    "TokenStore",
    "create_auth",
    "create_inner_auth",
]
