"""Build the strategy chain for one invocation from the resolved options.

The chain is at most two deep:

- The *inner* strategy is :class:`~shiftauth.auth.certificate.CertificateAuth`
  when both a certificate and a key file are configured, otherwise
  :class:`~shiftauth.auth.basic.BasicAuth`.
- It is wrapped in :class:`~shiftauth.auth.token.TokenAuth` when a token is
  configured or session tokens are enabled, unless an explicit login *and*
  password were given (those always win over a cached token).

See Also:
    :class:`~shiftauth.client.rest_client.RestClient` -- consumes the chain.
"""

from __future__ import annotations

from typing import Optional

from shiftauth.auth.base import AuthStrategy
from shiftauth.auth.basic import BasicAuth
from shiftauth.auth.certificate import CertificateAuth
from shiftauth.auth.token import TokenAuth
from shiftauth.auth.token_store import TokenStore
from shiftauth.models import AuthOptions
from shiftauth.output import OutputManager


def create_inner_auth(
    options: AuthOptions,
    output: Optional[OutputManager] = None,
) -> AuthStrategy:
    """Return the credential strategy used underneath any token layer."""
    if options.ssl_client_cert_file and options.ssl_client_key_file:
        return CertificateAuth(options, output)
    return BasicAuth(options, output)


def create_auth(
    options: AuthOptions,
    store: Optional[TokenStore] = None,
    output: Optional[OutputManager] = None,
) -> AuthStrategy:
    """Create the full strategy chain for *options*.

    Args:
        options: The resolved options.
        store: Token cache; only attached when ``use_authorization_tokens``
            is enabled. Defaults to :meth:`TokenStore.default`.
        output: Message sink shared by every strategy in the chain.

    Returns:
        The outermost :class:`~shiftauth.auth.base.AuthStrategy`.
    """
    inner = create_inner_auth(options, output)
    explicit_credentials = bool(options.login and options.password)
    wants_token = options.use_authorization_tokens or options.token is not None
    if not wants_token or explicit_credentials:
        return inner

    token_store: Optional[TokenStore] = None
    if options.use_authorization_tokens:
        token_store = store if store is not None else TokenStore.default()
    return TokenAuth(options, inner, token_store, output=output)
