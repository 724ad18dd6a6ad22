"""Canonical Pydantic models shared across all shiftauth modules.

**Configuration models** -- loaded from ``~/.config/shiftauth/config.json``
and layered with environment variables and CLI flags by
:func:`~shiftauth.config.resolve_options`:
    :class:`AuthOptions` and :class:`RequestConfig`.

**Broker payload models** -- parsed from REST responses:
    :class:`SessionToken`.

Auth strategies only ever *read* :class:`AuthOptions`; nothing in
:mod:`shiftauth.auth` writes back to it.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SERVER = "openshift.redhat.com"


class RequestConfig(BaseModel):
    """HTTP request settings used by :class:`~shiftauth.client.RestClient`."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(
        default=3, description="Max retry attempts on 5xx and network errors"
    )
    max_auth_retries: int = Field(
        default=3, description="Max resends after an authentication challenge"
    )


class AuthOptions(BaseModel):
    """Configured authentication options for one CLI invocation.

    Every field is optional. A ``None`` value means "not configured"; the
    strategies then fall back to prompting (unless :attr:`noprompt` is set)
    or to the defaults documented on each strategy.

    Unknown keys in the config file are preserved in ``model_extra`` so
    that newer config files still load.

    Example::

        AuthOptions(login="dev@example.com", server="broker.example.com")
    """

    model_config = ConfigDict(extra="allow")

    login: Optional[str] = Field(default=None, description="Account login name")
    password: Optional[str] = Field(default=None, description="Account password")
    server: Optional[str] = Field(
        default=None, description=f"Broker host name (default {DEFAULT_SERVER})"
    )
    token: Optional[str] = Field(default=None, description="Bearer token to send")
    ssl_client_cert_file: Optional[str] = Field(
        default=None, description="Path to a client certificate (PEM or DER)"
    )
    ssl_client_key_file: Optional[str] = Field(
        default=None, description="Path to the client certificate's private key"
    )
    noprompt: bool = Field(
        default=False, description="Never ask for input interactively"
    )
    use_authorization_tokens: bool = Field(
        default=False,
        description="Exchange credentials for a session token and cache it locally",
    )
    request: RequestConfig = Field(default_factory=RequestConfig)


class SessionToken(BaseModel):
    """An authorization issued by the broker's ``/user/authorizations`` endpoint."""

    model_config = ConfigDict(extra="ignore")

    token: str
    scopes: Optional[str] = None
    note: Optional[str] = None
    expires_in: Optional[int] = None
