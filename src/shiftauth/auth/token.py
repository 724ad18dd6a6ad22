"""Bearer-token authentication that falls back to another strategy.

:class:`TokenAuth` sends ``authorization: Bearer <token>`` and optionally
wraps an *inner* strategy (:class:`~shiftauth.auth.basic.BasicAuth` or
:class:`~shiftauth.auth.certificate.CertificateAuth`). When the broker
rejects the token, the inner strategy is used either to mint a new session
token (when ``use_authorization_tokens`` is enabled) or to authenticate the
retried request directly.

Retry decision on a 401::

    no token, no inner strategy      -> False
    token, no inner strategy         -> TokenExpiredOrInvalid
    inner cannot authenticate        -> TokenExpiredOrInvalid
    noprompt and a token was sent    -> TokenExpiredOrInvalid
    session tokens disabled          -> inner.retry_auth(...)
    server has no session support    -> AuthorizationsNotSupported
    new session issued               -> save(token), True
    new session refused              -> inner.retry_auth(...)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from shiftauth.auth.base import AuthResponse, AuthStrategy, SessionClient
from shiftauth.exceptions import AuthorizationsNotSupported, TokenExpiredOrInvalid
from shiftauth.models import AuthOptions
from shiftauth.output import OutputManager

if TYPE_CHECKING:
    from shiftauth.auth.token_store import TokenStore


class TokenAuth(AuthStrategy):
    """Authenticate with a bearer token, wrapping an optional inner strategy.

    Args:
        options: Configured options; ``token`` seeds the token and
            ``use_authorization_tokens`` enables the session exchange.
        auth: Inner strategy used to obtain a new token or to authenticate
            once the token is rejected.
        store: Token cache. When no token is configured, the cached token
            for ``(username, openshift_server)`` is read on first use.
        token: Explicit token, overriding ``options.token``.
        output: Message sink.
    """

    def __init__(
        self,
        options: Optional[AuthOptions] = None,
        auth: Optional[AuthStrategy] = None,
        store: Optional[TokenStore] = None,
        *,
        token: Optional[str] = None,
        output: Optional[OutputManager] = None,
    ) -> None:
        super().__init__(options, output)
        self._auth = auth
        self._store = store
        self._token = token if token is not None else self._options.token
        self._store_checked = self._token is not None

    @property
    def auth(self) -> Optional[AuthStrategy]:
        """The wrapped strategy, if any."""
        return self._auth

    @property
    def username(self) -> Optional[str]:
        return self._auth.username if self._auth is not None else None

    @property
    def token(self) -> Optional[str]:
        """The current token; reads the store once if none was given."""
        if not self._store_checked:
            self._store_checked = True
            if self._store is not None:
                self._token = self._store.get(self.username, self.openshift_server)
        return self._token

    def can_authenticate(self) -> bool:
        return self.token is not None

    def to_request(self, request: dict[str, Any]) -> dict[str, Any]:
        """Attach the bearer header, or hand the request to the inner strategy.

        Without any token and without an inner strategy an empty
        ``"Bearer "`` header is still sent; the resulting 401 starts the
        negotiation on servers that only issue tokens on demand.
        """
        token = self.token
        if token is None and self._auth is not None:
            return self._auth.to_request(request)
        headers = dict(request.get("headers") or {})
        headers["authorization"] = f"Bearer {token or ''}"
        request["headers"] = headers
        return request

    def save(self, token: str) -> str:
        """Remember *token* and cache it in the store, if one is attached."""
        if self._store is not None:
            self._store.put(self.username, self.openshift_server, token)
        self._token = token
        self._store_checked = True
        return token

    def retry_auth(self, response: AuthResponse, client: SessionClient) -> bool:
        if response.status_code != 401:
            return False
        return self._token_rejected(response, client)

    def _token_rejected(self, response: AuthResponse, client: SessionClient) -> bool:
        has_token = self.token is not None
        self._token = None

        if self._auth is None:
            if has_token:
                raise TokenExpiredOrInvalid()
            self.output.debug("Cannot authenticate via token or password, exiting")
            return False

        if not self._auth.can_authenticate():
            raise TokenExpiredOrInvalid()
        if has_token and self._options.noprompt:
            raise TokenExpiredOrInvalid()

        if not self._options.use_authorization_tokens:
            return self._auth.retry_auth(response, client)

        if not client.supports_sessions():
            raise AuthorizationsNotSupported()

        if has_token:
            self.output.warning(self._auth.expired_token_message())
        else:
            self.output.info(self._auth.get_token_message())

        self.output.debug("Creating a new authorization token")
        session = client.new_session(auth=self._auth)
        if session is not None and session.token:
            self.save(session.token)
            return True
        return self._auth.retry_auth(response, client)
