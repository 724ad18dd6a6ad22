"""Abstract base class for authentication strategies.

Every strategy answers two questions for the HTTP layer:

1. *Before* a request is sent -- :meth:`AuthStrategy.to_request` extends the
   request description with whatever credentials the strategy has (a
   ``user``/``password`` pair, a client certificate, or an ``authorization``
   header).
2. *After* a response arrives -- :meth:`AuthStrategy.retry_auth` decides
   whether the request should be sent again with refreshed credentials.

A request description is a plain ``dict`` that the transport turns into an
HTTP call. A request carrying ``"lazy_auth": True`` asks the strategy not to
prompt while building it: credentials that are already known are merged,
anything else is left for the transport to negotiate after a 401.

Strategies compose: :class:`~shiftauth.auth.token.TokenAuth` wraps another
strategy and falls back to it when its token is rejected.

See Also:
    :mod:`shiftauth.auth.factory` for building the strategy chain.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional, Protocol

from shiftauth.models import DEFAULT_SERVER, AuthOptions
from shiftauth.output import OutputManager, get_output

if TYPE_CHECKING:
    from shiftauth.models import SessionToken

LAZY_AUTH = "lazy_auth"


class AuthResponse(Protocol):
    """The slice of an HTTP response the strategies inspect.

    Only ``status_code`` is read. Responses also carry cookies, but no
    strategy looks at them, so they are not part of this protocol.
    """

    @property
    def status_code(self) -> int: ...


class SessionClient(Protocol):
    """The slice of the transport the strategies call during a retry."""

    def supports_sessions(self) -> bool: ...

    def new_session(self, auth: AuthStrategy) -> Optional[SessionToken]: ...


def is_lazy(request: dict[str, Any]) -> bool:
    """Return ``True`` if *request* defers credential acquisition."""
    return request.get(LAZY_AUTH) is True


class AuthStrategy(ABC):
    """Abstract base class for authentication strategies.

    Args:
        options: Configured options. ``None`` means nothing is configured.
        output: Message sink and prompt. Defaults to the global
            :class:`~shiftauth.output.OutputManager`.
    """

    def __init__(
        self,
        options: Optional[AuthOptions] = None,
        output: Optional[OutputManager] = None,
    ) -> None:
        self._options = options if options is not None else AuthOptions()
        self._output = output

    @property
    def options(self) -> AuthOptions:
        """The options this strategy was built from."""
        return self._options

    @property
    def output(self) -> OutputManager:
        """The message sink used for diagnostics and prompts."""
        return self._output if self._output is not None else get_output()

    @property
    def openshift_server(self) -> str:
        """The broker host, from options or :data:`~shiftauth.models.DEFAULT_SERVER`."""
        return self._options.server or DEFAULT_SERVER

    @property
    def username(self) -> Optional[str]:
        """The currently known username, without prompting."""
        return None

    @abstractmethod
    def can_authenticate(self) -> bool:
        """Return ``True`` if enough material is known to attempt authentication.

        Must never prompt or touch the network.
        """
        ...

    @abstractmethod
    def to_request(self, request: dict[str, Any]) -> dict[str, Any]:
        """Extend *request* with authentication material and return it."""
        ...

    @abstractmethod
    def retry_auth(self, response: AuthResponse, client: SessionClient) -> bool:
        """Decide whether the request should be resent after *response*.

        May prompt, may update cached credentials, and may raise an
        :class:`~shiftauth.exceptions.AuthError` subclass when retrying is
        pointless.
        """
        ...

    def expired_token_message(self) -> str:
        return (
            "Your authorization token has expired. "
            f"Please sign in now to continue on {self.openshift_server}."
        )

    def get_token_message(self) -> str:
        return f"Please sign in to start a new session to {self.openshift_server}."
