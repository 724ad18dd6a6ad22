"""Username/password authentication with provenance-aware prompting.

:class:`BasicAuth` sends a ``user``/``password`` pair with each request.
Either value may come from configuration or be asked for on the terminal,
and the strategy remembers which: a pair that came from configuration is
*trusted*, so a 401 is reported as wrong credentials and not retried, while
prompted values are asked for again on every rejection.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional

from shiftauth.auth.base import AuthResponse, AuthStrategy, SessionClient, is_lazy
from shiftauth.models import AuthOptions
from shiftauth.output import OutputManager


class CredentialOrigin(str, enum.Enum):
    """Where a credential value came from."""

    UNSET = "unset"
    CONFIGURED = "configured"
    PROMPTED = "prompted"


@dataclass(frozen=True)
class Credential:
    """A credential value tagged with its origin."""

    value: Optional[str] = None
    origin: CredentialOrigin = CredentialOrigin.UNSET

    @classmethod
    def configured(cls, value: Optional[str]) -> Credential:
        if value is None:
            return cls()
        return cls(value, CredentialOrigin.CONFIGURED)

    @property
    def known(self) -> bool:
        return self.value is not None

    @property
    def trusted(self) -> bool:
        return self.origin is CredentialOrigin.CONFIGURED


class BasicAuth(AuthStrategy):
    """Authenticate with a login and password.

    Args:
        options: Configured options; ``login`` and ``password`` seed the
            credentials as trusted values.
        output: Message sink and prompt.
        username: Explicit username, overriding ``options.login``.
        password: Explicit password, overriding ``options.password``.

    Example::

        auth = BasicAuth(AuthOptions(login="dev@example.com"))
        request = auth.to_request({})   # prompts for the password
    """

    def __init__(
        self,
        options: Optional[AuthOptions] = None,
        output: Optional[OutputManager] = None,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        super().__init__(options, output)
        self._username = Credential.configured(
            username if username is not None else self._options.login
        )
        self._password = Credential.configured(
            password if password is not None else self._options.password
        )

    @property
    def username(self) -> Optional[str]:
        return self._username.value

    @property
    def password(self) -> Optional[str]:
        return self._password.value

    def has_username(self) -> bool:
        return self._username.known

    def can_authenticate(self) -> bool:
        # A missing password is fine as long as we are allowed to ask for it.
        return self.has_username() and (
            self._password.known or not self._options.noprompt
        )

    def to_request(self, request: dict[str, Any]) -> dict[str, Any]:
        """Attach ``user`` and ``password`` to *request*.

        Missing values are prompted for unless the request is lazy, in which
        case the request is returned untouched until both are known.
        Values already present on the request take precedence.
        """
        complete = self._username.known and self._password.known
        if is_lazy(request) and not complete:
            return request

        user = self.username
        if user is None:
            user = self.ask_username()
        password = self.password
        if password is None:
            password = self.ask_password()

        request.setdefault("user", user)
        request.setdefault("password", password)
        return request

    def retry_auth(self, response: AuthResponse, client: SessionClient) -> bool:
        if response.status_code != 401:
            return False
        return self._credentials_rejected()

    def ask_username(self) -> Optional[str]:
        """Prompt for the login. Returns ``None`` under ``noprompt``."""
        if self._options.noprompt:
            return None
        value = self.output.ask(f"Login to {self.openshift_server}: ")
        self._username = Credential(value, CredentialOrigin.PROMPTED)
        return value

    def ask_password(self) -> Optional[str]:
        """Prompt for the password with hidden input. Returns ``None`` under ``noprompt``."""
        if self._options.noprompt:
            return None
        value = self.output.ask("Password: ", hide_input=True)
        self._password = Credential(value, CredentialOrigin.PROMPTED)
        return value

    def _credentials_rejected(self) -> bool:
        if self._options.noprompt:
            return False

        if self._username.known and self._password.known:
            self.output.error("Username or password is not correct")
        if self._username.trusted and self._password.trusted:
            return False

        if not self._username.trusted:
            self.ask_username()
        if not self._password.trusted:
            self.ask_password()
        return True
