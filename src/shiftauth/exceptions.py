"""Exception hierarchy for shiftauth.

All exceptions inherit from :class:`ShiftauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`shiftauth.exit_codes`.
The entry point in :func:`shiftauth.app.main` catches ``ShiftauthError``
and exits with the matching code.

Subclass hierarchy::

    ShiftauthError (exit 1)
    +-- AuthError                     (exit 3)
    |   +-- CredentialLoadError
    |   +-- TokenExpiredOrInvalid
    |   +-- AuthorizationsNotSupported
    +-- NotFoundError                 (exit 4)
    +-- ServerError                   (exit 5)
    +-- ConnectionError_              (exit 6)
    +-- ConfigError                   (exit 1)

A rejected username/password pair supplied by configuration is *not* an
exception: the strategy reports it through the output manager and declines
the retry, leaving the final failure to the HTTP layer.
"""

from shiftauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class ShiftauthError(Exception):
    """Base exception for all shiftauth errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class AuthError(ShiftauthError):
    """Raised when authentication or authorisation fails."""

    exit_code = EXIT_AUTH_FAILURE


class CredentialLoadError(AuthError):
    """Raised when a client certificate or private key cannot be loaded."""


class TokenExpiredOrInvalid(AuthError):
    """Raised when the bearer token was rejected and cannot be replaced.

    This happens when prompting is disabled while a token is configured, or
    when the wrapped strategy has no credentials to obtain a new token with.
    """

    def __init__(
        self,
        message: str = "Your authorization token has expired or is invalid.",
        exit_code: int | None = None,
    ):
        super().__init__(message, exit_code)


class AuthorizationsNotSupported(AuthError):
    """Raised when a session token is needed but the server cannot issue one."""

    def __init__(
        self,
        message: str = "The server does not support obtaining authorization tokens.",
        exit_code: int | None = None,
    ):
        super().__init__(message, exit_code)


class NotFoundError(ShiftauthError):
    """Raised when the broker returns HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class ServerError(ShiftauthError):
    """Raised when the broker returns an HTTP 5xx or unexpected 4xx error."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(ShiftauthError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(ShiftauthError):
    """Raised for configuration problems (invalid JSON, bad option values)."""

    exit_code = EXIT_GENERIC_FAILURE
