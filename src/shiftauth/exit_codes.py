"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~shiftauth.exceptions.ShiftauthError` subclass.
Shell wrappers can inspect the exit code to tell an authentication failure
apart from a network failure without parsing stderr.

Example::

    $ shiftauth --noprompt get /domains
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the token expired and prompting is disabled
"""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_USAGE_ERROR = 2
"""Invalid arguments; raised by Typer itself before any command runs."""

EXIT_AUTH_FAILURE = 3
"""Authentication or authorisation failed."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The broker returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
