"""Typer application and CLI entry point for shiftauth.

Root options mirror :class:`~shiftauth.models.AuthOptions` and are merged
with the environment and the config file by
:func:`~shiftauth.config.resolve_options`. Sub-commands:

- ``login`` -- exchange a login/password (or client certificate) for a
  session token and cache it.
- ``logout`` -- delete every cached session token.
- ``get PATH`` -- authenticated GET against the broker, JSON on stdout.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. :class:`~shiftauth.exceptions.ShiftauthError` is printed
and mapped to its exit code; anything else is written to a crash log.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from shiftauth import __version__
from shiftauth.exit_codes import EXIT_AUTH_FAILURE, EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="shiftauth",
    help="Authenticated access to an OpenShift broker REST API.",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"shiftauth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    server: Optional[str] = typer.Option(None, "--server", help="Broker host name."),
    login: Optional[str] = typer.Option(None, "--login", "-l", help="Account login."),
    password: Optional[str] = typer.Option(None, "--password", help="Account password."),
    token: Optional[str] = typer.Option(None, "--token", help="Bearer token to use."),
    noprompt: Optional[bool] = typer.Option(
        None, "--noprompt", help="Never ask for input.", show_default=False
    ),
    use_authorization_tokens: Optional[bool] = typer.Option(
        None,
        "--use-authorization-tokens/--no-use-authorization-tokens",
        help="Obtain and cache session tokens.",
        show_default=False,
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~shiftauth.output.OutputManager` and stores
    the CLI overrides in ``ctx.obj`` for :func:`_resolve` to merge.
    """
    from shiftauth.output import OutputManager, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {
        "server": server,
        "login": login,
        "password": password,
        "token": token,
        "noprompt": noprompt,
        "use_authorization_tokens": use_authorization_tokens,
    }


def _resolve(ctx: typer.Context) -> Any:
    from shiftauth.config import resolve_options

    return resolve_options(**ctx.obj["overrides"])


def _make_client(options: Any, auth: Any) -> Any:
    """Create the broker client. Tests replace this to inject a transport."""
    from shiftauth.client import RestClient

    return RestClient(options, auth)


@app.command("login")
def login_command(ctx: typer.Context) -> None:
    """Sign in and cache a session token for later commands.

    The resolved options are then saved to the config file with the login
    and ``use_authorization_tokens`` set (never the password or token), so
    later commands look up the same cached token.

    Example::

        shiftauth --login dev@example.com login
    """
    from shiftauth.auth import TokenStore, create_inner_auth
    from shiftauth.config import save_options
    from shiftauth.output import error, info, success

    options = _resolve(ctx)
    auth = create_inner_auth(options)
    store = TokenStore.default()

    with _make_client(options, auth) as client:
        if not client.supports_sessions():
            error(f"{auth.openshift_server} does not support authorization tokens.")
            raise typer.Exit(code=EXIT_AUTH_FAILURE)
        info(auth.get_token_message())
        session = client.new_session(auth=auth)

    if session is None:
        error("Unable to obtain an authorization token.")
        raise typer.Exit(code=EXIT_AUTH_FAILURE)

    store.put(auth.username, auth.openshift_server, session.token)
    # Later runs need the same login and server to find the cached token.
    save_options(
        options.model_copy(update={"login": auth.username, "use_authorization_tokens": True})
    )
    success(f"Signed in to {auth.openshift_server}.")


@app.command("logout")
def logout_command() -> None:
    """Remove every locally cached session token."""
    from shiftauth.auth import TokenStore
    from shiftauth.output import info

    TokenStore.default().clear()
    info("All local sessions removed.")


@app.command("get")
def get_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="Resource path below /broker/rest, e.g. /domains."),
) -> None:
    """Fetch a broker resource and print the JSON response."""
    from shiftauth.auth import create_auth
    from shiftauth.output import get_output

    options = _resolve(ctx)
    auth = create_auth(options)

    with _make_client(options, auth) as client:
        response = client.get(path)

    output = get_output()
    output.info(f"HTTP {response.status_code} {response.reason_phrase or ''}")
    try:
        output.print_json(response.json())
    except ValueError:
        output.print_data(response.text)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from shiftauth.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``shiftauth`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from shiftauth.exceptions import ShiftauthError
        from shiftauth.output import error

        if isinstance(exc, ShiftauthError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
