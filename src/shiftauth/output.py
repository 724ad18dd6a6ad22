"""Terminal I/O for shiftauth: broker data, diagnostics and credential prompts.

Stream discipline (see `clig.dev <https://clig.dev/>`_):

* broker responses are the only thing written to **stdout**, so
  ``shiftauth get /domains | jq`` works;
* status lines, warnings, errors, debug lines and prompts go to **stderr**.

Colour is dropped when ``NO_COLOR`` is set, when ``TERM=dumb``, or with
``--no-color``.

Auth strategies talk to the user exclusively through an
:class:`OutputManager`: :meth:`~OutputManager.ask` for the login and
password prompts, and :meth:`~OutputManager.info`,
:meth:`~OutputManager.warning`, :meth:`~OutputManager.error` and
:meth:`~OutputManager.debug` for messages. A strategy built without one
falls back to the process-wide instance from :func:`get_output`.
"""

from __future__ import annotations

import json
import os
import sys
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape


class OutputManager:
    """Writes data to stdout and diagnostics to stderr, and asks questions.

    Args:
        no_color: Plain text only; no Rich styling.
        quiet: Drop ``info`` and ``success`` lines.
        verbose: Show ``debug`` lines.
    """

    def __init__(
        self,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._plain = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._console = Console(file=sys.stdout, no_color=self._plain)
        self._err_console = Console(file=sys.stderr, no_color=self._plain, stderr=True)

    # -- stdout --------------------------------------------------------- #

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_json(self, data: Any) -> None:
        """Write *data* as indented JSON; highlighted only on a colour TTY."""
        text = json.dumps(data, indent=2, ensure_ascii=False)
        if self._plain or not _is_tty():
            self.print_data(text)
            return
        self._console.print_json(text)

    # -- stderr --------------------------------------------------------- #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._emit(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._emit(message, style="green")

    def warning(self, message: str) -> None:
        self._emit(message, label="Warning:", style="yellow")

    def error(self, message: str) -> None:
        self._emit(message, label="Error:", style="bold red")

    def debug(self, message: str) -> None:
        """Emit a ``[debug]`` line when running with ``--verbose``."""
        if self._verbose:
            self._emit(message, label="[debug]", style="dim")

    def _emit(self, message: str, label: str = "", style: Optional[str] = None) -> None:
        line = f"{label} {message}" if label else message
        if self._plain:
            print(line, file=sys.stderr, flush=True)
        elif style is None:
            self._err_console.print(line, markup=False, highlight=False)
        else:
            self._err_console.print(escape(line), style=style, highlight=False)

    # -- prompts -------------------------------------------------------- #

    def ask(self, prompt: str, hide_input: bool = False) -> str:
        """Prompt on stderr and return the answer.

        *prompt* is shown exactly as given, so callers include their own
        trailing ``": "``. Visible answers are stripped; hidden ones (passwords)
        are returned verbatim.
        """
        answer = typer.prompt(
            prompt,
            hide_input=hide_input,
            prompt_suffix="",
            show_default=False,
            err=True,
        )
        return answer if hide_input else answer.strip()


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb`` turns colour off."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# -- process-wide instance (installed by the CLI root callback) ----------- #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed instance. Used between tests."""
    global _output
    _output = None


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)
