"""Output system with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (API responses, the command tree, listings).
  This is what downstream tools pipe and parse, so it is always plain text.
* **stderr** -- all diagnostics (errors, progress, debug lines). Never
  contaminates the data stream.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.
* **Broken pipe** -- when the reader of stdout goes away (``n8n list | head``)
  the write is abandoned and the process exits ``0``.

The module exposes two layers:

1. :class:`OutputManager` -- a stateful object holding colour and verbosity
   preferences plus a Rich console for stderr. Created in
   :func:`~n8n_cli.app.main_callback` and installed via :func:`set_output`.
2. :func:`get_output` and :func:`set_output` for the global instance, plus
   :func:`error`, which the entry points use to report a failure.
"""

from __future__ import annotations

import json
import os
import sys
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape


class OutputManager:
    """Central manager for all CLI output.

    Args:
        no_color: Disable all colour and Rich markup on stderr.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(self, no_color: bool = False, verbose: bool = False) -> None:
        self._no_color = no_color or _should_disable_color()
        self._verbose = verbose

        # Console for stderr (diagnostics)
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
            highlight=False,
            soft_wrap=True,
        )

    @property
    def is_verbose(self) -> bool:
        """Whether verbose mode is enabled."""
        return self._verbose

    @property
    def no_color(self) -> bool:
        """Whether colour is disabled."""
        return self._no_color

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout.

        A closed pipe ends the process with exit status ``0``.

        Args:
            text: The string to write. A trailing newline is appended.
        """
        try:
            print(text, file=sys.stdout, flush=True)
        except BrokenPipeError:
            _silence_stdout()
            raise SystemExit(0) from None

    def print_json(self, data: Any, pretty: bool = False) -> None:
        """Print a JSON value to stdout.

        Args:
            data: Any JSON-serialisable value.
            pretty: Two-space indentation instead of the compact form.
        """
        if pretty:
            text = json.dumps(data, indent=2, ensure_ascii=False)
        else:
            text = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
        self.print_data(text)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message to stderr.

        Args:
            message: The message text.
        """
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(escape(message))

    def error(self, message: str) -> None:
        """Print ``error: <message>`` to stderr. Never suppressed.

        Args:
            message: The error text.
        """
        if self._no_color:
            print(f"error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]error:[/bold red] {escape(message)}")

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when ``--verbose`` is active.

        Args:
            message: The debug text (prefixed with ``[debug]`` on output).
        """
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim]\\[debug] {escape(message)}[/dim]")


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


def _silence_stdout() -> None:
    """Point stdout at devnull so the interpreter's final flush cannot fail again."""
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
    except (OSError, ValueError):
        # stdout without a real descriptor (captured by a test runner)
        pass


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager` instance.

    If no instance has been installed via :func:`set_output`, a default
    ``OutputManager`` is created lazily.

    Returns:
        The active :class:`OutputManager`.
    """
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance.

    Args:
        output: The configured manager to install.
    """
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)
