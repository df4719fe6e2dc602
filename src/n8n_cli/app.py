"""Typer application and console entry points for n8n-cli.

This module wires together the root Typer application, registers the
introspection commands (``list``, ``describe``, ``tree``), and attaches one
command group per resource of the loaded command tree.

:func:`main` is the ``n8n`` console script and :func:`gen_tree_main` the
``n8n-gen-tree`` one.  Both delegate to a single error handler: any
:class:`~n8n_cli.exceptions.N8nCliError` prints ``error: <message>`` and
exits with the error's code, and anything unexpected also writes a crash
log under the data directory.

See Also:
    :mod:`n8n_cli.config`: Environment configuration and XDG paths.
    :mod:`n8n_cli.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

import click
import httpx
import typer

from n8n_cli import __version__
from n8n_cli.commands.compile import compile_app
from n8n_cli.commands.dynamic import attach_operations
from n8n_cli.commands.inspect import describe_command, list_command, tree_command
from n8n_cli.config import command_tree_path, get_logs_dir
from n8n_cli.exceptions import N8nCliError
from n8n_cli.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED, EXIT_SUCCESS
from n8n_cli.generator import load_command_tree
from n8n_cli.models import CommandTree
from n8n_cli.output import OutputManager, error, set_output


app = typer.Typer(
    name="n8n",
    help="n8n CLI (generated from the n8n public API).",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("list")(list_command)
app.command("describe")(describe_command)
app.command("tree")(tree_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"n8n-cli {__version__}")
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
    pretty: bool = typer.Option(
        False, "--pretty", help="Pretty-print JSON output."
    ),
    raw: bool = typer.Option(
        False, "--raw", help="Return full HTTP response envelope."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~n8n_cli.output.OutputManager` and stores
    the output switches in ``ctx.obj`` for the operation commands.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        pretty: Pretty-print JSON output.
        raw: Print the full response envelope instead of the body.
        no_color: Disable all colour and Rich markup.
        verbose: Enable debug-level diagnostic output.
    """
    output = OutputManager(no_color=no_color, verbose=verbose)
    set_output(output)

    ctx.ensure_object(dict)
    ctx.obj["pretty"] = pretty
    ctx.obj["raw"] = raw

    tree: Optional[CommandTree] = ctx.obj.get("tree")
    if tree is not None:
        output.debug(
            f"Command tree {tree.version} (base path {tree.base_path}), "
            f"{len(tree.resources)} resources"
        )


def build_cli(tree: CommandTree) -> click.Group:
    """Return the root :class:`click.Group` with one sub-group per resource of *tree*.

    Raises:
        N8nCliError: If Typer does not build its root command on
            :class:`click.Group`.
        SpecParseError: If the tree cannot be mapped onto commands.
    """
    cli = typer.main.get_command(app)
    if not isinstance(cli, click.Group):
        raise N8nCliError(
            f"root command is a {type(cli).__name__}, not a click.Group; "
            "typer releases that bundle their own click are not supported"
        )
    attach_operations(cli, tree)
    return cli


# ------------------------------------------------------------------ #
# Error handling
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> Optional[str]:
    """Write the current traceback to ``<data_dir>/logs`` and return the path.

    Returns:
        The log path, or ``None`` if the log could not be written.
    """
    try:
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        log_path = get_logs_dir() / f"crash-{timestamp}.log"
        log_path.write_text(traceback.format_exc(), encoding="utf-8")
    except OSError:
        return None
    return str(log_path)


def _exit_status(code: Any) -> int:
    if code is None:
        return EXIT_SUCCESS
    if isinstance(code, int):
        return code
    return EXIT_GENERIC_FAILURE


def _guard(start: Callable[[], None]) -> int:
    """Run *start* and translate every outcome into an exit status."""
    try:
        start()
    except SystemExit as exc:
        return _exit_status(exc.code)
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        return EXIT_INTERRUPTED
    except N8nCliError as exc:
        error(str(exc))
        return exc.exit_code
    except Exception as exc:
        log_path = _write_crash_log()
        message = str(exc) or type(exc).__name__
        if log_path is not None:
            message += f" (debug log: {log_path})"
        error(message)
        return EXIT_GENERIC_FAILURE
    return EXIT_SUCCESS


# ------------------------------------------------------------------ #
# Entry points
# ------------------------------------------------------------------ #


def run(
    argv: Optional[Sequence[str]] = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> int:
    """Run the ``n8n`` CLI and return its exit status.

    Args:
        argv: Arguments without the program name; ``None`` reads
            ``sys.argv``.
        transport: Optional :mod:`httpx` transport for the API call, used
            by tests to inject an :class:`httpx.MockTransport`.

    Returns:
        ``0`` on success, otherwise the code of the failure category.
    """

    def start() -> None:
        tree = load_command_tree(command_tree_path())
        cli = build_cli(tree)
        cli.main(
            args=list(argv) if argv is not None else None,
            prog_name="n8n",
            obj={"tree": tree, "transport": transport},
        )

    return _guard(start)


def gen_tree(argv: Optional[Sequence[str]] = None) -> int:
    """Run the ``n8n-gen-tree`` compiler and return its exit status."""

    def start() -> None:
        typer.main.get_command(compile_app).main(
            args=list(argv) if argv is not None else None,
            prog_name="n8n-gen-tree",
        )

    return _guard(start)


def main() -> None:
    """CLI entry point invoked by the ``n8n`` console script."""
    _setup_signal_handlers()
    sys.exit(run())


def gen_tree_main() -> None:
    """CLI entry point invoked by the ``n8n-gen-tree`` console script."""
    _setup_signal_handlers()
    sys.exit(gen_tree())
