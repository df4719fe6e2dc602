"""The ``n8n-gen-tree`` compiler command.

Reads an OpenAPI document (file, URL, or ``-`` for stdin; JSON or YAML),
compiles it with :func:`~n8n_cli.generator.build_command_tree`, and writes
the tree as pretty JSON.  The output file is replaced atomically so a failed
run never leaves a truncated tree behind.

Example::

    n8n-gen-tree --in n8n-api.yaml --out src/n8n_cli/schemas/command_tree.json
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional

import typer

from n8n_cli.exceptions import N8nCliError
from n8n_cli.generator import build_command_tree
from n8n_cli.output import OutputManager, get_output, set_output
from n8n_cli.parser import load_spec

compile_app = typer.Typer(
    name="n8n-gen-tree",
    help="Compile an OpenAPI document into an n8n-cli command tree.",
    add_completion=False,
)


@compile_app.command()
def compile_command(
    source: str = typer.Option(
        ..., "--in", "-i", help="OpenAPI document: file path, http(s) URL, or '-' for stdin."
    ),
    out: Optional[Path] = typer.Option(
        None, "--out", "-o", help="Output file. Prints to stdout when omitted."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
) -> None:
    """Compile --in into a command tree and write it to --out."""
    set_output(OutputManager(no_color=no_color, verbose=verbose))
    output = get_output()

    output.debug(f"Loading OpenAPI document from {source}")
    tree = build_command_tree(load_spec(source))
    text = tree.to_json()

    op_count = sum(len(r.ops) for r in tree.resources)
    if out is None:
        output.print_data(text.rstrip("\n"))
    else:
        _atomic_write(out, text)
    output.info(
        f"compiled {len(tree.resources)} resources, {op_count} operations"
        + (f" into {out}" if out is not None else "")
    )


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* via a temp file in the same directory and a rename.

    Raises:
        N8nCliError: If the file cannot be written.
    """
    tmp_path: Optional[str] = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as fd:
            tmp_path = fd.name
            fd.write(data)
        os.replace(tmp_path, path)
    except OSError as exc:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise N8nCliError(f"write {path}: {exc}") from exc
