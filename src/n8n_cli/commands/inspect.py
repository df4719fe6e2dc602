"""Introspection commands -- examine the loaded command tree.

Provides ``n8n list``, ``n8n describe RESOURCE OP`` and ``n8n tree``. All
three are read-only, need no credentials, and accept ``--json`` for
machine-readable output on stdout.
"""

from __future__ import annotations

import typer

from n8n_cli.exceptions import InvalidUsageError
from n8n_cli.models import CommandTree, Operation
from n8n_cli.output import get_output


def _tree(ctx: typer.Context) -> CommandTree:
    return ctx.find_root().obj["tree"]


def list_command(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable JSON."),
) -> None:
    """List resources and operations.

    Example::

        n8n list
        n8n list --json
    """
    tree = _tree(ctx)
    output = get_output()

    if json_output:
        output.print_json(
            [{"resource": r.name, "ops": [op.name for op in r.ops]} for r in tree.resources],
            pretty=True,
        )
        return

    for resource in tree.resources:
        output.print_data(resource.name)
        for op in resource.ops:
            output.print_data(f"  {op.name}")


def describe_command(
    ctx: typer.Context,
    resource: str = typer.Argument(..., help="Resource name."),
    op: str = typer.Argument(..., help="Operation name."),
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable JSON."),
) -> None:
    """Describe a specific operation.

    Shows the method, path, summary, parameters and body shape of one
    operation.

    Example::

        n8n describe workflow get-workflow
    """
    operation = _tree(ctx).find_op(resource, op)
    if operation is None:
        raise InvalidUsageError(f"unknown command {resource} {op}")

    output = get_output()
    if json_output:
        output.print_json(operation.model_dump(mode="json", by_alias=True), pretty=True)
        return

    for line in describe_lines(resource, operation):
        output.print_data(line)


def describe_lines(resource: str, operation: Operation) -> list[str]:
    """Render the human-readable description of *operation*."""
    lines = [
        f"{resource} {operation.name}",
        f"  method: {operation.method}",
        f"  path: {operation.path}",
    ]
    summary = (operation.summary or "").strip()
    if summary:
        lines.append(f"  summary: {summary}")

    if operation.params:
        lines.append("  params:")
        for param in operation.params:
            lines.append(
                f"    --{param.flag}  {param.schema_.kind.value} ({param.location.value})"
            )

    body = operation.body
    if body is not None:
        lines.append(f"  body: {body.content_type}")
        if body.input_fields:
            lines.append("  body fields:")
            for field in body.input_fields:
                lines.append(f"    --{field.flag}  {field.schema_.kind.value}")
    return lines


def tree_command(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable JSON."),
) -> None:
    """Show the full command tree."""
    output = get_output()
    if json_output:
        output.print_data(_tree(ctx).to_json().rstrip("\n"))
        return
    output.print_data("Run with --json for machine-readable output.")
