"""Generate the ``n8n <resource> <op>`` command surface from a command tree.

One :class:`click.Group` is created per resource and one
:class:`click.Command` per operation.  The options of each command come from
:func:`~n8n_cli.commands.registry.operation_args`; all commands share the
single generic callback :func:`execute_operation`.

Runtime flow of an operation command:

1. Resolve the :class:`~n8n_cli.models.RuntimeConfig` from the environment.
2. Bind the parsed option values to the operation.
3. Build the request and send it through the
   :class:`~n8n_cli.client.executor.Executor`.
4. Print the body (or the raw envelope with ``--raw``) to stdout.
5. If the status is not 2xx, raise the matching
   :class:`~n8n_cli.exceptions.HttpStatusError` *after* printing.
"""

from __future__ import annotations

from typing import Any

import click

from n8n_cli.client.executor import Executor
from n8n_cli.client.request import build_request
from n8n_cli.commands.registry import ArgSpec, bind_arguments, operation_args
from n8n_cli.config import load_runtime_config
from n8n_cli.exceptions import SpecParseError, error_for_status
from n8n_cli.models import CommandTree, Operation, Resource
from n8n_cli.output import get_output

# Output switches accepted after the operation name as well as on the root.
_OUTPUT_FLAGS = {
    "pretty": ("op_pretty", "Pretty-print JSON output"),
    "raw": ("op_raw", "Return full HTTP response envelope"),
}


def attach_operations(root: click.Group, tree: CommandTree) -> None:
    """Add one sub-group per resource of *tree* to *root*.

    Raises:
        SpecParseError: If a resource name collides with a built-in command.
    """
    for resource in tree.resources:
        if resource.name in root.commands:
            raise SpecParseError(
                f"resource '{resource.name}' collides with a built-in command"
            )
        root.add_command(build_resource_group(tree, resource))


def build_resource_group(tree: CommandTree, resource: Resource) -> click.Group:
    group = click.Group(
        name=resource.name,
        help=f"Operations on {resource.name}.",
        no_args_is_help=True,
    )
    for operation in resource.ops:
        group.add_command(build_operation_command(tree, operation))
    return group


def build_operation_command(tree: CommandTree, operation: Operation) -> click.Command:
    """Build the :class:`click.Command` for *operation*."""
    specs = operation_args(operation)
    params: list[click.Parameter] = [spec.to_click() for spec in specs]

    taken = {spec.flag for spec in specs}
    for flag, (dest, help_text) in _OUTPUT_FLAGS.items():
        if flag not in taken:
            params.append(click.Option([f"--{flag}", dest], is_flag=True, help=help_text))

    def callback(**values: Any) -> None:
        execute_operation(click.get_current_context(), tree, operation, specs, values)

    summary = (operation.summary or "").strip()
    return click.Command(
        name=operation.name,
        params=params,
        callback=callback,
        help=summary or None,
        short_help=summary or None,
        epilog=f"{operation.method} {operation.path}",
    )


def execute_operation(
    ctx: click.Context,
    tree: CommandTree,
    operation: Operation,
    specs: list[ArgSpec],
    values: dict[str, Any],
) -> None:
    """Run *operation* with the option *values* parsed by click.

    Raises:
        ConfigError: If ``N8N_API_KEY`` or ``N8N_BASE_URL`` is missing.
        InvalidUsageError: If the arguments cannot be bound.
        ConnectionError_: On transport failure.
        HttpStatusError: After printing, when the status is not 2xx.
    """
    obj = ctx.find_root().obj or {}
    pretty = bool(values.pop("op_pretty", False) or obj.get("pretty"))
    raw = bool(values.pop("op_raw", False) or obj.get("raw"))

    config = load_runtime_config()
    bound = bind_arguments(specs, values)
    prepared = build_request(config, tree.base_path, operation, bound)

    with Executor(config, transport=obj.get("transport")) as executor:
        response = executor.send(prepared)

    get_output().print_json(response.raw if raw else response.body, pretty)

    if not response.ok:
        raise error_for_status(response.status_code)
