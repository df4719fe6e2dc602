"""Declarative argument registry for compiled operations.

Every :class:`~n8n_cli.models.Operation` maps to an ordered list of
:class:`ArgSpec` entries: one per parameter, one per body input field, and
``--body`` / ``--body-file`` when the operation declares a body.  The
dynamic command surface (:mod:`n8n_cli.commands.dynamic`) turns each spec
into a :class:`click.Option` and, when the command runs, hands the parsed
values back to :func:`bind_arguments` to produce a
:class:`~n8n_cli.client.request.BoundArguments`.

No per-operation code exists anywhere: the registry is data, interpreted
generically at runtime.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import click

from n8n_cli.client.request import BoundArguments
from n8n_cli.exceptions import SpecParseError
from n8n_cli.models import Operation, SchemaKind

# Flags the command surface always owns.
BUILTIN_FLAGS = frozenset({"help"})


class ArgRole(str, enum.Enum):
    """What a flag binds to in the request."""

    PARAM = "param"
    INPUT_FIELD = "input_field"
    RAW_BODY = "raw_body"
    BODY_FILE = "body_file"


@dataclass(frozen=True)
class ArgSpec:
    """One command-line flag of an operation.

    Attributes:
        dest: Python identifier click stores the value under.
        flag: The long flag without the leading ``--``.
        role: What the value binds to.
        metavar: Value placeholder shown in help (the schema label).
        help: Help text.
        required: Whether click must see the flag.
        multiple: Whether the flag may be repeated (array kinds).
        param_key: ``(location, name)`` for :attr:`ArgRole.PARAM`.
        field_name: The property name for :attr:`ArgRole.INPUT_FIELD`.
    """

    dest: str
    flag: str
    role: ArgRole
    metavar: str
    help: str = ""
    required: bool = False
    multiple: bool = False
    param_key: Optional[tuple[str, str]] = None
    field_name: Optional[str] = None

    def to_click(self) -> click.Option:
        return click.Option(
            [f"--{self.flag}", self.dest],
            metavar=self.metavar,
            help=self.help,
            required=self.required,
            multiple=self.multiple,
            type=click.STRING,
        )


def operation_args(operation: Operation) -> list[ArgSpec]:
    """Build the ordered :class:`ArgSpec` list for *operation*.

    Order: parameters, ``--body``, ``--body-file``, then body input fields.

    Raises:
        SpecParseError: If two flags collide or a flag shadows ``--help``.
            Compiled trees never do this; hand-edited ones might.
    """
    specs: list[ArgSpec] = []

    for param in operation.params:
        schema = param.schema_
        specs.append(
            ArgSpec(
                dest=f"arg{len(specs)}",
                flag=param.flag,
                role=ArgRole.PARAM,
                metavar=schema.label,
                help=f"{param.location.value} parameter '{param.name}'",
                required=param.required,
                multiple=schema.kind == SchemaKind.ARRAY,
                param_key=param.key,
            )
        )

    body = operation.body
    if body is not None:
        specs.append(
            ArgSpec(
                dest=f"arg{len(specs)}",
                flag="body",
                role=ArgRole.RAW_BODY,
                metavar="JSON",
                help="Raw JSON request body",
            )
        )
        specs.append(
            ArgSpec(
                dest=f"arg{len(specs)}",
                flag="body-file",
                role=ArgRole.BODY_FILE,
                metavar="PATH",
                help="Path to JSON request body",
            )
        )
        for field in body.input_fields:
            schema = field.schema_
            specs.append(
                ArgSpec(
                    dest=f"arg{len(specs)}",
                    flag=field.flag,
                    role=ArgRole.INPUT_FIELD,
                    metavar=schema.label,
                    help=f"Body field '{field.name}'" + (" (required)" if field.required else ""),
                    multiple=schema.kind == SchemaKind.ARRAY,
                    field_name=field.name,
                )
            )

    _check_flags(operation, specs)
    return specs


def _check_flags(operation: Operation, specs: list[ArgSpec]) -> None:
    seen: set[str] = set(BUILTIN_FLAGS)
    for spec in specs:
        if spec.flag in seen:
            raise SpecParseError(
                f"operation '{operation.name}' declares flag --{spec.flag} more than once"
            )
        seen.add(spec.flag)


def bind_arguments(specs: list[ArgSpec], values: Mapping[str, Any]) -> BoundArguments:
    """Collect parsed click values into :class:`~n8n_cli.client.request.BoundArguments`.

    Unset flags (``None`` or an empty tuple) are left unbound.

    Example::

        >>> specs = operation_args(op)
        >>> bound = bind_arguments(specs, {"arg0": "42"})
        >>> bound.params
        {('path', 'id'): ['42']}
    """
    bound = BoundArguments()
    for spec in specs:
        value = values.get(spec.dest)
        if value is None:
            continue
        tokens = list(value) if spec.multiple else [value]
        if not tokens:
            continue

        if spec.role is ArgRole.PARAM:
            bound.params[spec.param_key] = tokens
        elif spec.role is ArgRole.INPUT_FIELD:
            bound.fields[spec.field_name] = tokens
        elif spec.role is ArgRole.RAW_BODY:
            bound.raw_body = value
        else:
            bound.body_file = value
    return bound
