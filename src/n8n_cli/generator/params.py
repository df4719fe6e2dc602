"""Compile OpenAPI parameter objects into :class:`~n8n_cli.models.ParamDef` entries.

OpenAPI lets parameters be declared on the path item (shared by every
operation under that path) and on the operation itself.  The operation-level
declaration overrides a path-level one with the same ``in`` and ``name``:
the override replaces the shared entry wholesale, it is not merged field by
field.

:func:`merge_params` implements that rule and returns the result in
``(location, name)`` order so that the compiled tree is reproducible.
"""

from __future__ import annotations

from typing import Any, Optional

from n8n_cli.generator.naming import to_flag_token
from n8n_cli.models import ParamDef, ParameterLocation
from n8n_cli.parser.resolver import resolve_ref, resolve_schema

_LOCATIONS = {loc.value: loc for loc in ParameterLocation}


def parse_param(doc: dict[str, Any], node: Any) -> Optional[ParamDef]:
    """Compile one OpenAPI *Parameter Object*.

    The node may be a ``$ref``.  ``in`` defaults to ``query`` and
    ``required`` to ``False``; the declared ``required`` is kept as-is for
    path parameters too.

    Returns:
        The compiled parameter, or ``None`` when the parameter has no name
        or lives in a header or cookie (neither travels on the command
        line).
    """
    param, _ = resolve_ref(doc, node)
    if not isinstance(param, dict):
        return None

    name = param.get("name")
    if not isinstance(name, str) or not name:
        return None

    location = _LOCATIONS.get(param.get("in", "query"))
    if location is None:
        return None

    return ParamDef(
        name=name,
        flag=to_flag_token(name) or "param",
        location=location,
        required=param.get("required") is True,
        schema=resolve_schema(doc, param.get("schema")),
    )


def merge_params(
    doc: dict[str, Any],
    shared: list[Any],
    operation: list[Any],
) -> list[ParamDef]:
    """Merge path-level (*shared*) and operation-level parameters.

    Entries are keyed by ``(location, name)``.  Shared entries are inserted
    first, then operation entries; a later insertion replaces an existing
    key entirely.

    Args:
        doc: The root document, for ``$ref`` lookup.
        shared: Raw parameter nodes declared on the path item.
        operation: Raw parameter nodes declared on the operation.

    Returns:
        The merged parameters sorted by ``(location, name)``.

    Example::

        >>> shared = [{"name": "id", "in": "path", "required": True}]
        >>> override = [{"name": "id", "in": "path", "required": False}]
        >>> [p.required for p in merge_params({}, shared, override)]
        [False]
    """
    merged: dict[tuple[str, str], ParamDef] = {}
    for node in [*shared, *operation]:
        param = parse_param(doc, node)
        if param is not None:
            merged[param.key] = param
    return [merged[key] for key in sorted(merged)]
