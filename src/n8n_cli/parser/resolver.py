"""Resolve ``$ref`` pointers and reduce JSON Schemas to a :class:`SchemaDef`.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Workflow"}``) to avoid repetition, and
composite keywords (``allOf``, ``oneOf``, ``anyOf``) to combine schemas.
The command tree only needs a coarse *kind* for every value, so this module
walks references lazily, collapses composites to their **first** branch,
and infers a kind when ``type`` is missing.

Only **internal** references (those starting with ``#/``) are followed.  A
reference that is external or that points at nothing degrades to the node
that carried it; compilation never fails on a bad pointer.

Circular references are detected via a ``seen`` set of the references on the
current resolution stack.  A schema that references itself (common in
tree-like structures) resolves to ``unknown`` at the cycle point.

Public functions:

* :func:`resolve_ref` -- follow a node's reference chain.
* :func:`resolve_node` -- dereference and collapse composites, returning the
  schema object that carries ``type``/``properties``/``items``.
* :func:`resolve_schema` -- reduce a schema node to a :class:`SchemaDef`.
"""

from __future__ import annotations

from typing import Any, Optional

from n8n_cli.models import SchemaDef, SchemaKind

# Composite keywords, in the order they are checked.
_COMPOSITE_KEYS = ("allOf", "oneOf", "anyOf")

_KINDS = {kind.value: kind for kind in SchemaKind}


def _lookup_pointer(doc: Any, ref: str) -> Any:
    """Walk *doc* along the JSON Pointer in *ref*.

    Handles RFC 6901 escaping (``~1`` for ``/``, ``~0`` for ``~``) and
    numeric list indices.

    Returns:
        The referenced value, or ``None`` if any segment is missing.
    """
    current: Any = doc
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            if segment not in current:
                return None
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                return None
        else:
            return None
    return current


def resolve_ref(
    doc: dict[str, Any],
    node: Any,
    seen: Optional[frozenset[str]] = None,
) -> tuple[Any, frozenset[str]]:
    """Follow the ``$ref`` chain starting at *node*.

    Args:
        doc: The root OpenAPI document.
        node: Any node of the document.  Non-dict nodes and dicts without a
            string ``$ref`` are returned unchanged.
        seen: References already on the resolution stack.

    Returns:
        A ``(target, seen)`` pair: the first node of the chain that is not
        a followable reference, and the stack extended by the references
        walked.  When the chain revisits a reference, ``target`` is
        ``None``; callers treat that as an opaque schema.
    """
    seen = seen or frozenset()
    while isinstance(node, dict) and isinstance(node.get("$ref"), str):
        ref = node["$ref"]
        if not ref.startswith("#/"):
            break
        if ref in seen:
            return None, seen
        target = _lookup_pointer(doc, ref)
        if target is None:
            break
        seen = seen | {ref}
        node = target
    return node, seen


def resolve_node(
    doc: dict[str, Any],
    node: Any,
    seen: Optional[frozenset[str]] = None,
) -> tuple[Any, frozenset[str]]:
    """Dereference *node* and collapse composite schemas to their first branch.

    ``allOf: [A, B]`` becomes ``A``; ``oneOf``/``anyOf`` likewise.  The
    collapse repeats until the node is neither a reference nor a composite.

    Returns:
        A ``(schema, seen)`` pair; ``schema`` is ``None`` on a cycle.
    """
    node, seen = resolve_ref(doc, node, seen)
    while isinstance(node, dict):
        branches = next(
            (
                node[key]
                for key in _COMPOSITE_KEYS
                if isinstance(node.get(key), list) and node[key]
            ),
            None,
        )
        if branches is None:
            break
        node, seen = resolve_ref(doc, branches[0], seen)
    return node, seen


def resolve_schema(
    doc: dict[str, Any],
    node: Any,
    seen: Optional[frozenset[str]] = None,
) -> SchemaDef:
    """Reduce a JSON Schema node to a :class:`~n8n_cli.models.SchemaDef`.

    Kind selection:

    1. An explicit ``type`` wins.  OpenAPI 3.1 type lists use their first
       non-``null`` entry; unrecognised type names map to ``unknown``.
    2. Without ``type``: a ``properties`` map means ``object``, an ``items``
       node means ``array``, anything else is ``unknown``.

    Arrays carry a recursively resolved ``item`` descriptor when ``items``
    is present.

    Args:
        doc: The root OpenAPI document, used for ``$ref`` lookup.
        node: The schema node (possibly a reference or composite).
        seen: References on the current stack; ``None`` on the initial call.

    Returns:
        The schema descriptor.  Never raises.

    Example::

        >>> resolve_schema({}, {"type": "array", "items": {"type": "integer"}})
        SchemaDef(kind=<SchemaKind.ARRAY: 'array'>, item=SchemaDef(kind=<SchemaKind.INTEGER: 'integer'>, item=None))
    """
    schema, seen = resolve_node(doc, node, seen)
    if not isinstance(schema, dict):
        return SchemaDef(kind=SchemaKind.UNKNOWN)

    type_value = schema.get("type")
    if isinstance(type_value, list):
        type_value = next((t for t in type_value if t != "null"), None)

    if isinstance(type_value, str):
        kind = _KINDS.get(type_value, SchemaKind.UNKNOWN)
    elif "properties" in schema:
        kind = SchemaKind.OBJECT
    elif "items" in schema:
        kind = SchemaKind.ARRAY
    else:
        kind = SchemaKind.UNKNOWN

    if kind == SchemaKind.ARRAY and "items" in schema:
        return SchemaDef(kind=kind, item=resolve_schema(doc, schema["items"], seen))
    return SchemaDef(kind=kind)
