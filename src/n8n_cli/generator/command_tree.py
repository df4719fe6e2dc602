"""Build and load the compiled command tree.

This is the compiler half of n8n-cli.  :func:`build_command_tree` takes a
raw OpenAPI document and produces a :class:`~n8n_cli.models.CommandTree`;
:func:`load_command_tree` reads a persisted tree back at runtime.

**Algorithm summary**

1. Read ``info.version`` (default ``"0"``) and the first server URL (default
   ``"/api/v1"``).
2. For every path and HTTP method with an operation object, derive the
   resource from the first tag and the operation name from ``operationId``.
3. Merge path-level and operation-level parameters
   (:func:`~n8n_cli.generator.params.merge_params`).
4. Compile the request body, expanding object bodies into one input field
   per property.
5. Make names and flags unique, then sort resources and operations by name.

Every step is deterministic, so compiling the same document twice yields
byte-identical JSON.
"""

from __future__ import annotations

from collections import defaultdict
from importlib import resources
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from n8n_cli.exceptions import SpecParseError
from n8n_cli.generator.naming import to_flag_token
from n8n_cli.generator.params import merge_params
from n8n_cli.models import (
    BodyDef,
    CommandTree,
    InputField,
    Operation,
    ParamDef,
    Resource,
    SchemaKind,
)
from n8n_cli.parser.resolver import resolve_node, resolve_ref, resolve_schema

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

DEFAULT_VERSION = "0"
DEFAULT_BASE_PATH = "/api/v1"
DEFAULT_RESOURCE = "default"
DEFAULT_OPERATION = "call"

# Flags owned by the command surface itself.
RESERVED_FLAGS = frozenset({"help", "pretty", "raw"})
BODY_FLAGS = frozenset({"body", "body-file"})

_PACKAGED_TREE = "schemas/command_tree.json"


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def build_command_tree(doc: dict[str, Any]) -> CommandTree:
    """Compile an OpenAPI document into a :class:`~n8n_cli.models.CommandTree`.

    Args:
        doc: The raw OpenAPI document as returned by
            :func:`~n8n_cli.parser.loader.load_spec`.  References are
            resolved lazily against it; it is never modified.

    Returns:
        The compiled tree with resources and operations sorted by name.

    Raises:
        SpecParseError: If ``paths`` is missing or an operation is not an
            object.

    Example::

        doc = load_spec("n8n-api.yaml")
        tree = build_command_tree(doc)
        Path("command_tree.json").write_text(tree.to_json())
    """
    paths = doc.get("paths")
    if not isinstance(paths, dict):
        raise SpecParseError("paths missing")

    grouped: dict[str, list[Operation]] = defaultdict(list)

    for path, item in paths.items():
        if not isinstance(item, dict):
            continue
        shared_params = _as_list(item.get("parameters"))

        for method in HTTP_METHODS:
            op = item.get(method)
            if op is None:
                continue
            if not isinstance(op, dict):
                raise SpecParseError(f"operation not object: {method.upper()} {path}")

            operation = _build_operation(doc, str(path), method, op, shared_params)
            resource = _resource_name(op)
            taken = {existing.name for existing in grouped[resource]}
            name = _unique_name(operation.name, method, taken)
            if name != operation.name:
                operation = operation.model_copy(update={"name": name})
            grouped[resource].append(operation)

    return CommandTree(
        version=_version(doc),
        base_path=_base_path(doc),
        resources=[
            Resource(name=name, ops=sorted(ops, key=lambda o: o.name))
            for name, ops in sorted(grouped.items())
        ],
    )


def load_command_tree(path: Optional[Path] = None) -> CommandTree:
    """Load a persisted command tree.

    Args:
        path: A tree file to load.  When ``None``, the tree packaged with
            n8n-cli is used.

    Returns:
        The validated tree.

    Raises:
        SpecParseError: If the file cannot be read or is not a valid tree.
    """
    try:
        if path is None:
            source = f"<package>/{_PACKAGED_TREE}"
            raw = resources.files("n8n_cli").joinpath(_PACKAGED_TREE).read_text(
                encoding="utf-8"
            )
        else:
            source = str(path)
            raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"cannot read command tree {source}: {exc}") from exc

    try:
        return CommandTree.model_validate_json(raw)
    except ValidationError as exc:
        raise SpecParseError(f"invalid command tree {source}: {exc}") from exc


# ---------------------------------------------------------------------------
# Document-level fields
# ---------------------------------------------------------------------------


def _version(doc: dict[str, Any]) -> str:
    info = doc.get("info")
    version = info.get("version") if isinstance(info, dict) else None
    if isinstance(version, bool) or version is None:
        return DEFAULT_VERSION
    # YAML reads `version: 1.0` as a float.
    if isinstance(version, (str, int, float)):
        return str(version)
    return DEFAULT_VERSION


def _base_path(doc: dict[str, Any]) -> str:
    servers = doc.get("servers")
    if isinstance(servers, list) and servers and isinstance(servers[0], dict):
        url = servers[0].get("url")
        if isinstance(url, str):
            return url
    return DEFAULT_BASE_PATH


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def _resource_name(op: dict[str, Any]) -> str:
    tags = op.get("tags")
    if isinstance(tags, list) and tags and isinstance(tags[0], str):
        return to_flag_token(tags[0]) or DEFAULT_RESOURCE
    return DEFAULT_RESOURCE


def _build_operation(
    doc: dict[str, Any],
    path: str,
    method: str,
    op: dict[str, Any],
    shared_params: list[Any],
) -> Operation:
    op_id = op.get("operationId") or op.get("x-eov-operation-id")
    name = to_flag_token(op_id) if isinstance(op_id, str) else ""

    params = merge_params(doc, shared_params, _as_list(op.get("parameters")))
    body = parse_request_body(doc, op.get("requestBody"))
    params = _assign_param_flags(params, reserved=_reserved_flags(body))

    return Operation(
        name=name or DEFAULT_OPERATION,
        method=method.upper(),
        path=path,
        summary=_optional_str(op.get("summary")),
        description=_optional_str(op.get("description")),
        params=params,
        body=_assign_field_flags(body, {p.flag for p in params}),
    )


def _unique_name(name: str, method: str, taken: set[str]) -> str:
    """Return *name*, or a ``-<method>`` / numeric variant not in *taken*."""
    if name not in taken:
        return name
    candidate = f"{name}-{method}"
    suffix = 2
    while candidate in taken:
        candidate = f"{name}-{method}-{suffix}"
        suffix += 1
    return candidate


# ---------------------------------------------------------------------------
# Request body
# ---------------------------------------------------------------------------


def parse_request_body(doc: dict[str, Any], node: Any) -> Optional[BodyDef]:
    """Compile an operation's ``requestBody`` into a :class:`~n8n_cli.models.BodyDef`.

    ``application/json`` content is preferred, otherwise the first declared
    content type is used.  Object-shaped bodies expose each declared
    property as an input field named ``input-<property>``, sorted by
    property name; a property is required when it is listed in the schema's
    ``required`` array.

    Returns:
        The body descriptor, or ``None`` when the operation declares no body
        or the body declares no content.
    """
    if node is None:
        return None
    body, _ = resolve_ref(doc, node)
    if not isinstance(body, dict):
        return None

    content = body.get("content")
    if not isinstance(content, dict) or not content:
        return None

    if "application/json" in content:
        content_type = "application/json"
    else:
        content_type = str(next(iter(content)))
    media = content[content_type]
    schema_node = media.get("schema") if isinstance(media, dict) else None

    schema = resolve_schema(doc, schema_node)
    input_fields: list[InputField] = []
    if schema.kind == SchemaKind.OBJECT:
        input_fields = _input_fields(doc, schema_node)

    return BodyDef(
        required=body.get("required") is True,
        content_type=content_type,
        schema=schema,
        input_fields=input_fields,
    )


def _input_fields(doc: dict[str, Any], schema_node: Any) -> list[InputField]:
    schema, seen = resolve_node(doc, schema_node)
    if not isinstance(schema, dict):
        return []
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return []
    required = {r for r in _as_list(schema.get("required")) if isinstance(r, str)}

    fields = [
        InputField(
            name=str(name),
            flag=f"input-{to_flag_token(str(name))}",
            required=name in required,
            schema=resolve_schema(doc, prop, seen),
        )
        for name, prop in properties.items()
    ]
    return sorted(fields, key=lambda f: f.name)


# ---------------------------------------------------------------------------
# Flag uniqueness
# ---------------------------------------------------------------------------


def _reserved_flags(body: Optional[BodyDef]) -> set[str]:
    reserved = set(RESERVED_FLAGS)
    if body is not None:
        reserved |= BODY_FLAGS
    return reserved


def _claim(flag: str, qualifier: str, taken: set[str]) -> str:
    """Claim *flag*, falling back to ``<flag>-<qualifier>`` then numeric suffixes."""
    candidate = flag
    if candidate in taken:
        candidate = f"{flag}-{qualifier}"
    suffix = 2
    while candidate in taken:
        candidate = f"{flag}-{qualifier}-{suffix}"
        suffix += 1
    taken.add(candidate)
    return candidate


def _assign_param_flags(params: list[ParamDef], reserved: set[str]) -> list[ParamDef]:
    taken = set(reserved)
    result = []
    for param in params:
        flag = _claim(param.flag, param.location.value, taken)
        if flag != param.flag:
            param = param.model_copy(update={"flag": flag})
        result.append(param)
    return result


def _assign_field_flags(body: Optional[BodyDef], taken: set[str]) -> Optional[BodyDef]:
    if body is None or not body.input_fields:
        return body
    taken = taken | _reserved_flags(body)
    fields = []
    for field in body.input_fields:
        flag = _claim(field.flag, "field", taken)
        if flag != field.flag:
            field = field.model_copy(update={"flag": flag})
        fields.append(field)
    return body.model_copy(update={"input_fields": fields})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None
