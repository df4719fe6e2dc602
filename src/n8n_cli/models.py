"""Canonical Pydantic models shared across all n8n-cli modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Command tree models** -- produced once by the compiler
(:func:`~n8n_cli.generator.build_command_tree`), persisted as JSON, and
loaded read-only at runtime:
    :class:`SchemaDef`, :class:`ParamDef`, :class:`InputField`,
    :class:`BodyDef`, :class:`Operation`, :class:`Resource`, and
    :class:`CommandTree`.

**Runtime models** -- built per invocation:
    :class:`RuntimeConfig` and :class:`ApiResponse`.

Tree models are frozen. The field order of each model is the key order of
the serialised tree, so it must not be changed casually: the compiled
artifact is expected to diff cleanly between compiler runs.
"""

from __future__ import annotations

import enum
import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# --- Command tree ---


class SchemaKind(str, enum.Enum):
    """Normalised JSON type of a parameter, body, or body field."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    UNKNOWN = "unknown"


class ParameterLocation(str, enum.Enum):
    """Where a parameter travels. Header and cookie parameters are not compiled."""

    PATH = "path"
    QUERY = "query"


class SchemaDef(BaseModel):
    """A schema descriptor: a kind plus, for arrays, the element descriptor."""

    model_config = ConfigDict(frozen=True)

    kind: SchemaKind
    item: Optional[SchemaDef] = None

    @property
    def label(self) -> str:
        """Short type label used as a metavar (``integer``, ``array<string>``)."""
        if self.kind == SchemaKind.ARRAY:
            item = self.item.kind.value if self.item is not None else "unknown"
            return f"array<{item}>"
        return self.kind.value


class ParamDef(BaseModel):
    """A path or query parameter. Unique within an operation by ``(location, name)``."""

    name: str
    flag: str
    location: ParameterLocation
    required: bool = False
    schema_: SchemaDef = Field(alias="schema")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def key(self) -> tuple[str, str]:
        return (self.location.value, self.name)


class InputField(BaseModel):
    """One property of an object-shaped request body, exposed as ``--input-<name>``."""

    name: str
    flag: str
    required: bool = False
    schema_: SchemaDef = Field(alias="schema")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class BodyDef(BaseModel):
    """The request payload of an operation."""

    required: bool = False
    content_type: str
    schema_: SchemaDef = Field(alias="schema")
    input_fields: list[InputField] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Operation(BaseModel):
    """One HTTP method + path endpoint and its argument shape.

    ``path`` may contain ``{token}`` placeholders that name path-located
    parameters.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    method: str
    path: str
    summary: Optional[str] = None
    description: Optional[str] = None
    params: list[ParamDef] = Field(default_factory=list)
    body: Optional[BodyDef] = None

    @model_validator(mode="after")
    def _check_unique_flags(self) -> Operation:
        flags = [p.flag for p in self.params]
        if self.body is not None:
            flags.extend(f.flag for f in self.body.input_fields)
        dupes = sorted({f for f in flags if flags.count(f) > 1})
        if dupes:
            raise ValueError(
                f"operation '{self.name}' declares duplicate flags: {', '.join(dupes)}"
            )
        return self


class Resource(BaseModel):
    """A named group of operations sharing a category tag."""

    model_config = ConfigDict(frozen=True)

    name: str
    ops: list[Operation] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_ops(self) -> Resource:
        names = [op.name for op in self.ops]
        if len(names) != len(set(names)):
            raise ValueError(f"resource '{self.name}' declares duplicate operations")
        return self

    def find_op(self, name: str) -> Optional[Operation]:
        return next((op for op in self.ops if op.name == name), None)


class CommandTree(BaseModel):
    """The compiled, versioned, immutable description of the command surface.

    Resources are sorted by name and each resource's operations by name, so
    that two compilations of the same document serialise identically.

    See Also:
        :func:`~n8n_cli.generator.build_command_tree`: Produces a tree.
        :func:`~n8n_cli.generator.load_command_tree`: Loads the persisted tree.
    """

    model_config = ConfigDict(frozen=True)

    version: str
    base_path: str
    resources: list[Resource] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_resources(self) -> CommandTree:
        names = [r.name for r in self.resources]
        if len(names) != len(set(names)):
            raise ValueError("command tree declares duplicate resources")
        return self

    def find_op(self, resource: str, op: str) -> Optional[Operation]:
        """Return the operation *op* of *resource*, or ``None``."""
        res = next((r for r in self.resources if r.name == resource), None)
        if res is None:
            return None
        return res.find_op(op)

    def to_json(self) -> str:
        """Serialise the tree in its persisted layout (2-space indent, trailing newline)."""
        data = self.model_dump(mode="json", by_alias=True)
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


# --- Runtime ---


class RuntimeConfig(BaseModel):
    """Per-invocation configuration resolved from the environment.

    Passed explicitly to the request builder and executor so that neither
    reads process-global state.
    """

    api_key: str = Field(description="Value of the X-N8N-API-KEY header")
    base_url: str = Field(description="Service URL, with or without the base path")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")


class ApiResponse(BaseModel):
    """A triaged HTTP response.

    ``body`` is the decoded JSON body (or the raw text as a string, or
    ``None`` for an empty body); ``raw`` is the full envelope with
    ``status``, ``headers``, and ``body``.
    """

    status_code: int
    ok: bool
    body: Any = None
    raw: dict[str, Any] = Field(default_factory=dict)
