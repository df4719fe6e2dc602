"""Shared test fixtures for n8n-cli.

Provides reusable fixtures for loading the OpenAPI fixture, building small
command trees, isolating the environment, managing output state, and
faking the HTTP transport. These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
import yaml

from n8n_cli.models import (
    BodyDef,
    CommandTree,
    InputField,
    Operation,
    ParamDef,
    ParameterLocation,
    Resource,
    SchemaDef,
    SchemaKind,
)
from n8n_cli.output import OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches a reference to sys.stderr at creation time.
    When pytest's capture replaces that stream between tests the cached
    reference becomes stale, so a fresh manager is forced on next use.
    """
    yield
    reset_output()


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a colourless OutputManager so stderr assertions see plain text."""
    output = OutputManager(no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# OpenAPI document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_doc_path() -> Path:
    """Path of the YAML OpenAPI excerpt used across the compiler tests."""
    return FIXTURES_DIR / "sample_api.yaml"


@pytest.fixture
def sample_doc(sample_doc_path: Path) -> dict[str, Any]:
    """The YAML OpenAPI excerpt as a raw dict."""
    with open(sample_doc_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# Command tree fixtures
# ---------------------------------------------------------------------------


def schema(kind: str, item: str | None = None) -> SchemaDef:
    """Shorthand for a :class:`SchemaDef`."""
    return SchemaDef(
        kind=SchemaKind(kind),
        item=SchemaDef(kind=SchemaKind(item)) if item is not None else None,
    )


def param(
    name: str,
    location: str = "query",
    kind: str = "string",
    item: str | None = None,
    required: bool = False,
    flag: str | None = None,
) -> ParamDef:
    """Shorthand for a :class:`ParamDef`."""
    return ParamDef(
        name=name,
        flag=flag or name,
        location=ParameterLocation(location),
        required=required,
        schema=schema(kind, item),
    )


def field(name: str, kind: str = "string", item: str | None = None, required: bool = False) -> InputField:
    """Shorthand for an :class:`InputField`."""
    return InputField(
        name=name,
        flag=f"input-{name}",
        required=required,
        schema=schema(kind, item),
    )


@pytest.fixture
def sample_tree() -> CommandTree:
    """A small tree with a path operation, a query operation, and a body operation."""
    return CommandTree(
        version="1.1.1",
        base_path="/api/v1",
        resources=[
            Resource(
                name="workflow",
                ops=[
                    Operation(
                        name="create",
                        method="POST",
                        path="/workflows",
                        summary="Create a workflow",
                        body=BodyDef(
                            required=True,
                            content_type="application/json",
                            schema=schema("object"),
                            input_fields=[
                                field("active", "boolean"),
                                field("name", required=True),
                                field("tags", "array", "string"),
                            ],
                        ),
                    ),
                    Operation(
                        name="get",
                        method="GET",
                        path="/workflows/{id}",
                        summary="Retrieves a workflow",
                        params=[param("id", "path", required=True)],
                    ),
                    Operation(
                        name="list",
                        method="GET",
                        path="/workflows",
                        params=[
                            param("active", kind="boolean"),
                            param("ids", kind="array", item="integer"),
                            param("limit", kind="integer"),
                        ],
                    ),
                ],
            ),
        ],
    )


@pytest.fixture
def tree_file(tmp_path: Path, sample_tree: CommandTree, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Persist :func:`sample_tree` and point ``N8N_CLI_COMMAND_TREE`` at it."""
    path = tmp_path / "command_tree.json"
    path.write_text(sample_tree.to_json(), encoding="utf-8")
    monkeypatch.setenv("N8N_CLI_COMMAND_TREE", str(path))
    return path


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def n8n_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Set the credential and service URL, and isolate XDG data to tmp_path."""
    monkeypatch.setenv("N8N_API_KEY", "test-key")
    monkeypatch.setenv("N8N_BASE_URL", "https://n8n.example.com")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("NO_COLOR", raising=False)
    return tmp_path


@pytest.fixture
def no_n8n_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove the credential and service URL from the environment."""
    monkeypatch.delenv("N8N_API_KEY", raising=False)
    monkeypatch.delenv("N8N_BASE_URL", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


class RecordingTransport(httpx.MockTransport):
    """An :class:`httpx.MockTransport` that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def json_transport(data: Any, status_code: int = 200) -> RecordingTransport:
    """A transport answering every request with *data* as JSON."""
    return RecordingTransport(
        lambda request: httpx.Response(
            status_code,
            headers={"content-type": "application/json"},
            content=json.dumps(data).encode(),
        )
    )


@pytest.fixture
def make_transport() -> Callable[..., RecordingTransport]:
    """Factory fixture: ``make_transport(data, status_code=200)``."""
    return json_transport
