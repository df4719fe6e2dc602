"""Compiler -- turn an OpenAPI document into a persisted command tree.

This sub-package is the build-time half of n8n-cli: it takes the raw
document returned by :func:`~n8n_cli.parser.load_spec` and produces a
:class:`~n8n_cli.models.CommandTree` that the runtime interpreter reads on
every invocation.

Typical usage::

    from n8n_cli.generator import build_command_tree
    from n8n_cli.parser import load_spec

    tree = build_command_tree(load_spec("n8n-api.yaml"))
    Path("command_tree.json").write_text(tree.to_json())

Sub-modules:

* :mod:`~n8n_cli.generator.naming` -- Normalise identifiers into
  kebab-case command and flag tokens.
* :mod:`~n8n_cli.generator.params` -- Compile parameter objects and merge
  path-level with operation-level declarations.
* :mod:`~n8n_cli.generator.command_tree` -- Group operations into
  resources, compile request bodies, and load persisted trees.
"""

from n8n_cli.generator.command_tree import (
    build_command_tree,
    load_command_tree,
    parse_request_body,
)
from n8n_cli.generator.naming import to_flag_token
from n8n_cli.generator.params import merge_params, parse_param

__all__ = [
    "build_command_tree",
    "load_command_tree",
    "merge_params",
    "parse_param",
    "parse_request_body",
    "to_flag_token",
]
