"""OpenAPI document input -- load documents and resolve their schemas.

This sub-package feeds the compiler:

* :mod:`~n8n_cli.parser.loader` -- I/O layer (URL, file, stdin) plus JSON /
  YAML format detection.
* :mod:`~n8n_cli.parser.resolver` -- Lazy ``$ref`` resolution with cycle
  detection, composite collapse, and kind inference.

Typical usage::

    from n8n_cli.parser import load_spec, resolve_schema

    doc = load_spec("n8n-api.yaml")
    schema = resolve_schema(doc, {"$ref": "#/components/schemas/workflow"})
"""

from n8n_cli.parser.loader import load_spec
from n8n_cli.parser.resolver import resolve_node, resolve_ref, resolve_schema

__all__ = ["load_spec", "resolve_ref", "resolve_node", "resolve_schema"]
