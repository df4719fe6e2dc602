"""n8n-cli -- a command-line client for the n8n public REST API.

The package has two halves that share one data model:

* a **compiler** that reads the n8n OpenAPI document and writes a compact
  command tree (``n8n-gen-tree --in n8n-api.yaml --out command_tree.json``);
* a **runtime** that loads the tree and exposes every API operation as
  ``n8n <resource> <op> [--flags]``.

Typical workflow::

    export N8N_BASE_URL=https://n8n.example.com
    export N8N_API_KEY=...
    n8n list
    n8n workflow get-workflow --id 42 --pretty

Modules:
    app: Root Typer application and the ``n8n`` entry point.
    models: Pydantic models for the command tree and runtime values.
    config: Environment-driven runtime configuration and XDG paths.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr discipline with Rich support.
"""

__version__ = "0.1.0"
