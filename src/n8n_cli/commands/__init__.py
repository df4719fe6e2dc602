"""Command surfaces of n8n-cli.

* :mod:`~n8n_cli.commands.inspect` -- ``list``, ``describe``, ``tree``.
* :mod:`~n8n_cli.commands.registry` -- operation to argument-spec mapping.
* :mod:`~n8n_cli.commands.dynamic` -- one group per resource, one command
  per operation, built from the registry.
* :mod:`~n8n_cli.commands.compile` -- the ``n8n-gen-tree`` compiler.
"""
