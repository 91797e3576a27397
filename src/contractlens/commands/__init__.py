"""Built-in CLI sub-commands for contractlens.

This package groups the Typer command modules that form the CLI's
top-level command tree:

* :mod:`~contractlens.commands.validate` -- validate one document.
* :mod:`~contractlens.commands.diff` -- breaking changes and changelog
  between two versions.
* :mod:`~contractlens.commands.report` -- the full analysis report.
* :mod:`~contractlens.commands.inspect` -- metadata, endpoints and schemas
  of a document.
* :mod:`~contractlens.commands.config` -- view and modify global settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``inspect`` and ``config``) or a plain callback
function registered directly on the root app (for single commands like
``validate``).
"""
