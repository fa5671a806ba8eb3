"""Built-in CLI sub-commands for schemalens.

This package groups all Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~schemalens.commands.explore` -- ``services``, ``operation``,
  ``schema``, and ``schemas``.
* :mod:`~schemalens.commands.config` -- view and modify global settings.
* :mod:`~schemalens.commands.cache` -- inspect and clear the document cache.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``config`` and ``cache``) or plain callback
functions registered directly on the root app.
"""
