"""Typer application and CLI entry point for schemalens.

This module wires together the top-level Typer application and registers the
built-in commands (``services``, ``operation``, ``schema``, ``schemas``,
``config``, ``cache``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`schemalens.config`: Configuration resolution.
    :mod:`schemalens.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from schemalens import __version__
from schemalens.commands.cache import cache_app
from schemalens.commands.config import config_app
from schemalens.commands.explore import (
    operation_command,
    schema_command,
    schemas_command,
    services_command,
)
from schemalens.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="schemalens",
    help="Explore OpenAPI 3.x documents: services, example payloads, schema tables and trees.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("services")(services_command)
app.command("operation")(operation_command)
app.command("schema")(schema_command)
app.command("schemas")(schemas_command)
app.add_typer(config_app, name="config", help="Configuration management.")
app.add_typer(cache_app, name="cache", help="Remote document cache.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"schemalens {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~schemalens.output.OutputManager` from
    CLI flags (falling back to the configured ``output.format``) and routes
    the ``schemalens`` logger into it.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
        output_file: Redirect primary data output to a file path.
    """
    from schemalens.output import OutputFormat, OutputManager, error, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _configured_format()

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)
    _setup_logging(verbose)

    if fmt is None:
        error("Invalid configuration; run 'schemalens config reset'.")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def _configured_format():  # noqa: ANN202
    """Return the configured output format, or ``None`` if the config is broken."""
    from schemalens.config import resolve_config
    from schemalens.exceptions import ConfigError
    from schemalens.output import OutputFormat

    try:
        value = resolve_config().output.format
    except ConfigError:
        return None
    try:
        return OutputFormat(value)
    except ValueError:
        return OutputFormat.AUTO


def _setup_logging(verbose: bool) -> None:
    """Attach a single :class:`~schemalens.output.OutputLogHandler` to the package logger."""
    from schemalens.output import OutputLogHandler

    logger = logging.getLogger("schemalens")
    for handler in list(logger.handlers):
        if isinstance(handler, OutputLogHandler):
            logger.removeHandler(handler)
    logger.addHandler(OutputLogHandler())
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from schemalens.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``schemalens`` console script.

    Unhandled :class:`~schemalens.exceptions.SchemalensError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from schemalens.exceptions import SchemalensError
        from schemalens.output import error

        if isinstance(exc, SchemalensError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
