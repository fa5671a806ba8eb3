"""Config commands -- view and modify global configuration.

Provides the ``schemalens config`` sub-command group for reading,
updating, and resetting the user's global configuration file
(:class:`~schemalens.models.GlobalConfig`).
"""

from __future__ import annotations

import typer

from schemalens.exceptions import ConfigError
from schemalens.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration.

    Prints the config directory path followed by the configuration after
    project config and environment variables are applied.

    Example::

        schemalens config show
        schemalens --json config show
    """
    from schemalens.config import get_config_dir, resolve_config

    try:
        config = resolve_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'output.payload')."
    ),
    value: str = typer.Argument(help="Value to set ('none' clears optional keys)."),
) -> None:
    """Set a global configuration value.

    Example::

        schemalens config set output.payload json
        schemalens config set cache.ttl_seconds 600
        schemalens config set loader.default_source ./openapi.yaml
    """
    from schemalens.config import load_global_config, save_global_config, set_config_value

    try:
        config = set_config_value(load_global_config(), key, value)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=2) from None

    save_global_config(config)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset the global configuration to defaults.

    Example::

        schemalens config reset --force
    """
    from schemalens.config import save_global_config
    from schemalens.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
