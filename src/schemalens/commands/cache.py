"""Cache commands -- inspect and clear the remote document cache."""

from __future__ import annotations

import typer

from schemalens.exceptions import ConfigError
from schemalens.output import error, format_response, success


cache_app = typer.Typer(no_args_is_help=True)


def _open_cache():  # noqa: ANN202
    from schemalens.cache import DocumentCache
    from schemalens.config import get_cache_dir, resolve_config

    try:
        config = resolve_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    return DocumentCache(get_cache_dir(), config.cache)


@cache_app.command("stats")
def cache_stats() -> None:
    """Show cache directory, entry count, and TTL.

    Example::

        schemalens cache stats
    """
    cache = _open_cache()
    try:
        format_response(cache.stats())
    finally:
        cache.close()


@cache_app.command("clear")
def cache_clear() -> None:
    """Remove every cached document.

    Example::

        schemalens cache clear
    """
    cache = _open_cache()
    try:
        cache.clear()
    finally:
        cache.close()
    success("Cache cleared.")
