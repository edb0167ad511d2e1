from __future__ import annotations

import importlib
import sys
from typing import List, Type

import typer

from rowcache.cache.paths import cache_artifacts, cache_directory
from rowcache.config import get_settings
from rowcache.domain.entity import Entity
from rowcache.domain.errors import InvalidEntityError
from rowcache.orchestrator import RowCache
from rowcache.reporter import print_artifacts, print_boot_reports, print_status
from rowcache.utils.logging import configure_logging

app = typer.Typer(help="rowcache CLI: inspect, warm, and clear SQLite row caches.")


def load_entity(path: str) -> Type[Entity]:
    """
    Import an entity class from `package.module:ClassName`.

    Raises
    ------
    InvalidEntityError
        If the path is malformed, the module cannot be imported, or the
        attribute is not an Entity subclass.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise InvalidEntityError(f"Expected 'module:ClassName', got '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise InvalidEntityError(f"Cannot import module '{module_name}': {exc}") from exc

    target = module
    for part in attr.split("."):
        target = getattr(target, part, None)
        if target is None:
            raise InvalidEntityError(f"'{module_name}' has no attribute '{attr}'")
    if not (isinstance(target, type) and issubclass(target, Entity) and target is not Entity):
        raise InvalidEntityError(f"'{path}' is not an Entity subclass")
    return target


def _load_all(paths: List[str]) -> List[Type[Entity]]:
    try:
        return [load_entity(path) for path in paths]
    except InvalidEntityError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"cache={cache_directory(settings)} prefix={settings.cache_prefix} | "
        f"api={settings.api_url} token={'set' if settings.api_token else 'unset'} | "
        f"chunk={settings.insert_chunk_size}"
    )


@app.command()
def status(
    entities: List[str] = typer.Argument(..., help="Entities as 'package.module:ClassName'."),
) -> None:
    """
    Show the freshness decision for each entity without materializing anything.
    """
    cache = RowCache(settings=get_settings(), remote_writes=False)
    print_status([(entity.descriptor.identity, cache.status(entity)) for entity in _load_all(entities)])


@app.command()
def warm(
    entities: List[str] = typer.Argument(..., help="Entities as 'package.module:ClassName'."),
) -> None:
    """
    Boot each entity, building or refreshing its cache file.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level)
    cache = RowCache(settings=settings, remote_writes=False)
    try:
        print_boot_reports([cache.boot(entity) for entity in _load_all(entities)])
    finally:
        cache.reset()


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Delete without confirmation."),
) -> None:
    """
    Delete cache artifacts written under the configured prefix.
    """
    settings = get_settings()
    paths = cache_artifacts(settings)
    print_artifacts([str(path) for path in paths])
    if not paths:
        return
    if not yes:
        typer.confirm(f"Delete {len(paths)} cache file(s)?", abort=True)
    removed = 0
    for path in paths:
        try:
            path.unlink()
            removed += 1
        except FileNotFoundError:
            continue
    typer.echo(f"Removed {removed} cache file(s).")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
