"""CLI interface for Docshelf.

Command-line tool for building and serving manifest-driven documentation.
"""

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from docshelf.config import Config
from docshelf.core.errors import DocshelfError
from docshelf.core.types import NavigationMode

_config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Path to configuration file (default: auto-discover docshelf.toml)",
)
_content_dir_option = click.option(
    "--content-dir",
    "-s",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Content directory containing manifest.json (overrides config)",
)
_navigation_mode_option = click.option(
    "--navigation-mode",
    type=click.Choice([mode.value for mode in NavigationMode]),
    default=None,
    help="Addressing mode for nested routes (overrides config)",
)
_verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)


@click.group()
def cli() -> None:
    """Docshelf - manifest-driven documentation sites."""


@cli.command()
@_config_option
@_content_dir_option
@_navigation_mode_option
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Output directory (overrides config)",
)
@click.option(
    "--jobs",
    "-j",
    type=click.IntRange(min=1),
    default=None,
    help="Number of pages resolved in parallel (overrides config)",
)
@_verbose_option
def build(
    config_path: Path | None,
    content_dir: Path | None,
    navigation_mode: str | None,
    output_dir: Path | None,
    jobs: int | None,
    verbose: bool,
) -> None:
    """Resolve every page and write it as JSON."""
    from docshelf.builder import build_site
    from docshelf.server import create_context

    _configure_logging(verbose)
    config = _load_config(
        config_path,
        content_dir=content_dir,
        navigation_mode=navigation_mode,
        output_dir=output_dir,
        jobs=jobs,
    )

    click.echo(f"Content directory: {config.content.content_dir}")
    click.echo(f"Output directory: {config.build.output_dir}")

    try:
        context = create_context(config)
        result = build_site(context, config.build.output_dir, jobs=config.build.jobs)
    except DocshelfError as e:
        _fail(e)

    click.echo(
        click.style(
            f"Built {len(result.pages)} pages (version {context.version})",
            fg="green",
        ),
    )


@cli.command()
@_config_option
@_content_dir_option
@_navigation_mode_option
@_verbose_option
def paths(
    config_path: Path | None,
    content_dir: Path | None,
    navigation_mode: str | None,
    verbose: bool,
) -> None:
    """List every buildable URL path."""
    from docshelf.server import create_context

    _configure_logging(verbose)
    config = _load_config(config_path, content_dir=content_dir, navigation_mode=navigation_mode)

    try:
        context = create_context(config)
        static_paths = context.static_paths()
    except DocshelfError as e:
        _fail(e)

    for segments in static_paths:
        click.echo("/" + "/".join(segments))


@cli.command()
@_config_option
@_content_dir_option
@_navigation_mode_option
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@_verbose_option
def serve(
    config_path: Path | None,
    content_dir: Path | None,
    navigation_mode: str | None,
    host: str | None,
    port: int | None,
    verbose: bool,
) -> None:
    """Start the page API server."""
    from docshelf.server import run_server

    _configure_logging(verbose)
    config = _load_config(
        config_path,
        content_dir=content_dir,
        navigation_mode=navigation_mode,
        host=host,
        port=port,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Content directory: {config.content.content_dir}")

    try:
        run_server(config)
    except DocshelfError as e:
        _fail(e)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(
    config_path: Path | None,
    *,
    navigation_mode: str | None = None,
    **overrides: object,
) -> Config:
    """Load configuration and apply CLI overrides, exiting on error."""
    try:
        config = Config.load(config_path)
    except (OSError, ValueError) as e:
        _fail(e)

    mode = NavigationMode(navigation_mode) if navigation_mode is not None else None
    return config.with_overrides(navigation_mode=mode, **overrides)  # type: ignore[arg-type]


def _fail(error: Exception) -> NoReturn:
    """Print an error and exit with status 1."""
    click.echo(click.style(f"Error: {error}", fg="red"), err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
