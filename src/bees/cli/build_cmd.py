"""bees build - production build with gzip size report.

Usage:
    bees build                  # Optimized build into dist/ (or outputPath)
    bees build --debug          # Development build, no compression
    bees build -w               # Rebuild on every source change
    bees build -o public/build  # Custom output directory
"""
from __future__ import annotations

import asyncio
import os
import sys

import click
from rich.console import Console
from rich.markup import escape

from bees.bundler import WebpackBundler, resolve_webpack_config
from bees.config import DEFAULT_STYLE, DEFAULT_USE, BeesConfig, ConfigError, load_config
from bees.logging_setup import setup_logging
from bees.paths import ProjectPaths
from bees.session import BuildFailed, BuildSession, run_build

_DEFAULT_VALUES = {
    "use": DEFAULT_USE,
    "style": '["' + '", "'.join(DEFAULT_STYLE) + '"]',
}


def _warn_defaults(console: Console, config: BeesConfig) -> None:
    for name in config.defaulted:
        console.print(
            f"[red]No [cyan]{name}[/cyan] defined in [yellow].beesrc[/yellow], "
            f"defaulting to [cyan]{escape(_DEFAULT_VALUES[name])}[/cyan].[/red]"
        )


def _warn_custom_webpack_config(console: Console, config: BeesConfig, paths: ProjectPaths) -> None:
    config_file = resolve_webpack_config(config, paths)
    if config_file is not None and not config_file.is_file():
        console.print(f"[yellow]Webpack config {escape(str(config_file))} does not exist.[/yellow]")
    elif config_file is not None:
        console.print(
            f"[yellow]Using custom webpack config {escape(config_file.name)}; "
            "it overrides the built-in build settings.[/yellow]"
        )


@click.command("build", context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--debug", is_flag=True, default=False, help="Build without compression")
@click.option("--watch", "-w", is_flag=True, default=False, help="Watch file changes and rebuild")
@click.option("--output-path", "-o", type=str, default=None, help="Specify output path")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging to stderr")
def build_command(debug: bool, watch: bool, output_path: str | None, verbose: bool) -> None:
    """Create a production build and report gzip sizes.

    Sizes are compared with whatever the output directory held before the
    build, so growth or shrinkage of each bundle shows next to its size.

    \b
    Examples:
        bees build
        bees build --debug
        bees build --watch -o public/build
    """
    setup_logging(verbose)
    console = Console()
    environment = os.environ.get("NODE_ENV") or "production"
    paths = ProjectPaths.from_cwd()

    try:
        config = load_config(environment, paths.app_directory)
    except ConfigError as e:
        click.echo(click.style("Failed to parse .beesrc config.", fg="red"))
        click.echo()
        click.echo(str(e))
        sys.exit(1)

    _warn_defaults(console, config)

    session = BuildSession.create(
        cwd=paths.app_directory,
        output_path=output_path,
        debug=debug,
        watch=watch,
        config=config,
    )
    _warn_custom_webpack_config(console, config, session.paths)
    bundler = WebpackBundler(config, session.paths, session.output_dir, debug=debug)

    try:
        asyncio.run(run_build(session, bundler, console))
    except BuildFailed:
        sys.exit(1)
    except KeyboardInterrupt:
        if not watch:
            raise
        console.print()
        console.print("Stopped watching.")


__all__ = ["build_command"]
