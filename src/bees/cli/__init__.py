"""Bees CLI.

Commands:
    build   - Production build with gzip size deltas
"""
from __future__ import annotations

import click

from bees import __version__

from .build_cmd import build_command


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="bees")
def cli() -> None:
    """Bees - build frontend projects and keep an eye on bundle size.

    \b
    Quick start:
      bees build                 Optimized production build
      bees build --watch         Rebuild on change
    """


cli.add_command(build_command, name="build")


def main() -> None:
    cli()


__all__ = ["cli", "main"]
