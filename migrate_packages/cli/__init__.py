"""
Unified CLI entry point for package migration using Click.

This module provides the main CLI group. Every option can
also be set through the environment: click derives ``GHMP_<COMMAND>_<OPTION>``
names from the ``GHMP`` prefix, and the commonly used options additionally
accept flat names such as ``GHMP_SOURCE_TOKEN``.
"""

import sys

import click

from . import export, sync
from .._version import __version__
from ..utils.constants import EXIT_USER_INTERRUPT
from .options import ENVVAR_PREFIX


# ============================================================================
# CLI Group
# ============================================================================


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="migrate-packages")
@click.option(
    "-d",
    "--debug",
    count=True,
    help="Increase verbosity (use -d for INFO, -dd for DEBUG, -ddd for DEBUG with HTTP logs)",
)
@click.pass_context
def cli(ctx: click.Context, debug: int) -> None:
    """Migrate Packages - Export and migrate GitHub Packages between organizations."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


cli.add_command(export.export)
cli.add_command(sync.sync)


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli(auto_envvar_prefix=ENVVAR_PREFIX)  # pylint: disable=no-value-for-parameter  # Click handles parameters
    except KeyboardInterrupt:
        click.echo("\n\nOperation cancelled by user", err=True)
        sys.exit(EXIT_USER_INTERRUPT)


__all__ = ["cli", "main"]
