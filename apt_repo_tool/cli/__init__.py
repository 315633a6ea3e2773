"""
Unified CLI entry point for apt-repo-tool operations using Click.

This module provides the main CLI group and shared options.
"""

import sys
from typing import Optional

import click

from . import keys, packages, repos
from .._version import __version__
from ..utils import setup_logging
from ..utils.constants import DEFAULT_CONFIG_PATH, EXIT_CANCELLED

# ============================================================================
# CLI Group
# ============================================================================


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="apt-repo-tool")
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH}, optional)",
)
@click.option(
    "--cwd",
    type=click.Path(file_okay=False),
    help="Base directory for relative paths (overrides path.cwd)",
)
@click.option(
    "-d",
    "--debug",
    count=True,
    help="Increase verbosity (use -d for INFO, -dd for DEBUG)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], cwd: Optional[str], debug: int) -> None:
    """apt-repo-tool - Manage APT package repositories on the local filesystem."""
    # Store shared options in context for subcommands to access
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["cwd"] = cwd
    ctx.obj["debug"] = debug

    setup_logging(debug, use_wrapping=True)


# Register subcommands
cli.add_command(repos.prepare)
cli.add_command(repos.list_repos)
cli.add_command(repos.create)
cli.add_command(repos.delete)
cli.add_command(packages.include)
cli.add_command(packages.remove)
cli.add_command(packages.list_packages)
cli.add_command(keys.key)


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()  # pylint: disable=no-value-for-parameter  # Click handles parameters
    except KeyboardInterrupt:
        click.echo("\n\nOperation cancelled by user", err=True)
        sys.exit(EXIT_CANCELLED)


__all__ = ["cli", "main"]
