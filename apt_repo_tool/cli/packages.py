"""
Package commands for the apt-repo-tool CLI.

This module provides the include, remove and packages commands.
"""

from typing import Optional, Tuple

import click

from ..models import RemoveRequest
from ..utils.error_handling import with_error_handling
from ..utils.logging_utils import format_count_with_unit
from .common import echo_model, repository_service


@click.command()
@click.argument("name")
@click.argument("debs", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.pass_context
@with_error_handling("include operation")
def include(ctx: click.Context, name: str, debs: Tuple[str, ...]) -> None:
    """Add one or more DEBS to repository NAME.

    Each file is staged and ingested separately; the originals are left
    untouched even when the repository signs packages.
    """
    with repository_service(ctx) as service:
        for deb in debs:
            record = service.include_file(name, deb)
            click.echo(record.filename)
    click.echo(f"Included {format_count_with_unit(len(debs), 'package')} in {name}", err=True)


@click.command()
@click.argument("name")
@click.option("--package", "package_name", required=True, help="Package name")
@click.option("--version", "package_version", required=True, help="Package version")
@click.option(
    "--arch",
    "arches",
    multiple=True,
    help="Architecture group (i386, amd64 or source); may be repeated (default: all)",
)
@click.pass_context
@with_error_handling("remove operation")
def remove(
    ctx: click.Context,
    name: str,
    package_name: Optional[str],
    package_version: Optional[str],
    arches: Tuple[str, ...],
) -> None:
    """Remove a package version from repository NAME."""
    request = RemoveRequest(name=package_name, version=package_version, arches=list(arches))
    with repository_service(ctx) as service:
        service.remove(name, request)


@click.command(name="packages")
@click.argument("name")
@click.pass_context
@with_error_handling("packages operation")
def list_packages(ctx: click.Context, name: str) -> None:
    """List packages of repository NAME by version and architecture group."""
    with repository_service(ctx) as service:
        echo_model(service.list_packages(name))


__all__ = ["include", "remove", "list_packages"]
