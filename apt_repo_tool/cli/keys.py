"""
Key export command for the apt-repo-tool CLI.
"""

import click

from ..utils.error_handling import with_error_handling
from .common import echo_model, repository_service


@click.command()
@click.argument("name")
@click.pass_context
@with_error_handling("key export")
def key(ctx: click.Context, name: str) -> None:
    """Export the public signing key of repository NAME to the files directory."""
    with repository_service(ctx) as service:
        echo_model(service.export_key(name))


__all__ = ["key"]
