"""
Repository commands for the apt-repo-tool CLI.

This module provides the prepare, list, create and delete commands.
"""

import logging
import sys
from typing import Optional

import click
from pydantic import ValidationError

from ..models import RepoConfig
from ..utils.constants import EXIT_BAD_INPUT
from ..utils.error_handling import with_error_handling
from .common import echo_model, load_config, repository_service


@click.command()
@click.pass_context
@with_error_handling("prepare operation")
def prepare(ctx: click.Context) -> None:
    """Create working directories and apply every [[repos]] entry of the configuration."""
    shared = load_config(ctx).get_map_list("repos")
    with repository_service(ctx) as service:
        names = service.prepare(shared)
    for name in names:
        click.echo(name)


@click.command(name="list")
@click.pass_context
@with_error_handling("list operation")
def list_repos(ctx: click.Context) -> None:
    """List repositories and their configuration."""
    with repository_service(ctx) as service:
        echo_model(service.list_repositories())


@click.command()
@click.option("--origin", help="Origin field of Release files")
@click.option("--label", help="Label field of Release files")
@click.option("--description", help="Description field of Release files")
@click.option("--codename", help="Distribution name under dists/")
@click.option("--component", help="Component name (default: main)")
@click.option("--sign", is_flag=True, help="Sign packages and Release files with the default key")
@click.option(
    "-j",
    "--json-data",
    help="JSON repository configuration. CLI options are ignored when JSON data is provided",
)
@click.pass_context
@with_error_handling("create operation")
def create(  # pylint: disable=too-many-arguments,too-many-positional-arguments
    ctx: click.Context,
    origin: Optional[str],
    label: Optional[str],
    description: Optional[str],
    codename: Optional[str],
    component: Optional[str],
    sign: bool,
    json_data: Optional[str],
) -> None:
    """Create an ephemeral repository and print its name."""
    if json_data:
        try:
            config = RepoConfig.model_validate_json(json_data)
        except ValidationError as e:
            logging.error("Unable to validate json data:")
            for error in e.errors():
                if error["type"] == "json_invalid":
                    logging.error("Invalid JSON: %s", error["msg"])
                else:
                    logging.error("%s-%s: %s", e.title, error["loc"][0] if error["loc"] else "", error["msg"])
            sys.exit(EXIT_BAD_INPUT)
    else:
        options = {
            "origin": origin,
            "label": label,
            "description": description,
            "codename": codename,
            "component": component,
        }
        config = RepoConfig(sign=sign, **{k: v for k, v in options.items() if v is not None})

    with repository_service(ctx) as service:
        echo_model(service.create_repository(config))


@click.command()
@click.argument("name")
@click.pass_context
@with_error_handling("delete operation")
def delete(ctx: click.Context, name: str) -> None:
    """Delete the ephemeral repository NAME."""
    with repository_service(ctx) as service:
        service.delete_repository(name)
    click.echo(f"Deleted {name}")


__all__ = ["prepare", "list_repos", "create", "delete"]
