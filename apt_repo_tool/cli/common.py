"""
Shared helpers for CLI commands.

Commands build their service from the options stored on the click
context by the group callback.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

import click

from ..models import AptRepoBaseModel, ServerSettings
from ..services import RepositoryService
from ..signing import KeyringSigner
from ..utils.config_manager import ConfigManager


def load_config(ctx: click.Context) -> ConfigManager:
    """
    Configuration named by --config, or the default location if present.

    An explicit --config file must load; the default file is optional.
    """
    path = ctx.obj.get("config")
    config = ConfigManager(path, optional=path is None)
    config.load()
    return config


def load_settings(ctx: click.Context, config: ConfigManager) -> ServerSettings:
    settings = ServerSettings.from_config(config, cwd=ctx.obj.get("cwd"))
    logging.debug("Repository root: %s", settings.repos_dir)
    return settings


@contextmanager
def repository_service(ctx: click.Context) -> Iterator[RepositoryService]:
    """
    Build a RepositoryService from the CLI context and close it afterwards.

    Yields:
        Service wired with the configured keyring signer
    """
    settings = load_settings(ctx, load_config(ctx))
    signer = KeyringSigner(settings.keyring_file, settings.passphrase)
    service = RepositoryService(settings, signer)
    try:
        yield service
    finally:
        service.close()


def echo_model(model: AptRepoBaseModel) -> None:
    """Print a response model as JSON."""
    click.echo(model.model_dump_json(indent=2))


__all__ = ["load_config", "load_settings", "repository_service", "echo_model"]
