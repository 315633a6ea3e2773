"""
apt-repo-tool - Manage APT package repositories on the local filesystem.

This package ingests Debian binary packages into named repositories,
regenerates Packages/Sources/Release metadata and signs packages and
Release files with OpenPGP keys.
"""

from ._version import __version__

# Import main classes and functions for easy access
from .archive import DebArchive
from .repository import RepositoryStore
from .services import NameAllocator, RepositoryService
from .signing import KeyringSigner
from .utils import HashingSink, setup_logging, WrappingFormatter
from .cli import main as cli_main, cli as cli_group

__all__ = [
    "__version__",
    "DebArchive",
    "RepositoryStore",
    "NameAllocator",
    "RepositoryService",
    "KeyringSigner",
    "HashingSink",
    "setup_logging",
    "WrappingFormatter",
    "cli_main",
    "cli_group",
]
