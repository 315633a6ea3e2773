"""Response models produced by control-plane operations."""

from typing import Dict, List

from .base import AptRepoBaseModel
from .repository import RepoConfig


class RepositoryListResponse(AptRepoBaseModel):
    """Every loadable repository and its configuration."""

    repos: Dict[str, RepoConfig]


class CreateResponse(AptRepoBaseModel):
    """Name of a newly created ephemeral repository."""

    name: str


class KeyResponse(AptRepoBaseModel):
    """
    Result of exporting a repository's public key.

    Attributes:
        id: Key identifier
        filename: File name of the armored key under the files directory
    """

    id: str
    filename: str


class PackageListResponse(AptRepoBaseModel):
    """Package name -> version -> architecture groups."""

    packages: Dict[str, Dict[str, List[str]]]


__all__ = ["RepositoryListResponse", "CreateResponse", "KeyResponse", "PackageListResponse"]
