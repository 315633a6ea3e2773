"""
Pydantic models for apt-repo-tool.

This package contains all Pydantic models used in the application:
- package, repository: Index records, repository configuration and persisted state
- settings: Process-wide settings
- cli, results: Control-plane requests and responses
"""

from .base import AptRepoBaseModel
from .package import Architecture, PackageRecord
from .repository import PackageDetails, PackageGroup, PackageIndex, RepoConfig, RepoFile, RepositoryState
from .settings import ServerSettings
from .cli import RemoveRequest
from .results import CreateResponse, KeyResponse, PackageListResponse, RepositoryListResponse

__all__ = [
    "AptRepoBaseModel",
    "Architecture",
    "PackageRecord",
    "PackageDetails",
    "PackageGroup",
    "PackageIndex",
    "RepoConfig",
    "RepoFile",
    "RepositoryState",
    "ServerSettings",
    "RemoveRequest",
    "CreateResponse",
    "KeyResponse",
    "PackageListResponse",
    "RepositoryListResponse",
]
