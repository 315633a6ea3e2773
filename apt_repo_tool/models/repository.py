"""Repository-related models for apt-repo-tool."""

from typing import Dict, Iterator, List, Tuple

from pydantic import Field

from ..utils.constants import (
    DEFAULT_CODENAME,
    DEFAULT_COMPONENT,
    DEFAULT_DESCRIPTION,
    DEFAULT_LABEL,
    DEFAULT_ORIGIN,
)
from .base import AptRepoBaseModel
from .package import Architecture, PackageRecord

# name -> version -> record
PackageGroup = Dict[str, Dict[str, PackageRecord]]

# name -> version -> architecture groups containing it
PackageDetails = Dict[str, Dict[str, List[str]]]


class RepoConfig(AptRepoBaseModel):
    """
    Configuration of a repository.

    Attributes:
        origin: Origin field of Release files
        label: Label field of Release files
        description: Description field of Release files
        codename: Distribution directory under dists/
        component: Component name (pool and dists subdirectory)
        sign: Whether packages and Release files are signed
        gpgkey: Hex key id used when signing
    """

    origin: str = DEFAULT_ORIGIN
    label: str = DEFAULT_LABEL
    description: str = DEFAULT_DESCRIPTION
    codename: str = DEFAULT_CODENAME
    component: str = DEFAULT_COMPONENT
    sign: bool = False
    gpgkey: str = ""


class RepoFile(AptRepoBaseModel):
    """Size and digests of a generated metadata file."""

    size: int = Field(ge=0)
    sha1: str
    sha256: str
    md5: str


class PackageIndex(AptRepoBaseModel):
    """
    Packages partitioned by architecture group.

    Each group maps package name to a map of version to record. Empty
    version maps and name entries are pruned as soon as they become empty.
    """

    i386: PackageGroup = Field(default_factory=dict)
    amd64: PackageGroup = Field(default_factory=dict)
    source: PackageGroup = Field(default_factory=dict)

    def group(self, architecture: Architecture) -> PackageGroup:
        return getattr(self, architecture.value)

    def get(self, architecture: Architecture, name: str, version: str) -> PackageRecord:
        """
        Get a record.

        Raises:
            KeyError: If the triple is not indexed
        """
        return self.group(architecture)[name][version]

    def put(self, architecture: Architecture, name: str, version: str, record: PackageRecord) -> None:
        """Insert or overwrite the record for a triple."""
        self.group(architecture).setdefault(name, {})[version] = record

    def remove(self, architecture: Architecture, name: str, version: str) -> bool:
        """
        Remove a triple, pruning containers left empty.

        Returns:
            True if a record was removed
        """
        group = self.group(architecture)
        versions = group.get(name)
        if versions is None or version not in versions:
            return False
        del versions[version]
        if not versions:
            del group[name]
        return True

    def records(self, architecture: Architecture) -> Iterator[Tuple[str, str, PackageRecord]]:
        """Yield (name, version, record) of a group in sorted order."""
        group = self.group(architecture)
        for name in sorted(group):
            for version in sorted(group[name]):
                yield name, version, group[name][version]

    def details(self) -> PackageDetails:
        """Map every package name to its versions and the groups holding them."""
        packages: PackageDetails = {}
        for architecture in Architecture:
            for name, versions in self.group(architecture).items():
                for version in versions:
                    packages.setdefault(name, {}).setdefault(version, []).append(architecture.value)
        return packages

    def count(self) -> int:
        """Number of indexed (architecture, name, version) triples."""
        return sum(len(versions) for arch in Architecture for versions in self.group(arch).values())


class RepositoryState(AptRepoBaseModel):
    """
    Persisted state of a repository (the .meta file).

    Attributes:
        config: Repository configuration
        packages: Package index
        files: Generated metadata files keyed by path relative to dists/<codename>
    """

    config: RepoConfig = Field(default_factory=RepoConfig)
    packages: PackageIndex = Field(default_factory=PackageIndex)
    files: Dict[str, RepoFile] = Field(default_factory=dict)


__all__ = [
    "RepoConfig",
    "RepoFile",
    "PackageIndex",
    "PackageGroup",
    "PackageDetails",
    "RepositoryState",
]
