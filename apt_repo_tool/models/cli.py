"""Models for validating control-plane request input."""

from typing import List

from pydantic import field_validator

from .base import AptRepoBaseModel
from .package import Architecture


class RemoveRequest(AptRepoBaseModel):
    """
    Request to remove one package version from a repository.

    Attributes:
        name: Package name
        version: Package version
        arches: Architecture groups to remove from (all groups when empty)
    """

    name: str
    version: str
    arches: List[str] = []

    @field_validator("name", "version")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Validate that name and version are not empty."""
        if not v:
            raise ValueError("must not be empty")
        return v

    def target_arches(self) -> List[str]:
        """Requested architectures, defaulting to every group."""
        if self.arches:
            return list(self.arches)
        return [architecture.value for architecture in Architecture]


__all__ = ["RemoveRequest"]
