"""Base models for apt-repo-tool."""

from pydantic import BaseModel, ConfigDict


class AptRepoBaseModel(BaseModel):
    """Base model for all apt-repo-tool models."""

    model_config = ConfigDict(
        extra="forbid",  # Don't allow extra fields
        frozen=False,  # Allow modification (can be changed per model)
        validate_assignment=True,  # Validate on attribute assignment
    )


__all__ = ["AptRepoBaseModel"]
