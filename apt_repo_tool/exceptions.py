"""
Exception hierarchy for apt-repo-tool.

Every error raised by the repository core derives from AptRepoError and
falls under one of the classification bases below, so that the command
line boundary can map it to a coarse outcome (bad input, not found,
forbidden, internal failure) without inspecting messages.
"""

from typing import Optional


class AptRepoError(Exception):
    """Base class for all apt-repo-tool errors."""


# ============================================================================
# Classification Bases
# ============================================================================


class MalformedInputError(AptRepoError):
    """Input failed validation; the operation was aborted before any persisted change."""


class NotFoundError(AptRepoError):
    """A named resource (repository, archive section, signing key) does not exist."""


class PolicyError(AptRepoError):
    """The request is well-formed but not allowed."""


class SigningError(AptRepoError):
    """The signing backend could not produce a signature."""


# ============================================================================
# Malformed Input
# ============================================================================


class InvalidArchiveError(MalformedInputError):
    """
    A Debian binary package failed structural validation.

    Attributes:
        path: Path of the archive that was rejected
        cause: Underlying error or reason
    """

    def __init__(self, path: str, cause: object) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Deb file '{path}' was not valid: {cause}")


class InvalidControlError(MalformedInputError):
    """The control descriptor of a package is unusable."""


class UnsupportedArchitectureError(MalformedInputError):
    """An architecture tag outside of the supported groups."""

    def __init__(self, architecture: str) -> None:
        self.architecture = architecture
        super().__init__(f"Unsupported architecture: {architecture}")


class InvalidSettingError(MalformedInputError):
    """A configuration or settings value could not be parsed."""


# ============================================================================
# Not Found
# ============================================================================


class RepositoryNotFoundError(NotFoundError):
    """No persisted state exists for the named repository."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Repository not found: {name}")


class SectionNotFoundError(NotFoundError):
    """An archive has no section with the requested name."""

    def __init__(self, archive: str, section: str) -> None:
        self.archive = archive
        self.section = section
        super().__init__(f"Section '{section}' was not found in deb '{archive}'")


class ControlMemberNotFoundError(NotFoundError):
    """The control tarball has no member with the requested name."""

    def __init__(self, archive: str, member: str) -> None:
        self.archive = archive
        self.member = member
        super().__init__(f"Control member '{member}' was not found in deb '{archive}'")


class UnknownKeyError(NotFoundError):
    """The key identifier matches nothing in the keyring."""

    def __init__(self, key_id: str) -> None:
        self.key_id = key_id
        super().__init__(f"Unable to find a key with ID: {key_id}")


# ============================================================================
# Policy
# ============================================================================


class AlreadySignedError(PolicyError):
    """The archive already carries a builder signature section."""

    def __init__(self, archive: str) -> None:
        self.archive = archive
        super().__init__(f"{archive} already signed.")


class ForbiddenOperationError(PolicyError):
    """The operation is not permitted on this repository."""


# ============================================================================
# Signing
# ============================================================================


class AmbiguousIdentityError(SigningError):
    """A key has other than exactly one user identity."""

    def __init__(self, key_id: str, count: int, maximum: int = 1) -> None:
        self.key_id = key_id
        self.count = count
        if count == 0:
            message = f"Key '{key_id}' has no identities"
        else:
            message = f"Key '{key_id}' has {count} identities, can only handle {maximum}"
        super().__init__(message)


class SigningKeyUnavailableError(SigningError):
    """No usable signing key is available."""

    def __init__(self, message: str, key_id: Optional[str] = None) -> None:
        self.key_id = key_id
        super().__init__(message)


__all__ = [
    "AptRepoError",
    "MalformedInputError",
    "NotFoundError",
    "PolicyError",
    "SigningError",
    "InvalidArchiveError",
    "InvalidControlError",
    "UnsupportedArchitectureError",
    "InvalidSettingError",
    "RepositoryNotFoundError",
    "SectionNotFoundError",
    "ControlMemberNotFoundError",
    "UnknownKeyError",
    "AlreadySignedError",
    "ForbiddenOperationError",
    "AmbiguousIdentityError",
    "SigningKeyUnavailableError",
]
