"""Package and architecture models for apt-repo-tool."""

from enum import Enum
from typing import Dict

from pydantic import Field

from ..exceptions import UnsupportedArchitectureError
from ..utils.constants import PACKAGES_FILENAME, SOURCES_FILENAME
from .base import AptRepoBaseModel


class Architecture(str, Enum):
    """Architecture groups packages are indexed under."""

    I386 = "i386"
    AMD64 = "amd64"
    SOURCE = "source"

    @classmethod
    def classify(cls, value: str) -> "Architecture":
        """
        Classify an architecture tag case-insensitively.

        Args:
            value: Architecture field of a control file

        Returns:
            Matching architecture group

        Raises:
            UnsupportedArchitectureError: If the tag is not i386, amd64 or source
        """
        try:
            return cls(value.lower())
        except ValueError:
            raise UnsupportedArchitectureError(value) from None

    @property
    def index_dir(self) -> str:
        """Directory of this group under dists/<codename>/<component>/."""
        if self is Architecture.SOURCE:
            return "source"
        return f"binary-{self.value}"

    @property
    def index_filename(self) -> str:
        """Name of the package index file for this group."""
        if self is Architecture.SOURCE:
            return SOURCES_FILENAME
        return PACKAGES_FILENAME


def _field(name: str, value: str) -> str:
    # No space after the colon when the value is empty or opens on a continuation line
    separator = ":" if not value or value.startswith("\n") else ": "
    return f"{name}{separator}{value}\n"


class PackageRecord(AptRepoBaseModel):
    """
    One ingested package.

    Attributes:
        control: Control fields in file order, without Description
        description: Description field value
        filename: Pool path relative to the repository root
        size: Size of the stored package file in bytes
        sha1: SHA-1 of the stored package file
        sha256: SHA-256 of the stored package file
        md5: MD5 of the stored package file
    """

    control: Dict[str, str] = Field(default_factory=dict)
    description: str = ""
    filename: str
    size: int = Field(ge=0)
    sha1: str
    sha256: str
    md5: str

    def stanza(self) -> str:
        """Render the package index stanza, terminated by a blank line."""
        text = "".join(_field(name, value) for name, value in self.control.items())
        text += f"Filename: {self.filename}\n"
        text += f"Size: {self.size}\n"
        text += f"SHA1: {self.sha1}\n"
        text += f"SHA256: {self.sha256}\n"
        text += f"MD5Sum: {self.md5}\n"
        text += _field("Description", self.description)
        return text + "\n"


__all__ = ["Architecture", "PackageRecord"]
