"""
Debian binary package reader and validator.

This module opens a .deb container, verifies its preamble, locates named
sections, extracts the control descriptor and appends a builder signature
section. It is a verification gate rather than a best-effort reader: any
structural deviation is rejected with InvalidArchiveError.
"""

import hashlib
import io
import logging
import os
import tarfile
import zlib
from datetime import datetime
from typing import Dict, List, Optional

from debian import arfile, deb822

from ..exceptions import (
    AlreadySignedError,
    ControlMemberNotFoundError,
    InvalidArchiveError,
    SectionNotFoundError,
)
from ..protocols import SigningProtocol
from ..utils.constants import (
    CONTROL_SECTION,
    COPY_CHUNK_SIZE,
    DEBIAN_BINARY_SECTION,
    DEBIAN_BINARY_VERSION,
    SIGNATURE_DATE_FORMAT,
    SIGNATURE_MODE,
    SIGNATURE_SECTION,
)
from .ar_writer import AR_GLOBAL_HEADER_SIZE, AR_MEMBER_HEADER_SIZE, append_member

ControlParagraph = Dict[str, str]


def _section_name(member: arfile.ArMember) -> str:
    return member.name.strip("/")


class DebArchive:
    """
    An opened Debian binary package.

    Use DebArchive.open() to get a validated instance; it can be used as a
    context manager to close the underlying file.
    """

    def __init__(self, path: str, fh: io.BufferedRandom) -> None:
        self.path = path
        self._fh = fh

    @classmethod
    def open(cls, path: str) -> "DebArchive":
        """
        Open and validate a package.

        Args:
            path: Path to the .deb file

        Returns:
            Validated archive positioned at the start of the file

        Raises:
            InvalidArchiveError: If the preamble is not a v2.0 debian-binary section
            OSError: If the file cannot be opened
        """
        fh = open(path, "r+b")  # pylint: disable=consider-using-with
        archive = cls(path, fh)
        try:
            archive.validate()
        except Exception:
            fh.close()
            raise
        return archive

    def close(self) -> None:
        self._fh.close()

    def __enter__(self) -> "DebArchive":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __str__(self) -> str:
        return self.path

    # ------------------------------------------------------------------
    # Section access
    # ------------------------------------------------------------------

    def _members(self) -> List[arfile.ArMember]:
        """Index the container; every section body must lie within the file."""
        self._fh.flush()
        try:
            members = arfile.ArFile(filename=self.path).getmembers()
            file_size = os.fstat(self._fh.fileno()).st_size
        except (arfile.ArError, OSError, ValueError) as e:
            raise InvalidArchiveError(self.path, e) from e

        offset = AR_GLOBAL_HEADER_SIZE
        for member in members:
            end = offset + AR_MEMBER_HEADER_SIZE + member.size
            if end > file_size:
                raise InvalidArchiveError(self.path, f"section '{_section_name(member)}' is truncated")
            offset = end + member.size % 2
        return members

    def validate(self) -> None:
        """
        Check the debian-binary preamble and rewind.

        Raises:
            InvalidArchiveError: If the first section is not debian-binary or
                its version text is not 2.0
        """
        members = self._members()
        if not members:
            raise InvalidArchiveError(self.path, "archive has no sections")

        first = members[0]
        name = _section_name(first)
        if name != DEBIAN_BINARY_SECTION:
            raise InvalidArchiveError(
                self.path, f"First file in .deb must be '{DEBIAN_BINARY_SECTION}', not '{name}'"
            )

        try:
            version = first.read(10).decode("ascii").strip()
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidArchiveError(self.path, e) from e
        finally:
            first.close()
        if version != DEBIAN_BINARY_VERSION:
            raise InvalidArchiveError(self.path, f"Only v{DEBIAN_BINARY_VERSION} .deb files supported, not v{version}")

        self._fh.seek(0)

    def find_section(self, name: str) -> arfile.ArMember:
        """
        Locate a section by name.

        Args:
            name: Section name, compared after trimming slashes

        Returns:
            The matching ar member, readable from its start; the caller closes it

        Raises:
            SectionNotFoundError: If no section has that name
            InvalidArchiveError: If the container cannot be read
        """
        for member in self._members():
            if _section_name(member) == name:
                return member
            member.close()
        raise SectionNotFoundError(self.path, name)

    def has_section(self, name: str) -> bool:
        try:
            self.find_section(name).close()
        except SectionNotFoundError:
            return False
        return True

    # ------------------------------------------------------------------
    # Control data
    # ------------------------------------------------------------------

    def control(self, filename: str = "control") -> List[ControlParagraph]:
        """
        Extract and parse a member of control.tar.gz.

        Args:
            filename: Member name inside the control tarball (leading ./ ignored)

        Returns:
            List of paragraphs; each maps field name to verbatim value,
            in the order the fields appear

        Raises:
            SectionNotFoundError: If the archive has no control.tar.gz
            ControlMemberNotFoundError: If the tarball has no such member
            InvalidArchiveError: If the tarball or its text cannot be decoded
        """
        section = self.find_section(CONTROL_SECTION)
        try:
            with tarfile.open(fileobj=section, mode="r|gz") as tar:
                for info in tar:
                    if info.isdir():
                        continue
                    member_name = info.name
                    if member_name.startswith("./"):
                        member_name = member_name[2:]
                    if member_name != filename:
                        continue
                    extracted = tar.extractfile(info)
                    if extracted is None:
                        raise InvalidArchiveError(self.path, f"control member '{filename}' is not a regular file")
                    text = extracted.read().decode("utf-8")
                    break
                else:
                    raise ControlMemberNotFoundError(self.path, filename)
        except (tarfile.TarError, EOFError, zlib.error, OSError, UnicodeDecodeError) as e:
            raise InvalidArchiveError(self.path, e) from e
        finally:
            section.close()

        paragraphs = deb822.Deb822.iter_paragraphs(text.splitlines(), use_apt_pkg=False)
        return [dict(paragraph) for paragraph in paragraphs]

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def digest_manifest(self) -> str:
        """
        Compute the per-section digest manifest.

        Each section contributes one line of the form
        "\\t<md5> <sha1> <size> <name>\\n"; digests are independent per section.

        Returns:
            Concatenated manifest lines
        """
        lines = []
        for member in self._members():
            md5 = hashlib.md5()
            sha1 = hashlib.sha1()
            read = 0
            try:
                for chunk in iter(lambda: member.read(COPY_CHUNK_SIZE), b""):
                    md5.update(chunk)
                    sha1.update(chunk)
                    read += len(chunk)
            except OSError as e:
                raise InvalidArchiveError(self.path, e) from e
            finally:
                member.close()
            if read != member.size:
                raise InvalidArchiveError(
                    self.path, f"section '{_section_name(member)}' has {read} of {member.size} bytes"
                )
            lines.append(f"\t{md5.hexdigest()} {sha1.hexdigest()} {member.size} {_section_name(member)}\n")
        return "".join(lines)

    def sign(self, key_id: str, signer: SigningProtocol, now: Optional[datetime] = None) -> None:
        """
        Append a clearsigned builder manifest as a trailing _gpgbuilder section.

        Args:
            key_id: Signing key identifier
            signer: Signing capability used for the identity and the signature
            now: Timestamp for the manifest (defaults to the current local time)

        Raises:
            AlreadySignedError: If a _gpgbuilder section already exists
            UnknownKeyError: If the key is not in the keyring
        """
        if self.has_section(SIGNATURE_SECTION):
            raise AlreadySignedError(self.path)

        identity = signer.find_signer_identity(key_id)
        now = now or datetime.now()

        manifest = "Version: 4\n"
        manifest += f"Signer: {identity}\n"
        manifest += f"Date: {now.strftime(SIGNATURE_DATE_FORMAT)}\n"
        manifest += "Role: builder\n"
        manifest += "Files:\n"
        manifest += self.digest_manifest()

        signed = io.BytesIO()
        signer.clearsign(io.BytesIO(manifest.encode("utf-8")), signed, key_id)

        append_member(
            self._fh,
            SIGNATURE_SECTION,
            signed.getvalue(),
            mtime=int(now.timestamp()),
            uid=0,
            gid=0,
            mode=SIGNATURE_MODE,
        )
        logging.debug("Appended %s section to %s", SIGNATURE_SECTION, self.path)


__all__ = ["DebArchive", "ControlParagraph"]
