"""
Test fixtures and helpers for apt-repo-tool tests.

This module provides common fixtures for building synthetic Debian
packages, repository settings rooted in a temporary directory, a
recording signer and a real OpenPGP keyring.
"""

import io
import tarfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pgpy
import pytest
from pgpy.constants import (
    CompressionAlgorithm,
    HashAlgorithm,
    KeyFlags,
    PubKeyAlgorithm,
    SymmetricKeyAlgorithm,
)

from apt_repo_tool.models import ServerSettings

AR_MAGIC = b"!<arch>\n"

DEFAULT_CONTROL = {
    "Package": "foo",
    "Version": "1.0",
    "Architecture": "amd64",
    "Maintainer": "Test Maintainer <maint@example.com>",
    "Description": "test package\n A package used by the test suite.",
}


# ============================================================================
# Synthetic package builders
# ============================================================================


def ar_member(name: str, data: bytes, mtime: int = 0) -> bytes:
    """Encode one ar member, padded to an even length."""
    header = b"%-16s%-12d%-6d%-6d%-8s%-10d`\n" % (name.encode("ascii"), mtime, 0, 0, b"100644", len(data))
    body = header + data
    if len(data) % 2:
        body += b"\n"
    return body


def render_control(control: Dict[str, str]) -> str:
    return "".join(f"{key}: {value}\n" for key, value in control.items())


def control_tarball(files: Dict[str, str], *, with_dir: bool = True) -> bytes:
    """Build a control.tar.gz holding the given members."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        if with_dir:
            info = tarfile.TarInfo("./")
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        for name, text in files.items():
            data = text.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def build_deb(
    path: Path,
    control: Optional[Dict[str, str]] = None,
    *,
    control_text: Optional[str] = None,
    version: bytes = b"2.0\n",
    members: Optional[List[Tuple[str, bytes]]] = None,
) -> Path:
    """
    Write a synthetic .deb file.

    Args:
        path: Destination path
        control: Control fields (defaults to DEFAULT_CONTROL)
        control_text: Raw control text overriding control
        version: Body of the debian-binary section
        members: Explicit member list overriding the standard layout

    Returns:
        The written path
    """
    if members is None:
        text = control_text if control_text is not None else render_control(control or DEFAULT_CONTROL)
        members = [
            ("debian-binary", version),
            ("control.tar.gz", control_tarball({"./control": text})),
            ("data.tar.gz", control_tarball({"./usr/share/doc/foo/README": "hello\n"}, with_dir=False)),
        ]
    content = AR_MAGIC + b"".join(ar_member(name, data) for name, data in members)
    path.write_bytes(content)
    return path


@pytest.fixture
def make_deb(tmp_path):
    """Factory writing synthetic packages into an uploads directory."""
    uploads = tmp_path / "uploads"
    uploads.mkdir()

    def _make(filename: str = "foo_1.0_amd64.deb", control: Optional[Dict[str, str]] = None, **kwargs) -> Path:
        return build_deb(uploads / filename, control, **kwargs)

    return _make


@pytest.fixture
def deb_file(make_deb):
    """A valid amd64 package foo 1.0."""
    return make_deb()


# ============================================================================
# Settings and signers
# ============================================================================


@pytest.fixture
def settings(tmp_path):
    """Server settings rooted in a temporary directory."""
    return ServerSettings(cwd=str(tmp_path), default_key="DEADBEEF")


class RecordingSigner:
    """Signing capability that produces recognisable fake output."""

    identity = "Test Builder (ci) <builder@example.com>"

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []

    def find_signer_identity(self, key_id: str) -> str:
        self.calls.append(("identity", key_id))
        return self.identity

    def detached_sign(self, file_path: str, output_path: str, key_id: str) -> None:
        self.calls.append(("detached", key_id))
        Path(output_path).write_text(f"SIGNATURE OF {Path(file_path).name} BY {key_id}\n")

    def export_public_key(self, key_id: str, output_path: str) -> None:
        self.calls.append(("export", key_id))
        Path(output_path).write_text(f"PUBLIC KEY {key_id}\n")

    def clearsign(self, source, output, key_id: str) -> None:
        self.calls.append(("clearsign", key_id))
        output.write(b"-----BEGIN PGP SIGNED MESSAGE-----\nHash: SHA256\n\n")
        output.write(source.read())
        output.write(f"-----BEGIN PGP SIGNATURE-----\n{key_id}\n-----END PGP SIGNATURE-----\n".encode("ascii"))


@pytest.fixture
def signer():
    """Recording fake signer."""
    return RecordingSigner()


# ============================================================================
# OpenPGP keys
# ============================================================================


def generate_key(name: str, email: str, comment: str = "") -> pgpy.PGPKey:
    """Generate a signing-capable RSA key with one user id."""
    key = pgpy.PGPKey.new(PubKeyAlgorithm.RSAEncryptOrSign, 2048)
    uid = pgpy.PGPUID.new(name, comment=comment, email=email)
    key.add_uid(
        uid,
        usage={KeyFlags.Sign, KeyFlags.Certify},
        hashes=[HashAlgorithm.SHA256],
        ciphers=[SymmetricKeyAlgorithm.AES256],
        compression=[CompressionAlgorithm.ZLIB],
    )
    return key


@pytest.fixture(scope="session")
def pgp_key():
    """A secret key shared by the whole session."""
    return generate_key("Repo Signer", "signer@example.com", comment="test")


@pytest.fixture(scope="session")
def other_pgp_key():
    """A second secret key with a different identity."""
    return generate_key("Other Signer", "other@example.com")


@pytest.fixture
def keyring_file(tmp_path, pgp_key):
    """Armored keyring file holding pgp_key."""
    path = tmp_path / "keyring"
    path.write_text(str(pgp_key))
    return path


@pytest.fixture
def short_key_id(pgp_key):
    """Short (32-bit) hex id of pgp_key."""
    return pgp_key.fingerprint.keyid[-8:]


@pytest.fixture
def write_ar(tmp_path):
    """Factory writing an ar container from (name, data) pairs."""

    def _write(filename: str, members: List[Tuple[str, bytes]]) -> Path:
        path = tmp_path / filename
        path.write_bytes(AR_MAGIC + b"".join(ar_member(name, data) for name, data in members))
        return path

    return _write


@pytest.fixture
def make_control_tarball():
    """Factory building control.tar.gz bytes from a member map."""
    return control_tarball
