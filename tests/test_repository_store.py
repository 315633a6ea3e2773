"""Tests for RepositoryStore."""

import gzip
import hashlib
import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from apt_repo_tool.archive import DebArchive
from apt_repo_tool.exceptions import (
    InvalidArchiveError,
    InvalidControlError,
    InvalidSettingError,
    RepositoryNotFoundError,
    SigningKeyUnavailableError,
    UnsupportedArchitectureError,
)
from apt_repo_tool.models import Architecture
from apt_repo_tool.repository import RepositoryStore, update_shared_repository

POOL_PATH = "pool/main/f/foo/foo_1.0_amd64.deb"


@pytest.fixture
def store(settings):
    """Unsigned repository with codename c and origin O."""
    store = RepositoryStore("test", settings.repos_dir)
    store.config.origin = "O"
    store.config.codename = "c"
    store.config.component = "main"
    store.save()
    return store


@pytest.fixture
def signed_store(settings, signer):
    """Repository signing with key DEADBEEF through the recording signer."""
    store = RepositoryStore("signed", settings.repos_dir, signer)
    store.config.codename = "c"
    store.config.sign = True
    store.config.gpgkey = "DEADBEEF"
    store.save()
    return store


def release_entries(release: str):
    """Parse the SHA256 block of a Release file into {path: (digest, size)}."""
    entries = {}
    in_block = False
    for line in release.splitlines():
        if line == "SHA256:":
            in_block = True
            continue
        if not line.startswith(" "):
            in_block = False
            continue
        if in_block:
            digest, size, path = line.split()
            entries[path] = (digest, int(size))
    return entries


def parse_release_blocks(release: str):
    """Parse every checksum block of a Release file into {block: {path: (digest, size)}}."""
    blocks = {}
    current = None
    for line in release.splitlines():
        if line in ("MD5Sum:", "SHA1:", "SHA256:"):
            current = blocks.setdefault(line[:-1], {})
            continue
        if line.startswith(" ") and current is not None:
            digest, size, path = line.split()
            current[path] = (digest, int(size))
        else:
            current = None
    return blocks


class TestPersistence:
    """Tests for loading and saving state."""

    def test_load_missing_repository(self, settings):
        """Test loading a repository without state raises RepositoryNotFoundError."""
        with pytest.raises(RepositoryNotFoundError) as exc_info:
            RepositoryStore.load("nope", settings.repos_dir)

        assert exc_info.value.name == "nope"

    def test_load_corrupt_state(self, store, settings):
        """Test a corrupt state file raises ValueError."""
        Path(store.state_path).write_text("{not json")

        with pytest.raises(ValueError):
            RepositoryStore.load("test", settings.repos_dir)

    def test_save_and_load(self, store, settings, deb_file):
        """Test a saved repository loads back with the same configuration and index."""
        store.add(str(deb_file))

        loaded = RepositoryStore.load("test", settings.repos_dir)

        assert loaded.config == store.config
        assert loaded.state.packages == store.state.packages
        assert loaded.files == store.files

    def test_state_document(self, store):
        """Test the state file is a JSON document with config, packages and files."""
        document = json.loads(Path(store.state_path).read_text())

        assert document["config"]["origin"] == "O"
        assert set(document["packages"]) == {"i386", "amd64", "source"}
        assert "main/binary-amd64/Packages" in document["files"]


class TestSave:
    """Tests for metadata generation."""

    def test_empty_repository_layout(self, store):
        """Test every group gets index files and a Release stanza."""
        dists = Path(store.dists_path)

        for group, index in (("binary-i386", "Packages"), ("binary-amd64", "Packages"), ("source", "Sources")):
            assert (dists / "main" / group / index).read_bytes() == b""
            assert gzip.decompress((dists / "main" / group / f"{index}.gz").read_bytes()) == b""
            assert (dists / "main" / group / "Release").is_file()

        assert len(store.files) == 9
        assert not (dists / "Release.gpg").exists()
        assert not (dists / "InRelease").exists()

    def test_group_release(self, store):
        """Test the per-group Release stanza content."""
        text = (Path(store.dists_path) / "main" / "binary-i386" / "Release").read_text()

        assert text == (
            "Component: main\n"
            "Origin: O\n"
            "Label: <label>\n"
            "Architecture: i386\n"
            "Description: <description>\n"
        )

    def test_top_level_release_header(self, store):
        """Test the header fields of the top-level Release file."""
        now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        text = store.release_text(now)

        assert text.startswith(
            "Origin: O\n"
            "Label: <label>\n"
            "Codename: c\n"
            "Date: Tue, 02 Jan 2024 03:04:05 UTC\n"
            "Architectures: i386 amd64\n"
            "Components: main\n"
            "Description: <description>\n"
            "MD5Sum:\n"
        )

    def test_release_date_is_utc(self, store):
        """Test non-UTC timestamps are rendered in UTC."""
        now = datetime(2024, 1, 2, 5, 4, 5, tzinfo=timezone(timedelta(hours=2)))

        assert "Date: Tue, 02 Jan 2024 03:04:05 UTC\n" in store.release_text(now)

    def test_checksum_cross_reference(self, store, deb_file):
        """Test every path in the Release checksum blocks matches the file on disk."""
        store.add(str(deb_file))
        release = (Path(store.dists_path) / "Release").read_text()
        blocks = parse_release_blocks(release)
        algorithms = {"MD5Sum": hashlib.md5, "SHA1": hashlib.sha1, "SHA256": hashlib.sha256}

        assert set(blocks) == set(algorithms)
        for block, entries in blocks.items():
            assert len(entries) == 9
            for path, (digest, size) in entries.items():
                data = (Path(store.dists_path) / path).read_bytes()
                assert len(data) == size
                assert algorithms[block](data).hexdigest() == digest

    def test_release_paths_sorted(self, store):
        """Test checksum lines are emitted in path order."""
        paths = list(release_entries((Path(store.dists_path) / "Release").read_text()))

        assert paths == sorted(paths)

    def test_save_is_reproducible(self, store, deb_file):
        """Test saving twice produces identical index files."""
        store.add(str(deb_file))
        first = dict(store.files)

        store.save()

        assert store.files == first


class TestAdd:
    """Tests for package ingestion."""

    def test_add_unsigned(self, store, deb_file):
        """Test ingesting foo 1.0 amd64 into an unsigned repository."""
        record = store.add(str(deb_file))
        repo = Path(store.path)

        pool_file = repo / POOL_PATH
        assert pool_file.read_bytes() == deb_file.read_bytes()
        assert record.filename == POOL_PATH
        assert record.size == pool_file.stat().st_size
        assert record.sha256 == hashlib.sha256(pool_file.read_bytes()).hexdigest()
        assert record.md5 == hashlib.md5(pool_file.read_bytes()).hexdigest()

        packages = (repo / "dists" / "c" / "main" / "binary-amd64" / "Packages").read_text()
        assert "Package: foo\n" in packages
        assert "Version: 1.0\n" in packages
        assert f"Filename: {POOL_PATH}\n" in packages
        assert f"SHA1: {record.sha1}\n" in packages
        assert packages.endswith("Description: test package\n A package used by the test suite.\n\n")

        gz = (repo / "dists" / "c" / "main" / "binary-amd64" / "Packages.gz").read_bytes()
        assert gzip.decompress(gz).decode("utf-8") == packages

        entries = release_entries((repo / "dists" / "c" / "Release").read_text())
        data = (repo / "dists" / "c" / "main" / "binary-amd64" / "Packages").read_bytes()
        assert entries["main/binary-amd64/Packages"] == (hashlib.sha256(data).hexdigest(), len(data))

        assert not (repo / "dists" / "c" / "Release.gpg").exists()
        assert not (repo / "dists" / "c" / "InRelease").exists()

    def test_add_leaves_other_groups_empty(self, store, deb_file):
        """Test an amd64 package is indexed only in its group."""
        store.add(str(deb_file))

        assert (Path(store.dists_path) / "main" / "binary-i386" / "Packages").read_bytes() == b""
        assert store.list_packages() == {"foo": {"1.0": ["amd64"]}}

    def test_add_same_version_replaces(self, store, make_deb):
        """Test re-adding a version replaces the stored record."""
        store.add(str(make_deb("a.deb")))
        control = {"Package": "foo", "Version": "1.0", "Architecture": "amd64", "Priority": "optional"}
        store.add(str(make_deb("b.deb", control)))

        assert store.state.packages.count() == 1
        assert store.state.packages.get(Architecture.AMD64, "foo", "1.0").control["Priority"] == "optional"

    def test_add_architecture_case_insensitive(self, store, make_deb):
        """Test the group is chosen case-insensitively while the pool path keeps the tag."""
        record = store.add(str(make_deb(control={"Package": "foo", "Version": "1.0", "Architecture": "I386"})))

        assert record.filename == "pool/main/f/foo/foo_1.0_I386.deb"
        assert "foo" in store.state.packages.i386

    def test_add_source(self, store, make_deb):
        """Test source packages are indexed in Sources."""
        store.add(str(make_deb(control={"Package": "bar", "Version": "2", "Architecture": "source"})))

        sources = (Path(store.dists_path) / "main" / "source" / "Sources").read_text()
        assert "Package: bar\n" in sources
        assert "Description:\n" in sources

    def test_add_unsupported_architecture(self, store, make_deb):
        """Test an unsupported architecture is rejected before anything is stored."""
        path = make_deb(control={"Package": "foo", "Version": "1.0", "Architecture": "arm64"})

        with pytest.raises(UnsupportedArchitectureError):
            store.add(str(path))

        assert store.state.packages.count() == 0
        assert not (Path(store.path) / "pool").exists()

    @pytest.mark.parametrize("missing", ["Package", "Version", "Architecture"])
    def test_add_missing_required_field(self, store, make_deb, missing):
        """Test a control file without a required field is rejected."""
        control = {"Package": "foo", "Version": "1.0", "Architecture": "amd64"}
        del control[missing]

        with pytest.raises(InvalidControlError) as exc_info:
            store.add(str(make_deb(control=control)))

        assert missing in str(exc_info.value)
        assert store.state.packages.count() == 0

    def test_add_multiple_paragraphs(self, store, make_deb):
        """Test a control file with more than one paragraph is rejected."""
        path = make_deb(control_text="Package: a\nVersion: 1\nArchitecture: amd64\n\nPackage: b\n")

        with pytest.raises(InvalidControlError):
            store.add(str(path))

    def test_add_invalid_archive(self, store, make_deb):
        """Test an invalid package is rejected without changes."""
        with pytest.raises(InvalidArchiveError):
            store.add(str(make_deb(version=b"1.0\n")))

        assert store.state.packages.count() == 0


class TestSignedRepository:
    """Tests for repositories with signing enabled."""

    def test_add_signed(self, signed_store, deb_file, signer):
        """Test ingestion signs the package and the Release file."""
        store = signed_store

        store.add(str(deb_file))

        dists = Path(store.dists_path)
        assert (dists / "Release.gpg").read_text() == "SIGNATURE OF Release BY DEADBEEF\n"
        inrelease = (dists / "InRelease").read_text()
        assert inrelease.startswith("-----BEGIN PGP SIGNED MESSAGE-----")
        assert (dists / "Release").read_text() in inrelease

        with DebArchive.open(str(Path(store.path) / POOL_PATH)) as archive:
            assert archive.has_section("_gpgbuilder")
            assert archive.digest_manifest().splitlines()[-1].endswith(" _gpgbuilder")

        assert ("identity", "DEADBEEF") in signer.calls
        assert ("detached", "DEADBEEF") in signer.calls

    def test_pool_digest_covers_signature(self, signed_store, deb_file):
        """Test the recorded digest is that of the signed package in the pool."""
        record = signed_store.add(str(deb_file))

        data = (Path(signed_store.path) / POOL_PATH).read_bytes()
        assert record.size == len(data)
        assert record.sha256 == hashlib.sha256(data).hexdigest()

    def test_signing_without_signer(self, settings, deb_file):
        """Test signing without a signer raises SigningKeyUnavailableError."""
        store = RepositoryStore("nosigner", settings.repos_dir)
        store.config.sign = True
        store.config.gpgkey = "DEADBEEF"

        with pytest.raises(SigningKeyUnavailableError):
            store.add(str(deb_file))

        assert not (Path(store.path) / "pool").exists()
        assert store.state.packages.count() == 0

    def test_failed_release_signature_then_retry(self, settings, signer):
        """Test a signing failure leaves unsigned metadata that the next save signs."""
        store = RepositoryStore("partial", settings.repos_dir, signer)
        store.config.codename = "c"
        store.config.sign = True
        store.config.gpgkey = "DEADBEEF"
        dists = Path(store.dists_path)

        with patch.object(signer, "detached_sign", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                store.save()

        assert (dists / "Release").is_file()
        assert not (dists / "Release.gpg").exists()
        assert not (dists / "InRelease").exists()
        assert RepositoryStore.load("partial", settings.repos_dir).config.gpgkey == "DEADBEEF"

        store.save()

        release = (dists / "Release").read_text()
        assert (dists / "Release.gpg").read_text() == "SIGNATURE OF Release BY DEADBEEF\n"
        assert release in (dists / "InRelease").read_text()


class TestRemove:
    """Tests for package removal."""

    def test_remove_then_save(self, store, deb_file):
        """Test removing foo 1.0 amd64 drops the stanza and the pool file."""
        store.add(str(deb_file))

        assert store.remove("foo", "1.0", "amd64") is True
        store.save()

        packages = (Path(store.dists_path) / "main" / "binary-amd64" / "Packages").read_text()
        assert "Package: foo" not in packages
        assert not (Path(store.path) / POOL_PATH).exists()
        assert store.list_packages() == {}

    def test_remove_keeps_other_versions(self, store, make_deb):
        """Test removing one version keeps the others indexed."""
        store.add(str(make_deb("a.deb")))
        store.add(str(make_deb("b.deb", {"Package": "foo", "Version": "2.0", "Architecture": "amd64"})))

        store.remove("foo", "1.0", "amd64")

        assert list(store.state.packages.amd64["foo"]) == ["2.0"]
        assert (Path(store.path) / "pool/main/f/foo/foo_2.0_amd64.deb").exists()

    def test_remove_is_idempotent(self, store):
        """Test removing a package with no pool file succeeds."""
        assert store.remove("ghost", "0.1", "i386") is True
        assert store.remove("ghost", "0.1", "i386") is True

    def test_remove_unknown_architecture(self, store, deb_file, caplog):
        """Test an unrecognized architecture tag is logged and ignored."""
        store.add(str(deb_file))

        with caplog.at_level(logging.WARNING):
            assert store.remove("foo", "1.0", "arm64") is False

        assert "unknown arch: arm64" in caplog.text
        assert store.state.packages.count() == 1
        assert (Path(store.path) / POOL_PATH).exists()

    def test_remove_architecture_is_exact(self, store, deb_file):
        """Test removal matches the group tag exactly."""
        store.add(str(deb_file))

        assert store.remove("foo", "1.0", "AMD64") is False
        assert store.state.packages.count() == 1


class TestSharedRepositories:
    """Tests for settings-driven repositories."""

    def test_create_shared(self, settings):
        """Test a shared repository is created from settings and saved."""
        store = update_shared_repository(
            "stable", settings.repos_dir, {"codename": "stable", "origin": "Example", "component": "contrib"}
        )

        loaded = RepositoryStore.load("stable", settings.repos_dir)
        assert loaded.config.codename == "stable"
        assert loaded.config.origin == "Example"
        assert loaded.config.label == "<label>"
        assert (Path(store.path) / "dists" / "stable" / "contrib" / "binary-amd64" / "Packages").exists()

    def test_update_keeps_packages(self, settings, deb_file):
        """Test updating settings keeps the indexed packages."""
        store = update_shared_repository("stable", settings.repos_dir, {"codename": "stable"})
        store.add(str(deb_file))

        update_shared_repository("stable", settings.repos_dir, {"description": "Stable packages"})

        loaded = RepositoryStore.load("stable", settings.repos_dir)
        assert loaded.config.description == "Stable packages"
        assert loaded.config.codename == "stable"
        assert loaded.list_packages() == {"foo": {"1.0": ["amd64"]}}

    def test_sign_with_default_key(self, settings, signer):
        """Test enabling signing without signing-key assigns the default key."""
        update_shared_repository(
            "stable", settings.repos_dir, {"codename": "stable", "sign": "true"}, signer=signer, default_key="CAFEBABE"
        )

        loaded = RepositoryStore.load("stable", settings.repos_dir)
        assert loaded.config.sign is True
        assert loaded.config.gpgkey == "CAFEBABE"
        assert ("detached", "CAFEBABE") in signer.calls

    def test_sign_with_explicit_key(self, settings, signer):
        """Test signing-key overrides the default key."""
        update_shared_repository(
            "stable",
            settings.repos_dir,
            {"codename": "stable", "sign": "1", "signing-key": "0BADF00D"},
            signer=signer,
            default_key="CAFEBABE",
        )

        assert RepositoryStore.load("stable", settings.repos_dir).config.gpgkey == "0BADF00D"

    def test_sign_without_default_key(self, settings, signer):
        """Test enabling signing with no key available fails."""
        with pytest.raises(SigningKeyUnavailableError):
            update_shared_repository("stable", settings.repos_dir, {"sign": "true"}, signer=signer)

    def test_invalid_sign_value(self, settings):
        """Test an unparseable sign value raises InvalidSettingError."""
        with pytest.raises(InvalidSettingError):
            update_shared_repository("stable", settings.repos_dir, {"sign": "maybe"})
