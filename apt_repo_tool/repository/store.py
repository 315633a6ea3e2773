"""
Repository store.

A RepositoryStore owns one named repository: its configuration, package
index and generated-file registry. It ingests and removes packages,
persists its state and regenerates every metadata file APT clients read.

The store performs no locking. Callers must serialize load/mutate/save
cycles on the same repository name (see RepositoryService.locked).
"""

import logging
import os
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

from pydantic import ValidationError

from ..archive import DebArchive
from ..exceptions import (
    InvalidControlError,
    InvalidSettingError,
    RepositoryNotFoundError,
    SigningKeyUnavailableError,
)
from ..models import (
    Architecture,
    PackageDetails,
    PackageRecord,
    RepoConfig,
    RepoFile,
    RepositoryState,
)
from ..protocols import SigningProtocol
from ..utils.constants import (
    CONTROL_MEMBER,
    GZIP_EXTENSION,
    INRELEASE_FILENAME,
    RELEASE_ARCHITECTURES,
    RELEASE_DATE_FORMAT,
    RELEASE_FILENAME,
    RELEASE_SIGNATURE_FILENAME,
    STATE_FILENAME,
)
from ..utils.hashing import FanOutWriter, HashingSink, copy_through_sink, open_gzip_writer
from ..utils.logging_utils import format_count_with_unit, log_file_size, log_operation_complete, log_operation_start
from ..utils.path_utils import dists_dir, ensure_directory_exists, index_dir, pool_filename, relative_to
from ..utils.validation import parse_bool

REQUIRED_CONTROL_FIELDS = ("Version", "Package", "Architecture")


class RepositoryStore:
    """
    One repository on disk.

    Attributes:
        name: Repository name (directory under the repository root)
        root: Repository root directory
        state: In-memory configuration, index and file registry
    """

    def __init__(
        self,
        name: str,
        root: str,
        signer: Optional[SigningProtocol] = None,
        state: Optional[RepositoryState] = None,
    ) -> None:
        """
        Create an in-memory repository with default configuration.

        Args:
            name: Repository name
            root: Directory holding all repositories
            signer: Signing capability, required once config.sign is enabled
            state: Initial state (defaults to an empty repository)
        """
        self.name = name
        self.root = root
        self.signer = signer
        self.state = state or RepositoryState()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> RepoConfig:
        return self.state.config

    @property
    def files(self) -> Dict[str, RepoFile]:
        return self.state.files

    @property
    def path(self) -> str:
        """Directory of this repository."""
        return os.path.join(self.root, self.name)

    @property
    def state_path(self) -> str:
        return os.path.join(self.path, STATE_FILENAME)

    @property
    def dists_path(self) -> str:
        """Distribution root; registry paths are relative to it."""
        return dists_dir(self.path, self.config.codename)

    def exists(self) -> bool:
        return os.path.isdir(self.path)

    def _signer(self) -> SigningProtocol:
        if self.signer is None:
            raise SigningKeyUnavailableError(f"Repository {self.name} requires signing but no signer is configured")
        return self.signer

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, name: str, root: str, signer: Optional[SigningProtocol] = None) -> "RepositoryStore":
        """
        Load a repository from its persisted state.

        Args:
            name: Repository name
            root: Directory holding all repositories
            signer: Signing capability

        Returns:
            Loaded store

        Raises:
            RepositoryNotFoundError: If the repository has no state file
            ValueError: If the state file is corrupt
        """
        store = cls(name, root, signer)
        store.reload()
        return store

    def reload(self) -> None:
        """Replace the in-memory state with the persisted one."""
        try:
            with open(self.state_path, "r", encoding="utf-8") as f:
                content = f.read()
        except FileNotFoundError:
            logging.error("Failed to open '%s' file", self.state_path)
            raise RepositoryNotFoundError(self.name) from None

        try:
            self.state = RepositoryState.model_validate_json(content)
        except ValidationError as e:
            logging.error("Failed to read '%s' file: %s", self.state_path, e)
            raise ValueError(f"Corrupt repository state in {self.state_path}: {e}") from e

    def _write_state(self) -> None:
        os.makedirs(self.path, exist_ok=True)
        try:
            with open(self.state_path, "w", encoding="utf-8") as f:
                f.write(self.state.model_dump_json())
        except OSError as e:
            logging.error("Failed to write '%s' file: %s", self.state_path, e)
            raise

    def save(self, now: Optional[datetime] = None) -> None:
        """
        Persist state and regenerate every metadata file.

        Per-group Packages/Sources and their Release stanzas are written
        first; the top-level Release summarizes their digests and is then
        signed when signing is enabled. A signing failure leaves valid but
        unsigned metadata behind; the next successful save supersedes it.

        Args:
            now: Timestamp for the Release file (defaults to current UTC time)
        """
        log_operation_start("repository save", repository=self.name)
        self._write_state()

        files: Dict[str, RepoFile] = {}
        for architecture in Architecture:
            self._write_index(architecture, files)
            self._write_group_release(architecture, files)
        self.state.files = files

        self._write_state()
        release_path = self._write_release(now)
        if self.config.sign:
            self._sign_release(release_path)

        log_operation_complete(
            "repository save",
            repository=self.name,
            packages=format_count_with_unit(self.state.packages.count(), "package"),
        )

    # ------------------------------------------------------------------
    # Metadata generation
    # ------------------------------------------------------------------

    def _record_file(self, files: Dict[str, RepoFile], path: str, sink: HashingSink) -> None:
        rel = relative_to(self.dists_path, path)
        files[rel] = RepoFile(size=sink.size, sha1=sink.sha1, sha256=sink.sha256, md5=sink.md5)
        log_file_size(rel, "Generated", sink.size)

    def _write_index(self, architecture: Architecture, files: Dict[str, RepoFile]) -> None:
        directory = index_dir(self.path, self.config.codename, self.config.component, architecture.index_dir)
        os.makedirs(directory, exist_ok=True)

        filename = os.path.join(directory, architecture.index_filename)
        gz_filename = filename + GZIP_EXTENSION
        try:
            with open(filename, "wb") as plain, open(gz_filename, "wb") as compressed:
                plain_sink = HashingSink(plain)
                gz_sink = HashingSink(compressed)
                with open_gzip_writer(gz_sink) as gz:
                    writer = FanOutWriter([plain_sink, gz])
                    for _, _, record in self.state.packages.records(architecture):
                        writer.write(record.stanza().encode("utf-8"))
        except OSError as e:
            logging.error("Failed to write %s: %s", filename, e)
            raise

        self._record_file(files, filename, plain_sink)
        self._record_file(files, gz_filename, gz_sink)

    def _write_group_release(self, architecture: Architecture, files: Dict[str, RepoFile]) -> None:
        directory = index_dir(self.path, self.config.codename, self.config.component, architecture.index_dir)
        os.makedirs(directory, exist_ok=True)
        filename = os.path.join(directory, RELEASE_FILENAME)

        text = f"Component: {self.config.component}\n"
        text += f"Origin: {self.config.origin}\n"
        text += f"Label: {self.config.label}\n"
        text += f"Architecture: {architecture.value}\n"
        text += f"Description: {self.config.description}\n"

        try:
            with open(filename, "wb") as f:
                sink = HashingSink(f)
                sink.write(text.encode("utf-8"))
        except OSError as e:
            logging.error("Failed to write %s: %s", filename, e)
            raise

        self._record_file(files, filename, sink)

    def release_text(self, now: Optional[datetime] = None) -> str:
        """
        Render the top-level Release file from the current registry.

        Args:
            now: Timestamp (defaults to current UTC time)

        Returns:
            Release file contents
        """
        now = now or datetime.now(timezone.utc)
        md5 = "MD5Sum:\n"
        sha1 = "SHA1:\n"
        sha256 = "SHA256:\n"
        for rel in sorted(self.files):
            entry = self.files[rel]
            md5 += f" {entry.md5} {entry.size} {rel}\n"
            sha1 += f" {entry.sha1} {entry.size} {rel}\n"
            sha256 += f" {entry.sha256} {entry.size} {rel}\n"

        text = f"Origin: {self.config.origin}\n"
        text += f"Label: {self.config.label}\n"
        text += f"Codename: {self.config.codename}\n"
        text += f"Date: {now.astimezone(timezone.utc).strftime(RELEASE_DATE_FORMAT)}\n"
        text += f"Architectures: {' '.join(RELEASE_ARCHITECTURES)}\n"
        text += f"Components: {self.config.component}\n"
        text += f"Description: {self.config.description}\n"
        return text + md5 + sha1 + sha256

    def _write_release(self, now: Optional[datetime] = None) -> str:
        os.makedirs(self.dists_path, exist_ok=True)
        filename = os.path.join(self.dists_path, RELEASE_FILENAME)
        try:
            with open(filename, "w", encoding="utf-8") as f:
                f.write(self.release_text(now))
        except OSError as e:
            logging.error("Failed to write %s: %s", filename, e)
            raise
        return filename

    def _sign_release(self, release_path: str) -> None:
        signer = self._signer()
        key_id = self.config.gpgkey

        signature_path = os.path.join(self.dists_path, RELEASE_SIGNATURE_FILENAME)
        signer.detached_sign(release_path, signature_path, key_id)

        inrelease_path = os.path.join(self.dists_path, INRELEASE_FILENAME)
        with open(release_path, "rb") as source, open(inrelease_path, "wb") as output:
            signer.clearsign(source, output, key_id)
        logging.debug("Signed %s with key %s", release_path, key_id)

    # ------------------------------------------------------------------
    # Package ingestion and removal
    # ------------------------------------------------------------------

    def add(self, deb_path: str) -> PackageRecord:
        """
        Ingest a package file and save the repository.

        The incoming file is signed in place first when the repository
        requires signing.

        Args:
            deb_path: Path of the uploaded .deb

        Returns:
            The indexed record

        Raises:
            InvalidArchiveError: If the file is not a valid v2.0 package
            InvalidControlError: If the control data is unusable
            UnsupportedArchitectureError: If the architecture is not indexed
        """
        log_operation_start("package add", repository=self.name, file=os.path.basename(deb_path))
        if self.config.sign:
            self._sign_deb(deb_path)

        architecture, name, version, record = self._store_deb(deb_path)
        self.state.packages.put(architecture, name, version, record)
        self.save()
        log_operation_complete("package add", package=name, version=version, architecture=architecture.value)
        return record

    def _sign_deb(self, deb_path: str) -> None:
        try:
            with DebArchive.open(deb_path) as archive:
                archive.sign(self.config.gpgkey, self._signer())
        except Exception as e:
            logging.error("Failed to sign deb '%s': %s", deb_path, e)
            raise

    def _store_deb(self, deb_path: str):
        try:
            with DebArchive.open(deb_path) as archive:
                paragraphs = archive.control(CONTROL_MEMBER)
        except Exception as e:
            logging.error("Failed to parse deb '%s': %s", deb_path, e)
            raise

        if len(paragraphs) != 1:
            logging.error("%s: Expected 1 paragraph in .deb control file, not %d", deb_path, len(paragraphs))
            raise InvalidControlError(f"{len(paragraphs)}/1 paragraphs in control: {deb_path}")

        control = dict(paragraphs[0])
        for field in REQUIRED_CONTROL_FIELDS:
            if not control.get(field):
                logging.error("deb did not include %s: %s", field, deb_path)
                raise InvalidControlError(f"no {field} in {deb_path}")

        name = control["Package"]
        version = control["Version"]
        arch = control["Architecture"]
        description = control.pop("Description", "")

        architecture = Architecture.classify(arch)
        filename = pool_filename(self.config.component, name, version, arch)
        destination = os.path.join(self.path, filename)
        ensure_directory_exists(destination)

        try:
            with open(deb_path, "rb") as source, open(destination, "wb") as target:
                sink = HashingSink(target)
                copy_through_sink(source, sink)
        except OSError as e:
            logging.error("Failed to copy '%s' -> '%s': %s", deb_path, destination, e)
            raise

        log_file_size(filename, "Pool", sink.size)
        record = PackageRecord(
            control=control,
            description=description,
            filename=filename,
            size=sink.size,
            sha1=sink.sha1,
            sha256=sink.sha256,
            md5=sink.md5,
        )
        return architecture, name, version, record

    def remove(self, name: str, version: str, arch: str) -> bool:
        """
        Remove one package version from one architecture group.

        The repository is not saved; callers batch removals and call save().
        An unrecognized architecture tag is logged and ignored.

        Args:
            name: Package name
            version: Package version
            arch: Architecture group tag (exact: i386, amd64 or source)

        Returns:
            True if the architecture tag was recognized

        Raises:
            OSError: If the pool file exists but cannot be deleted
        """
        try:
            architecture = Architecture(arch)
        except ValueError:
            logging.warning("Attempt to remove %s:%s from unknown arch: %s", name, version, arch)
            return False

        if self.state.packages.remove(architecture, name, version):
            logging.info("Removed %s %s (%s) from %s", name, version, arch, self.name)

        path = os.path.join(self.path, pool_filename(self.config.component, name, version, arch))
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logging.error("Failed to delete %s from pool: %s", os.path.basename(path), e)
            raise
        return True

    def list_packages(self) -> PackageDetails:
        """Map package name -> version -> architecture groups containing it."""
        return self.state.packages.details()

    # ------------------------------------------------------------------
    # Shared repositories
    # ------------------------------------------------------------------

    def apply_settings(self, settings: Mapping[str, str], default_key: Optional[str] = None) -> None:
        """
        Apply the settings keys present in a mapping.

        Args:
            settings: Keys among origin, label, description, codename,
                component, sign and signing-key
            default_key: Key used when signing is enabled without signing-key

        Raises:
            InvalidSettingError: If sign is not a boolean
            SigningKeyUnavailableError: If signing needs a key and none is available
        """
        config = self.config
        for field in ("origin", "label", "description", "codename", "component"):
            if field in settings:
                setattr(config, field, settings[field])
        if "sign" in settings:
            config.sign = parse_bool(settings["sign"], "sign")

        if config.sign:
            if "signing-key" in settings:
                config.gpgkey = settings["signing-key"]
            else:
                config.gpgkey = require_default_key(default_key)


def require_default_key(default_key: Optional[str]) -> str:
    """
    Return the process default key or fail.

    Raises:
        SigningKeyUnavailableError: If no default key is configured
    """
    if not default_key:
        logging.error("Signing requested, but no key configured. Please set 'default-key' in the configuration")
        raise SigningKeyUnavailableError("default-key not set")
    return default_key


def update_shared_repository(
    name: str,
    root: str,
    settings: Mapping[str, str],
    *,
    signer: Optional[SigningProtocol] = None,
    default_key: Optional[str] = None,
) -> RepositoryStore:
    """
    Create or update a persistent repository from settings, then save it.

    Args:
        name: Repository name
        root: Directory holding all repositories
        settings: Settings keys to apply; absent keys keep their values
        signer: Signing capability
        default_key: Process default key for signing repositories

    Returns:
        The saved store
    """
    store = RepositoryStore(name, root, signer)
    if store.exists():
        store.reload()
    try:
        store.apply_settings(settings, default_key)
    except InvalidSettingError:
        logging.error("Invalid settings for repository %s: %s", name, dict(settings))
        raise
    store.save()
    return store


__all__ = ["RepositoryStore", "update_shared_repository", "require_default_key", "REQUIRED_CONTROL_FIELDS"]
