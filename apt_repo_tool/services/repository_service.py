"""
Repository service for control-plane operations.

This module provides a service layer that orchestrates repository
operations: listing, creating and deleting repositories, ingesting and
removing packages, and exporting signing keys. Each load/mutate/save cycle
runs under a per-repository-name lock.
"""

import logging
import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from typing import BinaryIO, Dict, Iterator, List, Mapping, Optional

from ..exceptions import (
    ForbiddenOperationError,
    InvalidSettingError,
    RepositoryNotFoundError,
    SigningKeyUnavailableError,
)
from ..models import (
    CreateResponse,
    KeyResponse,
    PackageListResponse,
    PackageRecord,
    RemoveRequest,
    RepoConfig,
    RepositoryListResponse,
    ServerSettings,
)
from ..protocols import SigningProtocol
from ..repository import RepositoryStore, require_default_key, update_shared_repository
from ..utils.constants import EPHEMERAL_PREFIX, PUBLIC_KEY_SUFFIX, STATE_FILENAME
from ..utils.logging_utils import format_count_with_unit, log_operation_complete, log_operation_start
from ..utils.validation import safe_upload_name, validate_file_path
from .name_allocator import NameAllocator

REQUIRED_SHARED_KEYS = ("name", "codename")


class RepositoryService:
    """
    High-level service for repository operations.

    The service owns no repository state between calls; every operation
    loads the repository from disk while holding that repository's lock.
    """

    def __init__(
        self,
        settings: ServerSettings,
        signer: Optional[SigningProtocol] = None,
        allocator: Optional[NameAllocator] = None,
    ) -> None:
        """
        Initialize the repository service.

        Args:
            settings: Process settings (paths, default key)
            signer: Signing capability for signing repositories
            allocator: Ephemeral name source (created on demand if omitted)
        """
        self.settings = settings
        self.signer = signer
        self._allocator = allocator
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def allocator(self) -> NameAllocator:
        if self._allocator is None:
            self._allocator = NameAllocator(self.settings.repos_dir)
        return self._allocator

    @contextmanager
    def locked(self, name: str) -> Iterator[None]:
        """Hold the mutual-exclusion scope of one repository name."""
        with self._locks_guard:
            lock = self._locks.setdefault(name, threading.Lock())
        with lock:
            yield

    def _load(self, name: str) -> RepositoryStore:
        return RepositoryStore.load(name, self.settings.repos_dir, self.signer)

    def close(self) -> None:
        """Release background resources."""
        if self._allocator is not None:
            self._allocator.close()

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    def list_repositories(self) -> RepositoryListResponse:
        """
        List every repository and its configuration.

        Directories without a readable state file are skipped.
        """
        root = self.settings.repos_dir
        repos: Dict[str, RepoConfig] = {}
        if os.path.isdir(root):
            for entry in sorted(os.listdir(root)):
                if not os.path.isfile(os.path.join(root, entry, STATE_FILENAME)):
                    continue
                with self.locked(entry):
                    try:
                        repos[entry] = self._load(entry).config
                    except (OSError, ValueError, RepositoryNotFoundError) as e:
                        logging.warning("Skipping repository %s: %s", entry, e)
        logging.debug("Found %s", format_count_with_unit(len(repos), "repositories", singular="repository"))
        return RepositoryListResponse(repos=repos)

    def create_repository(self, config: Optional[RepoConfig] = None) -> CreateResponse:
        """
        Create an ephemeral repository.

        Args:
            config: Initial configuration (defaults for absent fields)

        Returns:
            The allocated repository name

        Raises:
            SigningKeyUnavailableError: If signing is requested and no default key is set
        """
        config = config.model_copy() if config is not None else RepoConfig()
        if config.sign:
            config.gpgkey = require_default_key(self.settings.default_key)

        name = EPHEMERAL_PREFIX + self.allocator.allocate()
        log_operation_start("repository create", repository=name)
        with self.locked(name):
            store = RepositoryStore(name, self.settings.repos_dir, self.signer)
            store.state.config = config
            store.save()
        log_operation_complete("repository create", repository=name)
        return CreateResponse(name=name)

    def delete_repository(self, name: str) -> None:
        """
        Delete an ephemeral repository and everything under it.

        Raises:
            ForbiddenOperationError: If the repository is not ephemeral
            RepositoryNotFoundError: If it does not exist
        """
        if not name.startswith(EPHEMERAL_PREFIX):
            logging.warning("Refusing to delete persistent repository %s", name)
            raise ForbiddenOperationError(f"Only ephemeral repositories can be deleted: {name}")

        try:
            with self.locked(name):
                store = self._load(name)
                shutil.rmtree(store.path)
        finally:
            with self._locks_guard:
                self._locks.pop(name, None)
        logging.info("Deleted repository %s", name)

    def prepare(self, shared: List[Mapping[str, str]]) -> List[str]:
        """
        Create the working directories and apply shared repository settings.

        Args:
            shared: One settings mapping per [[repos]] entry

        Returns:
            Names of the shared repositories that were saved

        Raises:
            InvalidSettingError: If an entry lacks name or codename
        """
        for directory in (self.settings.repos_dir, self.settings.files_dir, self.settings.tmp_dir):
            os.makedirs(directory, exist_ok=True)

        names = []
        for entry in shared:
            for key in REQUIRED_SHARED_KEYS:
                if not entry.get(key):
                    logging.error("Shared repository entry without '%s': %s", key, dict(entry))
                    raise InvalidSettingError(f"Shared repository entry without '{key}'")

            name = entry["name"]
            settings = {key: value for key, value in entry.items() if key != "name"}
            with self.locked(name):
                update_shared_repository(
                    name,
                    self.settings.repos_dir,
                    settings,
                    signer=self.signer,
                    default_key=self.settings.default_key,
                )
            logging.info("Prepared shared repository %s", name)
            names.append(name)
        return names

    # ------------------------------------------------------------------
    # Packages
    # ------------------------------------------------------------------

    def include(self, name: str, upload_name: str, stream: BinaryIO) -> PackageRecord:
        """
        Stage an uploaded package and ingest it.

        The staging directory is created under the tmp path, prefixed with
        the repository name, and removed whether or not ingestion succeeds.

        Args:
            name: Repository name
            upload_name: Client-supplied file name of the upload
            stream: Readable binary stream of the package bytes

        Returns:
            The indexed record
        """
        filename = safe_upload_name(upload_name)
        with self.locked(name):
            store = self._load(name)
            os.makedirs(self.settings.tmp_dir, exist_ok=True)
            with tempfile.TemporaryDirectory(dir=self.settings.tmp_dir, prefix=f"{name}-") as staging:
                deb_path = os.path.join(staging, filename)
                with open(deb_path, "wb") as f:
                    shutil.copyfileobj(stream, f)
                return store.add(deb_path)

    def include_file(self, name: str, deb_path: str) -> PackageRecord:
        """Ingest a local package file without modifying the original."""
        validate_file_path(deb_path, "deb")
        with open(deb_path, "rb") as stream:
            return self.include(name, os.path.basename(deb_path), stream)

    def remove(self, name: str, request: RemoveRequest) -> None:
        """
        Remove a package version from the requested groups and save once.

        Args:
            name: Repository name
            request: Package name, version and architecture groups
        """
        arches = request.target_arches()
        with self.locked(name):
            store = self._load(name)
            for arch in arches:
                store.remove(request.name, request.version, arch)
            store.save()
        logging.info("Removed %s %s from %s (%s)", request.name, request.version, name, ", ".join(arches))

    def list_packages(self, name: str) -> PackageListResponse:
        with self.locked(name):
            store = self._load(name)
            return PackageListResponse(packages=store.list_packages())

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def export_key(self, name: str) -> KeyResponse:
        """
        Export the public signing key of a repository.

        Returns:
            Key id and the file name written under the files directory

        Raises:
            ForbiddenOperationError: If the repository does not sign
            SigningKeyUnavailableError: If no signer is configured
        """
        with self.locked(name):
            config = self._load(name).config

        if not config.sign or not config.gpgkey:
            logging.error("Repository %s is not signed", name)
            raise ForbiddenOperationError(f"Repository {name} is not signed")
        if self.signer is None:
            raise SigningKeyUnavailableError("No signer configured", config.gpgkey)

        filename = f"{config.gpgkey}{PUBLIC_KEY_SUFFIX}"
        os.makedirs(self.settings.files_dir, exist_ok=True)
        self.signer.export_public_key(config.gpgkey, os.path.join(self.settings.files_dir, filename))
        logging.info("Exported key %s for %s", config.gpgkey, name)
        return KeyResponse(id=config.gpgkey, filename=filename)


__all__ = ["RepositoryService"]
