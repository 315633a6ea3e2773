"""Process-wide settings for apt-repo-tool."""

import os
from typing import Optional

from ..utils.config_manager import ConfigManager
from ..utils.constants import (
    DEFAULT_FILES_PATH,
    DEFAULT_KEYRING_PATH,
    DEFAULT_LISTEN,
    DEFAULT_REPOS_PATH,
    DEFAULT_TMP_PATH,
)
from .base import AptRepoBaseModel


class ServerSettings(AptRepoBaseModel):
    """
    Explicit configuration handed to the store, service and signer.

    Relative paths are resolved against ``cwd``.

    Attributes:
        cwd: Base directory for relative paths
        repos_path: Root directory holding one directory per repository
        files_path: Directory receiving exported public keys
        tmp_path: Directory for staging uploads
        keyring: OpenPGP keyring file
        default_key: Key id assigned to repositories that enable signing without one
        passphrase: Passphrase for protected secret keys
        listen: Listen address of the control server
        manage_only: Serve only control requests
    """

    cwd: str = "."
    repos_path: str = DEFAULT_REPOS_PATH
    files_path: str = DEFAULT_FILES_PATH
    tmp_path: str = DEFAULT_TMP_PATH
    keyring: str = DEFAULT_KEYRING_PATH
    default_key: Optional[str] = None
    passphrase: Optional[str] = None
    listen: str = DEFAULT_LISTEN
    manage_only: bool = False

    @classmethod
    def from_config(cls, config: ConfigManager, cwd: Optional[str] = None) -> "ServerSettings":
        """
        Build settings from a configuration source.

        Args:
            config: Loaded (or loadable) configuration
            cwd: Base directory overriding path.cwd

        Returns:
            Settings with defaults for absent keys
        """
        return cls(
            cwd=cwd or config.get_str("path.cwd", "."),
            repos_path=config.get_str("path.repos", DEFAULT_REPOS_PATH),
            files_path=config.get_str("path.files", DEFAULT_FILES_PATH),
            tmp_path=config.get_str("path.tmp", DEFAULT_TMP_PATH),
            keyring=config.get_str("keyring", DEFAULT_KEYRING_PATH),
            default_key=config.get_str("default-key", "") or None,
            passphrase=config.get_str("passphrase", "") or None,
            listen=config.get_str("listen", DEFAULT_LISTEN),
            manage_only=config.get_bool("manage-only", False),
        )

    def resolve(self, path: str) -> str:
        """Resolve a configured path against cwd."""
        return os.path.join(os.path.expanduser(self.cwd), os.path.expanduser(path))

    @property
    def repos_dir(self) -> str:
        return self.resolve(self.repos_path)

    @property
    def files_dir(self) -> str:
        return self.resolve(self.files_path)

    @property
    def tmp_dir(self) -> str:
        return self.resolve(self.tmp_path)

    @property
    def keyring_file(self) -> str:
        return self.resolve(self.keyring)


__all__ = ["ServerSettings"]
