"""
Repository path handling utilities.

This module provides centralized functions for the deterministic on-disk
layout of a repository: pool locations of package files and the dists
tree of generated metadata.
"""

import os
import posixpath

from .constants import DEB_EXTENSION, DISTS_DIR, POOL_DIR


def pool_filename(component: str, name: str, version: str, architecture: str) -> str:
    """
    Compute the pool path of a package, relative to the repository root.

    Args:
        component: Repository component (e.g. "main")
        name: Package name (must not be empty)
        version: Package version
        architecture: Architecture tag as written in the control file

    Returns:
        Path of the form pool/<component>/<first letter>/<name>/<name>_<version>_<arch>.deb

    Raises:
        ValueError: If the package name is empty

    Example:
        >>> pool_filename("main", "foo", "1.0", "amd64")
        'pool/main/f/foo/foo_1.0_amd64.deb'
    """
    if not name:
        raise ValueError("Package name must not be empty")
    deb_name = f"{name}_{version}_{architecture}{DEB_EXTENSION}"
    return posixpath.join(POOL_DIR, component, name[0], name, deb_name)


def dists_dir(repo_dir: str, codename: str) -> str:
    """Directory holding the top-level Release of a distribution."""
    return os.path.join(repo_dir, DISTS_DIR, codename)


def index_dir(repo_dir: str, codename: str, component: str, group_dir: str) -> str:
    """
    Directory of one architecture group's index files.

    Example:
        >>> index_dir("/srv/repos/r", "c", "main", "binary-amd64")
        '/srv/repos/r/dists/c/main/binary-amd64'
    """
    return os.path.join(dists_dir(repo_dir, codename), component, group_dir)


def relative_to(base: str, path: str) -> str:
    """
    Express path relative to base with forward slashes.

    Raises:
        ValueError: If path is not under base
    """
    rel = os.path.relpath(path, base)
    if rel == os.pardir or rel.startswith(os.pardir + os.sep):
        raise ValueError(f"Path '{path}' wasn't under '{base}'")
    return rel.replace(os.sep, "/")


def ensure_directory_exists(file_path: str) -> None:
    """
    Ensure the directory containing the file path exists.

    Args:
        file_path: Full path to a file

    Example:
        >>> ensure_directory_exists("/tmp/repos/r/pool/main/f/foo/foo_1.0_amd64.deb")
        # Creates /tmp/repos/r/pool/main/f/foo/ if it doesn't exist
    """
    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)


__all__ = ["pool_filename", "dists_dir", "index_dir", "relative_to", "ensure_directory_exists"]
