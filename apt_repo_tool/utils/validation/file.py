"""
File path validation utilities.

This module provides functions for validating file paths, ensuring files exist,
are readable, and not empty.
"""

import logging
import os

from ...exceptions import MalformedInputError


def validate_file_path(file_path: str, file_type: str) -> None:
    """
    Validate file exists, is readable, and not empty.

    Uses guard clauses for early validation failure.

    Args:
        file_path: Path to the file to validate
        file_type: Type of file for error messages (e.g., 'deb', 'keyring')

    Raises:
        FileNotFoundError: If the file does not exist
        PermissionError: If the file cannot be read
        ValueError: If the file is empty

    Example:
        >>> validate_file_path("/path/to/foo_1.0_amd64.deb", "deb")  # doctest: +SKIP
    """
    # Guard clause: file must exist
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"{file_type} file not found: {file_path}")

    # Guard clause: file must be readable
    if not os.access(file_path, os.R_OK):
        raise PermissionError(f"Cannot read {file_type} file: {file_path}")

    # Guard clause: file must not be empty
    file_size = os.path.getsize(file_path)
    if file_size == 0:
        raise ValueError(f"{file_type} file is empty: {file_path}")

    logging.debug("%s file size: %d bytes", file_type, file_size)


def safe_upload_name(name: str) -> str:
    """
    Reduce an upload name to a bare file name.

    Args:
        name: Client supplied name, possibly with directories

    Returns:
        Base name safe to join under a staging directory

    Raises:
        MalformedInputError: If nothing usable remains
    """
    base = os.path.basename(name.replace("\\", "/"))
    if base in ("", ".", ".."):
        raise MalformedInputError(f"Invalid upload name: {name!r}")
    return base


__all__ = ["validate_file_path", "safe_upload_name"]
