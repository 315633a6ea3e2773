"""
Logging utilities for consistent operation logging.

This module provides standardized logging functions to eliminate
code duplication and ensure consistent log formatting.
"""

import logging
from typing import Optional


def log_operation_start(operation: str, **details) -> None:
    """
    Log the start of an operation with standardized format.

    Args:
        operation: Description of the operation
        **details: Additional details to log as key=value pairs
    """
    if details:
        detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
        logging.info("Starting %s (%s)", operation, detail_str)
    else:
        logging.info("Starting %s", operation)


def log_operation_complete(operation: str, **details) -> None:
    """
    Log the completion of an operation with standardized format.

    Args:
        operation: Description of the operation
        **details: Additional details to log as key=value pairs
    """
    if details:
        detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
        logging.info("Completed %s (%s)", operation, detail_str)
    else:
        logging.info("Completed %s", operation)


def format_count_with_unit(count: int, unit: str, *, singular: Optional[str] = None) -> str:
    """
    Format a count with proper pluralization.

    Args:
        count: Number to format
        unit: Unit name (will be pluralized if count != 1)
        singular: Optional explicit singular form (defaults to unit)

    Returns:
        Formatted string like "5 packages" or "1 package"

    Examples:
        >>> format_count_with_unit(1, "package")
        '1 package'
        >>> format_count_with_unit(5, "package")
        '5 packages'
        >>> format_count_with_unit(1, "repositories", singular="repository")
        '1 repository'
    """
    if count == 1:
        return f"{count} {singular or unit}"

    if unit.endswith("s"):
        plural = unit
    else:
        plural = f"{unit}s"

    return f"{count} {plural}"


def log_file_size(file_path: str, file_type: str, size_bytes: int) -> None:
    """
    Log file size in human-readable format.

    Args:
        file_path: Path to the file
        file_type: Type of file for logging
        size_bytes: Size in bytes
    """
    size_str = format_file_size(size_bytes)
    logging.debug("%s file '%s': %s", file_type, file_path, size_str)


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "500 KB")

    Examples:
        >>> format_file_size(0)
        '0 B'
        >>> format_file_size(1024)
        '1.0 KB'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if size_bytes == 0:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    size_float = float(size_bytes)

    while size_float >= 1024 and i < len(size_names) - 1:
        size_float /= 1024.0
        i += 1

    return f"{size_float:.1f} {size_names[i]}"


__all__ = [
    "log_operation_start",
    "log_operation_complete",
    "format_count_with_unit",
    "log_file_size",
    "format_file_size",
]
