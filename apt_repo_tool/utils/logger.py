"""
Logging configuration and utilities for apt-repo-tool.

This module provides logging setup, custom formatters, and logging utilities
to ensure consistent and readable logging across the package.
"""

import logging
from typing import Optional

from .constants import DEFAULT_LOG_WIDTH

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

# ============================================================================
# Custom Formatters
# ============================================================================


class WrappingFormatter(logging.Formatter):
    """
    Custom formatter that wraps long log messages for better readability.

    This formatter extends the standard logging formatter to handle
    long messages by wrapping them at a specified width.
    """

    def __init__(
        self, fmt: Optional[str] = None, datefmt: Optional[str] = None, width: int = DEFAULT_LOG_WIDTH
    ) -> None:
        """
        Initialize the wrapping formatter.

        Args:
            fmt: Format string for log messages
            datefmt: Date format string
            width: Maximum width for log message wrapping
        """
        super().__init__(fmt, datefmt)
        self.width = width

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record with line wrapping.

        Args:
            record: Log record to format

        Returns:
            Formatted log message with wrapping
        """
        formatted = super().format(record)

        if len(formatted) <= self.width:
            return formatted

        lines = []
        current_line = ""
        for word in formatted.split():
            if len(current_line + " " + word) <= self.width:
                current_line += (" " + word) if current_line else word
            else:
                if current_line:
                    lines.append(current_line)
                current_line = word

        if current_line:
            lines.append(current_line)

        return "\n".join(lines)


# ============================================================================
# Logging Setup Functions
# ============================================================================


def setup_logging(verbosity: int = 0, use_wrapping: bool = False) -> None:
    """
    Setup logging configuration with multi-level verbosity.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG)
        use_wrapping: If True, use wrapping formatter for long messages

    Verbosity Levels:
        0 (default): WARNING - Only warnings and errors
        1 (-d):      INFO - Operation start/complete messages
        2 (-dd):     DEBUG - Digests, sizes and file level detail

    Example:
        >>> from apt_repo_tool.utils.logger import setup_logging
        >>> setup_logging(1)  # INFO level
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    if use_wrapping:
        formatter = WrappingFormatter(fmt=LOG_FORMAT, width=DEFAULT_LOG_WIDTH)
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        # Clear any existing handlers
        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(handler)
        root_logger.setLevel(level)
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT)


__all__ = [
    "WrappingFormatter",
    "setup_logging",
]
