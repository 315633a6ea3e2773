"""
Utility modules for apt-repo-tool.
"""

from .logger import setup_logging, WrappingFormatter
from .hashing import FanOutWriter, HashingSink, copy_through_sink, open_gzip_writer
from .validation.file import safe_upload_name, validate_file_path

from . import error_handling
from . import logging_utils
from . import constants
from . import path_utils
from . import config_manager

__all__ = [
    "setup_logging",
    "WrappingFormatter",
    "HashingSink",
    "FanOutWriter",
    "copy_through_sink",
    "open_gzip_writer",
    "safe_upload_name",
    "validate_file_path",
    "error_handling",
    "logging_utils",
    "constants",
    "path_utils",
    "config_manager",
]
