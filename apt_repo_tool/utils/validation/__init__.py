"""
Validation utilities for apt-repo-tool.

Modules:
    - file: Uploaded file validation
    - settings: Typed parsing of settings values
"""

from .file import safe_upload_name, validate_file_path
from .settings import parse_bool, stringify

__all__ = [
    "validate_file_path",
    "safe_upload_name",
    "parse_bool",
    "stringify",
]
