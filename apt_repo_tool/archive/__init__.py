"""
Debian binary package (ar container) handling.
"""

from .ar_writer import append_member, format_member_header
from .deb_archive import ControlParagraph, DebArchive

__all__ = ["DebArchive", "ControlParagraph", "append_member", "format_member_header"]
