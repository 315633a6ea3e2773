"""
Writing members onto an ar container.

Only appending is needed: a builder signature is added as a new trailing
section of an existing Debian binary package.
"""

import time
from typing import BinaryIO, Optional

AR_GLOBAL_HEADER_SIZE = 8
AR_MEMBER_HEADER_SIZE = 60
AR_MEMBER_MAGIC = b"`\n"
AR_PADDING = b"\n"


def format_member_header(name: str, size: int, *, mtime: int, uid: int = 0, gid: int = 0, mode: int = 0o644) -> bytes:
    """
    Build the fixed 60-byte header of an ar member.

    Args:
        name: Member name (at most 16 bytes)
        size: Size of the member body in bytes
        mtime: Modification time as a Unix timestamp
        uid: Owner user id
        gid: Owner group id
        mode: File mode, written in octal

    Returns:
        Encoded header

    Raises:
        ValueError: If a field does not fit its column
    """
    fields = [
        (name, 16),
        (str(mtime), 12),
        (str(uid), 6),
        (str(gid), 6),
        (format(mode, "o"), 8),
        (str(size), 10),
    ]
    header = b""
    for value, width in fields:
        encoded = value.encode("ascii")
        if len(encoded) > width:
            raise ValueError(f"ar header field '{value}' exceeds {width} bytes")
        header += encoded.ljust(width, b" ")
    return header + AR_MEMBER_MAGIC


def append_member(
    fh: BinaryIO,
    name: str,
    data: bytes,
    *,
    mtime: Optional[int] = None,
    uid: int = 0,
    gid: int = 0,
    mode: int = 0o644,
) -> None:
    """
    Append a member to the end of an ar container opened for writing.

    Args:
        fh: Binary file handle opened for reading and writing
        name: Member name
        data: Member body
        mtime: Modification time (defaults to now)
        uid: Owner user id
        gid: Owner group id
        mode: File mode
    """
    if mtime is None:
        mtime = int(time.time())

    fh.seek(0, 2)
    # Members start on even offsets
    if fh.tell() % 2:
        fh.write(AR_PADDING)
    fh.write(format_member_header(name, len(data), mtime=mtime, uid=uid, gid=gid, mode=mode))
    fh.write(data)
    if len(data) % 2:
        fh.write(AR_PADDING)
    fh.flush()


__all__ = ["format_member_header", "append_member"]
