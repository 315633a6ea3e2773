"""
Streaming digest utilities.

This module provides a write-through sink that computes MD5, SHA-1 and
SHA-256 digests of everything written through it, so that a digest is a
side effect of a write that is already being performed rather than a
second pass over the file.
"""

import gzip
import hashlib
import shutil
from typing import BinaryIO, Iterable

from .constants import COPY_CHUNK_SIZE


class HashingSink:
    """
    Write-through sink accumulating digests and a byte count.

    Every chunk is forwarded to the underlying writer immediately (nothing
    is buffered here), so the sink can be composed into arbitrary write
    pipelines, e.g. underneath a gzip compressor.

    The digest properties are only meaningful once all writing is done.

    Example:
        >>> import io
        >>> sink = HashingSink(io.BytesIO())
        >>> sink.write(b"abc")
        3
        >>> sink.size
        3
        >>> sink.md5
        '900150983cd24fb0d6963f7d28e17f72'
    """

    def __init__(self, writer: BinaryIO) -> None:
        """
        Initialize the sink.

        Args:
            writer: Underlying binary writer that receives every chunk
        """
        self._writer = writer
        self._md5 = hashlib.md5()
        self._sha1 = hashlib.sha1()
        self._sha256 = hashlib.sha256()
        self._size = 0

    def write(self, data: bytes) -> int:
        """
        Forward data to the underlying writer and fold it into the digests.

        Args:
            data: Bytes to write

        Returns:
            Number of bytes written
        """
        view = memoryview(data)
        self._writer.write(view)
        self._md5.update(view)
        self._sha1.update(view)
        self._sha256.update(view)
        self._size += len(view)
        return len(view)

    def flush(self) -> None:
        """Flush the underlying writer."""
        self._writer.flush()

    def writable(self) -> bool:
        return True

    @property
    def size(self) -> int:
        """Total number of bytes written."""
        return self._size

    @property
    def md5(self) -> str:
        return self._md5.hexdigest()

    @property
    def sha1(self) -> str:
        return self._sha1.hexdigest()

    @property
    def sha256(self) -> str:
        return self._sha256.hexdigest()


class FanOutWriter:
    """Writer duplicating every chunk to several underlying writers."""

    def __init__(self, writers: Iterable[BinaryIO]) -> None:
        self._writers = list(writers)

    def write(self, data: bytes) -> int:
        for writer in self._writers:
            writer.write(data)
        return len(data)

    def flush(self) -> None:
        for writer in self._writers:
            writer.flush()


def open_gzip_writer(sink: HashingSink) -> gzip.GzipFile:
    """
    Open a gzip compressor writing its compressed output into a sink.

    The sink sits below the compressor, so its digests describe the
    compressed bytes that land on disk. The header carries no filename and
    a zero mtime, which keeps regenerated files byte-identical.

    Args:
        sink: HashingSink wrapping the destination file

    Returns:
        Writable GzipFile; closing it does not close the sink
    """
    return gzip.GzipFile(filename="", mode="wb", fileobj=sink, mtime=0)  # type: ignore[arg-type]


def copy_through_sink(source: BinaryIO, sink: HashingSink, chunk_size: int = COPY_CHUNK_SIZE) -> int:
    """
    Stream a readable file into a sink.

    Args:
        source: Binary file opened for reading
        sink: Destination sink
        chunk_size: Read size in bytes

    Returns:
        Number of bytes copied
    """
    before = sink.size
    shutil.copyfileobj(source, sink, chunk_size)  # type: ignore[misc]
    return sink.size - before


__all__ = ["HashingSink", "FanOutWriter", "open_gzip_writer", "copy_through_sink"]
