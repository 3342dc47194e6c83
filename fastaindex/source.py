"""Uniform readable handles over plain and gzip-compressed FASTA files.
"""

import abc
import io
import os
import pathlib
import zlib
from typing import BinaryIO, Iterator, Union

try:
    from isal import igzip as gzip
except ImportError:
    import gzip

from .errors import IOFailure, UnseekableSource

__all__ = ["SourceHandle", "PlainSource", "CompressedSource", "open_source", "is_compressed"]

_GZIP_SUFFIXES = {".gz"}

PathLike = Union[str, os.PathLike]


def is_compressed(path: PathLike) -> bool:
    """Check whether a path is framed as gzip according to its extension.
    """
    return pathlib.Path(path).suffix.lower() in _GZIP_SUFFIXES


class SourceHandle(abc.ABC):
    """A readable handle over a FASTA source.

    Both variants read raw lines *including* their line terminator, so
    that callers can keep an exact count of the bytes consumed. Only
    `PlainSource` supports random access; use `supports_seek` to check
    for the capability before requesting it.

    """

    supports_seek: bool = False

    def __init__(self, path: PathLike, file: BinaryIO):
        self.path = pathlib.Path(path)
        self._file = file

    def __repr__(self):
        return f"{type(self).__name__}({str(self.path)!r})"

    def __enter__(self) -> "SourceHandle":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False

    def __iter__(self) -> Iterator[bytes]:
        while True:
            line = self.readline()
            if not line:
                break
            yield line

    @property
    def closed(self) -> bool:
        return self._file.closed

    def close(self) -> None:
        self._file.close()

    def read(self, size: int = -1) -> bytes:
        try:
            return self._file.read(size)
        except (OSError, EOFError, zlib.error) as err:
            raise IOFailure(self.path, err) from err

    def readline(self) -> bytes:
        try:
            return self._file.readline()
        except (OSError, EOFError, zlib.error) as err:
            raise IOFailure(self.path, err) from err

    def require_seekable(self, operation: str = "seek") -> None:
        """Fail with `UnseekableSource` if the handle cannot seek.
        """
        if not self.supports_seek:
            raise UnseekableSource(self.path, operation)

    @abc.abstractmethod
    def seek(self, offset: int) -> int:
        """Move to the given byte offset of the uncompressed stream.
        """

    @abc.abstractmethod
    def tell(self) -> int:
        """Get the current byte offset in the uncompressed stream.
        """


class PlainSource(SourceHandle):
    """A handle over an uncompressed file, supporting random access.
    """

    supports_seek = True

    def seek(self, offset: int) -> int:
        if offset < 0:
            raise ValueError(f"negative seek offset: {offset!r}")
        try:
            return self._file.seek(offset, io.SEEK_SET)
        except (OSError, OverflowError, ValueError) as err:
            raise IOFailure(self.path, err) from err

    def tell(self) -> int:
        return self._file.tell()


class CompressedSource(SourceHandle):
    """A handle over a gzip stream, possibly made of several members.

    The decompressed members are read as one logical stream. Seeking is
    refused explicitly, since offsets in the uncompressed stream cannot
    be reached without decompressing everything before them.

    """

    supports_seek = False

    def __init__(self, path: PathLike, file: BinaryIO, raw: BinaryIO):
        super().__init__(path, file)
        self._raw = raw

    def close(self) -> None:
        try:
            self._file.close()
        finally:
            self._raw.close()

    def seek(self, offset: int) -> int:
        raise UnseekableSource(self.path, "seek")

    def tell(self) -> int:
        raise UnseekableSource(self.path, "tell")


def open_source(path: PathLike) -> SourceHandle:
    """Open a FASTA file, decompressing it if its extension says so.

    Raises:
        `~fastaindex.errors.IOFailure`: When the file cannot be opened.

    """
    try:
        raw = open(path, "rb")
    except OSError as err:
        raise IOFailure(path, err.strerror or err) from err
    if is_compressed(path):
        return CompressedSource(path, gzip.open(raw, mode="rb"), raw)  # type: ignore
    return PlainSource(path, raw)
