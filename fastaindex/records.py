"""Streaming decoding of FASTA records.

The predicates `is_description`, `is_blank` and `ends_record` define
where records start and stop; the offset index builder and the
random-access retrieval both rely on them so that they always agree on
record boundaries.

"""

import dataclasses
import enum
import os
from typing import Iterable, Iterator, List, Optional, Union

from .accession import MARKER
from .errors import MalformedInput
from .source import SourceHandle, open_source

__all__ = [
    "Record",
    "is_description",
    "is_blank",
    "ends_record",
    "decode_line",
    "decode_records",
    "read_records",
]

_MARKER = MARKER.encode("ascii")


@dataclasses.dataclass(frozen=True)
class Record:
    """A single FASTA record.

    Attributes:
        description (`str`): The description line, without the leading
            ``>`` and without the line terminator.
        sequence (`str`): The sequence lines of the record, concatenated.

    """
    description: str
    sequence: str


def is_description(line: bytes) -> bool:
    """Check whether a raw line starts a new record.
    """
    return line.startswith(_MARKER)


def is_blank(line: bytes) -> bool:
    """Check whether a raw line is empty or only holds whitespace.
    """
    return not line.strip()


def ends_record(line: bytes) -> bool:
    """Check whether a raw line ends the sequence of the current record.
    """
    return is_blank(line) or is_description(line)


def decode_line(line: bytes, path: Optional[Union[str, os.PathLike]] = None) -> str:
    """Decode a raw line to text, without its line terminator.
    """
    try:
        return line.rstrip(b"\r\n").decode("utf-8")
    except UnicodeDecodeError as err:
        raise MalformedInput(path, f"invalid UTF-8 data ({err.reason})") from err


class _State(enum.Enum):
    SEEKING_FIRST_DESCRIPTION = enum.auto()
    IN_RECORD = enum.auto()


def decode_records(
    lines: Iterable[bytes],
    path: Optional[Union[str, os.PathLike]] = None,
) -> Iterator[Record]:
    """Decode records from raw lines.

    Lines before the first description line are ignored. Every line
    between two description lines is part of the sequence of the first
    one, blank lines contributing nothing. The last record is produced
    even when it has no sequence.

    Arguments:
        lines (iterable of `bytes`): The raw lines to decode, with or
            without their line terminators.
        path (`str`, *optional*): The path of the source the lines come
            from, used to report errors.

    Yields:
        `~fastaindex.records.Record`: The records, in source order.

    Raises:
        `~fastaindex.errors.MalformedInput`: When no description line
            is found before the end of the input.

    """
    state = _State.SEEKING_FIRST_DESCRIPTION
    description: Optional[str] = None
    sequence: List[str] = []

    for line in lines:
        if state is _State.SEEKING_FIRST_DESCRIPTION:
            if is_description(line):
                description = decode_line(line, path)[len(MARKER):]
                state = _State.IN_RECORD
        elif is_description(line):
            yield Record(description, "".join(sequence))  # type: ignore
            description = decode_line(line, path)[len(MARKER):]
            sequence = []
        elif not is_blank(line):
            sequence.append(decode_line(line, path))

    if state is _State.SEEKING_FIRST_DESCRIPTION:
        raise MalformedInput(path, "reached end of file before any description line")
    yield Record(description, "".join(sequence))  # type: ignore


def read_records(
    source: Union[str, os.PathLike, SourceHandle],
) -> Iterator[Record]:
    """Stream the records of a FASTA file, compressed or not.

    When given a path, the file is opened on the first iteration and
    closed once the generator is exhausted or closed. An already open
    `~fastaindex.source.SourceHandle` is read but left open.

    Example:
        Count the residues of every record in a FASTA file::

            for record in read_records("proteins.faa.gz"):
                print(record.description, len(record.sequence))

    """
    if isinstance(source, SourceHandle):
        yield from decode_records(source, source.path)
    else:
        with open_source(source) as handle:
            yield from decode_records(handle, handle.path)
