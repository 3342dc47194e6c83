"""Streaming and indexed random access to FASTA files.
"""

__version__ = "0.1.0"

from .accession import AccessionConfig, extract_id
from .errors import (
    AccessionFieldError,
    DuplicateAccession,
    FastaError,
    IndexNotAtDescription,
    IOFailure,
    MalformedIndexFile,
    MalformedInput,
    MissingAccession,
    UnseekableSource,
)
from .index import OffsetIndex
from .records import Record, read_records
from .source import CompressedSource, PlainSource, SourceHandle, open_source
from .store import IndexedStore, fetch, fetch_record

__all__ = [
    "AccessionConfig",
    "AccessionFieldError",
    "CompressedSource",
    "DuplicateAccession",
    "FastaError",
    "IndexNotAtDescription",
    "IndexedStore",
    "IOFailure",
    "MalformedIndexFile",
    "MalformedInput",
    "MissingAccession",
    "OffsetIndex",
    "PlainSource",
    "Record",
    "SourceHandle",
    "UnseekableSource",
    "extract_id",
    "fetch",
    "fetch_record",
    "open_source",
    "read_records",
]
