"""Random access to FASTA records through an offset index.
"""

import os
import pathlib
from typing import Dict, Iterable, Iterator, Mapping, Optional, Union

import rich.progress

from .accession import MARKER, AccessionConfig
from .errors import (
    DuplicateAccession,
    FastaError,
    IOFailure,
    IndexNotAtDescription,
    MissingAccession,
    UnseekableSource,
)
from .index import OffsetIndex
from .records import Record, decode_line, ends_record, is_description, read_records
from .sink import FASTASink
from .source import is_compressed, open_source

__all__ = ["fetch_record", "fetch", "IndexedStore"]


def fetch_record(path: Union[str, os.PathLike], offset: int) -> Record:
    """Read the record whose description line starts at ``offset``.

    The line at ``offset`` must be a description line. The sequence
    lines that follow are read until a blank line, the next description
    line, or the end of the file.

    Raises:
        `~fastaindex.errors.UnseekableSource`: When the file is
            compressed.
        `~fastaindex.errors.IndexNotAtDescription`: When ``offset``
            does not point to a description line, including when it
            lies outside of the file.

    """
    with open_source(path) as handle:
        handle.require_seekable("seek")
        if not 0 <= offset < handle.path.stat().st_size:
            raise IndexNotAtDescription(path, offset)
        handle.seek(offset)

        line = handle.readline()
        if not is_description(line):
            raise IndexNotAtDescription(path, offset)
        description = decode_line(line, path)[len(MARKER):]

        sequence = []
        for line in handle:
            if ends_record(line):
                break
            sequence.append(decode_line(line, path))

    return Record(description, "".join(sequence))


def fetch(
    path: Union[str, os.PathLike],
    index: Mapping[str, int],
    accession: str,
) -> Record:
    """Read the record of a single accession.

    Raises:
        `~fastaindex.errors.MissingAccession`: When ``accession`` is not
            in ``index``.

    """
    try:
        offset = index[accession]
    except KeyError:
        raise MissingAccession(accession) from None
    return fetch_record(path, offset)


class IndexedStore(Mapping[str, str]):
    """A mapping of accessions to sequences.

    Use `IndexedStore.from_index` to read only the requested records
    through the offsets of an `~fastaindex.index.OffsetIndex`, or
    `IndexedStore.from_fasta` to load a whole file, compressed or not.

    Attributes:
        records (`dict`): The records that were successfully retrieved,
            by accession.
        failures (`dict`): The errors raised while retrieving the other
            requested accessions, by accession.

    """

    def __init__(
        self,
        records: Mapping[str, Record],
        failures: Optional[Mapping[str, FastaError]] = None,
    ):
        self.records: Dict[str, Record] = dict(records)
        self.failures: Dict[str, FastaError] = dict(failures or {})

    def __repr__(self):
        return (
            f"<IndexedStore "
            f"records={len(self.records)} "
            f"failures={len(self.failures)}>"
        )

    def __getitem__(self, accession: str) -> str:
        return self.records[accession].sequence

    def __iter__(self) -> Iterator[str]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @classmethod
    def from_index(
        cls,
        path: Union[str, os.PathLike],
        index: OffsetIndex,
        ids: Iterable[str],
        *,
        strict: bool = False,
        progress: Optional[rich.progress.Progress] = None,
    ) -> "IndexedStore":
        """Retrieve the records of the given accessions.

        Arguments:
            path (`str` or `os.PathLike`): The path to the indexed file.
            index (`~fastaindex.index.OffsetIndex`): The index of the file.
            ids (iterable of `str`): The accessions to retrieve.
            strict (`bool`): Raise the first retrieval error instead of
                recording it in `IndexedStore.failures`.
            progress (`rich.progress.Progress`, *optional*): A progress
                bar to report the number of records retrieved.

        Raises:
            `~fastaindex.errors.UnseekableSource`: When the file is
                compressed; no record can be retrieved in that case.

        """
        if is_compressed(path):
            raise UnseekableSource(path, "use an index")

        ids = list(ids)
        records: Dict[str, Record] = {}
        failures: Dict[str, FastaError] = {}
        if progress is not None:
            task = progress.add_task(f"[bold blue]{'Fetching':>9}[/]", total=len(ids))
            ids = progress.track(ids, task_id=task)

        try:
            for accession in ids:
                if accession in records or accession in failures:
                    continue
                try:
                    records[accession] = fetch(path, index, accession)
                except FastaError as err:
                    if strict:
                        raise
                    failures[accession] = err
        finally:
            if progress is not None:
                progress.remove_task(task)
        return cls(records, failures)

    @classmethod
    def from_fasta(
        cls,
        path: Union[str, os.PathLike],
        config: Optional[AccessionConfig] = None,
    ) -> "IndexedStore":
        """Load every record of a FASTA file, compressed or not.

        Records are keyed by their description line, or by the accession
        extracted with ``config`` when one is given.

        Raises:
            `~fastaindex.errors.DuplicateAccession`: When two records
                share the same key.

        """
        records: Dict[str, Record] = {}
        for record in read_records(path):
            if config is None:
                key = record.description
            else:
                key = config.extract(record.description)
            if key in records:
                raise DuplicateAccession(key)
            records[key] = record
        return cls(records)

    def to_fasta(self, path: Union[str, os.PathLike]) -> pathlib.Path:
        """Write the retrieved records to a FASTA file, keyed by accession.
        """
        try:
            with open(path, "w") as dst:
                sink = FASTASink(dst)
                for accession, record in self.records.items():
                    sink.add_record(accession, record.sequence)
        except OSError as err:
            raise IOFailure(path, err.strerror or err) from err
        return pathlib.Path(path)
