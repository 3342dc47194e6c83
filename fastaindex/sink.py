import abc
import json
import os
import pathlib
import typing
from typing import Iterable, List, Union

import pandas

from .accession import AccessionConfig
from .errors import IOFailure
from .records import read_records

__all__ = [
    "BaseRecordSink",
    "FASTASink",
    "read_accessions",
    "write_accessions",
    "sequence_lengths",
    "write_lengths",
]


class BaseRecordSink(abc.ABC):
    """A destination for records, keeping statistics on what was added.
    """

    def __init__(self):
        self.stats = []
        self.done = set()

    def add_record(self, name: str, sequence: str) -> bool:
        if name in self.done:
            return False
        self.stats.append({
            "id": name,
            "length": len(sequence),
        })
        self.done.add(name)
        return True

    def report_statistic(self) -> pandas.DataFrame:
        return pandas.DataFrame(self.stats, columns=["id", "length"])


class FASTASink(BaseRecordSink):
    """A sink writing records in FASTA format, one sequence line each.
    """

    def __init__(self, file: typing.TextIO) -> None:
        super().__init__()
        self.file = file

    def add_record(self, name: str, sequence: str) -> bool:
        if not super().add_record(name, sequence):
            return False
        self.file.write(">{}\n".format(name))
        self.file.write(sequence)
        self.file.write("\n")
        return True


def read_accessions(
    path: Union[str, os.PathLike],
    config: AccessionConfig = AccessionConfig(),
) -> List[str]:
    """Get the accessions of all records of a FASTA file, in file order.
    """
    return [config.extract(record.description) for record in read_records(path)]


def write_accessions(
    accessions: Iterable[str],
    path: Union[str, os.PathLike],
    format: str = "txt",
) -> pathlib.Path:
    """Write accessions to a file, one per line or as a JSON array.
    """
    if format not in {"txt", "json"}:
        raise ValueError(f"invalid format: {format!r}")
    try:
        with open(path, "w") as dst:
            if format == "json":
                json.dump(list(accessions), dst)
            else:
                for accession in accessions:
                    dst.write(f"{accession}\n")
    except OSError as err:
        raise IOFailure(path, err.strerror or err) from err
    return pathlib.Path(path)


def sequence_lengths(
    path: Union[str, os.PathLike],
    config: AccessionConfig = AccessionConfig(),
) -> pandas.Series:
    """Compute the sequence length of every record of a FASTA file.

    Returns:
        `pandas.Series`: The sequence lengths, indexed by accession. If
        an accession appears more than once, the last record wins.

    """
    lengths = {
        config.extract(record.description): len(record.sequence)
        for record in read_records(path)
    }
    series = pandas.Series(lengths, dtype="int64", name="length")
    series.index.name = "id"
    return series


def write_lengths(lengths: pandas.Series, path: Union[str, os.PathLike]) -> pathlib.Path:
    """Write sequence lengths to a JSON object mapping accessions to lengths.
    """
    try:
        with open(path, "w") as dst:
            json.dump({str(k): int(v) for k, v in lengths.items()}, dst)
    except OSError as err:
        raise IOFailure(path, err.strerror or err) from err
    return pathlib.Path(path)
