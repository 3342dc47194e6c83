"""An index storing the byte offsets of individual records of FASTA files.
"""

import json
import os
import pathlib
from typing import Dict, Iterator, Mapping, Optional, Union

import rich.progress

from .accession import AccessionConfig
from .errors import DuplicateAccession, IOFailure, MalformedIndexFile
from .records import decode_line, is_description
from .source import open_source

__all__ = ["OffsetIndex"]

_MAX_OFFSET = 2**64


class OffsetIndex(Mapping[str, int]):
    """A read-only mapping of accessions to description line offsets.

    Offsets are counted in bytes from the start of the uncompressed
    file, and point to the ``>`` of the description line of each record.

    Example:
        Build the index of a UniProt file once, save it next to the
        file, and reload it later::

            index = OffsetIndex.build("uniprot_sprot.fasta")
            index.to_json("uniprot_sprot.index.json")
            index = OffsetIndex.from_json("uniprot_sprot.index.json")

    """

    def __init__(
        self,
        id_to_offset: Mapping[str, int],
        config: Optional[AccessionConfig] = None,
    ):
        self._id_to_offset: Dict[str, int] = dict(id_to_offset)
        self.config = config

    def __repr__(self):
        return f"<OffsetIndex entries={len(self._id_to_offset)}>"

    def __getitem__(self, accession: str) -> int:
        return self._id_to_offset[accession]

    def __iter__(self) -> Iterator[str]:
        return iter(self._id_to_offset)

    def __len__(self) -> int:
        return len(self._id_to_offset)

    @classmethod
    def build(
        cls,
        path: Union[str, os.PathLike],
        config: AccessionConfig = AccessionConfig(),
        progress: Optional[rich.progress.Progress] = None,
    ) -> "OffsetIndex":
        """Index a FASTA file with a single forward scan.

        Arguments:
            path (`str` or `os.PathLike`): The path to an uncompressed
                FASTA file.
            config (`~fastaindex.accession.AccessionConfig`): How to
                extract accessions from the description lines.
            progress (`rich.progress.Progress`, *optional*): A progress
                bar to report the number of bytes scanned.

        Raises:
            `~fastaindex.errors.UnseekableSource`: When the file is
                compressed, since its records could not be reached later.
            `~fastaindex.errors.DuplicateAccession`: When two records
                have the same accession.

        """
        id_to_offset: Dict[str, int] = {}
        offset = 0

        with open_source(path) as handle:
            handle.require_seekable("build an index")
            if progress is not None:
                total = os.stat(path).st_size
                task = progress.add_task(f"[bold blue]{'Indexing':>9}[/]", total=total)
            try:
                for line in handle:
                    if is_description(line):
                        key = config.extract(decode_line(line, path))
                        if key in id_to_offset:
                            raise DuplicateAccession(key, id_to_offset[key], offset)
                        id_to_offset[key] = offset
                    offset += len(line)
                    if progress is not None:
                        progress.update(task, completed=offset)
            finally:
                if progress is not None:
                    progress.remove_task(task)

        return cls(id_to_offset, config)

    @classmethod
    def from_json(cls, path: Union[str, os.PathLike]) -> "OffsetIndex":
        """Load an index previously saved with `OffsetIndex.to_json`.

        Raises:
            `~fastaindex.errors.IOFailure`: When the file cannot be read.
            `~fastaindex.errors.MalformedIndexFile`: When the file does
                not contain a valid index.

        """
        try:
            with open(path, "r", encoding="utf-8") as src:
                data = json.load(src)
        except json.JSONDecodeError as err:
            raise MalformedIndexFile(path, f"invalid JSON ({err.msg})") from err
        except UnicodeDecodeError as err:
            raise MalformedIndexFile(path, "not a text file") from err
        except OSError as err:
            raise IOFailure(path, err.strerror or err) from err

        if not isinstance(data, dict) or not isinstance(data.get("id_to_offset"), dict):
            raise MalformedIndexFile(path, "missing 'id_to_offset' mapping")
        for key, offset in data["id_to_offset"].items():
            if (
                isinstance(offset, bool)
                or not isinstance(offset, int)
                or not 0 <= offset < _MAX_OFFSET
            ):
                raise MalformedIndexFile(path, f"invalid offset for {key!r}: {offset!r}")
        return cls(data["id_to_offset"])

    def to_json(self, path: Union[str, os.PathLike]) -> pathlib.Path:
        """Save the index to a JSON file.
        """
        try:
            with open(path, "w", encoding="utf-8") as dst:
                json.dump({"id_to_offset": self._id_to_offset}, dst)
                dst.flush()
        except OSError as err:
            raise IOFailure(path, err.strerror or err) from err
        return pathlib.Path(path)
