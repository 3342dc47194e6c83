import io
import os
import typing


class FastaError(Exception):
    """Base class for all errors raised by `fastaindex`.
    """


class IOFailure(FastaError, OSError):
    """A source or index file could not be opened, read or written.
    """

    def __init__(self, path: typing.Union[str, os.PathLike], reason: object = None):
        self.path = os.fspath(path)
        self.reason = reason
        if reason is None:
            message = f"failed to access {self.path!r}"
        else:
            message = f"failed to access {self.path!r}: {reason}"
        FastaError.__init__(self, message)

    def __str__(self):
        return self.args[0]


class UnseekableSource(FastaError, io.UnsupportedOperation):
    """Random access was requested on a compressed source.
    """

    def __init__(self, path: typing.Union[str, os.PathLike], operation: str = "seek"):
        self.path = os.fspath(path)
        self.operation = operation
        FastaError.__init__(
            self, f"cannot {operation} in non-seekable compressed file {self.path!r}"
        )


class MalformedInput(FastaError, ValueError):
    """The source does not contain a decodable FASTA record.
    """

    def __init__(self, path: typing.Union[str, os.PathLike, None], reason: str):
        self.path = None if path is None else os.fspath(path)
        if self.path is None:
            FastaError.__init__(self, reason)
        else:
            FastaError.__init__(self, f"{reason} in {self.path!r}")


class DuplicateAccession(FastaError, ValueError):
    """The same accession was derived from two description lines.
    """

    def __init__(
        self,
        accession: str,
        first_offset: typing.Optional[int] = None,
        second_offset: typing.Optional[int] = None,
    ):
        self.accession = accession
        self.first_offset = first_offset
        self.second_offset = second_offset
        message = f"multiple entries found for id {accession!r}"
        if first_offset is not None and second_offset is not None:
            message += f" (at offsets {first_offset} and {second_offset})"
        FastaError.__init__(self, message)


class MissingAccession(FastaError, KeyError):
    """A requested accession is not present in the index.
    """

    def __init__(self, accession: str):
        self.accession = accession
        FastaError.__init__(self, f"accession {accession!r} not found in index")

    def __str__(self):
        # `KeyError.__str__` would quote the whole message
        return self.args[0]


class IndexNotAtDescription(FastaError, ValueError):
    """An indexed offset does not point at a description line.
    """

    def __init__(self, path: typing.Union[str, os.PathLike], offset: int):
        self.path = os.fspath(path)
        self.offset = offset
        FastaError.__init__(
            self,
            f"no description line found at offset {offset} in {self.path!r}"
        )


class MalformedIndexFile(FastaError, ValueError):
    """A persisted index could not be parsed.
    """

    def __init__(self, path: typing.Union[str, os.PathLike], reason: str):
        self.path = os.fspath(path)
        self.reason = reason
        FastaError.__init__(self, f"malformed index file {self.path!r}: {reason}")


class AccessionFieldError(FastaError, IndexError):
    """The configured field index does not exist in a description line.
    """

    def __init__(self, description: str, id_index: int, n_fields: int):
        self.description = description
        self.id_index = id_index
        self.n_fields = n_fields
        FastaError.__init__(
            self,
            f"cannot extract field {id_index} from description {description!r} "
            f"(only {n_fields} fields)"
        )
