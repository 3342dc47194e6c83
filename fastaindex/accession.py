import dataclasses

from .errors import AccessionFieldError

__all__ = ["MARKER", "AccessionConfig", "extract_id"]

#: The character starting every description line.
MARKER = ">"


def _strip_marker(text: str) -> str:
    return text[len(MARKER):] if text.startswith(MARKER) else text


def extract_id(description: str, separator: str = "|", id_index: int = 1) -> str:
    """Extract the accession identifier from a description line.

    If the description contains ``separator``, it is split on it and the
    field at ``id_index`` is used, otherwise the whole description is the
    accession. The record marker is removed when present, so raw lines
    and `~fastaindex.records.Record` descriptions give the same result.

    Arguments:
        description (`str`): The description line, with or without its
            leading ``>`` and without its line terminator.
        separator (`str`): The field separator, ``|`` for UniProt headers.
        id_index (`int`): The index of the field holding the accession.

    Returns:
        `str`: The accession identifier.

    Raises:
        `~fastaindex.errors.AccessionFieldError`: When the description
            contains the separator but has no field at ``id_index``.

    Example:
        >>> extract_id(">sp|P12345|PROT_HUMAN Some protein")
        'P12345'
        >>> extract_id(">sp|P12345|PROT_HUMAN Some protein", id_index=0)
        'sp'
        >>> extract_id(">P12345")
        'P12345'

    """
    if not separator:
        raise ValueError("separator must not be empty")
    if id_index < 0:
        raise ValueError(f"id_index must be non-negative, got {id_index!r}")
    if separator not in description:
        return _strip_marker(description)
    fields = description.split(separator)
    if id_index >= len(fields):
        raise AccessionFieldError(description, id_index, len(fields))
    if id_index == 0:
        return _strip_marker(fields[0])
    return fields[id_index]


@dataclasses.dataclass(frozen=True)
class AccessionConfig:
    """How accessions are found in description lines.
    """
    separator: str = "|"
    id_index: int = 1

    def __post_init__(self):
        if not isinstance(self.separator, str) or not self.separator:
            raise ValueError(f"invalid separator: {self.separator!r}")
        if not isinstance(self.id_index, int) or self.id_index < 0:
            raise ValueError(f"invalid id_index: {self.id_index!r}")

    def extract(self, description: str) -> str:
        return extract_id(description, self.separator, self.id_index)
