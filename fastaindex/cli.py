import argparse
import errno
import pathlib
import sys
from typing import List, Optional

import rich.console
import rich.markup
import rich.progress

from . import __version__
from .accession import AccessionConfig
from .errors import FastaError, IOFailure, UnseekableSource
from .index import OffsetIndex
from .sink import FASTASink, read_accessions, sequence_lengths, write_accessions, write_lengths
from .store import IndexedStore


def _add_accession_options(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("Accessions")
    group.add_argument(
        "-s",
        "--separator",
        default="|",
        help="The separator between the fields of description lines.",
    )
    group.add_argument(
        "-f",
        "--id-index",
        type=int,
        default=1,
        help="The index of the description field holding the accession.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fastaindex",
        description="Index FASTA files and retrieve records by accession.",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    parser_index = commands.add_parser("index", help="Build the offset index of a FASTA file.")
    parser_index.add_argument("input", type=pathlib.Path, help="The uncompressed FASTA file to index.")
    parser_index.add_argument(
        "-o",
        "--output",
        type=pathlib.Path,
        help="The index file to write (defaults to `<input>.index.json`).",
    )
    _add_accession_options(parser_index)

    parser_fetch = commands.add_parser("fetch", help="Retrieve records by accession.")
    parser_fetch.add_argument("input", type=pathlib.Path, help="The indexed FASTA file.")
    parser_fetch.add_argument("ids", nargs="*", help="The accessions to retrieve.")
    parser_fetch.add_argument(
        "-i",
        "--index",
        type=pathlib.Path,
        help="The index file (built on the fly when not given).",
    )
    parser_fetch.add_argument(
        "--ids-file",
        type=pathlib.Path,
        help="A file with more accessions to retrieve, one per line.",
    )
    parser_fetch.add_argument(
        "-o",
        "--output",
        type=pathlib.Path,
        help="The FASTA file to write (defaults to the standard output).",
    )
    _add_accession_options(parser_fetch)

    parser_accessions = commands.add_parser("accessions", help="List the accessions of a FASTA file.")
    parser_accessions.add_argument("input", type=pathlib.Path, help="The FASTA file, compressed or not.")
    parser_accessions.add_argument("-o", "--output", type=pathlib.Path, required=True)
    parser_accessions.add_argument(
        "--json",
        action="store_true",
        help="Write the accessions as a JSON array instead of one per line.",
    )
    _add_accession_options(parser_accessions)

    parser_lengths = commands.add_parser("lengths", help="Compute the sequence lengths of a FASTA file.")
    parser_lengths.add_argument("input", type=pathlib.Path, help="The FASTA file, compressed or not.")
    parser_lengths.add_argument("-o", "--output", type=pathlib.Path, required=True)
    _add_accession_options(parser_lengths)

    return parser


def _progress(console: rich.console.Console) -> rich.progress.Progress:
    return rich.progress.Progress(
        rich.progress.SpinnerColumn(finished_text=""),
        "[progress.description]{task.description}",
        rich.progress.BarColumn(bar_width=60),
        "[progress.percentage]{task.percentage:>3.0f}%",
        rich.progress.TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def _load_index(
    args: argparse.Namespace,
    config: AccessionConfig,
    progress: rich.progress.Progress,
) -> OffsetIndex:
    if args.index is not None:
        progress.console.print(f"[bold blue]{'Loading':>12}[/] index from [magenta]{args.index}[/]")
        return OffsetIndex.from_json(args.index)
    progress.console.print(f"[bold blue]{'Indexing':>12}[/] [magenta]{args.input}[/]")
    return OffsetIndex.build(args.input, config, progress=progress)


def _read_ids(args: argparse.Namespace) -> List[str]:
    ids = list(args.ids)
    if args.ids_file is not None:
        try:
            with open(args.ids_file) as src:
                ids.extend(line.strip() for line in src if line.strip())
        except OSError as err:
            raise IOFailure(args.ids_file, err.strerror or err) from err
    return ids


def run_index(args: argparse.Namespace, config: AccessionConfig, progress: rich.progress.Progress) -> int:
    output = args.output or args.input.with_name(f"{args.input.name}.index.json")
    progress.console.print(f"[bold blue]{'Indexing':>12}[/] [magenta]{args.input}[/]")
    index = OffsetIndex.build(args.input, config, progress=progress)
    index.to_json(output)
    progress.console.print(
        f"[bold green]{'Indexed':>12}[/] {len(index):,} records to [magenta]{output}[/]"
    )
    return 0


def run_fetch(args: argparse.Namespace, config: AccessionConfig, progress: rich.progress.Progress) -> int:
    ids = _read_ids(args)
    index = _load_index(args, config, progress)
    store = IndexedStore.from_index(args.input, index, ids, progress=progress)

    if args.output is None:
        sink = FASTASink(sys.stdout)
        for accession, record in store.records.items():
            sink.add_record(accession, record.sequence)
    else:
        store.to_fasta(args.output)

    for err in store.failures.values():
        progress.console.print(f"[bold yellow]{'Skipped':>12}[/] {rich.markup.escape(str(err))}")
    progress.console.print(
        f"[bold green]{'Retrieved':>12}[/] {len(store):,} of {len(ids):,} requested records"
    )
    return errno.ENOENT if store.failures else 0


def run_accessions(args: argparse.Namespace, config: AccessionConfig, progress: rich.progress.Progress) -> int:
    accessions = read_accessions(args.input, config)
    write_accessions(accessions, args.output, format="json" if args.json else "txt")
    progress.console.print(
        f"[bold green]{'Extracted':>12}[/] {len(accessions):,} accessions to [magenta]{args.output}[/]"
    )
    return 0


def run_lengths(args: argparse.Namespace, config: AccessionConfig, progress: rich.progress.Progress) -> int:
    lengths = sequence_lengths(args.input, config)
    write_lengths(lengths, args.output)
    progress.console.print(
        f"[bold green]{'Measured':>12}[/] {len(lengths):,} sequences to [magenta]{args.output}[/]"
    )
    return 0


_COMMANDS = {
    "index": run_index,
    "fetch": run_fetch,
    "accessions": run_accessions,
    "lengths": run_lengths,
}


def main(
    argv: Optional[List[str]] = None,
    console: Optional[rich.console.Console] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if console is None:
        console = rich.console.Console(stderr=True)

    try:
        config = AccessionConfig(args.separator, args.id_index)
    except ValueError as err:
        parser.error(str(err))

    try:
        with _progress(console) as progress:
            return _COMMANDS[args.command](args, config, progress)
    except UnseekableSource as err:
        console.print(f"[bold red]{'Failed':>12}[/] {rich.markup.escape(str(err))}")
        return errno.ESPIPE
    except IOFailure as err:
        console.print(f"[bold red]{'Failed':>12}[/] {rich.markup.escape(str(err))}")
        return errno.EIO
    except FastaError as err:
        console.print(f"[bold red]{'Failed':>12}[/] {rich.markup.escape(str(err))}")
        return errno.EINVAL
