import gzip
import io

import rich.console
import rich.progress

from fastaindex.accession import AccessionConfig
from fastaindex.errors import (
    DuplicateAccession,
    IndexNotAtDescription,
    MalformedInput,
    MissingAccession,
    UnseekableSource,
)
from fastaindex.index import OffsetIndex
from fastaindex.records import Record, read_records
from fastaindex.store import IndexedStore, fetch, fetch_record

from .utils import DATA, THREE_RECORDS, TempdirTestCase


class TestFetch(TempdirTestCase):

    def test_three_records(self):
        path = self.write("seqs.fa", THREE_RECORDS)
        index = OffsetIndex.build(path)
        self.assertEqual(fetch(path, index, "acc2"), Record("A|acc2", "SEQ2"))
        self.assertEqual(fetch(path, index, "acc3"), Record("A|acc3", "SEQ3"))

    def test_fixture(self):
        index = OffsetIndex.build(DATA / "test.fasta")
        entry = fetch(DATA / "test.fasta", index, "P93158")
        self.assertEqual(
            entry,
            Record(
                description=(
                    "tr|P93158|P93158_GOSHI Annexin (Fragment) OS=Gossypium "
                    "hirsutum OX=3635 GN=AnnGh2 PE=2 SV=1"
                ),
                sequence=(
                    "TLKVPVHVPSPSEDAEWQLRKAFEGWGTNEQLIIDILAHRNAAQRNSIRKVYGEAYGEDL"
                    "LKCLEKELTSDFERAVLLFTLDPAERDAHLANEATKKFTSSNWILMEIACSRSSHELLNV"
                ),
            ),
        )

    def test_agrees_with_streaming(self):
        path = self.write("seqs.fa", b">a|1\nMKV\nLL\n>a|2\n>a|3\nQQ\n\n>a|4\nW\n")
        index = OffsetIndex.build(path)
        for record in read_records(path):
            accession = record.description.split("|")[1]
            self.assertEqual(fetch(path, index, accession), record)

    def test_stops_at_blank_line(self):
        path = self.write("seqs.fa", b">a|1\nMKV\n\nLL\n>a|2\nQQ\n")
        index = OffsetIndex.build(path)
        self.assertEqual(fetch(path, index, "1"), Record("a|1", "MKV"))

    def test_stops_at_next_description(self):
        path = self.write("seqs.fa", b">a|1\nMKV\n>a|2\nQQ")
        index = OffsetIndex.build(path)
        self.assertEqual(fetch(path, index, "1"), Record("a|1", "MKV"))
        self.assertEqual(fetch(path, index, "2"), Record("a|2", "QQ"))

    def test_missing_accession(self):
        path = self.write("seqs.fa", THREE_RECORDS)
        index = OffsetIndex.build(path)
        with self.assertRaises(MissingAccession) as ctx:
            fetch(path, index, "acc4")
        self.assertEqual(ctx.exception.accession, "acc4")
        self.assertIsInstance(ctx.exception, KeyError)
        self.assertEqual(str(ctx.exception), "accession 'acc4' not found in index")

    def test_offset_not_at_description(self):
        path = self.write("seqs.fa", THREE_RECORDS)
        with self.assertRaises(IndexNotAtDescription) as ctx:
            fetch_record(path, 8)
        self.assertEqual(ctx.exception.offset, 8)
        self.assertRaises(IndexNotAtDescription, fetch_record, path, 1)
        self.assertRaises(IndexNotAtDescription, fetch_record, path, 10_000)

    def test_compressed(self):
        path = self.write("seqs.fa.gz", gzip.compress(THREE_RECORDS))
        self.assertRaises(UnseekableSource, fetch_record, path, 0)
        self.assertRaises(UnseekableSource, fetch, path, {"acc1": 0}, "acc1")


class TestIndexedStore(TempdirTestCase):

    def test_from_index(self):
        index = OffsetIndex.build(DATA / "test.fasta")
        store = IndexedStore.from_index(DATA / "test.fasta", index, ["P93158", "H0VS30"])
        self.assertEqual(len(store), 2)
        self.assertEqual(set(store), {"P93158", "H0VS30"})
        self.assertEqual(len(store["H0VS30"]), 180)
        self.assertEqual(store.failures, {})
        self.assertNotIn("Q2HZH0", store)

    def test_failures_are_reported_per_id(self):
        path = self.write("seqs.fa", THREE_RECORDS)
        index = OffsetIndex({"acc1": 0, "acc2": 14, "bad": 3})
        store = IndexedStore.from_index(path, index, ["acc1", "nope", "bad", "acc2"])
        self.assertEqual(dict(store), {"acc1": "SEQ1", "acc2": "SEQ2"})
        self.assertEqual(set(store.failures), {"nope", "bad"})
        self.assertIsInstance(store.failures["nope"], MissingAccession)
        self.assertIsInstance(store.failures["bad"], IndexNotAtDescription)

    def test_strict(self):
        path = self.write("seqs.fa", THREE_RECORDS)
        index = OffsetIndex.build(path)
        with self.assertRaises(MissingAccession):
            IndexedStore.from_index(path, index, ["acc1", "nope"], strict=True)

    def test_duplicate_requests(self):
        path = self.write("seqs.fa", THREE_RECORDS)
        index = OffsetIndex.build(path)
        store = IndexedStore.from_index(path, index, ["acc3", "acc3"])
        self.assertEqual(list(store), ["acc3"])

    def test_compressed(self):
        path = self.write("seqs.fa.gz", gzip.compress(THREE_RECORDS))
        index = OffsetIndex({"acc1": 0})
        self.assertRaises(UnseekableSource, IndexedStore.from_index, path, index, ["acc1"])

    def test_progress(self):
        path = self.write("seqs.fa", THREE_RECORDS)
        index = OffsetIndex.build(path)
        console = rich.console.Console(file=io.StringIO())
        with rich.progress.Progress(console=console) as progress:
            store = IndexedStore.from_index(path, index, ["acc1", "acc3"], progress=progress)
            self.assertEqual(len(progress.tasks), 0)
        self.assertEqual(len(store), 2)

    def test_offsets_past_end_of_file(self):
        path = self.write("seqs.fa", THREE_RECORDS)
        index = OffsetIndex({"acc1": 0, "far": 2**63 - 1, "farther": 2**64 - 1, "acc2": 14})
        store = IndexedStore.from_index(path, index, ["acc1", "far", "farther", "acc2"])
        self.assertEqual(dict(store), {"acc1": "SEQ1", "acc2": "SEQ2"})
        self.assertEqual(set(store.failures), {"far", "farther"})
        self.assertIsInstance(store.failures["far"], IndexNotAtDescription)
        self.assertIsInstance(store.failures["farther"], IndexNotAtDescription)

    def test_negative_offset(self):
        path = self.write("seqs.fa", THREE_RECORDS)
        store = IndexedStore.from_index(path, OffsetIndex({"neg": -1}), ["neg"])
        self.assertIsInstance(store.failures["neg"], IndexNotAtDescription)

    def test_undecodable_record(self):
        path = self.write("seqs.fa", b">A|acc1\nSEQ1\n>A|acc2\n\xff\xfe\n")
        index = OffsetIndex.build(path)
        store = IndexedStore.from_index(path, index, ["acc2", "acc1"])
        self.assertEqual(dict(store), {"acc1": "SEQ1"})
        self.assertIsInstance(store.failures["acc2"], MalformedInput)

    def test_strict_progress_removed(self):
        path = self.write("seqs.fa", THREE_RECORDS)
        index = OffsetIndex.build(path)
        console = rich.console.Console(file=io.StringIO())
        with rich.progress.Progress(console=console) as progress:
            with self.assertRaises(MissingAccession):
                IndexedStore.from_index(path, index, ["nope"], strict=True, progress=progress)
            self.assertEqual(len(progress.tasks), 0)

    def test_from_fasta(self):
        store = IndexedStore.from_fasta(DATA / "test.fasta")
        self.assertEqual(len(store), 3)
        key = (
            "tr|P93158|P93158_GOSHI Annexin (Fragment) OS=Gossypium "
            "hirsutum OX=3635 GN=AnnGh2 PE=2 SV=1"
        )
        self.assertEqual(len(store[key]), 120)
        self.assertEqual(store.failures, {})

    def test_from_fasta_compressed(self):
        path = self.write("seqs.fa.gz", gzip.compress(THREE_RECORDS))
        store = IndexedStore.from_fasta(path, AccessionConfig())
        self.assertEqual(dict(store), {"acc1": "SEQ1", "acc2": "SEQ2", "acc3": "SEQ3"})
        output = store.to_fasta(self.tempdir / "out.fa")
        self.assertEqual(output.read_text(), ">acc1\nSEQ1\n>acc2\nSEQ2\n>acc3\nSEQ3\n")

    def test_from_fasta_duplicate(self):
        path = self.write("seqs.fa", b">sp|P1|A\nMKV\n>tr|P1|B\nQQ\n")
        self.assertEqual(len(IndexedStore.from_fasta(path)), 2)
        with self.assertRaises(DuplicateAccession) as ctx:
            IndexedStore.from_fasta(path, AccessionConfig())
        self.assertEqual(ctx.exception.accession, "P1")

    def test_to_fasta(self):
        path = self.write("seqs.fa", THREE_RECORDS)
        index = OffsetIndex.build(path)
        store = IndexedStore.from_index(path, index, ["acc3", "acc1"])
        output = store.to_fasta(self.tempdir / "out.fa")
        self.assertEqual(output.read_text(), ">acc3\nSEQ3\n>acc1\nSEQ1\n")
