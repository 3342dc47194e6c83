import pathlib
import tempfile
import unittest

DATA = pathlib.Path(__file__).parent / "data"

THREE_RECORDS = b">A|acc1\nSEQ1\n\n>A|acc2\nSEQ2\n\n>A|acc3\nSEQ3\n"


class TempdirTestCase(unittest.TestCase):
    """A test case running each test in a fresh temporary directory.
    """

    def setUp(self):
        self._tempdir = tempfile.TemporaryDirectory()
        self.tempdir = pathlib.Path(self._tempdir.name)

    def tearDown(self):
        self._tempdir.cleanup()

    def write(self, name, data):
        path = self.tempdir / name
        path.write_bytes(data)
        return path
