import os
import stat
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from sentiment_index.core.artifacts import read_json, write_json_atomic


class TestArtifacts(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.dir = Path(self.tmp.name)

    def test_write_creates_parents_and_reads_back(self) -> None:
        target = self.dir / "nested" / "market-data.json"
        write_json_atomic(target, {"sentiment": {"score": 12.5}})
        self.assertEqual(read_json(target), {"sentiment": {"score": 12.5}})
        self.assertEqual(os.listdir(target.parent), ["market-data.json"])

    def test_replace_is_whole_document(self) -> None:
        target = self.dir / "historical-data.json"
        write_json_atomic(target, [1, 2, 3])
        write_json_atomic(target, [4])
        self.assertEqual(read_json(target), [4])

    def test_failed_write_keeps_previous_document(self) -> None:
        target = self.dir / "market-data.json"
        write_json_atomic(target, {"ok": True})
        with self.assertRaises(TypeError):
            write_json_atomic(target, {"bad": object()})
        self.assertEqual(read_json(target), {"ok": True})
        self.assertEqual(os.listdir(self.dir), ["market-data.json"])

    def test_failed_replace_cleans_temp_file(self) -> None:
        target = self.dir / "market-data.json"
        with mock.patch("sentiment_index.core.artifacts.os.replace", side_effect=OSError("disk")):
            with self.assertRaises(OSError):
                write_json_atomic(target, {"ok": True})
        self.assertEqual(os.listdir(self.dir), [])

    def test_new_file_is_world_readable(self) -> None:
        target = self.dir / "market-data.json"
        write_json_atomic(target, {"ok": True})
        self.assertEqual(stat.S_IMODE(os.stat(target).st_mode), 0o644)

    def test_replace_keeps_existing_mode(self) -> None:
        target = self.dir / "historical-data.json"
        write_json_atomic(target, [1])
        os.chmod(target, 0o640)
        write_json_atomic(target, [2])
        self.assertEqual(stat.S_IMODE(os.stat(target).st_mode), 0o640)
        self.assertEqual(read_json(target), [2])

    def test_read_missing(self) -> None:
        with self.assertRaises(FileNotFoundError):
            read_json(self.dir / "absent.json")


if __name__ == "__main__":
    unittest.main()
