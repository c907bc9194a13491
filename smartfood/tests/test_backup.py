import tempfile
import unittest
from pathlib import Path

from smartfood.utilities.backup import BackupManager


class TestBackupManager(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.data_file = Path(self.tmp.name) / "storage.json"
        self.manager = BackupManager(Path(self.tmp.name) / "backups", keep=3)

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_source(self):
        self.assertIsNone(self.manager.create_backup(self.data_file))

    def test_create_and_rotate(self):
        for n in range(5):
            self.data_file.write_text(f"version {n}", encoding='utf-8')
            self.manager.create_backup(self.data_file)
        backups = self.manager.list_backups(self.data_file)
        self.assertEqual(len(backups), 3)
        self.assertEqual(backups[-1].read_text(encoding='utf-8'), "version 4")
        self.assertEqual(backups[0].read_text(encoding='utf-8'), "version 2")

    def test_restore(self):
        self.data_file.write_text("good", encoding='utf-8')
        good = self.manager.create_backup(self.data_file)
        self.data_file.write_text("bad", encoding='utf-8')
        self.manager.restore_backup(good, self.data_file)
        self.assertEqual(self.data_file.read_text(encoding='utf-8'), "good")
        # the overwritten content was kept as well
        contents = [b.read_text(encoding='utf-8') for b in self.manager.list_backups(self.data_file)]
        self.assertIn("bad", contents)

    def test_restore_missing_backup(self):
        with self.assertRaises(FileNotFoundError):
            self.manager.restore_backup(Path(self.tmp.name) / "nope.json", self.data_file)
