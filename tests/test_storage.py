# tests/test_storage.py
import tempfile
import unittest
import uuid
from pathlib import Path

from gameledger.utils.storage import AvatarStorage, FileTooLarge, StorageError

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class TestAvatarStorage(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.storage = AvatarStorage(root=str(self.root), base_url="/media", max_bytes=1024)
        self.profile_id = uuid.uuid4()

    def tearDown(self):
        self._tmp.cleanup()

    def stored_files(self):
        return sorted(p.name for p in (self.root / "avatars").iterdir())

    def test_upload_writes_file_and_returns_public_url(self):
        url = self.storage.upload(self.profile_id, "image/png", PNG_BYTES)

        self.assertTrue(url.startswith("/media/avatars/"))
        self.assertTrue(url.endswith(".png"))
        name = self.storage.filename_from_url(url)
        self.assertEqual((self.root / "avatars" / name).read_bytes(), PNG_BYTES)

    def test_upload_keeps_previous_avatar_until_deleted(self):
        first = self.storage.upload(self.profile_id, "image/png", PNG_BYTES)
        self.storage.save("other.png", PNG_BYTES)

        second = self.storage.upload(self.profile_id, "image/jpeg", b"\xff\xd8\xff" + b"\x00" * 16)

        self.assertNotEqual(first, second)
        first_name = self.storage.filename_from_url(first)
        second_name = self.storage.filename_from_url(second)
        self.assertEqual(self.stored_files(), sorted(["other.png", first_name, second_name]))

        self.assertTrue(self.storage.delete(first))
        self.assertEqual(self.stored_files(), sorted(["other.png", second_name]))

    def test_rejects_unsupported_type(self):
        with self.assertRaises(StorageError):
            self.storage.upload(self.profile_id, "application/pdf", b"%PDF")

    def test_rejects_empty_file(self):
        with self.assertRaises(StorageError):
            self.storage.upload(self.profile_id, "image/png", b"")

    def test_rejects_oversized_file(self):
        with self.assertRaises(FileTooLarge):
            self.storage.upload(self.profile_id, "image/png", b"\x00" * 2048)

    def test_delete_only_touches_this_bucket(self):
        url = self.storage.upload(self.profile_id, "image/gif", b"GIF89a")

        self.assertFalse(self.storage.delete("https://elsewhere.example.com/a.gif"))
        self.assertFalse(self.storage.delete("/media/avatars/../secret"))
        self.assertTrue(self.storage.delete(url))
        self.assertFalse(self.storage.delete(url))
        self.assertEqual(self.stored_files(), [])


if __name__ == "__main__":
    unittest.main()
