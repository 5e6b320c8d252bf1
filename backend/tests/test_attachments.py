from __future__ import annotations

import re
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fault_reports.errors import MalformedAttachment
from fault_reports.storage.attachments import (
    AttachmentStore,
    extension_for,
    lenient_b64decode,
    parse_data_uri,
)

PNG_URI = "data:image/png;base64,iVBORw0KGgo="
PNG_BYTES = b"\x89PNG\r\n\x1a\n"


class DataUriParsingTests(unittest.TestCase):
    def test_parse_splits_mime_and_payload(self) -> None:
        self.assertEqual(parse_data_uri(PNG_URI), ("image/png", "iVBORw0KGgo="))

    def test_rejects_strings_without_data_prefix(self) -> None:
        for bad in ["iVBORw0KGgo=", "data:image/png,iVBORw0KGgo=", "data:;base64,", ""]:
            with self.subTest(bad=bad):
                with self.assertRaises(MalformedAttachment):
                    parse_data_uri(bad)

    def test_rejects_non_string_values(self) -> None:
        with self.assertRaises(MalformedAttachment) as ctx:
            parse_data_uri(42)
        self.assertIn("format", ctx.exception.message)

    def test_extension_is_mime_subtype_verbatim(self) -> None:
        self.assertEqual(extension_for("image/jpeg"), "jpeg")
        self.assertEqual(extension_for("image/svg+xml"), "svg+xml")
        self.assertEqual(extension_for("application/x-anything"), "x-anything")
        self.assertEqual(extension_for("png"), "bin")


class LenientBase64Tests(unittest.TestCase):
    def test_missing_padding_is_repaired(self) -> None:
        self.assertEqual(lenient_b64decode("aGk"), b"hi")

    def test_stray_characters_are_dropped(self) -> None:
        self.assertEqual(lenient_b64decode("aG!k*="), b"hi")

    def test_dangling_sextet_is_ignored(self) -> None:
        self.assertEqual(lenient_b64decode("aGkxZ"), b"hi1")

    def test_garbage_never_raises(self) -> None:
        self.assertIsInstance(lenient_b64decode("%%%%not base64 at all%%%%"), bytes)
        self.assertEqual(lenient_b64decode("@@@"), b"")


class AttachmentStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.uploads = Path(self._tmpdir.name) / "uploads"
        self.store = AttachmentStore(self.uploads)

    def tearDown(self) -> None:
        self._tmpdir.cleanup()

    def test_decode_writes_file_and_returns_reference(self) -> None:
        ref = self.store.decode(PNG_URI, "photo")

        self.assertRegex(ref, r"^/uploads/photo-\d+-\d{1,4}\.png$")
        filename = ref.rsplit("/", 1)[1]
        self.assertEqual((self.uploads / filename).read_bytes(), PNG_BYTES)

    def test_decode_creates_uploads_dir_on_demand(self) -> None:
        self.assertFalse(self.uploads.exists())
        self.store.decode(PNG_URI, "ownerSign")
        self.assertTrue(self.uploads.is_dir())

    def test_malformed_payload_still_produces_a_file(self) -> None:
        ref = self.store.decode("data:image/webp;base64,###", "techSign")
        path = self.store.resolve(ref)
        self.assertIsNotNone(path)
        assert path is not None
        self.assertEqual(path.read_bytes(), b"")
        self.assertTrue(path.name.endswith(".webp"))

    def test_malformed_uri_writes_nothing(self) -> None:
        with self.assertRaises(MalformedAttachment):
            self.store.decode("not a data uri", "photo")
        self.assertFalse(self.uploads.exists() and any(self.uploads.iterdir()))

    def test_custom_url_prefix(self) -> None:
        store = AttachmentStore(self.uploads, url_prefix="files/")
        ref = store.decode(PNG_URI, "photo")
        self.assertTrue(re.match(r"^/files/photo-", ref))
        self.assertIsNotNone(store.resolve(ref))

    def test_resolve_accepts_bare_filename(self) -> None:
        ref = self.store.decode(PNG_URI, "photo")
        filename = ref.rsplit("/", 1)[1]
        self.assertEqual(self.store.resolve(filename), self.uploads.resolve() / filename)

    def test_resolve_blocks_traversal_and_missing_files(self) -> None:
        (Path(self._tmpdir.name) / "secret.txt").write_text("x", encoding="utf-8")
        self.store.ensure_dir()

        self.assertIsNone(self.store.resolve("../secret.txt"))
        self.assertIsNone(self.store.resolve("/uploads/../secret.txt"))
        self.assertIsNone(self.store.resolve("missing.png"))
        self.assertIsNone(self.store.resolve(""))


if __name__ == "__main__":
    unittest.main()
