import os
import shutil
import sqlite3
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("SMART_RESUME_DATA_DIR", tempfile.mkdtemp(prefix="smart-resume-tests-"))
os.environ["RATE_LIMIT_ENABLED"] = "0"

from smart_resume.core.config import settings  # noqa: E402
from smart_resume.core.errors import NotFound, PartialFailure  # noqa: E402
from smart_resume.matching.engine import match_job  # noqa: E402
from smart_resume.records import store  # noqa: E402


class ResumeStoreTests(unittest.TestCase):
    def setUp(self):
        store.clear_resume_records()
        shutil.rmtree(settings.upload_dir, ignore_errors=True)
        Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    def _add(self, owner_id: str, file_name: str, content: bytes = b"%PDF-1.4", text: str = "React CSS"):
        (Path(settings.upload_dir) / file_name).write_bytes(content)
        return store.create_record(
            owner_id=owner_id,
            file_name=file_name,
            original_name=file_name.split("-", 1)[-1],
            match=match_job(text),
            snippet=text,
        )

    def test_history_is_newest_first_and_owner_scoped(self):
        self._add("alice", "1-a.pdf")
        self._add("alice", "2-b.pdf")
        self._add("bob", "3-c.pdf")
        self._add("alice", "4-d.pdf")

        history = store.list_by_owner("alice")
        self.assertEqual([record.file_name for record in history], ["4-d.pdf", "2-b.pdf", "1-a.pdf"])
        self.assertEqual([record.file_name for record in store.list_by_owner("bob")], ["3-c.pdf"])
        self.assertEqual(store.list_by_owner("carol"), [])

    def test_record_keeps_match_summary(self):
        record = self._add("alice", "1-a.pdf", text="React, JavaScript, HTML")

        self.assertEqual(record.matched_job.title, "Frontend Developer")
        self.assertEqual(record.matched_job.matched_skills, ["javascript", "react", "html"])
        stored = store.get_record("alice", "1-a.pdf")
        self.assertEqual(stored.matched_job, record.matched_job)

    def test_unmatched_resume_has_no_job(self):
        record = self._add("alice", "1-a.pdf", text="pottery")
        self.assertIsNone(record.matched_job)
        self.assertIsNone(store.get_record("alice", "1-a.pdf").matched_job)

    def test_snippet_is_truncated(self):
        record = self._add("alice", "1-a.pdf", text="x" * 2000)
        self.assertEqual(len(record.snippet), store.SNIPPET_MAX_CHARS)

    def test_fetch_is_idempotent_and_owner_scoped(self):
        self._add("alice", "1-a.pdf", content=b"resume-bytes")

        self.assertEqual(store.fetch_file("alice", "1-a.pdf"), b"resume-bytes")
        self.assertEqual(store.fetch_file("alice", "1-a.pdf"), b"resume-bytes")
        with self.assertRaises(NotFound):
            store.fetch_file("bob", "1-a.pdf")

    def test_traversal_names_are_not_found(self):
        self._add("alice", "1-a.pdf")
        for name in ("../1-a.pdf", "..", "sub/1-a.pdf", "a\x00b.pdf"):
            with self.assertRaises(NotFound):
                store.fetch_file("alice", name)

    def test_delete_removes_binary_and_record(self):
        self._add("alice", "1-a.pdf")

        deleted = store.delete_resume("alice", "1-a.pdf")

        self.assertEqual(deleted.file_name, "1-a.pdf")
        self.assertFalse((Path(settings.upload_dir) / "1-a.pdf").exists())
        self.assertIsNone(store.get_record("alice", "1-a.pdf"))
        with self.assertRaises(NotFound):
            store.delete_resume("alice", "1-a.pdf")

    def test_delete_by_other_owner_is_not_found(self):
        self._add("alice", "1-a.pdf")
        with self.assertRaises(NotFound):
            store.delete_resume("bob", "1-a.pdf")
        self.assertTrue((Path(settings.upload_dir) / "1-a.pdf").exists())

    def test_delete_with_missing_binary_is_not_found(self):
        self._add("alice", "1-a.pdf")
        (Path(settings.upload_dir) / "1-a.pdf").unlink()

        with self.assertRaises(NotFound):
            store.fetch_file("alice", "1-a.pdf")
        with self.assertRaises(NotFound):
            store.delete_resume("alice", "1-a.pdf")

    def test_record_delete_failure_after_unlink_is_partial(self):
        self._add("alice", "1-a.pdf")

        with patch(
            "smart_resume.records.store.delete_record",
            side_effect=sqlite3.OperationalError("database is locked"),
        ):
            with self.assertLogs("smart_resume.records", level="ERROR"):
                with self.assertRaises(PartialFailure):
                    store.delete_resume("alice", "1-a.pdf")

        self.assertFalse((Path(settings.upload_dir) / "1-a.pdf").exists())
        self.assertIsNotNone(store.get_record("alice", "1-a.pdf"))
        with self.assertRaises(NotFound):
            store.fetch_file("alice", "1-a.pdf")


if __name__ == "__main__":
    unittest.main()
