import json
import os
import sys
import tempfile
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("SMART_RESUME_DATA_DIR", tempfile.mkdtemp(prefix="smart-resume-tests-"))
os.environ["RATE_LIMIT_ENABLED"] = "0"

from smart_resume.catalog.jobs import DEFAULT_CATALOG_PATH, get_job_catalog, load_catalog  # noqa: E402


class JobCatalogTests(unittest.TestCase):
    def test_default_catalog_order_is_preserved(self):
        catalog = get_job_catalog()
        self.assertEqual(
            [profile.title for profile in catalog],
            ["Frontend Developer", "Backend Developer", "Full Stack Developer", "DevOps Engineer"],
        )
        self.assertIs(get_job_catalog(), catalog)

    def test_skills_are_trimmed_and_casefolded(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "jobs.json"
            path.write_text(
                json.dumps([{"title": "Data", "skills": ["  SQL ", "Pandas", ""], "description": "d"}]),
                encoding="utf-8",
            )
            catalog = load_catalog(path)

        self.assertEqual(catalog[0].skills, ("sql", "pandas"))

    def test_non_list_catalog_is_rejected(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "jobs.json"
            path.write_text(json.dumps({"title": "x"}), encoding="utf-8")
            with self.assertRaises(ValueError):
                load_catalog(path)

    def test_bundled_catalog_file_exists(self):
        self.assertTrue(DEFAULT_CATALOG_PATH.is_file())


if __name__ == "__main__":
    unittest.main()
