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

from smart_resume.catalog.jobs import JobProfile  # noqa: E402
from smart_resume.matching.engine import match_job, score_catalog  # noqa: E402


class MatchingEngineTests(unittest.TestCase):
    def test_frontend_resume_matches_frontend_profile(self):
        text = "Frontend engineer. React, JavaScript, HTML and CSS for product UI work."
        match = match_job(text)

        self.assertIsNotNone(match)
        self.assertEqual(match.title, "Frontend Developer")
        self.assertEqual(match.matched_skills, ["javascript", "react", "html", "css", "frontend", "ui"])
        self.assertEqual(match.match_count, 6)

    def test_matched_skills_are_a_subsequence_of_profile_skills(self):
        match = match_job("I use Docker and Linux on AWS daily.")

        self.assertEqual(match.title, "DevOps Engineer")
        positions = [match.skills.index(skill) for skill in match.matched_skills]
        self.assertEqual(positions, sorted(positions))

    def test_no_overlap_returns_none(self):
        self.assertIsNone(match_job("Gardening, pottery and long walks."))

    def test_blank_text_returns_none(self):
        self.assertIsNone(match_job(""))
        self.assertIsNone(match_job("   \n\t"))

    def test_ties_resolve_to_earliest_catalog_entry(self):
        catalog = (
            JobProfile(title="First", skills=("alpha", "beta"), description=""),
            JobProfile(title="Second", skills=("beta", "alpha"), description=""),
            JobProfile(title="Third", skills=("gamma",), description=""),
        )
        match = match_job("alpha beta", catalog)
        self.assertEqual(match.title, "First")

        ranked = score_catalog("alpha beta", catalog)
        self.assertEqual([item.title for item in ranked], ["First", "Second", "Third"])

    def test_keywords_match_as_raw_substrings(self):
        catalog = (JobProfile(title="Designer", skills=("ui",), description=""),)
        match = match_job("I build things", catalog)

        self.assertIsNotNone(match)
        self.assertEqual(match.matched_skills, ["ui"])

    def test_matching_is_case_insensitive(self):
        catalog = (JobProfile(title="Ops", skills=("Kubernetes",), description=""),)
        match = match_job("KUBERNETES clusters", catalog)

        self.assertEqual(match.matched_skills, ["kubernetes"])

    def test_same_input_gives_same_result(self):
        text = "Node.js, Express and MongoDB REST API with JWT"
        self.assertEqual(match_job(text), match_job(text))
        self.assertEqual(match_job(text).title, "Backend Developer")


if __name__ == "__main__":
    unittest.main()
