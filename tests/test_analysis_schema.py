import sys
import unittest
from pathlib import Path

from pydantic import ValidationError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from jd2resume.analysis.schemas import AnalysisResult, MatchScore, clamp_score, round_half_up  # noqa: E402


class AnalysisSchemaTests(unittest.TestCase):
    def test_scores_are_clamped_and_rounded(self):
        result = AnalysisResult.model_validate(
            {
                "matchScore": {
                    "total": 140,
                    "hardSkills": -5,
                    "softSkills": "72%",
                    "roleAlignment": 64.5,
                    "atsCompatibility": 80.2,
                },
                "recruiterLens": {"shortlistProbability": 101},
            }
        )
        self.assertEqual(result.match_score.total, 100)
        self.assertEqual(result.match_score.hard_skills, 0)
        self.assertEqual(result.match_score.soft_skills, 72)
        self.assertEqual(result.match_score.role_alignment, 65)
        self.assertEqual(result.match_score.ats_compatibility, 80)
        self.assertEqual(result.recruiter_lens.shortlist_probability, 100)

    def test_missing_sections_get_defaults(self):
        result = AnalysisResult.model_validate({"matchScore": {"total": 40}, "coverLetter": "Hi"})
        self.assertEqual(result.cover_letter, "Hi")
        self.assertEqual(result.match_score.hard_skills, 0)
        self.assertEqual(result.missing_keywords, [])
        self.assertFalse(result.ats_verdict.will_auto_reject)

    def test_non_numeric_scores_are_rejected(self):
        with self.assertRaises(ValidationError):
            AnalysisResult.model_validate({"matchScore": {"total": "excellent"}})
        for value in (None, [80], {}, float("inf")):
            with self.subTest(value=value), self.assertRaises(ValidationError):
                AnalysisResult.model_validate({"matchScore": {"total": value}})
        with self.assertRaises(ValueError):
            clamp_score(True)

    def test_unrelated_object_is_rejected(self):
        for payload in ({}, {"foo": 1}, {"coverLetter": "Hi"}):
            with self.subTest(payload=payload), self.assertRaises(ValidationError):
                AnalysisResult.model_validate(payload)

    def test_round_half_up(self):
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(2.49), 2)

    def test_round_trip_by_alias_and_by_name(self):
        by_name = AnalysisResult(match_score=MatchScore(total=55), cover_letter="Dear team")
        payload = by_name.to_payload()
        self.assertEqual(payload["coverLetter"], "Dear team")
        self.assertEqual(AnalysisResult.model_validate(payload), by_name)


if __name__ == "__main__":
    unittest.main()
