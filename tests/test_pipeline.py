import json
import sys
import tempfile
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from jd2resume.ai.errors import ResolutionError, UpstreamError  # noqa: E402
from jd2resume.ai.orchestrator import InvocationOrchestrator  # noqa: E402
from jd2resume.ai.types import FailureKind  # noqa: E402
from jd2resume.analysis.fallback import OFFLINE_COVER_LETTER  # noqa: E402
from jd2resume.analysis.pipeline import AnalysisPipeline, should_use_fallback  # noqa: E402
from jd2resume.analysis.prompt import build_analysis_prompt  # noqa: E402


MODEL_ANSWER = json.dumps({"matchScore": {"total": 77}, "coverLetter": "Dear hiring manager"})


class FakeTransport:
    def __init__(self, name, outcome):
        self.name = name
        self.outcome = outcome
        self.prompts = []

    async def invoke(self, prompt):
        self.prompts.append(prompt)
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


async def _no_sleep(delay):
    return None


def _pipeline(outcome, **kwargs):
    transport = FakeTransport("relay", outcome)
    orchestrator = InvocationOrchestrator([transport], retries=2, base_delay=0.0, sleep=_no_sleep)
    return AnalysisPipeline(orchestrator, **kwargs), transport


class PromptTests(unittest.TestCase):
    def test_prompt_contains_both_documents_and_shape(self):
        prompt = build_analysis_prompt("RESUME BODY", "JOB BODY")
        self.assertIn("RESUME:\nRESUME BODY", prompt)
        self.assertIn("JOB DESCRIPTION:\nJOB BODY", prompt)
        self.assertIn('"matchScore"', prompt)
        self.assertIn('"coverLetter"', prompt)

    def test_long_documents_are_clipped(self):
        prompt = build_analysis_prompt("x" * 50, "y" * 10, max_chars_per_document=20)
        self.assertIn("x" * 20 + "...", prompt)
        self.assertNotIn("x" * 21, prompt)


class FallbackPolicyTests(unittest.TestCase):
    def test_network_failures_use_fallback(self):
        self.assertTrue(should_use_fallback(ResolutionError(FailureKind.NETWORK_ERROR)))
        self.assertTrue(should_use_fallback(RuntimeError("net::ERR_INTERNET_DISCONNECTED")))
        self.assertTrue(should_use_fallback(RuntimeError("Failed to fetch")))

    def test_other_failures_do_not(self):
        self.assertFalse(should_use_fallback(ResolutionError(FailureKind.RATE_LIMITED)))
        self.assertFalse(should_use_fallback(ResolutionError(FailureKind.SAFETY_BLOCKED)))
        self.assertFalse(should_use_fallback(ResolutionError(FailureKind.UNKNOWN)))


class AnalysisPipelineTests(unittest.IsolatedAsyncioTestCase):
    async def test_model_answer_is_returned(self):
        pipeline, transport = _pipeline(MODEL_ANSWER)
        outcome = await pipeline.analyze("Python engineer", "Python role")

        self.assertFalse(outcome.used_fallback)
        self.assertEqual(outcome.result.match_score.total, 77)
        self.assertIn("Python engineer", transport.prompts[0])

    async def test_network_failure_substitutes_fallback(self):
        pipeline, transport = _pipeline(RuntimeError("TypeError: Failed to fetch"))
        outcome = await pipeline.analyze("python developer", "python developer")

        self.assertTrue(outcome.used_fallback)
        self.assertEqual(outcome.failure_kind, FailureKind.NETWORK_ERROR)
        self.assertEqual(outcome.result.cover_letter, OFFLINE_COVER_LETTER)
        self.assertEqual(outcome.result.match_score.total, 100)
        self.assertEqual(len(transport.prompts), 2)

    async def test_network_failure_raises_when_fallback_disabled(self):
        pipeline, _ = _pipeline(RuntimeError("network down"), fallback_on_network_error=False)
        with self.assertRaises(ResolutionError) as ctx:
            await pipeline.analyze("a", "b")
        self.assertEqual(ctx.exception.kind, FailureKind.NETWORK_ERROR)

    async def test_quota_failure_is_surfaced(self):
        pipeline, _ = _pipeline(UpstreamError("HTTP error 429", status_code=429))
        with self.assertRaises(ResolutionError) as ctx:
            await pipeline.analyze("a", "b")
        self.assertIn("quota", str(ctx.exception))

    async def test_offline_never_calls_the_model(self):
        pipeline, transport = _pipeline(MODEL_ANSWER)
        outcome = await pipeline.analyze("python", "python", offline=True)
        self.assertTrue(outcome.used_fallback)
        self.assertEqual(transport.prompts, [])

    async def test_analyze_files_extracts_documents_first(self):
        pipeline, transport = _pipeline(MODEL_ANSWER)
        with tempfile.TemporaryDirectory() as tmp:
            resume_path = Path(tmp) / "resume.txt"
            job_path = Path(tmp) / "job.md"
            resume_path.write_text("Senior Python engineer with FastAPI", encoding="utf-8")
            job_path.write_text("# Backend role\nFastAPI and Python", encoding="utf-8")

            outcome = await pipeline.analyze_files(resume_path, job_path)

        self.assertEqual(outcome.result.cover_letter, "Dear hiring manager")
        self.assertIn("Senior Python engineer with FastAPI", transport.prompts[0])
        self.assertIn("FastAPI and Python", transport.prompts[0])


if __name__ == "__main__":
    unittest.main()
