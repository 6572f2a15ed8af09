import os
import sys
import unittest
from pathlib import Path

os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from jd2resume.ai.errors import ConfigurationError, UpstreamError  # noqa: E402
from jd2resume.api.v1.relay import get_gemini_client  # noqa: E402
from jd2resume.main import app  # noqa: E402


class FakeGeminiClient:
    def __init__(self, outcome):
        self.outcome = outcome
        self.prompts = []

    async def generate_text(self, prompt):
        self.prompts.append(prompt)
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


class RelayApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def _use(self, outcome) -> FakeGeminiClient:
        fake = FakeGeminiClient(outcome)
        app.dependency_overrides[get_gemini_client] = lambda: fake
        return fake

    def test_returns_sanitized_model_object(self):
        fake = self._use("```json\n{'matchScore': {'total': 80,},}\n```")
        response = self.client.post("/v1/gemini-proxy", json={"prompt": "Compare"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"matchScore": {"total": 80}})
        self.assertEqual(fake.prompts, ["Compare"])
        self.assertEqual(response.headers["access-control-allow-origin"], "*")
        self.assertEqual(response.headers["content-type"], "application/json")

    def test_preflight(self):
        response = self.client.options("/v1/gemini-proxy")
        self.assertEqual(response.status_code, 204)
        self.assertEqual(response.content, b"")
        self.assertEqual(response.headers["access-control-allow-origin"], "*")
        self.assertEqual(response.headers["access-control-allow-methods"], "POST, OPTIONS")
        self.assertEqual(response.headers["access-control-allow-headers"], "Content-Type")

    def test_prompt_is_required(self):
        fake = self._use("{}")
        response = self.client.post("/v1/gemini-proxy", json={"prompt": "  "})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Prompt is required"})
        self.assertEqual(fake.prompts, [])

    def test_upstream_failures_map_to_statuses(self):
        cases = [
            (UpstreamError("HTTP error 429: quota", status_code=429), 429, "API quota exceeded"),
            (UpstreamError("HTTP error 503", status_code=503), 503, "Service temporarily unavailable"),
            (UpstreamError("Response blocked: SAFETY"), 400, "Request blocked due to safety settings"),
            (RuntimeError("fetch failed"), 502, "Network connectivity issue"),
            (UpstreamError("No response text received from API"), 500, "An unexpected error occurred"),
        ]
        for exc, status_code, message in cases:
            with self.subTest(status=status_code):
                self._use(exc)
                response = self.client.post("/v1/gemini-proxy", json={"prompt": "Compare"})
                self.assertEqual(response.status_code, status_code)
                self.assertEqual(response.json(), {"error": message})

    def test_missing_server_key(self):
        self._use(ConfigurationError("Missing API key"))
        response = self.client.post("/v1/gemini-proxy", json={"prompt": "Compare"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Server configuration error: API key not configured"})

    def test_unparseable_model_text_returns_raw_response(self):
        self._use("```json\nI am not JSON\n```")
        response = self.client.post("/v1/gemini-proxy", json={"prompt": "Compare"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(),
            {"error": "Invalid JSON response from Gemini API", "rawResponse": "I am not JSON"},
        )

    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")


if __name__ == "__main__":
    unittest.main()
