import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import jd2resume.main  # noqa: F401,E402
from jd2resume.analysis.pipeline import AnalysisPipeline  # noqa: E402
from jd2resume.core.config import load_settings  # noqa: E402


class PipelineSmokeTests(unittest.TestCase):
    def test_safe_imports_and_pipeline_from_settings(self):
        cfg = load_settings()
        pipeline = AnalysisPipeline.from_settings(cfg, environment="development")
        self.assertEqual(pipeline._orchestrator.strategy_names, ["direct", "relay"])
        pipeline = AnalysisPipeline.from_settings(cfg, environment="production")
        self.assertEqual(pipeline._orchestrator.strategy_names, ["relay"])


if __name__ == "__main__":
    unittest.main()
