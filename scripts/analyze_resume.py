from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from jd2resume.ai.errors import ResolutionError, error_payload  # noqa: E402
from jd2resume.analysis.pipeline import AnalysisPipeline  # noqa: E402
from jd2resume.core.config import settings  # noqa: E402
from jd2resume.parsing import DocumentExtractionError  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description="Compare a resume against a job description.")
    parser.add_argument("--resume", required=True, help="Resume file (.pdf, .docx, .txt, .md)")
    parser.add_argument("--job", required=True, help="Job description file (.pdf, .docx, .txt, .md)")
    parser.add_argument(
        "--env",
        choices=["development", "production"],
        default=None,
        help="Calling strategy order. Defaults to APP_ENV.",
    )
    parser.add_argument("--offline", action="store_true", help="Skip the model and use the local analyzer.")
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Fail instead of using the local analyzer on network errors.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level, format="%(message)s", stream=sys.stderr)

    pipeline = AnalysisPipeline.from_settings(
        environment=args.env,
        fallback_on_network_error=not args.no_fallback,
    )
    try:
        outcome = asyncio.run(pipeline.analyze_files(args.resume, args.job, offline=args.offline))
    except (DocumentExtractionError, FileNotFoundError) as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        return 2
    except ResolutionError as exc:
        print(json.dumps(error_payload(exc)), file=sys.stderr)
        return 1

    body = outcome.result.to_payload()
    if outcome.used_fallback:
        print(f"Model unavailable ({outcome.failure_message}); showing offline analysis.", file=sys.stderr)
    print(json.dumps(body, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
