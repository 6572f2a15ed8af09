from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from jd2resume.ai.errors import ResolutionError
from jd2resume.ai.factory import build_strategies
from jd2resume.ai.orchestrator import InvocationOrchestrator
from jd2resume.ai.types import FailureKind
from jd2resume.analysis.fallback import run_fallback_analysis
from jd2resume.analysis.prompt import build_analysis_prompt
from jd2resume.analysis.schemas import AnalysisResult
from jd2resume.core.config import Settings, settings as default_settings
from jd2resume.parsing import extract_text_from_path

logger = logging.getLogger(__name__)

_OFFLINE_MARKERS = ("network", "connectivity", "fetch", "ERR_INTERNET_DISCONNECTED")


def should_use_fallback(error: BaseException) -> bool:
    if getattr(error, "kind", None) == FailureKind.NETWORK_ERROR:
        return True
    message = str(error)
    lowered = message.lower()
    return any(marker.lower() in lowered for marker in _OFFLINE_MARKERS)


@dataclass(frozen=True)
class PipelineOutcome:
    result: AnalysisResult
    used_fallback: bool = False
    failure_kind: FailureKind | None = None
    failure_message: str | None = None


class AnalysisPipeline:
    def __init__(self, orchestrator: InvocationOrchestrator, *, fallback_on_network_error: bool = True):
        self._orchestrator = orchestrator
        self._fallback_on_network_error = fallback_on_network_error

    @classmethod
    def from_settings(
        cls,
        cfg: Settings | None = None,
        *,
        environment: str | None = None,
        fallback_on_network_error: bool = True,
    ) -> "AnalysisPipeline":
        cfg = cfg or default_settings
        orchestrator = InvocationOrchestrator(
            build_strategies(environment, cfg),
            retries=cfg.ai_retries,
            base_delay=cfg.ai_base_delay_s,
            attempt_timeout=cfg.ai_attempt_timeout_s,
        )
        return cls(orchestrator, fallback_on_network_error=fallback_on_network_error)

    async def analyze(
        self,
        resume_text: str,
        job_description_text: str,
        *,
        offline: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> PipelineOutcome:
        if offline:
            logger.info("analysis_offline using_fallback=true")
            return PipelineOutcome(
                result=run_fallback_analysis(resume_text, job_description_text),
                used_fallback=True,
                failure_kind=FailureKind.NETWORK_ERROR,
                failure_message="Offline",
            )

        prompt = build_analysis_prompt(resume_text, job_description_text)
        try:
            result = await self._orchestrator.resolve(prompt, cancel_event=cancel_event)
        except ResolutionError as exc:
            if not (self._fallback_on_network_error and should_use_fallback(exc)):
                raise
            logger.warning("analysis_fallback kind=%s error=%s", exc.kind.value, exc)
            return PipelineOutcome(
                result=run_fallback_analysis(resume_text, job_description_text),
                used_fallback=True,
                failure_kind=exc.kind,
                failure_message=str(exc),
            )
        return PipelineOutcome(result=result)

    async def analyze_files(
        self,
        resume_path: str | Path,
        job_description_path: str | Path,
        *,
        offline: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> PipelineOutcome:
        resume = extract_text_from_path(resume_path)
        job_description = extract_text_from_path(job_description_path)
        return await self.analyze(
            resume.text,
            job_description.text,
            offline=offline,
            cancel_event=cancel_event,
        )
