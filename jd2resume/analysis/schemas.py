from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("score must be a number")
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        number = float(value)
        if math.isnan(number):
            raise ValueError("score must be a number")
        return max(0, min(100, round_half_up(number)))
    except (TypeError, OverflowError) as exc:
        raise ValueError("score must be a number") from exc


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MatchScore(CamelModel):
    total: int = 0
    hard_skills: int = 0
    soft_skills: int = 0
    role_alignment: int = 0
    ats_compatibility: int = 0

    @field_validator("*", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        return clamp_score(value)


class RecruiterLens(CamelModel):
    positives: list[str] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)
    shortlist_probability: int = 0
    verdict: str = ""

    @field_validator("shortlist_probability", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        return clamp_score(value)


class AtsVerdict(CamelModel):
    will_auto_reject: bool = False
    reason: str = ""


class RewriteSuggestions(CamelModel):
    headline: str = ""
    summary: str = ""
    experience_bullet: str = ""


class AnalysisResult(CamelModel):
    match_score: MatchScore
    missing_keywords: list[str] = Field(default_factory=list)
    action_plan: list[str] = Field(default_factory=list)
    recruiter_lens: RecruiterLens = Field(default_factory=RecruiterLens)
    ats_verdict: AtsVerdict = Field(default_factory=AtsVerdict)
    rewrite_suggestions: RewriteSuggestions = Field(default_factory=RewriteSuggestions)
    cover_letter: str = ""

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
