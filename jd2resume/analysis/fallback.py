"""Offline approximation of the model analysis.

Used when the model cannot be reached. Everything here is a pure function of
the two input texts: plain lexical overlap plus two fixed skill lists.
"""

from __future__ import annotations

from jd2resume.analysis.schemas import (
    AnalysisResult,
    AtsVerdict,
    MatchScore,
    RecruiterLens,
    RewriteSuggestions,
    round_half_up,
)

HARD_SKILLS = ("javascript", "react", "python", "java", "sql", "html", "css", "node", "angular", "vue")
SOFT_SKILLS = ("leadership", "communication", "teamwork", "problem-solving", "analytical", "adaptability")

MIN_TOKEN_LENGTH = 4
AUTO_REJECT_BELOW = 30

OFFLINE_COVER_LETTER = "Please connect to the internet for AI-generated cover letter suggestions."


def _percent(part: float, whole: float) -> int:
    if whole <= 0:
        return 0
    return min(100, round_half_up(part / whole * 100))


def _scaled(value: int, factor: float) -> int:
    return min(100, round_half_up(value * factor))


def keyword_match_percentage(resume_text: str, job_description_text: str) -> int:
    resume_tokens = set(resume_text.lower().split())
    job_tokens = set(job_description_text.lower().split())
    shared = {token for token in resume_tokens if token in job_tokens and len(token) >= MIN_TOKEN_LENGTH}
    return _percent(len(shared), len(job_tokens))


def _verdict(shortlist_probability: int) -> str:
    if shortlist_probability > 70:
        return "Strong candidate with some improvements needed"
    if shortlist_probability > 40:
        return "Potential candidate with significant improvements needed"
    return "Needs substantial improvements to be competitive"


def run_fallback_analysis(resume_text: str, job_description_text: str) -> AnalysisResult:
    resume_lower = (resume_text or "").lower()
    job_lower = (job_description_text or "").lower()

    match_percentage = keyword_match_percentage(resume_lower, job_lower)

    found_hard = [skill for skill in HARD_SKILLS if skill in resume_lower and skill in job_lower]
    found_soft = [skill for skill in SOFT_SKILLS if skill in resume_lower and skill in job_lower]
    missing_hard = list(
        dict.fromkeys(skill for skill in HARD_SKILLS if skill in job_lower and skill not in resume_lower)
    )

    shortlist_probability = _scaled(match_percentage, 0.8)
    will_auto_reject = match_percentage < AUTO_REJECT_BELOW

    action_plan = []
    if missing_hard:
        action_plan.append("Add missing skills: " + ", ".join(missing_hard))
    action_plan.extend(
        [
            "Include more metrics and numbers in experience descriptions",
            "Highlight transferable skills from previous roles",
            "Consider obtaining certifications for missing technologies",
        ]
    )

    return AnalysisResult(
        match_score=MatchScore(
            total=match_percentage,
            hard_skills=_percent(len(found_hard), len(HARD_SKILLS)),
            soft_skills=_percent(len(found_soft), len(SOFT_SKILLS)),
            role_alignment=_scaled(match_percentage, 0.9),
            ats_compatibility=_scaled(match_percentage, 0.7),
        ),
        missing_keywords=missing_hard,
        action_plan=action_plan,
        recruiter_lens=RecruiterLens(
            positives=[
                f"Matches {match_percentage}% of job description keywords",
                f"Has {len(found_hard)} required technical skills" if found_hard else "Good foundational skills",
                f"Demonstrates {len(found_soft)} soft skills" if found_soft else "Shows potential for soft skills",
            ],
            red_flags=[
                (
                    f"Missing {len(missing_hard)} key technical skills"
                    if missing_hard
                    else "Could use more specific technical skills"
                ),
                "Consider adding more quantifiable achievements",
                "Experience descriptions could be more tailored to the role",
            ],
            shortlist_probability=shortlist_probability,
            verdict=_verdict(shortlist_probability),
        ),
        ats_verdict=AtsVerdict(
            will_auto_reject=will_auto_reject,
            reason=(
                "Low keyword match score may cause ATS rejection"
                if will_auto_reject
                else "Good keyword match score, likely to pass ATS screening"
            ),
        ),
        rewrite_suggestions=RewriteSuggestions(
            headline="Consider a more targeted professional headline",
            summary="Tailor your summary to highlight relevant experience for this role",
            experience_bullet="Focus on quantifiable achievements and relevant skills",
        ),
        cover_letter=OFFLINE_COVER_LETTER,
    )
