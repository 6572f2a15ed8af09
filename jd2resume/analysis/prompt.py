from __future__ import annotations

RESPONSE_SHAPE = """{
  "matchScore": {"total": 0, "hardSkills": 0, "softSkills": 0, "roleAlignment": 0, "atsCompatibility": 0},
  "missingKeywords": ["keyword"],
  "actionPlan": ["step"],
  "recruiterLens": {"positives": ["..."], "redFlags": ["..."], "shortlistProbability": 0, "verdict": "..."},
  "atsVerdict": {"willAutoReject": false, "reason": "..."},
  "rewriteSuggestions": {"headline": "...", "summary": "...", "experienceBullet": "..."},
  "coverLetter": "..."
}"""


def _clip(text: str, max_chars: int) -> str:
    cleaned = (text or "").strip()
    if len(cleaned) > max_chars:
        return cleaned[:max_chars] + "..."
    return cleaned


def build_analysis_prompt(
    resume_text: str,
    job_description_text: str,
    max_chars_per_document: int = 30000,
) -> str:
    resume = _clip(resume_text, max_chars_per_document)
    job_description = _clip(job_description_text, max_chars_per_document)
    return (
        "You are an experienced technical recruiter and ATS (applicant tracking system) specialist. "
        "Compare the candidate resume with the job description and evaluate how well they match.\n\n"
        "Rules:\n"
        "- All scores are integers from 0 to 100.\n"
        "- missingKeywords lists important job description terms absent from the resume, without duplicates.\n"
        "- actionPlan gives concrete, ordered steps to improve the resume for this role.\n"
        "- Base every statement on the two documents only. Do not invent experience.\n"
        "- coverLetter is a short, tailored cover letter draft.\n"
        "- Respond with a single JSON object, no markdown, using exactly this shape:\n"
        f"{RESPONSE_SHAPE}\n\n"
        f"RESUME:\n{resume}\n\n"
        f"JOB DESCRIPTION:\n{job_description}\n"
    )
