from .fallback import run_fallback_analysis
from .schemas import AnalysisResult, AtsVerdict, MatchScore, RecruiterLens, RewriteSuggestions

__all__ = [
    "run_fallback_analysis",
    "AnalysisResult",
    "AtsVerdict",
    "MatchScore",
    "RecruiterLens",
    "RewriteSuggestions",
]
