"""Core data models for covered call screening."""

from .covered_call import CoveredCallCandidate
from .option import Quote, RawOption
from .results import AnalysisOutcome, AnalysisResult, BulkAnalysisResult

__all__ = [
    "Quote",
    "RawOption",
    "CoveredCallCandidate",
    "AnalysisResult",
    "BulkAnalysisResult",
    "AnalysisOutcome",
]
