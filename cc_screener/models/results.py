"""Analysis result containers."""

from dataclasses import dataclass, field
from datetime import date
from typing import List

from ..utils.error_handling import CCToolError, ErrorKind
from .covered_call import CoveredCallCandidate
from .option import Quote


@dataclass
class AnalysisResult:
    """Covered call candidates for a single expiration."""

    quote: Quote
    expiration_dates: List[List[date]]
    expiration_date: str
    options_chain: List[CoveredCallCandidate]  # Descending strike
    display_text: str = ""

    @property
    def expiration_dates_flat(self) -> List[date]:
        """Expiration dates without the weekly grouping."""
        return [d for week in self.expiration_dates for d in week]


@dataclass
class BulkAnalysisResult:
    """One page of candidates per expiration, in expiration order."""

    quote: Quote
    expiration_dates: List[List[date]]
    page_dates: List[str] = field(default_factory=list)
    pages: List[List[CoveredCallCandidate]] = field(default_factory=list)

    @property
    def expiration_dates_flat(self) -> List[date]:
        return [d for week in self.expiration_dates for d in week]


@dataclass
class AnalysisOutcome:
    """Either a result or the validation error that prevented it."""

    result: AnalysisResult | BulkAnalysisResult | None = None
    error: CCToolError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> ErrorKind | None:
        return self.error.kind if self.error is not None else None
