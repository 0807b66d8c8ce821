"""Covered call candidate model."""

from dataclasses import dataclass, field
from typing import Dict

from .option import RawOption


@dataclass(frozen=True)
class CoveredCallCandidate:
    """A call option evaluated as a covered call against the current share price.

    Derived fields are None when they could not be computed for this option
    (missing strike or mark, zero mark, no time left). The reason for each
    unresolved field is kept in ``errors``.
    """

    option: RawOption
    market_price: float

    break_even: float | None = None
    assignment_gain: float | None = None          # Dollars per contract (100 shares)
    assignment_gain_percent: float | None = None  # assignment_gain / market_price
    time: float | None = None                     # Hours until expiration close
    risk: float | None = None                     # Hours of exposure per dollar of premium
    time_gain: float | None = None                # Assignment gain per 24 hours
    time_gain_percent: float | None = None
    itm: bool | None = None

    errors: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    @property
    def strike(self) -> float | None:
        return self.option.strike

    @property
    def mark(self) -> float | None:
        return self.option.mark

    @property
    def is_complete(self) -> bool:
        """True if every derived field was computed."""
        return not self.errors

    def render(self) -> str:
        """Comma-joined strike, mark, break-even and assignment gain to 2 places."""
        fields = [self.strike, self.mark, self.break_even, self.assignment_gain]
        return ",".join("N/A" if value is None else f"{value:.2f}" for value in fields)

    def __repr__(self) -> str:
        return (f"CoveredCallCandidate(K={self.strike} M={self.mark} "
                f"BE={self.break_even} gain={self.assignment_gain} itm={self.itm})")
