"""Core option contract and quote models."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Literal


@dataclass(frozen=True)
class Quote:
    """Last traded price of the underlying at request time."""

    ticker: str
    last_price: float


@dataclass(frozen=True)
class RawOption:
    """Represents a single option contract as reported by the provider.

    Immutable dataclass to prevent accidental mutations during processing.
    Monetary values in dollars. Strike and mark may be missing on sparse
    provider records; downstream calculations must tolerate that.
    """

    option_type: Literal["call", "put"]
    strike: float | None
    mark: float | None
    expiration: date

    symbol: str = ""
    bid: float | None = None
    ask: float | None = None
    last: float | None = None
    volume: int = 0
    open_interest: int = 0

    # Provider record as received
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def is_call(self) -> bool:
        return self.option_type == "call"

    def __repr__(self) -> str:
        """Compact string representation for debugging."""
        strike = f"{self.strike:.2f}" if self.strike is not None else "?"
        return (f"RawOption({strike}{self.option_type[0].upper()} "
                f"{self.expiration.strftime('%Y-%m-%d')} mark={self.mark})")
