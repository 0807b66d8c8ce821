"""Request and option chain validators.

Ticker checks run before any provider call. Chain filters are applied
before covered call metrics are computed; anything rejected here never
becomes a candidate.
"""

import logging
import re
from typing import List, Dict, Any, Optional

from ..models.option import RawOption
from ..utils.error_handling import InvalidTickerError, UndefinedTickerError

logger = logging.getLogger("cc_screener.validators")

# Up to five ASCII letters. Matches the empty string too, so emptiness is
# checked first.
VALID_TICKER_REGEX = re.compile(r'[A-Za-z]{0,5}')


def validate_ticker(ticker: Optional[str]) -> str:
    """Check that a ticker symbol is present and well formed.

    Args:
        ticker: Symbol as entered by the caller

    Returns:
        The ticker, unchanged

    Raises:
        UndefinedTickerError: If ticker is None or empty
        InvalidTickerError: If ticker is not 0-5 ASCII letters
    """
    if not ticker:
        raise UndefinedTickerError()
    if not VALID_TICKER_REGEX.fullmatch(ticker):
        raise InvalidTickerError(ticker)
    return ticker


class ChainFilterConfig:
    """Configuration for covered call chain filters."""

    def __init__(self, price_ceiling_offset: float = 10.0):
        """Initialize filter configuration.

        Args:
            price_ceiling_offset: Calls with strike at or above
                market price + offset are too far out of the money
        """
        self.price_ceiling_offset = price_ceiling_offset

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "ChainFilterConfig":
        """Create ChainFilterConfig from dictionary (e.g., from YAML)."""
        return cls(
            price_ceiling_offset=config.get('price_ceiling_offset', 10.0),
        )


def filter_options(
    options: List[RawOption],
    market_price: float,
    config: ChainFilterConfig | None = None,
) -> List[RawOption]:
    """Reduce a raw chain to covered call candidates.

    Args:
        options: Chain as returned by the provider (ascending strike)
        market_price: Current share price
        config: ChainFilterConfig with the strike ceiling offset

    Returns:
        Calls with strike below market_price + offset, in reverse provider
        order (descending strike). Deep in-the-money calls are kept.
    """
    config = config or ChainFilterConfig()
    ceiling = market_price + config.price_ceiling_offset

    filtered = []
    reject_reasons: Dict[str, int] = {}

    for option in options:
        if not option.is_call:
            reject_reasons['put'] = reject_reasons.get('put', 0) + 1
            continue

        if option.strike is not None and option.strike >= ceiling:
            reject_reasons['far_otm'] = reject_reasons.get('far_otm', 0) + 1
            continue

        filtered.append(option)

    filtered.reverse()

    logger.info(
        "Filter results: %d/%d options passed",
        len(filtered), len(options)
    )
    if reject_reasons:
        reasons = [f"{count} ({reason})" for reason, count in reject_reasons.items()]
        logger.debug("Rejected: %s", ", ".join(reasons))

    return filtered
