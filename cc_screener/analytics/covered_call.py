"""Covered call metrics.

For share price P, strike K, mark M and hours to expiration T:

    break_even              = P - M
    assignment_gain         = 100 * (K + M - P)
    assignment_gain_percent = assignment_gain / P
    risk                    = T / M
    time_gain               = 24 * assignment_gain / T
    time_gain_percent       = 24 * assignment_gain_percent / T
    itm                     = K <= P

Each field is computed independently. A field that cannot be computed is
left as None and logged; the rest of the candidate and of the chain are
still produced.
"""

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from ..models.covered_call import CoveredCallCandidate
from ..models.option import RawOption
from .market_hours import market_close, to_exchange_time

logger = logging.getLogger("cc_screener.covered_call")

SHARES_PER_CONTRACT = 100
HOURS_PER_DAY = 24


def time_to_expiration(expiration: date, now: Optional[datetime] = None) -> float:
    """Hours from ``now`` until the closing bell on the expiration date."""
    remaining = market_close(expiration) - to_exchange_time(now)
    return remaining.total_seconds() / 3600


def build_covered_call(
    option: RawOption,
    market_price: float,
    now: Optional[datetime] = None,
) -> CoveredCallCandidate:
    """Evaluate one call option as a covered call.

    Args:
        option: Call option from the filtered chain
        market_price: Current share price
        now: Reference time for time to expiration (defaults to now)

    Returns:
        CoveredCallCandidate, possibly with some derived fields unset

    Raises:
        ValueError: If the option is not a call
    """
    if not option.is_call:
        raise ValueError(f"Covered calls require a call option, got {option.option_type}")

    strike = option.strike
    mark = option.mark
    values: Dict[str, Any] = {}
    errors: Dict[str, str] = {}

    def derive(name: str, func: Callable[[], Any]) -> None:
        try:
            values[name] = func()
        except (TypeError, ZeroDivisionError, ValueError) as e:
            values[name] = None
            errors[name] = str(e) or type(e).__name__
            logger.warning(
                "Could not compute %s for %s strike %s: %s",
                name, option.symbol or option.option_type, strike, errors[name]
            )

    derive('break_even', lambda: market_price - mark)
    derive('assignment_gain', lambda: SHARES_PER_CONTRACT * (strike + mark - market_price))
    derive('assignment_gain_percent', lambda: values['assignment_gain'] / market_price)
    derive('time', lambda: time_to_expiration(option.expiration, now))
    derive('risk', lambda: values['time'] / mark)
    derive('time_gain', lambda: HOURS_PER_DAY * values['assignment_gain'] / values['time'])
    derive('time_gain_percent',
           lambda: HOURS_PER_DAY * values['assignment_gain_percent'] / values['time'])
    derive('itm', lambda: strike <= market_price)

    return CoveredCallCandidate(
        option=option,
        market_price=market_price,
        errors=errors,
        **values,
    )


def compute_covered_calls(
    options: List[RawOption],
    market_price: float,
    now: Optional[datetime] = None,
) -> List[CoveredCallCandidate]:
    """Evaluate a filtered chain, preserving its order.

    Args:
        options: Filtered call options (descending strike)
        market_price: Current share price
        now: Reference time for time to expiration

    Returns:
        One candidate per option
    """
    now = to_exchange_time(now)
    candidates = [build_covered_call(option, market_price, now) for option in options]

    partial = sum(1 for c in candidates if not c.is_complete)
    if partial:
        logger.warning("%d/%d candidates have unresolved fields", partial, len(candidates))

    return candidates
