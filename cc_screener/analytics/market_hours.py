"""Exchange session utilities.

All session and expiration arithmetic happens in exchange-local time
(America/New_York).
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

import pytz
from dateutil.parser import isoparse

from ..utils.error_handling import MalformedDateError

logger = logging.getLogger("cc_screener.market_hours")

EASTERN = pytz.timezone("America/New_York")

# Regular session (Eastern Time)
MARKET_OPEN_TIME = time(9, 30)
MARKET_CLOSE_TIME = time(16, 0)

# 0=Monday, 6=Sunday
MARKET_CLOSED_DAYS = [5, 6]


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 string into an exchange-local datetime.

    Values without an offset are taken as exchange-local wall time.

    Raises:
        MalformedDateError: If the value is not valid ISO 8601 or falls
            outside the representable range once converted
    """
    try:
        parsed = isoparse(value)
        if parsed.tzinfo is None:
            return EASTERN.localize(parsed)
        return parsed.astimezone(EASTERN)
    except (ValueError, TypeError, OverflowError):
        raise MalformedDateError(value)


def to_exchange_time(moment: Union[datetime, str, None] = None) -> datetime:
    """Convert a timestamp to exchange-local time.

    Args:
        moment: Aware or naive datetime, ISO 8601 string, or None for now.
            Naive datetime objects are taken as UTC. Strings without an
            offset are exchange-local wall time, as in parse_iso_datetime.

    Returns:
        Timezone-aware datetime in America/New_York

    Raises:
        MalformedDateError: If a string is not valid ISO 8601
    """
    if moment is None:
        return datetime.now(EASTERN)
    if isinstance(moment, str):
        return parse_iso_datetime(moment)
    if moment.tzinfo is None:
        return pytz.utc.localize(moment).astimezone(EASTERN)
    return moment.astimezone(EASTERN)


def market_close(expiration: date) -> datetime:
    """Closing bell on the given date, exchange-local."""
    return EASTERN.localize(datetime.combine(expiration, MARKET_CLOSE_TIME))


def is_market_open(now: Union[datetime, str, None] = None) -> bool:
    """Check if the US stock market is open at the given instant.

    Args:
        now: Optional datetime or ISO 8601 string (defaults to current time).
            See to_exchange_time for how values without an offset are read.

    Returns:
        True if open. Exactly 09:30 and exactly 16:00 count as closed.

    Raises:
        MalformedDateError: If a string is not valid ISO 8601

    Note:
        Weekends only; exchange holidays and early closes are not modelled.
    """
    now = to_exchange_time(now)

    if now.weekday() in MARKET_CLOSED_DAYS:
        return False

    # Minute resolution
    current_time = now.time().replace(second=0, microsecond=0)
    return MARKET_OPEN_TIME < current_time < MARKET_CLOSE_TIME


def next_market_open(now: Optional[datetime] = None) -> datetime:
    """Get the next regular session open after ``now``.

    Args:
        now: Optional datetime to check from (defaults to current time)

    Returns:
        Aware datetime of the next 09:30 open on a weekday
    """
    now = to_exchange_time(now)

    candidate = now.date()
    if now.time() >= MARKET_OPEN_TIME:
        candidate += timedelta(days=1)
    while candidate.weekday() in MARKET_CLOSED_DAYS:
        candidate += timedelta(days=1)

    return EASTERN.localize(datetime.combine(candidate, MARKET_OPEN_TIME))
