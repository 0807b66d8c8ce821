"""Expiration date bucketing and request validation."""

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from ..analytics.market_hours import (
    market_close,
    parse_iso_datetime,
    to_exchange_time,
)
from ..utils.error_handling import DateAlreadyPassedError, InvalidExpirationDateError

logger = logging.getLogger("cc_screener.expirations")

ISO_DATE_FORMAT = '%Y-%m-%d'
DEFAULT_WEEK_LIMIT = 5


def parse_iso_date(value: str) -> date:
    """Parse an ISO 8601 string into its exchange-local calendar date."""
    return parse_iso_datetime(value).date()


def bucket_expirations(
    raw_dates: Iterable[str],
    limit: int = DEFAULT_WEEK_LIMIT,
) -> List[List[date]]:
    """Group expiration dates into calendar weeks.

    ["2024-01-05", "2024-01-12", "2024-01-10"] => [[01-05], [01-10, 01-12]]

    Args:
        raw_dates: ISO 8601 date strings as listed by the provider
        limit: Maximum number of weeks to keep

    Returns:
        Weeks in chronological order (by earliest date), each sorted.
        For provider input, which is ascending, this is listing order.

    Raises:
        MalformedDateError: If any date fails to parse (nothing is bucketed)
    """
    dates = [parse_iso_date(raw) for raw in raw_dates]

    weeks: Dict[Tuple[int, int], List[date]] = {}
    for expiration in dates:
        iso = expiration.isocalendar()
        weeks.setdefault((iso[0], iso[1]), []).append(expiration)

    buckets = sorted((sorted(week) for week in weeks.values()), key=min)[:limit]
    logger.debug("Bucketed %d dates into %d weeks", len(dates), len(buckets))
    return buckets


def flatten_expirations(buckets: List[List[date]]) -> List[date]:
    return [d for week in buckets for d in week]


def resolve_expiration(
    requested: Optional[str],
    buckets: List[List[date]],
    now: Optional[datetime] = None,
) -> str:
    """Validate a requested expiration and return it as ``YYYY-MM-DD``.

    Args:
        requested: ISO 8601 date (time and offset are accepted and dropped),
            or None for the earliest listed expiration
        buckets: Weekly expiration groups from bucket_expirations
        now: Reference time (defaults to current exchange time)

    Returns:
        Sanitized expiration date string

    Raises:
        MalformedDateError: requested is not ISO 8601
        DateAlreadyPassedError: the expiration closed before ``now``
        InvalidExpirationDateError: not a listed expiration (only checked
            when at least one week is listed)
    """
    if not requested:
        if not buckets:
            raise InvalidExpirationDateError(str(requested))
        requested = min(buckets[0]).strftime(ISO_DATE_FORMAT)

    expiration_close = market_close(parse_iso_date(requested))
    now = to_exchange_time(now)

    if expiration_close < now:
        raise DateAlreadyPassedError(requested)

    sanitized = expiration_close.strftime(ISO_DATE_FORMAT)

    if buckets and sanitized not in {
        d.strftime(ISO_DATE_FORMAT) for d in flatten_expirations(buckets)
    }:
        raise InvalidExpirationDateError(sanitized)

    return sanitized
