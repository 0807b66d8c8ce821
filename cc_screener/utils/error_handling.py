"""Error taxonomy and retry helpers.

Validation errors are terminal: they abort the current pipeline stage and are
never retried. Retries only wrap calls to the market data provider.
"""

import time
from enum import Enum
from typing import TypeVar, Callable, Type, Tuple
from functools import wraps
import logging

logger = logging.getLogger("cc_screener.error_handling")

T = TypeVar('T')


class ErrorKind(Enum):
    """Kinds of validation failure a caller can branch on."""
    UNDEFINED_TICKER = "UNDEFINED_TICKER"
    INVALID_TICKER = "INVALID_TICKER"
    MALFORMED_DATE = "MALFORMED_DATE"
    PASSED_DATE = "PASSED_DATE"
    INVALID_DATE = "INVALID_DATE"


class CCToolError(Exception):
    """Base exception for request validation errors.

    Attributes:
        kind: ErrorKind identifying the failure
        value: The offending ticker or date string (None for undefined ticker)
    """

    kind: ErrorKind

    def __init__(self, message: str, value: str | None = None):
        super().__init__(message)
        self.value = value

    @property
    def name(self) -> str:
        return self.kind.value


class UndefinedTickerError(CCToolError, ValueError):
    """Raised when no ticker was supplied."""

    kind = ErrorKind.UNDEFINED_TICKER

    def __init__(self):
        super().__init__("Ticker is not defined")


class InvalidTickerError(CCToolError, ValueError):
    """Raised when a ticker fails the symbol syntax check."""

    kind = ErrorKind.INVALID_TICKER

    def __init__(self, ticker: str):
        super().__init__(f"Ticker {ticker} is not valid", ticker)


class MalformedDateError(CCToolError, ValueError):
    """Raised when a date string is not ISO 8601."""

    kind = ErrorKind.MALFORMED_DATE

    def __init__(self, date: str):
        super().__init__(
            f"Date {date} is not parsable in ISO date format (ISO 8601)", date
        )


class DateAlreadyPassedError(CCToolError, ValueError):
    """Raised when the requested expiration is already in the past.

    The provider has no historical chain data.
    """

    kind = ErrorKind.PASSED_DATE

    def __init__(self, date: str):
        super().__init__(f"Date {date} has already passed", date)


class InvalidExpirationDateError(CCToolError, ValueError):
    """Raised when a date is not among the listed expirations."""

    kind = ErrorKind.INVALID_DATE

    def __init__(self, date: str):
        super().__init__(f"Date {date} is not a valid expiration date", date)


class GatewayError(Exception):
    """Raised by the market data client on a non-200 response."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"API Error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""
    pass


def retry_with_backoff(
    max_retries: int = 3,
    backoff_factor: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    logger_func: Callable[[str], None] | None = None
):
    """Decorator to retry function with exponential backoff.

    Args:
        max_retries: Maximum number of attempts
        backoff_factor: Multiplier for exponential backoff (wait time = backoff_factor ** attempt)
        exceptions: Tuple of exception types to catch and retry
        logger_func: Optional logging function (defaults to logger.warning)

    Returns:
        Decorated function with retry logic

    Example:
        >>> @retry_with_backoff(max_retries=3, exceptions=(ConnectionError, TimeoutError))
        >>> def fetch_data():
        >>>     return api.get_options_chain("AAPL", "2025-02-21")

    Raises:
        The original exception if all retries are exhausted
    """
    log_func = logger_func or logger.warning

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries - 1:
                        logger.error(
                            f"Function {func.__name__} failed after {max_retries} attempts: {e}"
                        )
                        raise

                    wait_time = backoff_factor ** attempt
                    log_func(
                        f"Attempt {attempt + 1}/{max_retries} failed for {func.__name__}: {e}. "
                        f"Retrying in {wait_time:.1f}s..."
                    )
                    time.sleep(wait_time)

            raise RuntimeError(f"Unexpected state in retry logic for {func.__name__}")

        return wrapper
    return decorator
