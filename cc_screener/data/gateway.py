"""Market data gateway and the Tradier API client.

Tradier offers a free sandbox API with 15-minute delayed data, which is
enough for screening.

Setup:
    1. Go to https://developer.tradier.com/
    2. Sign up (free)
    3. Get your sandbox API token from the Applications dashboard
    4. Export TRADIER_SANDBOX_TOKEN or pass the token explicitly
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Protocol

import requests

from ..models.option import Quote, RawOption
from ..utils.error_handling import GatewayError, retry_with_backoff
from .expirations import parse_iso_date

logger = logging.getLogger("cc_screener.gateway")

# API endpoints
SANDBOX_BASE = "https://sandbox.tradier.com/v1"
PRODUCTION_BASE = "https://api.tradier.com/v1"


class MarketDataGateway(Protocol):
    """Source of quotes, expiration lists and option chains."""

    def get_quote(self, ticker: str) -> Quote:
        ...

    def get_expiration_dates(self, ticker: str) -> List[str]:
        ...

    def get_options_chain(self, ticker: str, expiration_date: str) -> List[RawOption]:
        ...


class TradierAPI:
    """Tradier API client.

    Holds the credentials for one session. Pass the instance to
    CoveredCallAnalyzer; nothing is stored at module level. Each thread
    gets its own requests session unless one is injected, in which case
    the caller owns its thread safety.
    """

    def __init__(
        self,
        api_token: str,
        sandbox: bool = True,
        timeout: float = 10.0,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
    ):
        """Initialize Tradier API client.

        Args:
            api_token: Tradier API token
            sandbox: Use sandbox endpoint (default True)
            timeout: Per-request timeout in seconds
            max_retries: Attempts per request on connection errors and timeouts
            session: Optional preconfigured requests session, shared by all threads
        """
        self.base_url = SANDBOX_BASE if sandbox else PRODUCTION_BASE
        self.sandbox = sandbox
        self.timeout = timeout
        self.max_retries = max_retries
        self.headers = {
            'Authorization': f'Bearer {api_token}',
            'Accept': 'application/json'
        }
        self._local = threading.local()
        self._session = session
        if session is not None:
            session.headers.update(self.headers)

    @property
    def session(self) -> requests.Session:
        """The injected session, else one per calling thread."""
        if self._session is not None:
            return self._session

        session = getattr(self._local, 'session', None)
        if session is None:
            session = requests.Session()
            session.headers.update(self.headers)
            self._local.session = session
        return session

    def _request(self, endpoint: str, params: Dict) -> Dict:
        url = f"{self.base_url}{endpoint}"
        logger.debug("GET %s %s", url, params)
        response = self.session.get(url, params=params, timeout=self.timeout)

        if response.status_code != 200:
            raise GatewayError(response.status_code, response.text)

        return response.json()

    def _get(self, endpoint: str, params: Optional[Dict] = None) -> Dict:
        """Make GET request to Tradier API.

        Args:
            endpoint: API endpoint (e.g., '/markets/quotes')
            params: Query parameters

        Returns:
            JSON response as dictionary

        Raises:
            GatewayError: On a non-200 response (not retried)
            requests.RequestException: When retries are exhausted
        """
        fetch = retry_with_backoff(
            max_retries=self.max_retries,
            exceptions=(requests.ConnectionError, requests.Timeout),
        )(self._request)
        return fetch(endpoint, params or {})

    def get_quote(self, ticker: str) -> Quote:
        """Get quote for underlying symbol.

        Raises:
            GatewayError: If the symbol is unknown to the provider
        """
        data = self._get('/markets/quotes', {'symbols': ticker})
        quotes = (data.get('quotes') or {}).get('quote', {})

        if isinstance(quotes, list):
            quotes = quotes[0] if quotes else {}

        last = safe_float(quotes.get('last'))
        if not quotes or last is None:
            unmatched = (data.get('quotes') or {}).get('unmatched_symbols')
            raise GatewayError(404, f"No quote for {ticker}: {unmatched or data}")

        return Quote(ticker=quotes.get('symbol', ticker), last_price=last)

    def get_expiration_dates(self, ticker: str) -> List[str]:
        """Get available option expiration dates (YYYY-MM-DD)."""
        data = self._get('/markets/options/expirations', {'symbol': ticker})
        expirations = (data.get('expirations') or {}).get('date', [])

        if isinstance(expirations, str):
            expirations = [expirations]

        return expirations

    def get_options_chain(self, ticker: str, expiration_date: str) -> List[RawOption]:
        """Get the option chain for one expiration, in provider order."""
        data = self._get('/markets/options/chains', {
            'symbol': ticker,
            'expiration': expiration_date,
        })
        chain = (data.get('options') or {}).get('option', [])

        if isinstance(chain, dict):
            # Single option returned
            chain = [chain]

        return [parse_tradier_option(option, expiration_date) for option in chain]


def safe_float(value, default: Optional[float] = None) -> Optional[float]:
    """Convert value to float, returning default for None and invalid values."""
    if value is None or value == '':
        return default
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def safe_int(value, default: int = 0) -> int:
    """Convert value to int, returning default for None and invalid values."""
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def option_mark(bid: Optional[float], ask: Optional[float], last: Optional[float]) -> Optional[float]:
    """Mid of bid/ask when both are quoted, else the last trade."""
    if bid is not None and ask is not None:
        return (bid + ask) / 2.0
    return last


def parse_tradier_option(option: Dict[str, Any], expiration_date: str) -> RawOption:
    """Parse a Tradier chain record into a RawOption.

    Args:
        option: Tradier option record
        expiration_date: Expiration the chain was requested for

    Returns:
        RawOption with the record kept in ``raw``
    """
    bid = safe_float(option.get('bid'))
    ask = safe_float(option.get('ask'))
    last = safe_float(option.get('last'))

    expiration = option.get('expiration_date') or expiration_date

    return RawOption(
        option_type=str(option.get('option_type', '')).lower(),
        strike=safe_float(option.get('strike')),
        mark=option_mark(bid, ask, last),
        expiration=parse_iso_date(expiration),
        symbol=option.get('symbol', ''),
        bid=bid,
        ask=ask,
        last=last,
        volume=safe_int(option.get('volume')),
        open_interest=safe_int(option.get('open_interest')),
        raw=option,
    )
