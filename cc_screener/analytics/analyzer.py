"""Main covered call analysis orchestrator.

Request flow: validate ticker, quote, bucket expirations, resolve the
expiration, fetch the chain, filter, compute candidates.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from typing import List, Optional

from ..config import AnalyzerConfig
from ..data.expirations import bucket_expirations, flatten_expirations, resolve_expiration
from ..data.gateway import MarketDataGateway
from ..data.validators import ChainFilterConfig, filter_options, validate_ticker
from ..models.covered_call import CoveredCallCandidate
from ..models.option import Quote
from ..models.results import AnalysisOutcome, AnalysisResult, BulkAnalysisResult
from ..output.console import render_analysis
from ..utils.error_handling import CCToolError
from .covered_call import compute_covered_calls
from .market_hours import to_exchange_time

logger = logging.getLogger("cc_screener.analyzer")


class CoveredCallAnalyzer:
    """Runs covered call analysis against one market data gateway.

    The gateway carries its own credentials; the analyzer keeps no state
    between requests.
    """

    def __init__(self, gateway: MarketDataGateway, config: Optional[AnalyzerConfig] = None):
        """Initialize the analyzer.

        Args:
            gateway: Market data source (e.g. TradierAPI)
            config: AnalyzerConfig, defaults when omitted
        """
        self.gateway = gateway
        self.config = config or AnalyzerConfig()
        self.filter_config = ChainFilterConfig(
            price_ceiling_offset=self.config.price_ceiling_offset
        )

    def get_quote(self, ticker: Optional[str]) -> Quote:
        """Validate the ticker, then fetch its quote.

        Raises:
            UndefinedTickerError, InvalidTickerError: ticker rejected
            GatewayError: provider rejected the ticker
        """
        return self.gateway.get_quote(validate_ticker(ticker))

    def get_expirations(self, ticker: str) -> List[List[date]]:
        """Fetch expirations and group them into weeks."""
        return bucket_expirations(
            self.gateway.get_expiration_dates(ticker),
            limit=self.config.expiration_week_limit,
        )

    def get_chain(
        self,
        ticker: str,
        market_price: float,
        expiration_dates: List[List[date]],
        expiration_date: Optional[str],
        now: Optional[datetime] = None,
    ) -> List[CoveredCallCandidate]:
        """Resolve an expiration and return its candidates, descending strike."""
        sanitized = resolve_expiration(expiration_date, expiration_dates, now)
        chain = self.gateway.get_options_chain(ticker, sanitized)
        filtered = filter_options(chain, market_price, self.filter_config)
        return compute_covered_calls(filtered, market_price, now)

    def analyze(
        self,
        ticker: Optional[str],
        expiration_date: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AnalysisResult:
        """Covered call candidates for one expiration.

        Args:
            ticker: Underlying symbol
            expiration_date: ISO 8601 date, or None for the nearest expiration
            now: Reference time (defaults to current exchange time)

        Returns:
            AnalysisResult with display text rendered

        Raises:
            CCToolError: On an invalid ticker or expiration
            GatewayError: Propagated from the provider
        """
        now = to_exchange_time(now)
        quote = self.get_quote(ticker)
        expiration_dates = self.get_expirations(quote.ticker)

        resolved = resolve_expiration(expiration_date, expiration_dates, now)
        logger.info("Analyzing %s expiring %s at $%.2f", quote.ticker, resolved, quote.last_price)

        options_chain = self.get_chain(
            quote.ticker, quote.last_price, expiration_dates, resolved, now
        )

        result = AnalysisResult(
            quote=quote,
            expiration_dates=expiration_dates,
            expiration_date=resolved,
            options_chain=options_chain,
        )
        result.display_text = render_analysis(result)
        return result

    def analyze_bulk(
        self,
        ticker: Optional[str],
        n: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> BulkAnalysisResult:
        """Covered call candidates for the first ``n`` listed expirations.

        Chains are fetched concurrently. Pages come back in expiration order;
        if any fetch fails the whole call fails.

        Args:
            ticker: Underlying symbol
            n: Number of expirations (defaults to config.bulk_pages)
            now: Reference time (defaults to current exchange time)

        Raises:
            ValueError: If n is negative
        """
        n = self.config.bulk_pages if n is None else n
        if n < 0:
            raise ValueError(f"Page count must be non-negative, got {n}")
        now = to_exchange_time(now)
        quote = self.get_quote(ticker)
        expiration_dates = self.get_expirations(quote.ticker)

        page_dates = [
            d.strftime('%Y-%m-%d') for d in flatten_expirations(expiration_dates)[:n]
        ]
        logger.info("Bulk analysis of %s over %d expirations", quote.ticker, len(page_dates))

        if not page_dates:
            return BulkAnalysisResult(quote=quote, expiration_dates=expiration_dates)

        workers = min(len(page_dates), self.config.max_workers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(
                    self.get_chain,
                    quote.ticker, quote.last_price, expiration_dates, expiration, now
                )
                for expiration in page_dates
            ]
            pages = [future.result() for future in futures]

        return BulkAnalysisResult(
            quote=quote,
            expiration_dates=expiration_dates,
            page_dates=page_dates,
            pages=pages,
        )

    def try_analyze(self, ticker: Optional[str], expiration_date: Optional[str] = None,
                    now: Optional[datetime] = None) -> AnalysisOutcome:
        """Like analyze, but validation errors are returned instead of raised."""
        try:
            return AnalysisOutcome(result=self.analyze(ticker, expiration_date, now))
        except CCToolError as e:
            logger.info("Request rejected (%s): %s", e.kind.value, e)
            return AnalysisOutcome(error=e)

    def try_analyze_bulk(self, ticker: Optional[str], n: Optional[int] = None,
                         now: Optional[datetime] = None) -> AnalysisOutcome:
        """Like analyze_bulk, but validation errors are returned instead of raised."""
        try:
            return AnalysisOutcome(result=self.analyze_bulk(ticker, n, now))
        except CCToolError as e:
            logger.info("Request rejected (%s): %s", e.kind.value, e)
            return AnalysisOutcome(error=e)
