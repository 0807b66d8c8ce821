"""Integration tests for the covered call analysis workflow."""

import threading
from datetime import date, datetime

import pytest

from cc_screener.analytics.analyzer import CoveredCallAnalyzer
from cc_screener.analytics.market_hours import EASTERN
from cc_screener.config import AnalyzerConfig
from cc_screener.models.option import Quote, RawOption
from cc_screener.models.results import AnalysisResult, BulkAnalysisResult
from cc_screener.utils.error_handling import (
    DateAlreadyPassedError,
    ErrorKind,
    GatewayError,
    InvalidExpirationDateError,
    InvalidTickerError,
    UndefinedTickerError,
)

EXPIRATIONS = ["2024-01-05", "2024-01-10", "2024-01-12", "2024-01-19", "2024-01-26"]


class FakeGateway:
    """In-memory market data with a fixed chain per expiration."""

    def __init__(self, price=100.0, expirations=None, fail_on=None):
        self.price = price
        self.expirations = EXPIRATIONS if expirations is None else expirations
        self.fail_on = fail_on
        self.chain_requests = []
        self._lock = threading.Lock()

    def get_quote(self, ticker):
        if ticker.upper() == "NOPE":
            raise GatewayError(404, f"No quote for {ticker}")
        return Quote(ticker=ticker.upper(), last_price=self.price)

    def get_expiration_dates(self, ticker):
        return list(self.expirations)

    def get_options_chain(self, ticker, expiration_date):
        with self._lock:
            self.chain_requests.append(expiration_date)
        if expiration_date == self.fail_on:
            raise GatewayError(500, "chain unavailable")

        expiration = date.fromisoformat(expiration_date)
        chain = []
        for strike in (90.0, 95.0, 100.0, 105.0, 110.0, 115.0):
            distance = max(self.price - strike, 0.0)
            chain.append(RawOption("call", strike, round(distance + 1.0, 2), expiration))
            chain.append(RawOption("put", strike, 1.0, expiration))
        return chain


@pytest.fixture
def now():
    """Wednesday 2024-01-03 10:00 ET."""
    return EASTERN.localize(datetime(2024, 1, 3, 10, 0))


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def analyzer(gateway):
    return CoveredCallAnalyzer(gateway)


class TestAnalyze:
    """Test suite for single-expiration analysis."""

    def test_default_expiration(self, analyzer, gateway, now):
        result = analyzer.analyze("xyz", now=now)

        assert isinstance(result, AnalysisResult)
        assert result.expiration_date == "2024-01-05"
        assert gateway.chain_requests == ["2024-01-05"]
        assert result.quote == Quote("XYZ", 100.0)

    def test_candidates_descending_calls_below_ceiling(self, analyzer, now):
        result = analyzer.analyze("XYZ", now=now)

        assert [c.strike for c in result.options_chain] == [105.0, 100.0, 95.0, 90.0]
        assert all(c.option.option_type == "call" for c in result.options_chain)

    def test_candidate_metrics(self, analyzer, now):
        result = analyzer.analyze("XYZ", now=now)
        itm = result.options_chain[2]  # strike 95, mark 6

        assert itm.break_even == pytest.approx(94.0)
        assert itm.assignment_gain == pytest.approx(100.0)
        assert itm.itm is True
        assert itm.time == pytest.approx(54.0)

    def test_expiration_buckets(self, analyzer, now):
        result = analyzer.analyze("XYZ", now=now)

        assert result.expiration_dates == [
            [date(2024, 1, 5)],
            [date(2024, 1, 10), date(2024, 1, 12)],
            [date(2024, 1, 19)],
            [date(2024, 1, 26)],
        ]
        assert result.expiration_dates_flat[:3] == [
            date(2024, 1, 5), date(2024, 1, 10), date(2024, 1, 12)
        ]

    def test_week_limit_from_config(self, gateway, now):
        analyzer = CoveredCallAnalyzer(gateway, AnalyzerConfig(expiration_week_limit=2))

        assert len(analyzer.analyze("XYZ", now=now).expiration_dates) == 2

    def test_price_ceiling_from_config(self, gateway, now):
        analyzer = CoveredCallAnalyzer(gateway, AnalyzerConfig(price_ceiling_offset=20.0))

        assert analyzer.analyze("XYZ", now=now).options_chain[0].strike == 115.0

    def test_requested_expiration(self, analyzer, gateway, now):
        result = analyzer.analyze("XYZ", "2024-01-12", now=now)

        assert result.expiration_date == "2024-01-12"
        assert gateway.chain_requests == ["2024-01-12"]

    def test_display_text(self, analyzer, now):
        result = analyzer.analyze("XYZ", now=now)
        lines = result.display_text.split("\n")

        assert lines[0] == ""
        assert lines[1] == "Expiration Dates: 2024-01-05,2024-01-10,2024-01-12,2024-01-19,2024-01-26"
        assert lines[2] == "Share Price: $100.0, Ex Date: 2024-01-05"
        assert lines[3] == "\t105.00,1.00,99.00,600.00"
        assert lines[-1] == "\t90.00,11.00,89.00,100.00"

    def test_undefined_ticker(self, analyzer, gateway, now):
        with pytest.raises(UndefinedTickerError):
            analyzer.analyze(None, now=now)
        assert gateway.chain_requests == []

    def test_invalid_ticker(self, analyzer, now):
        with pytest.raises(InvalidTickerError):
            analyzer.analyze("SPY500", now=now)

    def test_gateway_error_propagates(self, analyzer, now):
        with pytest.raises(GatewayError):
            analyzer.analyze("NOPE", now=now)

    def test_passed_expiration(self, analyzer, gateway):
        with pytest.raises(DateAlreadyPassedError):
            analyzer.analyze("XYZ", "2020-01-01")
        assert gateway.chain_requests == []

    def test_unlisted_expiration(self, analyzer, now):
        with pytest.raises(InvalidExpirationDateError):
            analyzer.analyze("XYZ", "2024-01-11", now=now)

    def test_no_listed_expirations_accepts_request(self, now):
        analyzer = CoveredCallAnalyzer(FakeGateway(expirations=[]))

        result = analyzer.analyze("XYZ", "2024-02-16", now=now)

        assert result.expiration_dates == []
        assert result.expiration_date == "2024-02-16"


class TestAnalyzeBulk:
    """Test suite for multi-expiration analysis."""

    def test_pages_in_expiration_order(self, analyzer, gateway, now):
        result = analyzer.analyze_bulk("XYZ", 3, now=now)

        assert isinstance(result, BulkAnalysisResult)
        assert result.page_dates == ["2024-01-05", "2024-01-10", "2024-01-12"]
        assert len(result.pages) == 3
        assert sorted(gateway.chain_requests) == result.page_dates
        for expiration, page in zip(result.page_dates, result.pages):
            assert all(c.option.expiration.isoformat() == expiration for c in page)

    def test_default_page_count(self, analyzer, now):
        assert len(analyzer.analyze_bulk("XYZ", now=now).pages) == 2

    def test_more_pages_than_expirations(self, analyzer, now):
        assert len(analyzer.analyze_bulk("XYZ", 50, now=now).pages) == len(EXPIRATIONS)

    def test_zero_pages(self, analyzer, gateway, now):
        result = analyzer.analyze_bulk("XYZ", 0, now=now)

        assert result.pages == []
        assert gateway.chain_requests == []

    def test_negative_pages_rejected(self, analyzer, gateway, now):
        with pytest.raises(ValueError, match="non-negative"):
            analyzer.analyze_bulk("XYZ", -1, now=now)

        assert gateway.chain_requests == []

    def test_single_worker(self, gateway, now):
        analyzer = CoveredCallAnalyzer(gateway, AnalyzerConfig(max_workers=1))

        result = analyzer.analyze_bulk("XYZ", 4, now=now)

        assert result.page_dates == ["2024-01-05", "2024-01-10", "2024-01-12", "2024-01-19"]

    def test_one_failure_fails_all(self, now):
        analyzer = CoveredCallAnalyzer(FakeGateway(fail_on="2024-01-10"))

        with pytest.raises(GatewayError, match="chain unavailable"):
            analyzer.analyze_bulk("XYZ", 3, now=now)

    def test_invalid_ticker(self, analyzer, now):
        with pytest.raises(InvalidTickerError):
            analyzer.analyze_bulk("12345", 2, now=now)


class TestOutcome:
    """Test suite for the non-raising entry points."""

    def test_success(self, analyzer, now):
        outcome = analyzer.try_analyze("XYZ", now=now)

        assert outcome.ok
        assert outcome.kind is None
        assert outcome.result.expiration_date == "2024-01-05"

    @pytest.mark.parametrize("ticker,expiration,kind", [
        (None, None, ErrorKind.UNDEFINED_TICKER),
        ("TOOLONG", None, ErrorKind.INVALID_TICKER),
        ("XYZ", "not-a-date", ErrorKind.MALFORMED_DATE),
        ("XYZ", "2024-01-02", ErrorKind.PASSED_DATE),
        ("XYZ", "2024-01-11", ErrorKind.INVALID_DATE),
    ])
    def test_error_kinds(self, analyzer, now, ticker, expiration, kind):
        outcome = analyzer.try_analyze(ticker, expiration, now=now)

        assert not outcome.ok
        assert outcome.kind is kind
        assert outcome.result is None

    def test_bulk_success(self, analyzer, now):
        outcome = analyzer.try_analyze_bulk("XYZ", 2, now=now)

        assert outcome.ok
        assert len(outcome.result.pages) == 2

    def test_bulk_error(self, analyzer, now):
        assert analyzer.try_analyze_bulk("", 2, now=now).kind is ErrorKind.UNDEFINED_TICKER

    def test_gateway_errors_still_raise(self, analyzer, now):
        with pytest.raises(GatewayError):
            analyzer.try_analyze("NOPE", now=now)
