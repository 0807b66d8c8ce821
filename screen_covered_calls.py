#!/usr/bin/env python3
"""Screen covered calls for a ticker using the Tradier API.

Usage:
    python3 screen_covered_calls.py AAPL --sandbox
    python3 screen_covered_calls.py AAPL --expiration 2025-02-21 --sandbox
    python3 screen_covered_calls.py AAPL --bulk 3 --production
"""

import argparse
import sys

from cc_screener.analytics.analyzer import CoveredCallAnalyzer
from cc_screener.analytics.market_hours import is_market_open, next_market_open
from cc_screener.config import load_config, resolve_api_token
from cc_screener.data.gateway import TradierAPI
from cc_screener.output.console import (
    print_analysis,
    print_bulk_analysis,
    print_market_status,
)
from cc_screener.utils.error_handling import CCToolError, ConfigurationError, GatewayError
from cc_screener.utils.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Screen covered calls from live option chains',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Nearest expiration (sandbox, token from TRADIER_SANDBOX_TOKEN)
  python3 screen_covered_calls.py AAPL --sandbox

  # Specific expiration
  python3 screen_covered_calls.py AAPL --expiration 2025-02-21 --sandbox

  # First three expirations against the live API (token from TRADIER_TOKEN)
  python3 screen_covered_calls.py AAPL --bulk 3 --production
        """
    )

    parser.add_argument('ticker', help='Stock symbol (e.g., AAPL)')
    parser.add_argument('--expiration', help='Expiration date YYYY-MM-DD (default: nearest)')
    parser.add_argument('--bulk', type=int, metavar='N',
                        help='Analyze the first N expirations instead of one')
    parser.add_argument('--api-key', help='Tradier API token (or set TRADIER_TOKEN/TRADIER_SANDBOX_TOKEN env var)')
    endpoint = parser.add_mutually_exclusive_group()
    endpoint.add_argument('--sandbox', dest='sandbox', action='store_true', default=None,
                          help='Use sandbox API (free, recommended)')
    endpoint.add_argument('--production', dest='sandbox', action='store_false',
                          help='Use production API')
    parser.add_argument('--config', help='YAML config file')
    parser.add_argument('--log-level', help='Logging level (default: from config, INFO)')
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.bulk is not None and args.bulk < 0:
        parser.error('--bulk must be zero or more')

    try:
        config = load_config(args.config)
        if args.sandbox is not None:
            config.sandbox = args.sandbox
        setup_logging(log_level=args.log_level or config.log_level)
        api_token = resolve_api_token(args.api_key, sandbox=config.sandbox)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 2

    api = TradierAPI(
        api_token,
        sandbox=config.sandbox,
        timeout=config.timeout,
        max_retries=config.max_retries,
    )
    analyzer = CoveredCallAnalyzer(api, config)

    open_now = is_market_open()
    print_market_status(open_now, None if open_now else next_market_open().isoformat())

    try:
        if args.bulk is not None:
            print_bulk_analysis(analyzer.analyze_bulk(args.ticker, args.bulk))
        else:
            print_analysis(analyzer.analyze(args.ticker, args.expiration))
    except CCToolError as e:
        print(f"{e.name}: {e}")
        return 1
    except GatewayError as e:
        print(f"Error fetching {args.ticker}: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
