"""Analyzer configuration.

Settings come from a YAML file (all keys optional). The API token is never
read from the file: it is passed explicitly or taken from the environment.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .utils.error_handling import ConfigurationError

SANDBOX_TOKEN_ENV = "TRADIER_SANDBOX_TOKEN"
PRODUCTION_TOKEN_ENV = "TRADIER_TOKEN"


class AnalyzerConfig:
    """Configuration for covered call analysis."""

    def __init__(
        self,
        expiration_week_limit: int = 5,
        price_ceiling_offset: float = 10.0,
        bulk_pages: int = 2,
        max_workers: int = 4,
        sandbox: bool = True,
        timeout: float = 10.0,
        max_retries: int = 3,
        log_level: str = "INFO",
    ):
        """Initialize analyzer configuration.

        Args:
            expiration_week_limit: Number of expiration weeks to keep
            price_ceiling_offset: Dollars above market price where calls stop
                being candidates
            bulk_pages: Default number of expirations for bulk analysis
            max_workers: Concurrent chain fetches in bulk analysis
            sandbox: Use the Tradier sandbox endpoint
            timeout: Provider request timeout in seconds
            max_retries: Provider request attempts on connection errors
            log_level: Logging level for setup_logging
        """
        if expiration_week_limit < 1:
            raise ConfigurationError("expiration_week_limit must be at least 1")
        if max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")

        self.expiration_week_limit = expiration_week_limit
        self.price_ceiling_offset = price_ceiling_offset
        self.bulk_pages = bulk_pages
        self.max_workers = max_workers
        self.sandbox = sandbox
        self.timeout = timeout
        self.max_retries = max_retries
        self.log_level = log_level

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "AnalyzerConfig":
        """Create AnalyzerConfig from dictionary (e.g., from YAML)."""
        return cls(
            expiration_week_limit=config.get('expiration_week_limit', 5),
            price_ceiling_offset=config.get('price_ceiling_offset', 10.0),
            bulk_pages=config.get('bulk_pages', 2),
            max_workers=config.get('max_workers', 4),
            sandbox=config.get('sandbox', True),
            timeout=config.get('timeout', 10.0),
            max_retries=config.get('max_retries', 3),
            log_level=config.get('log_level', "INFO"),
        )


def load_config(path: Optional[str | Path] = None) -> AnalyzerConfig:
    """Load AnalyzerConfig from a YAML file, or defaults when path is None.

    Raises:
        ConfigurationError: If the file is missing or not a mapping
    """
    if path is None:
        return AnalyzerConfig()

    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    with open(path) as f:
        params = yaml.safe_load(f) or {}

    if not isinstance(params, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    return AnalyzerConfig.from_dict(params)


def resolve_api_token(api_token: Optional[str] = None, sandbox: bool = True) -> str:
    """Return the explicit token, else the one from the environment.

    Raises:
        ConfigurationError: If no token is available
    """
    if api_token:
        return api_token

    env_var = SANDBOX_TOKEN_ENV if sandbox else PRODUCTION_TOKEN_ENV
    token = os.getenv(env_var)
    if not token:
        raise ConfigurationError(f"No API token provided; set {env_var} or pass one explicitly")
    return token
