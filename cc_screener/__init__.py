"""Covered call screener: candidate metrics from options chain snapshots."""

__version__ = "0.1.0"
