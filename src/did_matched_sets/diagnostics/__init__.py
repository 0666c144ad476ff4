"""Diagnostics for panel coverage ahead of matching."""

from .coverage import CoverageAnalyzer

__all__ = ["CoverageAnalyzer"]
