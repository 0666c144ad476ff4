"""Export utilities for matched sets."""

from .export import to_csv, to_parquet

__all__ = ["to_parquet", "to_csv"]
