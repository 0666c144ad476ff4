"""Export utilities for matched-set collections."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from ..matching.matched_sets import MatchedSetCollection

logger = logging.getLogger(__name__)


def _event_frame(msets: MatchedSetCollection) -> pd.DataFrame:
    """One row per event with the matched set as a list column."""
    return pd.DataFrame({
        msets.unit_col: [e.unit_id for e in msets],
        msets.time_col: [e.time for e in msets],
        "label": msets.labels(),
        "n_controls": [len(controls) for controls in msets.values()],
        "controls": [sorted(controls) for controls in msets.values()],
        "lag": msets.lag,
    })


def to_csv(msets: MatchedSetCollection, path: str | Path, **kwargs) -> None:
    """Export matched sets to CSV, one row per event.

    The ``controls`` column holds pipe-separated control unit ids (empty
    string for an empty matched set).

    Parameters
    ----------
    msets : MatchedSetCollection
        Matched sets.
    path : str or Path
        Output file path.
    **kwargs
        Passed to ``DataFrame.to_csv()``.
    """
    df_out = _event_frame(msets)
    df_out["controls"] = df_out["controls"].apply(lambda x: "|".join(str(v) for v in x))
    df_out.to_csv(path, index=False, **kwargs)
    logger.info("Exported %s matched sets to %s", f"{len(df_out):,}", path)


def to_parquet(msets: MatchedSetCollection, path: str | Path, **kwargs) -> None:
    """Export matched sets to parquet in long format (one row per control).

    Parameters
    ----------
    msets : MatchedSetCollection
        Matched sets.
    path : str or Path
        Output file path.
    **kwargs
        Passed to ``DataFrame.to_parquet()``.
    """
    df_out = msets.to_frame()
    df_out["lag"] = msets.lag
    df_out.to_parquet(path, index=False, **kwargs)
    logger.info("Exported %s rows to %s", f"{len(df_out):,}", path)
