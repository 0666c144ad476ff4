"""Panel coverage analysis: gaps, span, treatment onsets per unit.

Units with gaps cannot certify an untreated history across the missing
periods, so they drop out of any matched set whose window covers a gap.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from .._types import PanelConfig
from ..matching.events import TreatedEventFinder
from ..panels import PanelIndex


class CoverageAnalyzer:
    """Analyze panel coverage: gaps, span, and onset counts per unit.

    Parameters
    ----------
    config : PanelConfig, optional
        Column name mapping. Only used when ``compute`` is given a DataFrame.
    """

    def __init__(self, config: PanelConfig | None = None):
        self.config = config or PanelConfig()

    def compute(self, panel: PanelIndex | pd.DataFrame) -> pd.DataFrame:
        """Compute unit-level coverage statistics.

        Parameters
        ----------
        panel : PanelIndex or pd.DataFrame
            A built index, or raw panel data (validated into an index first).

        Returns
        -------
        pd.DataFrame
            One row per unit with columns: n_periods, time_span, n_gaps,
            coverage_rate, min_time, max_time, n_onsets.
        """
        if not isinstance(panel, PanelIndex):
            panel = PanelIndex(panel, config=self.config)
        unit_col = panel.config.unit_col

        onsets = pd.Series(
            [e.unit_id for e in TreatedEventFinder(panel).find()], dtype="int64"
        ).value_counts()

        rows = []
        for unit_id in panel.unit_ids.tolist():
            times = panel.times_for(unit_id)
            n_periods = len(times)
            time_span = int(times[-1] - times[0]) + 1
            diffs = np.diff(times)
            rows.append({
                unit_col: unit_id,
                "n_periods": n_periods,
                "time_span": time_span,
                "n_gaps": int(np.sum(diffs > 1)),
                "coverage_rate": round(n_periods / time_span, 4),
                "min_time": int(times[0]),
                "max_time": int(times[-1]),
                "n_onsets": int(onsets.get(unit_id, 0)),
            })

        columns = [unit_col, "n_periods", "time_span", "n_gaps",
                   "coverage_rate", "min_time", "max_time", "n_onsets"]
        return pd.DataFrame(rows, columns=columns)

    def summary(self, panel: PanelIndex | pd.DataFrame) -> pd.DataFrame:
        """Aggregate coverage statistics across all units.

        Returns
        -------
        pd.DataFrame
            One-row DataFrame with mean, median, min, max for each stat.
        """
        coverage = self.compute(panel)
        numeric_cols = ["n_periods", "time_span", "n_gaps", "coverage_rate"]

        stats = {}
        for col in numeric_cols:
            stats[f"{col}_mean"] = coverage[col].mean()
            stats[f"{col}_median"] = coverage[col].median()
            stats[f"{col}_min"] = coverage[col].min()
            stats[f"{col}_max"] = coverage[col].max()

        stats["n_units"] = len(coverage)
        stats["n_balanced"] = int((coverage["n_gaps"] == 0).sum())
        stats["pct_balanced"] = (
            round(stats["n_balanced"] / stats["n_units"] * 100, 1) if len(coverage) else 0.0
        )
        stats["n_onsets"] = int(coverage["n_onsets"].sum())

        return pd.DataFrame([stats])
