"""Treatment-onset detection.

An onset (treated event) is a row at (unit, t) where the unit is treated,
a row for (unit, t - 1) exists, and the unit was untreated at t - 1. A unit's
first recorded row is never an onset, and neither is a row that follows a
gap in the unit's record.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from .._types import TreatedEvent
from ..panels import PanelIndex

logger = logging.getLogger(__name__)


class TreatedEventFinder:
    """Scan a ``PanelIndex`` for treatment onsets.

    Parameters
    ----------
    panel : PanelIndex
        Validated panel.

    Example
    -------
    >>> finder = TreatedEventFinder(panel)
    >>> events = finder.find()
    >>> df_treated = finder.to_frame()
    """

    def __init__(self, panel: PanelIndex):
        self.panel = panel
        self._positions: np.ndarray | None = None

    def _onset_positions(self) -> np.ndarray:
        """Row positions (in canonical order) of onset events."""
        if self._positions is None:
            units = self.panel.units
            times = self.panel.times
            treated = self.panel.treated

            # Row i qualifies when row i-1 is the same unit at exactly t-1
            qualifies = (
                (units[1:] == units[:-1])
                & (times[1:] - times[:-1] == 1)
                & (treated[:-1] == 0)
                & (treated[1:] == 1)
            )
            self._positions = np.flatnonzero(qualifies) + 1
        return self._positions

    def find(self) -> list[TreatedEvent]:
        """Return onset events ordered by unit, then time."""
        pos = self._onset_positions()
        events = [
            TreatedEvent(unit, time)
            for unit, time in zip(
                self.panel.units[pos].tolist(), self.panel.times[pos].tolist()
            )
        ]
        logger.info(
            "Found %s treated events across %s units",
            f"{len(events):,}",
            f"{len({e.unit_id for e in events}):,}",
        )
        return events

    def to_frame(self) -> pd.DataFrame:
        """Original input rows for each onset, in event order.

        Returns
        -------
        pd.DataFrame
            Subset of ``panel.source`` (all original columns and index labels).
        """
        return self.panel.source.iloc[self._onset_positions()]


def find_treated_events(panel: PanelIndex) -> list[TreatedEvent]:
    """Shorthand for ``TreatedEventFinder(panel).find()``."""
    return TreatedEventFinder(panel).find()
