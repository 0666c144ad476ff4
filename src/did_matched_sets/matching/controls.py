"""Control-unit eligibility for a single treated event."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from .._types import TreatedEvent
from ..exceptions import InvalidParameterError
from ..panels import PanelIndex
from .history import HistoryExtractor

logger = logging.getLogger(__name__)


class ControlMatcher:
    """Find the units that can serve as controls for a treated event.

    A candidate unit ``c`` is eligible for event ``(u, t)`` with lookback
    ``lag`` when ``c != u`` and ``c`` has a recorded, untreated row in every
    period ``t - lag, ..., t``. Candidates are evaluated independently.

    Parameters
    ----------
    panel : PanelIndex
        Validated panel. Every unit in ``panel.unit_ids`` is a candidate.
    extractor : HistoryExtractor, optional
        Reuse an existing extractor; one is built from ``panel`` otherwise.

    Example
    -------
    >>> matcher = ControlMatcher(panel)
    >>> matcher.match(TreatedEvent(4, 1992), lag=4)
    frozenset({2, 7, 11})
    """

    def __init__(self, panel: PanelIndex, extractor: HistoryExtractor | None = None):
        self.panel = panel
        self.extractor = extractor or HistoryExtractor(panel)

    def match(self, event: TreatedEvent, lag: int) -> frozenset[int]:
        """Eligible control unit ids for ``event``. May be empty."""
        check_lag(lag)
        mask = self.extractor.untreated_mask(event.time - lag, event.time)
        mask &= self.panel.unit_ids != event.unit_id
        controls = frozenset(self.panel.unit_ids[mask].tolist())
        if not controls:
            logger.debug("No eligible controls for %s (lag=%s)", event.label, lag)
        return controls

    def is_eligible(self, unit_id: int, event: TreatedEvent, lag: int) -> bool:
        """Apply the eligibility rule to one candidate via its history window."""
        check_lag(lag)
        if unit_id == event.unit_id:
            return False
        return self.extractor.window(unit_id, event.time - lag, event.time).all_untreated

    def explain(self, event: TreatedEvent, lag: int) -> pd.DataFrame:
        """Per-candidate eligibility breakdown for ``event``.

        Returns
        -------
        pd.DataFrame
            One row per unit in the panel with columns ``unit_col``,
            ``n_recorded``, ``complete``, ``eligible`` and ``reason``
            (``treated_unit``, ``incomplete_window``, ``treated_in_window``
            or ``eligible``).
        """
        check_lag(lag)
        rows = []
        for unit_id in self.panel.unit_ids.tolist():
            history = self.extractor.window(unit_id, event.time - lag, event.time)
            if unit_id == event.unit_id:
                reason = "treated_unit"
            elif not history.complete:
                reason = "incomplete_window"
            elif any(history.statuses):
                reason = "treated_in_window"
            else:
                reason = "eligible"
            rows.append({
                self.panel.config.unit_col: unit_id,
                "n_recorded": len(history.times),
                "complete": history.complete,
                "eligible": reason == "eligible",
                "reason": reason,
            })
        return pd.DataFrame(
            rows,
            columns=[self.panel.config.unit_col, "n_recorded", "complete", "eligible", "reason"],
        )


def check_lag(lag: int) -> None:
    """Raise ``InvalidParameterError`` unless ``lag`` is a positive integer."""
    if isinstance(lag, bool) or not isinstance(lag, (int, np.integer)) or lag < 1:
        raise InvalidParameterError(f"lag must be a positive integer, got {lag!r}")
