"""Windowed treatment-history lookups with missing-period awareness."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from ..exceptions import InvalidParameterError
from ..panels import PanelIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreatmentHistory:
    """Treatment statuses of one unit over an inclusive time window.

    ``times`` and ``statuses`` only cover periods recorded for the unit.
    ``complete`` is True iff every integer period in ``[t_start, t_end]``
    is recorded.
    """

    unit_id: int
    t_start: int
    t_end: int
    times: tuple[int, ...]
    statuses: tuple[int, ...]
    complete: bool

    @property
    def all_untreated(self) -> bool:
        """Complete and untreated in every period of the window."""
        return self.complete and not any(self.statuses)


class HistoryExtractor:
    """Read treatment histories out of a ``PanelIndex``.

    Holds a unit-by-period status matrix (NaN where a unit has no row) for
    bulk queries over the whole unit universe. The matrix is built in the
    constructor, so an extractor is fully read-only once created and can be
    shared across threads.

    Parameters
    ----------
    panel : PanelIndex
        Validated panel.
    """

    def __init__(self, panel: PanelIndex):
        self.panel = panel
        self._matrix = self._build_matrix()

    def _build_matrix(self) -> np.ndarray:
        unit_ids = self.panel.unit_ids
        periods = self.panel.time_periods
        matrix = np.full((len(unit_ids), len(periods)), np.nan)
        rows = np.searchsorted(unit_ids, self.panel.units)
        cols = np.searchsorted(periods, self.panel.times)
        matrix[rows, cols] = self.panel.treated
        matrix.flags.writeable = False
        logger.debug("History matrix: %s units x %s periods", *matrix.shape)
        return matrix

    def window(self, unit_id: int, t_start: int, t_end: int) -> TreatmentHistory:
        """Statuses of ``unit_id`` for recorded periods in ``[t_start, t_end]``.

        Returns
        -------
        TreatmentHistory
            With ``complete=False`` if any period in the window is unrecorded
            (including when the unit is not in the panel at all).
        """
        _check_window(t_start, t_end)
        times = self.panel.times_for(unit_id)
        lo = np.searchsorted(times, t_start, side="left")
        hi = np.searchsorted(times, t_end, side="right")
        in_window = times[lo:hi].tolist()
        statuses = tuple(self.panel.status(unit_id, t) for t in in_window)
        return TreatmentHistory(
            unit_id=int(unit_id),
            t_start=int(t_start),
            t_end=int(t_end),
            times=tuple(in_window),
            statuses=statuses,
            complete=len(in_window) == t_end - t_start + 1,
        )

    def untreated_mask(self, t_start: int, t_end: int) -> np.ndarray:
        """Vectorised ``window(u, t_start, t_end).all_untreated`` for every unit.

        Returns
        -------
        np.ndarray
            Boolean array aligned with ``panel.unit_ids``.
        """
        _check_window(t_start, t_end)
        n_units = len(self.panel.unit_ids)
        periods = self.panel.time_periods
        if (
            len(periods) == 0
            or t_start < periods[0]
            or t_end > periods[-1]
            or t_end - t_start + 1 > len(periods)
        ):
            return np.zeros(n_units, dtype=bool)
        required = np.arange(t_start, t_end + 1)
        cols = np.searchsorted(periods, required)
        if (periods[cols] != required).any():
            # A period nobody recorded: no unit can be complete
            return np.zeros(n_units, dtype=bool)
        # NaN (unrecorded) never equals 0
        return (self._matrix[:, cols] == 0).all(axis=1)


def _check_window(t_start: int, t_end: int) -> None:
    if t_start > t_end:
        raise InvalidParameterError(
            f"Empty history window: t_start ({t_start}) > t_end ({t_end})"
        )
