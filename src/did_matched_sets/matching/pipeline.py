"""End-to-end matching: panel -> treated events -> matched sets."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from .._types import PanelConfig, TreatedEvent
from ..exceptions import InvalidParameterError
from ..panels import PanelIndex
from .controls import ControlMatcher, check_lag
from .events import TreatedEventFinder
from .matched_sets import MatchedSetCollection

logger = logging.getLogger(__name__)


class PanelMatcher:
    """Build matched sets for every treatment onset in a panel.

    The input is validated and indexed in the constructor; nothing is
    matched until ``build()`` (or ``matched_sets``) is called, and an
    invalid table never produces partial results.

    Parameters
    ----------
    df : pd.DataFrame
        Long-format panel with ``unit_col``, ``time_col`` and
        ``treatment_col``.
    lag : int
        Number of periods before the onset over which a control must be
        recorded and untreated (the onset period itself is also required).
    config : PanelConfig, optional
        Column name mapping.
    already_sorted : bool
        Skip sorting; the caller asserts ``df`` is ordered by unit, then time.
    integer_check : {"full", "sampled"}
        See ``PanelIndex``.
    n_jobs : int
        Worker threads for matching.
    chunk_size : int, optional
        Events per batch submitted to the workers.

    Example
    -------
    >>> config = PanelConfig(unit_col="wbcode2", time_col="year", treatment_col="dem")
    >>> pm = PanelMatcher(df, lag=4, config=config)
    >>> msets = pm.build()
    >>> msets["4.1992"]
    frozenset({...})
    """

    def __init__(
        self,
        df: pd.DataFrame,
        lag: int,
        config: PanelConfig | None = None,
        already_sorted: bool = False,
        integer_check: str = "full",
        n_jobs: int = 1,
        chunk_size: int | None = None,
    ):
        check_lag(lag)
        self.config = config or PanelConfig()
        self.lag = lag
        self.n_jobs = n_jobs
        self.chunk_size = chunk_size
        self.index = PanelIndex(
            df,
            config=self.config,
            already_sorted=already_sorted,
            integer_check=integer_check,
        )
        self._finder = TreatedEventFinder(self.index)
        self._matcher: ControlMatcher | None = None
        self._events: list[TreatedEvent] | None = None
        self._matched_sets: MatchedSetCollection | None = None

    @property
    def matcher(self) -> ControlMatcher:
        if self._matcher is None:
            self._matcher = ControlMatcher(self.index)
        return self._matcher

    @property
    def treated_events(self) -> list[TreatedEvent]:
        """Treatment onsets, ordered by unit then time (cached)."""
        if self._events is None:
            self._events = self._finder.find()
        return self._events

    @property
    def treated(self) -> pd.DataFrame:
        """Original rows of the treatment onsets."""
        return self._finder.to_frame()

    def build(self) -> MatchedSetCollection:
        """Match every treated event and return the collection."""
        self._matched_sets = MatchedSetCollection.build(
            self.matcher,
            self.treated_events,
            self.lag,
            n_jobs=self.n_jobs,
            chunk_size=self.chunk_size,
        )
        return self._matched_sets

    @property
    def matched_sets(self) -> MatchedSetCollection:
        """Lazily build and cache the matched sets."""
        if self._matched_sets is None:
            self._matched_sets = self.build()
        return self._matched_sets

    def summary(self) -> pd.DataFrame:
        """Return panel and matching summary statistics.

        Returns
        -------
        pd.DataFrame
            One-row DataFrame with n_obs, n_units, time_min, time_max,
            n_events, n_treated_units, n_empty_sets and lag.
        """
        index = self.index
        msets = self.matched_sets
        periods = index.time_periods
        stats = {
            "n_obs": len(index),
            "n_units": len(index.unit_ids),
            "time_min": periods.min() if len(periods) else np.nan,
            "time_max": periods.max() if len(periods) else np.nan,
            "n_events": len(msets),
            "n_treated_units": len({e.unit_id for e in msets}),
            "n_empty_sets": len(msets.empty_sets()),
            "lag": self.lag,
        }
        return pd.DataFrame([stats])


def find_all_treated(
    df: pd.DataFrame,
    config: PanelConfig | None = None,
    already_sorted: bool = False,
    integer_check: str = "full",
) -> pd.DataFrame:
    """Rows of ``df`` at which a unit switches from untreated to treated.

    Parameters
    ----------
    df : pd.DataFrame
        Long-format panel.
    config : PanelConfig, optional
        Column name mapping.
    already_sorted : bool
        Skip sorting; ``df`` is already ordered by unit, then time.
    integer_check : {"full", "sampled"}
        See ``PanelIndex``.

    Returns
    -------
    pd.DataFrame
        Original rows (all columns, original index labels) of the onsets,
        ordered by unit then time.
    """
    panel = PanelIndex(df, config=config, already_sorted=already_sorted, integer_check=integer_check)
    return TreatedEventFinder(panel).to_frame()


def get_matched_sets(
    times,
    ids,
    df: pd.DataFrame,
    lag: int,
    config: PanelConfig | None = None,
    already_sorted: bool = False,
    integer_check: str = "full",
    n_jobs: int = 1,
    chunk_size: int | None = None,
) -> MatchedSetCollection:
    """Matched sets for caller-supplied (id, time) pairs.

    The pairs need not be onsets found in ``df``; eligibility of controls
    is evaluated the same way as for detected events.

    Parameters
    ----------
    times : int or sequence of int
        Times of the treated observations.
    ids : int or sequence of int
        Unit ids of the treated observations, aligned with ``times``.
    df : pd.DataFrame
        Long-format panel.
    lag : int
        Lookback length.
    config : PanelConfig, optional
        Column name mapping.

    Returns
    -------
    MatchedSetCollection
        Keyed in the order the pairs were given.

    Example
    -------
    >>> treated = find_all_treated(df, config)
    >>> msets = get_matched_sets(treated["year"], treated["wbcode2"], df, 4, config)
    """
    check_lag(lag)
    times_arr = np.atleast_1d(np.asarray(times)).ravel()
    ids_arr = np.atleast_1d(np.asarray(ids)).ravel()
    if len(times_arr) != len(ids_arr):
        raise InvalidParameterError(
            f"times and ids must have the same length, got {len(times_arr)} and {len(ids_arr)}"
        )
    events = [
        TreatedEvent(_as_int(unit, "ids"), _as_int(time, "times"))
        for unit, time in zip(ids_arr.tolist(), times_arr.tolist())
    ]

    panel = PanelIndex(df, config=config, already_sorted=already_sorted, integer_check=integer_check)
    return MatchedSetCollection.build(
        ControlMatcher(panel), events, lag, n_jobs=n_jobs, chunk_size=chunk_size
    )


def _as_int(value, name: str) -> int:
    try:
        as_float = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"{name} must be integers, got {value!r}") from None
    if not as_float.is_integer():
        raise InvalidParameterError(f"{name} must be integers, got {value!r}")
    return int(value) if isinstance(value, int) else int(as_float)
