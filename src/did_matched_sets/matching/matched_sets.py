"""Ordered collection of matched sets, one per treated event."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor

import pandas as pd

from .._types import TreatedEvent
from ..exceptions import InvalidParameterError
from .controls import ControlMatcher, check_lag

logger = logging.getLogger(__name__)


class MatchedSetCollection(Mapping):
    """Mapping from ``TreatedEvent`` to its set of control unit ids.

    Iteration follows the order in which events were supplied (for
    ``build`` from a ``TreatedEventFinder``: unit, then time). The lookback
    length and the three column names travel with the collection so
    downstream consumers can interpret it without the original panel.

    Keys can be given as a ``TreatedEvent``, a ``(unit, time)`` tuple, or a
    ``"unit.time"`` label.

    Parameters
    ----------
    sets : Mapping[TreatedEvent, frozenset[int]]
        Matched sets in event order.
    lag : int
        Lookback length used to build the sets.
    unit_col, time_col, treatment_col : str
        Column names of the panel the sets were built from.
    """

    def __init__(
        self,
        sets: Mapping[TreatedEvent, frozenset[int]],
        lag: int,
        unit_col: str,
        time_col: str,
        treatment_col: str,
    ):
        self._sets = {event: frozenset(controls) for event, controls in sets.items()}
        self._lag = lag
        self._unit_col = unit_col
        self._time_col = time_col
        self._treatment_col = treatment_col

    @classmethod
    def build(
        cls,
        matcher: ControlMatcher,
        events: Iterable[TreatedEvent],
        lag: int,
        n_jobs: int = 1,
        chunk_size: int | None = None,
    ) -> MatchedSetCollection:
        """Match every event and collect the results in event order.

        Parameters
        ----------
        matcher : ControlMatcher
            Matcher bound to the panel the events came from.
        events : iterable of TreatedEvent
            Events to match. Repeated events are matched once.
        lag : int
            Lookback length (positive).
        n_jobs : int
            Worker threads. ``1`` (default) matches sequentially.
        chunk_size : int, optional
            Events submitted to the pool at a time when ``n_jobs > 1``. Bounds
            the number of in-flight results. Defaults to all events at once.

        Returns
        -------
        MatchedSetCollection
        """
        check_lag(lag)
        if isinstance(n_jobs, bool) or not isinstance(n_jobs, int) or n_jobs < 1:
            raise InvalidParameterError(f"n_jobs must be a positive integer, got {n_jobs!r}")
        if chunk_size is not None and (
            isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size < 1
        ):
            raise InvalidParameterError(
                f"chunk_size must be a positive integer, got {chunk_size!r}"
            )

        unique_events = list(dict.fromkeys(events))
        results = _match_all(matcher, unique_events, lag, n_jobs, chunk_size)

        config = matcher.panel.config
        collection = cls(
            dict(zip(unique_events, results)),
            lag=lag,
            unit_col=config.unit_col,
            time_col=config.time_col,
            treatment_col=config.treatment_col,
        )
        logger.info(
            "Matched sets built: %s events, %s with no controls (lag=%s)",
            f"{len(collection):,}",
            f"{len(collection.empty_sets()):,}",
            lag,
        )
        return collection

    @property
    def lag(self) -> int:
        return self._lag

    @property
    def unit_col(self) -> str:
        return self._unit_col

    @property
    def time_col(self) -> str:
        return self._time_col

    @property
    def treatment_col(self) -> str:
        return self._treatment_col

    @property
    def events(self) -> list[TreatedEvent]:
        return list(self._sets)

    def __getitem__(self, key) -> frozenset[int]:
        return self._sets[_as_event(key)]

    def __iter__(self) -> Iterator[TreatedEvent]:
        return iter(self._sets)

    def __len__(self) -> int:
        return len(self._sets)

    def __repr__(self) -> str:
        return (
            f"MatchedSetCollection(n_sets={len(self)}, lag={self._lag}, "
            f"unit_col={self._unit_col!r}, time_col={self._time_col!r}, "
            f"treatment_col={self._treatment_col!r})"
        )

    def labels(self) -> list[str]:
        """``"unit.time"`` labels in event order."""
        return [event.label for event in self._sets]

    def empty_sets(self) -> list[TreatedEvent]:
        """Events for which no control unit qualified."""
        return [event for event, controls in self._sets.items() if not controls]

    def to_dict(self, labels: bool = True) -> dict:
        """Plain dict of sorted control lists, keyed by label or by event."""
        return {
            (event.label if labels else event): sorted(controls)
            for event, controls in self._sets.items()
        }

    def to_frame(self) -> pd.DataFrame:
        """Long format: one row per (event, control) pair.

        Events with an empty matched set keep a single row with a missing
        control id, so every event appears at least once.

        Returns
        -------
        pd.DataFrame
            Columns ``unit_col``, ``time_col``, ``control_<unit_col>``
            (nullable Int64).
        """
        control_col = f"control_{self._unit_col}"
        rows = []
        for event, controls in self._sets.items():
            if not controls:
                rows.append((event.unit_id, event.time, pd.NA))
            for control in sorted(controls):
                rows.append((event.unit_id, event.time, control))

        df = pd.DataFrame(rows, columns=[self._unit_col, self._time_col, control_col])
        return df.astype({
            self._unit_col: "int64",
            self._time_col: "int64",
            control_col: "Int64",
        })

    def summary(self) -> pd.DataFrame:
        """Return matched-set size statistics.

        Returns
        -------
        pd.DataFrame
            One-row DataFrame with n_sets, n_empty, size_min, size_max,
            size_mean and lag.
        """
        sizes = pd.Series([len(controls) for controls in self._sets.values()], dtype="int64")
        stats = {
            "n_sets": len(sizes),
            "n_empty": int((sizes == 0).sum()),
            "size_min": sizes.min() if len(sizes) else 0,
            "size_max": sizes.max() if len(sizes) else 0,
            "size_mean": sizes.mean() if len(sizes) else 0.0,
            "lag": self._lag,
        }
        return pd.DataFrame([stats])


def _match_all(
    matcher: ControlMatcher,
    events: list[TreatedEvent],
    lag: int,
    n_jobs: int,
    chunk_size: int | None,
) -> list[frozenset[int]]:
    if n_jobs == 1 or len(events) <= 1:
        return [matcher.match(event, lag) for event in events]

    chunk_size = chunk_size or len(events)
    results: list[frozenset[int]] = []
    with ThreadPoolExecutor(max_workers=n_jobs) as pool:
        for start in range(0, len(events), chunk_size):
            chunk = events[start:start + chunk_size]
            results.extend(pool.map(lambda event: matcher.match(event, lag), chunk))
            logger.debug("Matched %s/%s events", f"{len(results):,}", f"{len(events):,}")
    return results


def _as_event(key) -> TreatedEvent:
    if isinstance(key, TreatedEvent):
        return key
    if isinstance(key, str):
        try:
            return TreatedEvent.from_label(key)
        except ValueError:
            raise KeyError(key) from None
    if isinstance(key, tuple) and len(key) == 2:
        try:
            return TreatedEvent(int(key[0]), int(key[1]))
        except (TypeError, ValueError):
            raise KeyError(key) from None
    raise KeyError(key)
