"""Validated, canonically ordered panel index.

Every matching operation reads from a ``PanelIndex``. It is built once from
the input table, validated in full before anything else runs, and is
read-only afterwards, so it can be shared between worker threads.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from .._types import PanelConfig
from ..exceptions import (
    InvalidParameterError,
    MissingColumnError,
    NamingAmbiguityError,
    StructuralInvariantError,
    TypeValidationError,
)

logger = logging.getLogger(__name__)

INTEGER_CHECK_MODES = ("full", "sampled")
SAMPLED_CHECK_ROWS = 6


class PanelIndex:
    """Sorted (unit, time) panel with O(1) treatment lookup.

    Parameters
    ----------
    df : pd.DataFrame
        Long-format panel with at least ``unit_col``, ``time_col``, and
        ``treatment_col``. Other columns are carried along untouched in
        ``source``.
    config : PanelConfig, optional
        Column name mapping. Uses defaults if not provided.
    already_sorted : bool
        Caller asserts ``df`` is already ordered by unit, then time. The sort
        is skipped; results are undefined if the assertion is false.
    integer_check : {"full", "sampled"}
        ``"full"`` (default) verifies every unit and time value is
        integer-valued. ``"sampled"`` only inspects the first
        ``SAMPLED_CHECK_ROWS`` sorted rows; non-integer values further down
        are silently truncated. Opt in only for large, trusted inputs.

    Raises
    ------
    MissingColumnError
        A required column is absent.
    NamingAmbiguityError
        A required column name is duplicated in ``df`` or shared by two roles.
    TypeValidationError
        Values are non-numeric, missing, or (unit/time) not integer-valued.
    StructuralInvariantError
        Duplicate (unit, time) pairs or treatment values outside {0, 1}.

    Example
    -------
    >>> panel = PanelIndex(df, config=PanelConfig(unit_col="wbcode2", time_col="year", treatment_col="dem"))
    >>> panel.status(4, 1992)
    1
    """

    def __init__(
        self,
        df: pd.DataFrame,
        config: PanelConfig | None = None,
        already_sorted: bool = False,
        integer_check: str = "full",
    ):
        self.config = config or PanelConfig()
        if integer_check not in INTEGER_CHECK_MODES:
            raise InvalidParameterError(
                f"integer_check must be one of {list(INTEGER_CHECK_MODES)}, "
                f"got {integer_check!r}"
            )
        self.already_sorted = already_sorted
        self.integer_check = integer_check

        self._check_columns(df)
        c = self.config

        coerced = {
            c.unit_col: _coerce_numeric(df[c.unit_col], "unit"),
            c.time_col: _coerce_numeric(df[c.time_col], "time"),
            c.treatment_col: _coerce_numeric(df[c.treatment_col], "treatment"),
        }

        if already_sorted:
            order = np.arange(len(df))
        else:
            order = np.lexsort((
                coerced[c.time_col].to_numpy(),
                coerced[c.unit_col].to_numpy(),
            ))

        frame = pd.DataFrame(
            {col: values.to_numpy()[order] for col, values in coerced.items()},
            index=df.index[order],
        )
        if integer_check == "sampled":
            logger.warning(
                "integer_check='sampled': only the first %s rows of '%s' and '%s' are "
                "checked; fractional values further down are truncated",
                SAMPLED_CHECK_ROWS,
                c.unit_col,
                c.time_col,
            )
        for col, role in ((c.unit_col, "unit"), (c.time_col, "time")):
            _check_integer_valued(frame[col], role, integer_check)
            _check_int64_range(frame[col], role)
            frame[col] = frame[col].astype("int64")

        bad_treatment = ~frame[c.treatment_col].isin([0, 1]).to_numpy()
        if bad_treatment.any():
            bad_values = sorted(frame.loc[bad_treatment, c.treatment_col].unique().tolist())
            raise StructuralInvariantError(
                f"Treatment column '{c.treatment_col}' must be 0 or 1; "
                f"found {bad_values[:5]}"
            )
        frame[c.treatment_col] = frame[c.treatment_col].astype("int64")

        dupes = frame.duplicated([c.unit_col, c.time_col], keep=False).to_numpy()
        if dupes.any():
            examples = (
                frame.loc[dupes, [c.unit_col, c.time_col]]
                .drop_duplicates()
                .head(5)
                .itertuples(index=False, name=None)
            )
            raise StructuralInvariantError(
                f"{int(dupes.sum()):,} rows share a ({c.unit_col}, {c.time_col}) "
                f"pair, e.g. {list(examples)}"
            )

        self._frame = frame
        self._source = df.iloc[order]
        self._units = _readonly(frame[c.unit_col].to_numpy())
        self._times = _readonly(frame[c.time_col].to_numpy())
        self._treated = _readonly(frame[c.treatment_col].to_numpy())
        self._unit_ids = _readonly(np.unique(self._units))
        self._time_periods = _readonly(np.unique(self._times))
        self._lookup: dict[tuple[int, int], int] = dict(
            zip(zip(self._units.tolist(), self._times.tolist()), self._treated.tolist())
        )

        logger.info(
            "PanelIndex built: %s observations, %s units, %s periods",
            f"{len(frame):,}",
            f"{len(self._unit_ids):,}",
            f"{len(self._time_periods):,}",
        )

    def _check_columns(self, df: pd.DataFrame) -> None:
        """Check each role maps to exactly one distinct column."""
        c = self.config
        required = c.columns
        if len(set(required)) < len(required):
            raise NamingAmbiguityError(
                f"Unit, time and treatment columns must be distinct, got {required}"
            )

        missing = [col for col in required if col not in df.columns]
        if missing:
            raise MissingColumnError(
                f"Missing required columns: {missing}. "
                f"Available: {sorted(map(str, df.columns.tolist()))}"
            )

        ambiguous = [col for col in required if int((df.columns == col).sum()) > 1]
        if ambiguous:
            raise NamingAmbiguityError(
                f"Column names match more than one column: {ambiguous}"
            )

    @property
    def frame(self) -> pd.DataFrame:
        """Validated int64 (unit, time, treatment) frame in canonical order.

        The index carries the original row labels. Treat as read-only.
        """
        return self._frame

    @property
    def source(self) -> pd.DataFrame:
        """Original input rows (all columns) in canonical order."""
        return self._source

    @property
    def units(self) -> np.ndarray:
        return self._units

    @property
    def times(self) -> np.ndarray:
        return self._times

    @property
    def treated(self) -> np.ndarray:
        return self._treated

    @property
    def unit_ids(self) -> np.ndarray:
        """Sorted unique unit ids: the candidate universe for matching."""
        return self._unit_ids

    @property
    def time_periods(self) -> np.ndarray:
        """Sorted unique time periods recorded for any unit."""
        return self._time_periods

    def status(self, unit_id: int, time: int) -> int | None:
        """Treatment status at (unit, time), or None if no row is recorded."""
        return self._lookup.get((int(unit_id), int(time)))

    def has(self, unit_id: int, time: int) -> bool:
        return (int(unit_id), int(time)) in self._lookup

    def times_for(self, unit_id: int) -> np.ndarray:
        """Recorded time periods for one unit, ascending."""
        lo = np.searchsorted(self._units, unit_id, side="left")
        hi = np.searchsorted(self._units, unit_id, side="right")
        return self._times[lo:hi]

    def __len__(self) -> int:
        return len(self._frame)

    def __contains__(self, key) -> bool:
        try:
            unit_id, time = key
        except (TypeError, ValueError):
            return False
        return self.has(unit_id, time)

    def __repr__(self) -> str:
        return (
            f"PanelIndex(n_obs={len(self)}, n_units={len(self._unit_ids)}, "
            f"n_periods={len(self._time_periods)})"
        )


def _coerce_numeric(series: pd.Series, role: str) -> pd.Series:
    """Coerce one required column to a numeric dtype, rejecting missing values."""
    col = series.name
    n_missing = int(series.isna().sum())
    if n_missing:
        raise TypeValidationError(
            f"{role.capitalize()} column '{col}' has {n_missing:,} missing values"
        )
    if pd.api.types.is_bool_dtype(series):
        return series.astype("int64")
    try:
        values = pd.to_numeric(series, errors="raise")
    except (ValueError, TypeError) as exc:
        raise TypeValidationError(
            f"{role.capitalize()} column '{col}' cannot be coerced to numeric"
        ) from exc
    if pd.api.types.is_bool_dtype(values):
        values = values.astype("int64")
    if not pd.api.types.is_numeric_dtype(values) or pd.api.types.is_complex_dtype(values):
        raise TypeValidationError(
            f"{role.capitalize()} column '{col}' cannot be coerced to numeric"
        )
    # Nullable extension dtypes (Int64, Float64) become plain numpy dtypes
    if pd.api.types.is_unsigned_integer_dtype(values):
        return values.astype("uint64")
    if pd.api.types.is_integer_dtype(values):
        return values.astype("int64")
    return values.astype("float64")


def _check_integer_valued(values: pd.Series, role: str, mode: str) -> None:
    if pd.api.types.is_integer_dtype(values):
        return
    checked = values if mode == "full" else values.iloc[:SAMPLED_CHECK_ROWS]
    arr = checked.to_numpy(dtype="float64")
    with np.errstate(invalid="ignore"):
        bad = ~np.isfinite(arr) | (np.mod(arr, 1) != 0)
    if bad.any():
        raise TypeValidationError(
            f"{role.capitalize()} column '{values.name}' is not integer-valued, "
            f"e.g. {arr[bad][:5].tolist()}"
        )


def _check_int64_range(values: pd.Series, role: str) -> None:
    if len(values) == 0:
        return
    bounds = np.iinfo(np.int64)
    # uint64 and large floats would wrap around on the int64 cast
    as_python = int if pd.api.types.is_integer_dtype(values) else float
    if as_python(values.max()) > bounds.max or as_python(values.min()) < bounds.min:
        raise TypeValidationError(
            f"{role.capitalize()} column '{values.name}' has values outside the "
            f"int64 range [{bounds.min}, {bounds.max}]"
        )


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr = np.array(arr, copy=True)
    arr.flags.writeable = False
    return arr
