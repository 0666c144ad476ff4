"""Shared types and configuration for did-matched-sets."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PanelConfig:
    """Column name mapping for panel data.

    Every matching component takes this as its configuration argument.
    Create one and pass it to the index, the matcher, and diagnostics.

    Parameters
    ----------
    unit_col : str
        Column name for the unit identifier (e.g., country, firm). Values
        must be integer-valued.
    time_col : str
        Column name for the time period (e.g., year). Values must be
        integer-valued; consecutive periods differ by exactly 1.
    treatment_col : str
        Column name for the binary treatment indicator (0/1 or bool).

    Example
    -------
    >>> config = PanelConfig(unit_col="wbcode2", time_col="year", treatment_col="dem")
    """

    unit_col: str = "unit_id"
    time_col: str = "time"
    treatment_col: str = "treated"

    @property
    def columns(self) -> list[str]:
        return [self.unit_col, self.time_col, self.treatment_col]


@dataclass(frozen=True, order=True)
class TreatedEvent:
    """A (unit, time) pair at which a unit switches from untreated to treated.

    Used as the key of a ``MatchedSetCollection``. The ``"unit.time"`` string
    form is only produced by ``label`` for display and export.
    """

    unit_id: int
    time: int

    @property
    def label(self) -> str:
        return f"{self.unit_id}.{self.time}"

    @classmethod
    def from_label(cls, label: str) -> TreatedEvent:
        """Parse a ``"unit.time"`` label. Unit ids may be negative."""
        unit, sep, time = label.rpartition(".")
        if not sep or not unit:
            raise ValueError(f"Not a 'unit.time' label: {label!r}")
        return cls(int(unit), int(time))
