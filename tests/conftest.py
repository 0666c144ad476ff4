"""Shared fixtures for did-matched-sets tests."""

import numpy as np
import pandas as pd
import pytest

from did_matched_sets import PanelConfig


@pytest.fixture
def config() -> PanelConfig:
    return PanelConfig(unit_col="unit_id", time_col="year", treatment_col="treated")


def _simple_status(unit_id: int, year: int) -> int:
    if unit_id == 1:
        return int(year >= 2008)
    if unit_id == 2:
        return int(year >= 2010)
    if unit_id == 3:
        return int(year in (2007, 2008) or year >= 2011)
    if unit_id == 4:
        return 1
    return 0


@pytest.fixture
def simple_panel() -> pd.DataFrame:
    """Panel with 10 units, 10 years (2005-2014).

    - Unit 1: treated from 2008 on (onset 2008)
    - Unit 2: treated from 2010 on (onset 2010)
    - Unit 3: treated 2007-2008 and from 2011 on (onsets 2007, 2011)
    - Unit 4: treated in every year, including its first (no onset)
    - Unit 5: never treated, no row for 2009
    - Units 6-10: never treated
    """
    rng = np.random.default_rng(42)
    rows = []
    for unit_id in range(1, 11):
        for year in range(2005, 2015):
            if unit_id == 5 and year == 2009:
                continue
            rows.append({
                "unit_id": unit_id,
                "year": year,
                "treated": _simple_status(unit_id, year),
                "outcome": rng.normal(10, 2),
            })
    return pd.DataFrame(rows)


@pytest.fixture
def shuffled_panel(simple_panel) -> pd.DataFrame:
    """``simple_panel`` with rows in random order and a non-default index."""
    shuffled = simple_panel.sample(frac=1.0, random_state=7)
    shuffled.index = shuffled.index + 1000
    return shuffled


@pytest.fixture
def scenario_panel() -> pd.DataFrame:
    """Three units (1=A, 2=B, 3=C) over t=1..4.

    unit  t=1 t=2 t=3 t=4
    A      0   0   1   1
    B      0   0   0   0
    C      0   0   0   1
    """
    statuses = {
        1: [0, 0, 1, 1],
        2: [0, 0, 0, 0],
        3: [0, 0, 0, 1],
    }
    rows = [
        {"unit_id": unit_id, "year": t, "treated": status}
        for unit_id, history in statuses.items()
        for t, status in enumerate(history, start=1)
    ]
    return pd.DataFrame(rows)


@pytest.fixture
def never_treated_only() -> pd.DataFrame:
    """Panel where no unit is ever treated."""
    rows = []
    for uid in range(1, 6):
        for year in range(2005, 2010):
            rows.append({"unit_id": uid, "year": year, "treated": 0})
    return pd.DataFrame(rows)
