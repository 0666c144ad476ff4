"""Tests for IO export functions."""

import tempfile

import pandas as pd
import pytest

from did_matched_sets import PanelMatcher, TreatedEvent
from did_matched_sets.io import to_csv, to_parquet


class TestExport:
    def _build_sets(self, simple_panel, config, lag=2):
        return PanelMatcher(simple_panel, lag=lag, config=config).build()

    def test_to_csv(self, simple_panel, config):
        msets = self._build_sets(simple_panel, config)
        with tempfile.NamedTemporaryFile(suffix=".csv", delete=False) as f:
            to_csv(msets, f.name)
            result = pd.read_csv(f.name, dtype={"label": str, "controls": str})
            assert len(result) == len(msets)
            assert result["label"].tolist() == msets.labels()
            assert (result["lag"] == 2).all()

    def test_to_csv_controls_pipe_separated(self, simple_panel, config):
        msets = self._build_sets(simple_panel, config)
        with tempfile.NamedTemporaryFile(suffix=".csv", delete=False) as f:
            to_csv(msets, f.name)
            result = pd.read_csv(f.name, dtype={"label": str, "controls": str}).set_index("label")
            assert result.loc["2.2010", "controls"] == "6|7|8|9|10"
            assert result.loc["2.2010", "n_controls"] == 5

    def test_to_parquet_long_format(self, simple_panel, config):
        pytest.importorskip("pyarrow", reason="pyarrow not installed")
        msets = self._build_sets(simple_panel, config)

        with tempfile.NamedTemporaryFile(suffix=".parquet", delete=False) as f:
            to_parquet(msets, f.name)
            result = pd.read_parquet(f.name)
            assert len(result) == sum(len(c) for c in msets.values())
            assert "control_unit_id" in result.columns
            assert (result["lag"] == 2).all()
            sub = result[(result["unit_id"] == 1) & (result["year"] == 2008)]
            assert set(sub["control_unit_id"]) == msets[TreatedEvent(1, 2008)]
