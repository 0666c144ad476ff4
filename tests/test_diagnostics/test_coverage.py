"""Tests for CoverageAnalyzer."""

import pandas as pd

from did_matched_sets import PanelIndex
from did_matched_sets.diagnostics import CoverageAnalyzer


class TestCoverageAnalyzer:
    def test_compute_returns_expected_columns(self, simple_panel, config):
        analyzer = CoverageAnalyzer(config=config)
        result = analyzer.compute(simple_panel)
        expected = ["unit_id", "n_periods", "time_span", "n_gaps",
                    "coverage_rate", "min_time", "max_time", "n_onsets"]
        assert list(result.columns) == expected

    def test_compute_one_row_per_unit(self, simple_panel, config):
        analyzer = CoverageAnalyzer(config=config)
        result = analyzer.compute(simple_panel)
        assert len(result) == simple_panel["unit_id"].nunique()

    def test_accepts_panel_index(self, simple_panel, config):
        panel = PanelIndex(simple_panel, config=config)
        from_index = CoverageAnalyzer().compute(panel)
        from_frame = CoverageAnalyzer(config=config).compute(simple_panel)
        pd.testing.assert_frame_equal(from_index, from_frame)

    def test_gap_detected(self, simple_panel, config):
        result = CoverageAnalyzer(config=config).compute(simple_panel).set_index("unit_id")
        assert result.loc[5, "n_gaps"] == 1
        assert result.loc[5, "coverage_rate"] < 1.0
        assert (result.drop(index=5)["coverage_rate"] == 1.0).all()

    def test_onset_counts(self, simple_panel, config):
        result = CoverageAnalyzer(config=config).compute(simple_panel).set_index("unit_id")
        assert result.loc[1, "n_onsets"] == 1
        assert result.loc[3, "n_onsets"] == 2
        assert result.loc[4, "n_onsets"] == 0

    def test_unbalanced_panel(self, config):
        df = pd.DataFrame({
            "unit_id": [1, 1, 1, 2, 2],
            "year": [2000, 2002, 2004, 2000, 2001],
            "treated": [0] * 5,
        })
        result = CoverageAnalyzer(config=config).compute(df)
        a_row = result[result["unit_id"] == 1].iloc[0]
        assert a_row["n_gaps"] == 2
        assert a_row["coverage_rate"] < 1.0

    def test_summary(self, simple_panel, config):
        result = CoverageAnalyzer(config=config).summary(simple_panel)
        assert isinstance(result, pd.DataFrame)
        assert result.iloc[0]["n_units"] == 10
        assert result.iloc[0]["n_balanced"] == 9
        assert result.iloc[0]["n_onsets"] == 4
