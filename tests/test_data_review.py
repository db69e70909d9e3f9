import os

import numpy as np
import pytest

from script1a_data_review import (
    completeness_table,
    describe_numeric,
    plot_correlations,
    plot_death_rate_scatter,
)


def test_completeness_table_sorted_least_filled_first(county_frame):
    county_frame.loc[:29, "pct_65_over"] = np.nan
    out = completeness_table(county_frame)

    assert out["column"].iloc[0] == "pct_65_over"
    assert out["filled_pct"].iloc[0] == pytest.approx(90.0)


def test_describe_numeric_ignores_absent(county_frame):
    out = describe_numeric(county_frame, ["death_rate", "rep_share_pct", "obesity"])
    assert list(out.index) == ["death_rate", "rep_share_pct"]
    assert out.loc["death_rate", "count"] == len(county_frame)


def test_plot_correlations(county_frame, tmp_path):
    path = str(tmp_path / "corr.png")
    corr = plot_correlations(county_frame, ["death_rate", "rep_share_pct", "mask_mandate_days"], path)

    assert os.path.getsize(path) > 0
    assert corr.shape == (3, 3)
    assert corr.loc["death_rate", "rep_share_pct"] > 0


def test_plot_death_rate_scatter(county_frame, tmp_path):
    county_frame.loc[:2, "rep_share_pct"] = np.nan
    path = str(tmp_path / "scatter.png")
    used = plot_death_rate_scatter(county_frame, "rep_share_pct", path)

    assert os.path.getsize(path) > 0
    assert len(used) == len(county_frame) - 3


def test_plot_death_rate_scatter_missing_column(county_frame, tmp_path):
    with pytest.raises(KeyError):
        plot_death_rate_scatter(county_frame, "nope", str(tmp_path / "x.png"))


def test_module_header_names_author():
    import script1a_data_review

    assert "@author: covid-mandates" in script1a_data_review.__doc__
