import os

import numpy as np
import pandas as pd
import pytest

from script1_merge import build_county_dataset, write_dataset


def _s(values):
    return pd.Series(values, dtype="string")


@pytest.fixture()
def sources():
    population = pd.DataFrame({
        "fips": _s(["01001", "01003", "02013", "36061"]),
        "state_fips": _s(["01", "01", "02", "36"]),
        "state_name": ["Alabama", "Alabama", "Alaska", "New York"],
        "county_name": ["Autauga County", "Baldwin County", "Aleutians East Borough", "New York City"],
        "population": [50000, 200000, 0, 8000000],
    })
    covid = pd.DataFrame({
        "fips": _s(["01001", "01003", "36061"]),
        "county_nyt": ["Autauga", "Baldwin", "New York City"],
        "state_nyt": ["Alabama", "Alabama", "New York"],
        "covid_cases": [5000, 20000, 600000],
        "covid_deaths": [100, 150, 28000],
    })
    land = pd.DataFrame({
        "fips": _s(["01001", "01003", "02013", "36061"]),
        "land_area_sqmi": [500.0, 1000.0, 0.0, 300.0],
    })
    election = pd.DataFrame({
        "fips": _s(["01001", "01003", "36061"]),
        "rep_share": [0.7, 0.75, 0.2],
    })
    mandates = pd.DataFrame({
        "state_fips": _s(["01", "02", "36"]),
        "mask_mandate_days": [200, 0, 300],
        "mandate_days_total": [500, 100, 900],
    })
    return {"population": population, "covid": covid, "land": land,
            "election": election, "mandates": mandates}


def test_one_row_per_county(sources):
    out = build_county_dataset(sources)
    assert len(out) == 4
    assert out["fips"].is_unique


def test_death_rate_and_fill(sources, capsys):
    out = build_county_dataset(sources).set_index("fips")

    assert out.loc["01001", "death_rate"] == pytest.approx(200.0)
    assert out.loc["36061", "death_rate"] == pytest.approx(350.0)
    # no NYT report -> 0 deaths, rate undefined on 0 population
    assert out.loc["02013", "covid_deaths"] == 0
    assert np.isnan(out.loc["02013", "death_rate"])
    assert "1 counties without a NYT report" in capsys.readouterr().out


def test_state_mandates_reach_counties(sources):
    out = build_county_dataset(sources).set_index("fips")
    assert out.loc["01003", "mask_mandate_days"] == 200
    assert out.loc["36061", "mandate_days_total"] == 900


def test_density_and_percent(sources):
    out = build_county_dataset(sources).set_index("fips")
    assert out.loc["01003", "pop_density"] == pytest.approx(200.0)
    assert out.loc["01003", "log_pop_density"] == pytest.approx(np.log(200.0))
    assert np.isnan(out.loc["02013", "pop_density"])
    assert out.loc["36061", "rep_share_pct"] == pytest.approx(20.0)


def test_missing_sources_are_skipped(sources, capsys):
    out = build_county_dataset({"population": sources["population"]})
    assert "death_rate" not in out.columns
    assert "not loaded, skipped" in capsys.readouterr().out


def test_population_required(sources):
    with pytest.raises(KeyError):
        build_county_dataset({"covid": sources["covid"]})


def test_duplicate_source_keys_fail(sources):
    sources["election"] = pd.concat([sources["election"], sources["election"].head(1)])
    with pytest.raises(ValueError):
        build_county_dataset(sources)


def test_write_dataset(sources, tmp_path):
    out = build_county_dataset(sources)
    path = write_dataset(out, out_dir=str(tmp_path / "clean"))

    assert os.path.basename(path).endswith("_covid_county_merged.csv")
    back = pd.read_csv(path, dtype={"fips": str})
    assert list(back["fips"]) == ["01001", "01003", "02013", "36061"]
