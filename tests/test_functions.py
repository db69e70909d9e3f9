import os
import urllib.error

import numpy as np
import pandas as pd
import pytest

import functions
from functions import (
    clean_cols,
    collapse_nyc,
    days_in_window,
    fetch_csv,
    generate_fips,
    latest_file,
    merge_report,
    normalize_fips,
    percent_missing_vs_filled,
    rate_per,
    read_and_prepare,
    read_dbf,
    sniff_delim,
    zscore,
)


def test_percent_missing_vs_filled():
    df = pd.DataFrame({"a": [1, None, 3, None], "b": [1, 2, 3, 4]})
    out = percent_missing_vs_filled(df)
    assert out.loc["a", "missing_pct"] == 50
    assert out.loc["b", "filled_pct"] == 100


def test_normalize_fips_handles_numbers_and_floats():
    s = pd.Series([1001, "6037", "36061.0", None])
    out = normalize_fips(s)
    assert list(out[:3]) == ["01001", "06037", "36061"]
    assert pd.isna(out[3])


def test_generate_fips_pads_parts(capsys):
    df = pd.DataFrame({"STATE": [1, 36], "COUNTY": [1, 61]})
    generate_fips(df, state_col="STATE", county_col="COUNTY")
    assert list(df["fips"]) == ["01001", "36061"]
    assert "Warning" not in capsys.readouterr().out


def test_generate_fips_warns_on_bad_codes(capsys):
    df = pd.DataFrame({"STATE": ["1"], "COUNTY": ["2938"]})
    generate_fips(df, state_col="STATE", county_col="COUNTY")
    assert "not 5 digits" in capsys.readouterr().out


def test_clean_cols():
    df = pd.DataFrame(columns=["County Name", "Pop. Est", "R&D"])
    assert list(clean_cols(df).columns) == ["county_name", "pop_est", "randd"]


def test_sniff_delim(tmp_path):
    p = tmp_path / "pipe.txt"
    p.write_text("\nSTATEFP|COUNTYFP|NAME\n01|001|Autauga\n")
    assert sniff_delim(p) == "pipe"
    c = tmp_path / "comma.txt"
    c.write_text("a,b,c\n1,2,3\n")
    assert sniff_delim(c) == "comma"


def test_read_and_prepare_csv(tmp_path):
    p = tmp_path / "x.csv"
    p.write_text("GEOID,County Name,Value\n1001, Autauga ,3\n36061,New York,4\n")
    df = read_and_prepare(str(p))
    assert list(df.columns) == ["fips", "county_name", "value"]
    assert list(df["fips"]) == ["01001", "36061"]
    assert df["county_name"].iloc[0] == "Autauga"


def test_read_and_prepare_rejects_unknown_ext(tmp_path):
    p = tmp_path / "x.json"
    p.write_text("{}")
    with pytest.raises(ValueError):
        read_and_prepare(str(p))


def test_read_dbf_drops_geometry(monkeypatch):
    calls = {}

    def fake_read_file(path, **kwargs):
        calls.update(kwargs)
        return pd.DataFrame({"GEOID": ["01001"], "ALAND": [1.0]})

    monkeypatch.setattr(functions.gpd, "read_file", fake_read_file)
    df = read_dbf("counties.dbf")
    assert calls["ignore_geometry"] is True
    assert list(df.columns) == ["GEOID", "ALAND"]


class _FakeResponse:
    def __init__(self, body):
        self.body = body

    def read(self):
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False


def test_fetch_csv_writes_and_reuses(tmp_path, monkeypatch):
    hits = []

    def fake_urlopen(req):
        hits.append(req.full_url)
        return _FakeResponse(b"date,fips\n2020-03-01,01001\n")

    monkeypatch.setattr(functions, "urlopen", fake_urlopen)
    dest = str(tmp_path / "raw" / "nyt.csv")

    assert fetch_csv("https://example.org/nyt.csv", dest) == dest
    assert open(dest).read().startswith("date,fips")

    # second call uses the cached copy
    fetch_csv("https://example.org/nyt.csv", dest)
    assert len(hits) == 1

    fetch_csv("https://example.org/nyt.csv", dest, refresh=True)
    assert len(hits) == 2


def test_fetch_csv_http_error(tmp_path, monkeypatch):
    def fake_urlopen(req):
        raise urllib.error.HTTPError(req.full_url, 404, "Not Found", None, None)

    monkeypatch.setattr(functions, "urlopen", fake_urlopen)
    with pytest.raises(RuntimeError, match="HTTP 404"):
        fetch_csv("https://example.org/missing.csv", str(tmp_path / "m.csv"))
    assert not os.path.exists(tmp_path / "m.csv")


def test_latest_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        latest_file(str(tmp_path), "*.csv")

    old = tmp_path / "2021-01-01_a.csv"
    new = tmp_path / "2021-02-01_a.csv"
    old.write_text("x")
    new.write_text("x")
    os.utime(old, (1, 1))
    assert latest_file(str(tmp_path), "*_a.csv") == str(new)


def test_collapse_nyc_sums_and_means():
    df = pd.DataFrame({
        "fips": ["01001", "36005", "36047", "36061"],
        "population": [100, 10, 20, 30],
        "median_age": [40.0, 30.0, 35.0, 40.0],
    })
    out = collapse_nyc(df, sum_cols=["population"], mean_cols=["median_age"])
    assert len(out) == 2
    nyc = out[out["fips"] == "36061"].iloc[0]
    assert nyc["population"] == 60
    assert nyc["median_age"] == pytest.approx(35.0)


def test_collapse_nyc_without_boroughs_is_noop():
    df = pd.DataFrame({"fips": ["01001"], "x": [1]})
    assert collapse_nyc(df, sum_cols=["x"]).equals(df)


def test_merge_report_left_join_and_nulls(capsys):
    left = pd.DataFrame({"fips": ["01001", "01003", "01005"], "state_name": ["AL"] * 3})
    right = pd.DataFrame({"fips": ["01001", "01003", "99999"],
                          "state_name": ["x", "x", "x"], "value": [1.0, None, 3.0]})
    out = merge_report(left, right, "test")

    assert len(out) == 3
    assert list(out["state_name"]) == ["AL"] * 3
    assert out["value"].isna().sum() == 2
    printed = capsys.readouterr().out
    assert "matched: 2" in printed
    assert "right unmatched: 1" in printed
    assert "value" in printed


def test_merge_report_rejects_duplicate_keys():
    left = pd.DataFrame({"fips": ["01001"]})
    right = pd.DataFrame({"fips": ["01001", "01001"], "v": [1, 2]})
    with pytest.raises(ValueError, match="duplicate"):
        merge_report(left, right, "dupes")


def test_merge_report_missing_key():
    with pytest.raises(KeyError):
        merge_report(pd.DataFrame({"fips": []}), pd.DataFrame({"geoid": []}), "nokey")


def test_rate_per_handles_zero_and_missing():
    out = rate_per(pd.Series([10, 5, 1]), pd.Series([1000, 0, None]))
    assert out.iloc[0] == pytest.approx(1000.0)
    assert np.isnan(out.iloc[1])
    assert np.isnan(out.iloc[2])


def test_days_in_window():
    start = pd.Series(["2020-04-04", None, "2020-01-01", "2021-06-01"])
    end = pd.Series(["2020-04-30", None, None, None])
    days = days_in_window(start, end, pd.Timestamp("2020-03-01"), pd.Timestamp("2021-02-28"))
    # ended in window / never enacted / in force all window / enacted after
    assert list(days) == [26, 0, 365, 0]


def test_zscore():
    df = pd.DataFrame({"a": [1.0, 2.0, 3.0], "b": [5.0, 5.0, 5.0]})
    out = zscore(df, ["a", "b"])
    assert out["a"].mean() == pytest.approx(0.0)
    assert out["a"].std() == pytest.approx(1.0)
    assert (out["b"] == 0).all()
