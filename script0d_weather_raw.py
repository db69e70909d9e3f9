#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Thu Mar 11 14:31:09 2021

@author: covid-mandates
"""

# purpose: NOAA nClimDiv county temperature / precipitation -> mean over the
# months inside the study window

from packages import *
from functions import *


# fixed-width layout: state(2) county(3) element(2) year(4) then 12 x 7 monthly values
MONTHS = [f"m{m:02d}" for m in range(1, 13)]
CLIMDIV_COLSPECS = [(0, 2), (2, 5), (5, 7), (7, 11)] + [(11 + 7 * i, 18 + 7 * i) for i in range(12)]
CLIMDIV_NAMES = ["noaa_state", "county_code", "element", "year"] + MONTHS
CLIMDIV_MISSING = [-99.90, -9.99]


def read_climdiv(path):
    df = pd.read_fwf(
        path,
        colspecs=CLIMDIV_COLSPECS,
        names=CLIMDIV_NAMES,
        header=None,
        dtype={"noaa_state": str, "county_code": str, "element": str},
    )

    # NOAA state numbering -> FIPS state code
    df["noaa_state"] = df["noaa_state"].str.zfill(2)
    df["state_fips"] = df["noaa_state"].map(NOAA_STATE_TO_FIPS)
    unmapped = df["state_fips"].isna()
    if unmapped.any():
        print(f"Dropping {int(unmapped.sum())} climdiv rows with unknown NOAA state codes:",
              sorted(df.loc[unmapped, "noaa_state"].unique()))
    df = df[~unmapped].copy()

    df["fips"] = df["state_fips"] + df["county_code"].str.zfill(3)
    df["year"] = pd.to_numeric(df["year"], errors="coerce").astype(int)
    df[MONTHS] = df[MONTHS].apply(pd.to_numeric, errors="coerce")
    df[MONTHS] = df[MONTHS].mask(df[MONTHS].isin(CLIMDIV_MISSING))
    return df


def window_months(start, end):
    """(year, month) pairs touched by the window."""
    periods = pd.period_range(pd.Timestamp(start), pd.Timestamp(end), freq="M")
    return [(p.year, p.month) for p in periods]


def load_climdiv(path, value_name, start=STUDY_START, end=STUDY_END):
    df = read_climdiv(path)

    # wide -> long, keep months in the window
    long = df.melt(id_vars=["fips", "year"], value_vars=MONTHS,
                   var_name="month", value_name=value_name)
    long["month"] = long["month"].str[1:].astype(int)

    wanted = pd.DataFrame(window_months(start, end), columns=["year", "month"])
    long = long.merge(wanted, on=["year", "month"], how="inner")

    out = long.groupby("fips", as_index=False)[value_name].mean()
    out["fips"] = out["fips"].astype("string")
    out = collapse_nyc(out, mean_cols=[value_name])

    print(f"{value_name} ->", out.shape, f"({len(wanted)} months)")
    return out
