#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Fri Mar 12 11:26:40 2021

@author: covid-mandates
"""

# purpose: CDC PLACES county estimates (long) -> one column per health condition

from packages import *
from functions import *


def load_places(path, value_type="Age-adjusted prevalence", measures=None):
    measures = measures or PLACES_MEASURES
    df = pd.read_csv(path, dtype={"LocationID": str, "CountyFIPS": str})

    fips_col = "LocationID" if "LocationID" in df.columns else "CountyFIPS"
    for c in (fips_col, "MeasureId", "Data_Value_Type", "Data_Value"):
        if c not in df.columns:
            raise KeyError(f"column '{c}' not found in {path}")

    df = df[(df["Data_Value_Type"] == value_type) & df["MeasureId"].isin(list(measures))].copy()
    if df.empty:
        raise ValueError(f"no '{value_type}' rows for {sorted(measures)} in {path}")

    df["fips"] = normalize_fips(df[fips_col])
    df["Data_Value"] = pd.to_numeric(df["Data_Value"], errors="coerce")

    # one release per file, but guard against repeated rows
    dupes = df.duplicated(subset=["fips", "MeasureId"])
    if dupes.any():
        print(f"PLACES: {int(dupes.sum())} repeated fips/measure rows, keeping the first")
        df = df[~dupes]

    wide = df.pivot(index="fips", columns="MeasureId", values="Data_Value")
    wide = wide.rename(columns=measures).reset_index()
    wide.columns.name = None
    wide["fips"] = wide["fips"].astype("string")

    absent = [v for v in measures.values() if v not in wide.columns]
    if absent:
        print("PLACES: measures not in file:", absent)

    wide = collapse_nyc(wide, mean_cols=[c for c in wide.columns if c != "fips"])

    print("health (PLACES) ->", wide.shape, f"({value_type})")
    return wide
