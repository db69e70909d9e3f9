#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Tue Mar  9 15:12:54 2021

@author: covid-mandates
"""

# purpose: MIT election lab county presidential returns -> party shares per county

from packages import *
from functions import *


def load_election(path, year=2020):
    df = pd.read_csv(path, dtype={"county_fips": str})
    df.columns = df.columns.str.lower().str.strip()
    for c in ("year", "county_fips", "party", "candidatevotes"):
        if c not in df.columns:
            raise KeyError(f"column '{c}' not found in {path}")

    df = df[pd.to_numeric(df["year"], errors="coerce") == year].copy()
    if "office" in df.columns:
        df = df[df["office"].str.upper() == "US PRESIDENT"]
    if df.empty:
        raise ValueError(f"no presidential returns for {year} in {path}")

    df["fips"] = normalize_fips(df["county_fips"])

    # Alaska districts, Kansas City (2938000) and blank codes aren't counties
    bad = df["fips"].isna() | ~df["fips"].fillna("").str.match(r"^\d{5}$") | df["fips"].str.startswith("02")
    if bad.any():
        print(f"Dropping {int(bad.sum())} election rows with non-county codes")
    df = df[~bad.fillna(True)].copy()

    df["party"] = df["party"].str.upper().str.strip()
    df["candidatevotes"] = pd.to_numeric(df["candidatevotes"], errors="coerce")

    # some states report by mode (election day, absentee, ...) - sum them
    votes = df.pivot_table(index="fips", columns="party", values="candidatevotes",
                           aggfunc="sum", fill_value=0)
    votes.columns = [str(c).lower() for c in votes.columns]
    for p in ("republican", "democrat"):
        if p not in votes.columns:
            votes[p] = 0

    out = pd.DataFrame({
        "fips": votes.index.astype("string"),
        "rep_votes": votes["republican"].values,
        "dem_votes": votes["democrat"].values,
        "total_votes": votes.sum(axis=1).values,
    })

    out = collapse_nyc(out, sum_cols=["rep_votes", "dem_votes", "total_votes"])

    total = out["total_votes"].where(out["total_votes"] > 0)
    out["rep_share"] = out["rep_votes"] / total
    out["dem_share"] = out["dem_votes"] / total
    out["rep_margin"] = out["rep_share"] - out["dem_share"]

    out = out.sort_values("fips").reset_index(drop=True)
    print("election ->", out.shape, f"({year})")
    return out
