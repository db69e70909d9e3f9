#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Mon Mar  8 13:20:11 2021

@author: covid-mandates
"""

# purpose: NYT county covid deaths + NYT mask-use survey -> one row per county

from packages import *
from functions import *


## NYT CUMULATIVE CASES / DEATHS

def _last_report(df, cutoff, strict=False):
    """Last cumulative report per county on (or strictly before) cutoff."""
    mask = df["date"] < cutoff if strict else df["date"] <= cutoff
    return (
        df[mask]
        .sort_values(["fips", "date"])
        .drop_duplicates(subset="fips", keep="last")
    )


def load_covid_deaths(path, start=STUDY_START, end=STUDY_END):
    df = pd.read_csv(path, dtype={"fips": str})
    for c in ("date", "county", "state", "fips", "cases", "deaths"):
        if c not in df.columns:
            raise KeyError(f"column '{c}' not found in {path}")

    df["date"] = pd.to_datetime(df["date"])
    start, end = pd.Timestamp(start), pd.Timestamp(end)

    # NYT lumps the boroughs together without a fips
    nyc = df["county"].eq("New York City") & df["fips"].isna()
    df.loc[nyc, "fips"] = NYC_FIPS

    # "Unknown", Kansas City, Joplin etc. have no county fips
    no_fips = df["fips"].isna()
    if no_fips.any():
        print(f"Dropping {int(no_fips.sum())} NYT rows without fips:",
              sorted(df.loc[no_fips, "county"].dropna().unique())[:10])
    df = df[~no_fips].copy()
    df["fips"] = normalize_fips(df["fips"])

    at_end = _last_report(df, end)
    before = _last_report(df, start, strict=True)

    out = at_end[["fips", "county", "state", "cases", "deaths"]].merge(
        before[["fips", "cases", "deaths"]],
        on="fips", how="left", suffixes=("", "_before"),
    )
    out[["cases_before", "deaths_before"]] = out[["cases_before", "deaths_before"]].fillna(0)

    out["covid_deaths"] = out["deaths"] - out["deaths_before"]
    out["covid_cases"] = out["cases"] - out["cases_before"]

    # NYT revises cumulative counts downward now and then
    neg = (out["covid_deaths"] < 0) | (out["covid_cases"] < 0)
    if neg.any():
        print(f"Warning: {int(neg.sum())} counties with negative window counts, set to 0")
    out["covid_deaths"] = out["covid_deaths"].clip(lower=0)
    out["covid_cases"] = out["covid_cases"].clip(lower=0)

    out = out.rename(columns={"county": "county_nyt", "state": "state_nyt"})
    out = out[["fips", "county_nyt", "state_nyt", "covid_cases", "covid_deaths"]]
    out = out.reset_index(drop=True)

    print("covid deaths ->", out.shape, f"({start:%Y-%m-%d} to {end:%Y-%m-%d})")
    return out


## NYT MASK USE (July 2020 survey)

MASK_LEVELS = ["never", "rarely", "sometimes", "frequently", "always"]


def load_mask_use(path):
    df = pd.read_csv(path, dtype={"COUNTYFP": str})
    df = clean_cols(df)
    if "countyfp" not in df.columns:
        raise KeyError(f"column 'countyfp' not found in {path}")

    df["fips"] = normalize_fips(df["countyfp"])
    shares = df[MASK_LEVELS].apply(pd.to_numeric, errors="coerce")

    out = pd.DataFrame({"fips": df["fips"]})
    for level in MASK_LEVELS:
        out[f"mask_{level}"] = shares[level]

    out["mask_freq_always"] = shares["frequently"] + shares["always"]
    # 0 (never) .. 4 (always)
    weights = pd.Series(range(len(MASK_LEVELS)), index=MASK_LEVELS)
    out["mask_score"] = shares.mul(weights, axis=1).sum(axis=1, min_count=1) / shares.sum(axis=1)

    out = collapse_nyc(out, mean_cols=[c for c in out.columns if c != "fips"])

    print("mask use ->", out.shape)
    return out
