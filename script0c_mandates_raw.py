#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Wed Mar 10 10:05:48 2021

@author: covid-mandates
"""

# purpose: state policy database -> days under each mandate within the study
# window, then broadcast to every county in the state

from packages import *
from functions import *


NEVER_ENACTED = {"0", "0.0", "", "nan", "NaN", "None"}


def parse_policy_dates(s):
    """Policy cells hold m/d/yyyy dates, 0 or blank when never enacted."""
    s = s.astype("string").str.strip()
    s = s.where(~s.isin(NEVER_ENACTED))
    return pd.to_datetime(s, errors="coerce", format="%m/%d/%Y")


def load_mandates(path, start=STUDY_START, end=STUDY_END, policies=None):
    policies = policies or MANDATE_POLICIES
    df = pd.read_csv(path, dtype=str)
    df.columns = df.columns.str.strip()

    # state key - the policy database ships either FIPS or STATE_FIPS
    fips_col = next((c for c in ("FIPS", "STATE_FIPS", "fips") if c in df.columns), None)
    if fips_col is None:
        raise KeyError(f"no state fips column found in {path}")

    needed = [c for pair in policies.values() for c in pair if c]
    missing = [c for c in needed if c not in df.columns]
    if missing:
        raise KeyError(f"policy columns not found: {missing}")

    df["state_fips"] = normalize_fips(df[fips_col], width=2)
    df = df[df["state_fips"].str.match(r"^\d{2}$").fillna(False)].copy()

    out = pd.DataFrame({"state_fips": df["state_fips"].values})
    total = pd.Series(0, index=out.index)
    for name, (start_col, end_col) in policies.items():
        began = parse_policy_dates(df[start_col]).reset_index(drop=True)
        if end_col:
            ended = parse_policy_dates(df[end_col]).reset_index(drop=True)
        else:
            ended = pd.Series(pd.NaT, index=out.index)

        # lifted before it began = bad entry, treat as still in force
        bad = ended.notna() & began.notna() & (ended < began)
        if bad.any():
            print(f"Warning: {name} end before start in {int(bad.sum())} states, end ignored")
            ended = ended.where(~bad)

        days = days_in_window(began, ended, start, end)
        out[f"{name}_days"] = days.values
        out[f"{name}_ever"] = (days > 0).astype(int).values
        total = total + days.values

    out["mandate_days_total"] = total.values

    if out["state_fips"].duplicated().any():
        raise ValueError(f"duplicate states in {path}")

    print("mandates ->", out.shape, f"({len(policies)} policies)")
    return out


def mandates_to_counties(mandates, counties):
    """State rows -> county rows via the 2-digit state prefix."""
    if "state_fips" not in counties.columns:
        raise KeyError("column 'state_fips' not found in counties")

    keys = counties[["fips", "state_fips"]].drop_duplicates()
    out = keys.merge(mandates, on="state_fips", how="left")

    no_policy = out["mandate_days_total"].isna()
    if no_policy.any():
        print(f"Warning: {int(no_policy.sum())} counties in states without policy rows")

    return out.drop(columns="state_fips")
