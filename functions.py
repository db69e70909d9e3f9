#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Mon Mar  8 11:02:37 2021

@author: covid-mandates
"""

# purpose: useful functions across scripts

import os
import glob
import urllib.error
from urllib.request import urlopen, Request

import numpy as np
import pandas as pd
import geopandas as gpd

from packages import NYC_FIPS, NYC_BOROUGH_FIPS


# data cleaning - checking missing percentages
def percent_missing_vs_filled(df: pd.DataFrame) -> pd.DataFrame:
    """
    Returns a DataFrame with, for each column in `df`:
      - missing_pct:    percentage of NA values
      - filled_pct:     percentage of non-NA values
    """
    total = len(df)
    missing_count = df.isna().sum()

    # compute percentages (empty frame -> everything missing)
    missing_pct = missing_count / total * 100 if total else missing_count * 0 + 100.0
    filled_pct = 100 - missing_pct

    summary = pd.DataFrame({
        'missing_pct': missing_pct,
        'filled_pct':  filled_pct
    })

    return summary


# FIPS helpers

def normalize_fips(s, width=5):
    """Any int/float/str FIPS series -> zero-padded string, NA kept."""
    return (
        s.astype("string")
        .str.strip()
        .str.replace(r"\.0$", "", regex=True)
        .str.zfill(width)
    )


def generate_fips(df, state_col="state", county_col="county", out_col="fips"):
    # pad state to 2 digits, county to 3 digits
    state_padded = normalize_fips(df[state_col], width=2)
    county_padded = normalize_fips(df[county_col], width=3)

    df[out_col] = state_padded + county_padded

    # QA - check all are 5 digits
    invalid_fips = df[~df[out_col].fillna("").str.match(r"^\d{5}$")]
    if not invalid_fips.empty:
        print(f"Warning: {len(invalid_fips)} {out_col} values are not 5 digits.")
        print(invalid_fips[[out_col, state_col, county_col]].head(10))

    return df


# simple / standard colname cleaning

def clean_cols(df):
    df.columns = (
        df.columns
        .str.lower()                      # lowercase
        .str.replace("&", "and")          # replace & with and
        .str.replace(r"[.,]", "", regex=True)  # remove . and ,
        .str.strip()                      # trim spaces
        .str.replace(r"\s+", "_", regex=True)  # spaces -> underscores
    )
    return df


# read in files

def sniff_delim(path):
    s = ""
    with open(path, "r", errors="ignore") as f:
        for line in f:
            if line.strip():
                s = line
                break
    # count signals for each delimiter
    scores = {
        "pipe": s.count("|"),
        "comma": s.count(","),
        "ws": len(s.split()) - 1  # whitespace tokens
    }
    return max(scores, key=scores.get)


_SEPS = {"pipe": "|", "comma": ",", "ws": r"\s+"}


def read_text_table(path, **kwargs):
    """csv/txt reader with delimiter sniffing and a latin1 fallback."""
    sep = _SEPS[sniff_delim(path)]
    engine = "python" if sep == r"\s+" else "c"
    try:
        return pd.read_csv(path, sep=sep, engine=engine, encoding="utf-8", **kwargs)
    except UnicodeDecodeError:
        # retry with fallback encoding
        return pd.read_csv(path, sep=sep, engine=engine, encoding="latin1", **kwargs)


def read_dbf(path):
    """DBF attribute table (e.g. TIGER county file) as a plain DataFrame."""
    df = gpd.read_file(path, ignore_geometry=True)
    return pd.DataFrame(df)


def read_and_prepare(path):
    """Simple reader: csv/txt/parquet/xlsx/dbf -> clean cols, strip strings, standardize fips."""
    ext = os.path.splitext(path)[1].lower()
    if ext in (".csv", ".txt"):
        df = read_text_table(path, dtype=str)
    elif ext in (".parquet", ".pq"):
        df = pd.read_parquet(path)
    elif ext in (".xlsx", ".xls"):
        df = pd.read_excel(path, dtype=str)
    elif ext == ".dbf":
        df = read_dbf(path)
    else:
        raise ValueError(f"unsupported file type: {ext}")

    # normalize column names and trim string columns
    df = clean_cols(df)
    for c in df.select_dtypes(include=["object", "string"]).columns:
        df[c] = df[c].astype("string").str.strip()

    # rename common fips variants if present
    fips_candidates = [c for c in df.columns if c in ("fips", "fips_generated", "fips_code", "geoid", "county_fips", "countyfp")]
    if fips_candidates:
        df = df.rename(columns={fips_candidates[0]: "fips"})
        df["fips"] = normalize_fips(df["fips"])

    return df


def fetch_csv(url, dest, refresh=False):
    """Single GET of a remote csv into dest; an existing copy is reused."""
    if os.path.exists(dest) and not refresh:
        print("Using cached:", dest)
        return dest

    req = Request(url, headers={"User-Agent": "covid-mandates-script/1.0"})
    try:
        with urlopen(req) as resp:
            body = resp.read()
    except urllib.error.HTTPError as e:
        raise RuntimeError(f"HTTP {e.code} for {url}") from e

    os.makedirs(os.path.dirname(dest) or ".", exist_ok=True)
    with open(dest, "wb") as f:
        f.write(body)
    print("Saved:", dest)
    return dest


def latest_file(folder, pattern):
    hits = glob.glob(os.path.join(folder, pattern))
    if not hits:
        raise FileNotFoundError(f"No files found for pattern: {pattern} in {folder}")
    return max(hits, key=os.path.getmtime)


# NYC - NYT reports the five boroughs as one unit, fold the other sources to match

def collapse_nyc(df, sum_cols=(), mean_cols=(), fips_col="fips"):
    is_nyc = df[fips_col].isin(NYC_BOROUGH_FIPS)
    if not is_nyc.any():
        return df

    boroughs = df[is_nyc]
    base = boroughs[boroughs[fips_col] == NYC_FIPS]
    row = (base if not base.empty else boroughs).iloc[[0]].copy()
    row[fips_col] = NYC_FIPS

    for c in sum_cols:
        row[c] = boroughs[c].sum(min_count=1)
    for c in mean_cols:
        row[c] = pd.to_numeric(boroughs[c], errors="coerce").mean()

    print(f"NYC: collapsed {len(boroughs)} borough rows into {NYC_FIPS}")
    out = pd.concat([df[~is_nyc], row], ignore_index=True)
    return out


# joins - every source is merged through here so the null check is never skipped

def merge_report(left, right, name, on="fips", how="left"):
    if on not in left.columns or on not in right.columns:
        raise KeyError(f"{name}: key column '{on}' missing")

    n_dupes = int(right.duplicated(subset=on).sum())
    if n_dupes:
        raise ValueError(f"{name}: {n_dupes} duplicate '{on}' keys, join would add rows")

    overlap = [c for c in right.columns if c in left.columns and c != on]
    if overlap:
        print(f"{name}: dropping columns already present: {overlap}")
        right = right.drop(columns=overlap)
    added = [c for c in right.columns if c != on]

    out = left.merge(right, on=on, how=how, indicator=True)
    matched = int((out["_merge"] == "both").sum())
    unmatched_left = int((out["_merge"] == "left_only").sum())
    unmatched_right = int((~right[on].isin(left[on])).sum())
    out = out.drop(columns="_merge")

    print(f"--- merge {name} ({how} on {on}) ---")
    print(f"rows: {len(out)}  matched: {matched}  left only: {unmatched_left}  "
          f"right unmatched: {unmatched_right}")
    nulls = out[added].isna().sum()
    print(nulls[nulls > 0].to_string() if (nulls > 0).any() else "no nulls added")

    return out


# rates and windows

def rate_per(num, den, per=100_000):
    num = pd.to_numeric(num, errors="coerce").astype(float)
    den = pd.to_numeric(den, errors="coerce").astype(float)
    den = den.where(den != 0)
    return num / den * per


def days_in_window(start, end, window_start, window_end):
    """
    Days of [start, end) inside the inclusive window [window_start, window_end].
    Missing end = still in force at window end. Missing start = never enacted.
    """
    start = pd.to_datetime(pd.Series(start), errors="coerce")
    end = pd.to_datetime(pd.Series(end), errors="coerce")
    stop = pd.Timestamp(window_end) + pd.Timedelta(days=1)

    lo = start.clip(lower=pd.Timestamp(window_start))
    hi = end.fillna(stop).clip(upper=stop)

    days = (hi - lo).dt.days
    return days.clip(lower=0).fillna(0).astype(int)


def zscore(df, cols):
    out = df.copy()
    for c in cols:
        x = out[c].astype(float)
        sd = x.std()
        out[c] = (x - x.mean()) / sd if sd and not np.isnan(sd) else 0.0
    return out
