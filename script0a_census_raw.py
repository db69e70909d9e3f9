#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Tue Mar  9 09:47:30 2021

@author: covid-mandates
"""

# purpose: census population, ACS demographics, TIGER land area and NCHS
# urban-rural codes -> one row per county each

from packages import *
from functions import *


## POPULATION ESTIMATES (co-est2020-alldata)

def load_population(path, year=2019):
    df = pd.read_csv(path, encoding="latin1", dtype={"STATE": str, "COUNTY": str})
    pop_col = f"POPESTIMATE{year}"
    for c in ("SUMLEV", "STATE", "COUNTY", "STNAME", "CTYNAME", pop_col):
        if c not in df.columns:
            raise KeyError(f"column '{c}' not found in {path}")

    # county rows only (state totals are SUMLEV 40)
    df = df[pd.to_numeric(df["SUMLEV"], errors="coerce") == 50].copy()
    df = generate_fips(df, state_col="STATE", county_col="COUNTY")

    out = pd.DataFrame({
        "fips": df["fips"],
        "state_fips": df["fips"].str[:2],
        "state_name": df["STNAME"],
        "county_name": df["CTYNAME"],
        "population": pd.to_numeric(df[pop_col], errors="coerce"),
    })

    out = collapse_nyc(out, sum_cols=["population"])
    out.loc[out["fips"] == NYC_FIPS, "county_name"] = "New York City"
    out = out.sort_values("fips").reset_index(drop=True)

    print("population ->", out.shape, f"(estimate {year})")
    return out


## ACS 5-YEAR DATA PROFILE

ACS_MISSING = {"-": np.nan, "(X)": np.nan, "N": np.nan, "**": np.nan, "***": np.nan, "*****": np.nan}


def load_demographics(path, acs_vars=None):
    acs_vars = acs_vars or ACS_VARS
    df = pd.read_csv(path, dtype=str)
    if "GEO_ID" not in df.columns:
        raise KeyError(f"column 'GEO_ID' not found in {path}")

    # data.census.gov exports carry a second header row of labels
    if not df.empty:
        first = str(df["GEO_ID"].iloc[0]).strip().lower()
        if first == "id" or first.startswith("geograph"):
            df = df.iloc[1:].copy()
    if df.empty:
        raise ValueError(f"no data rows in {path}")

    missing = [c for c in acs_vars if c not in df.columns]
    if missing:
        raise KeyError(f"ACS columns not found: {missing}")

    out = pd.DataFrame({"fips": df["GEO_ID"].str.strip().str[-5:]})
    for code, name in acs_vars.items():
        out[name] = pd.to_numeric(df[code].replace(ACS_MISSING), errors="coerce")

    # counties only - GEO_ID like 0500000US01001
    is_county = df["GEO_ID"].str.startswith("0500000US", na=False)
    out = out[is_county.values].copy()

    out = collapse_nyc(out, mean_cols=list(acs_vars.values()))
    out = out.reset_index(drop=True)

    print("demographics ->", out.shape)
    return out


## TIGER COUNTY FILE (.dbf) - land area

SQM_PER_SQMI = 2_589_988.11


def load_land_area(path):
    df = read_dbf(path)
    df.columns = df.columns.str.upper()
    if "GEOID" in df.columns:
        fips = normalize_fips(df["GEOID"])
    else:
        fips = generate_fips(df, state_col="STATEFP", county_col="COUNTYFP")["fips"]

    if "ALAND" not in df.columns:
        raise KeyError(f"column 'ALAND' not found in {path}")

    out = pd.DataFrame({
        "fips": fips,
        "land_area_sqmi": pd.to_numeric(df["ALAND"], errors="coerce") / SQM_PER_SQMI,
    })
    out = collapse_nyc(out, sum_cols=["land_area_sqmi"])
    out = out.reset_index(drop=True)

    print("land area ->", out.shape)
    return out


## NCHS URBAN-RURAL CODES

def load_urban_rural(path, code_col="code2013"):
    # read (latin1 encoding needed)
    df = pd.read_csv(path, encoding="latin1")
    df.columns = df.columns.str.lower().str.strip()
    for c in ("stfips", "ctyfips", code_col):
        if c not in df.columns:
            raise KeyError(f"column '{c}' not found in {path}")

    df = generate_fips(df, state_col="stfips", county_col="ctyfips")

    out = pd.DataFrame({
        "fips": df["fips"],
        "nchs_code": pd.to_numeric(df[code_col], errors="coerce"),
    })
    out = out.dropna(subset=["nchs_code"])

    # NYC boroughs are all large central metro
    out = collapse_nyc(out)
    out.loc[out["fips"] == NYC_FIPS, "nchs_code"] = 1

    out["nchs_code"] = out["nchs_code"].astype(int)
    out["nchs_label"] = out["nchs_code"].map(NCHS_LABELS)

    # binary flag: 0 for large central/fringe metro, 1 otherwise
    out["non_large_metro"] = 1
    out.loc[out["nchs_code"].isin([1, 2]), "non_large_metro"] = 0

    out = out.sort_values("fips").reset_index(drop=True)
    print("urban-rural ->", out.shape)
    return out
