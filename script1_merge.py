#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Mon Mar 15 09:58:21 2021

@author: covid-mandates
"""

# purpose: assemble the county dataset - population is the county universe,
# every other source is left-joined on fips (mandates via state fips)

from packages import *
from functions import *

from script0_covid_raw import load_covid_deaths, load_mask_use
from script0a_census_raw import load_population, load_demographics, load_land_area, load_urban_rural
from script0b_election_raw import load_election
from script0c_mandates_raw import load_mandates, mandates_to_counties
from script0d_weather_raw import load_climdiv
from script0e_health_raw import load_places


# join order for the county-keyed sources
MERGE_ORDER = ["covid", "mask", "demographics", "land", "urban", "election",
               "mandates", "temp", "precip", "health"]


def build_county_dataset(sources):
    if "population" not in sources:
        raise KeyError("sources must include 'population' (the county universe)")

    df = sources["population"].copy()
    print("county universe ->", df.shape)

    for name in MERGE_ORDER:
        part = sources.get(name)
        if part is None:
            print(f"--- merge {name}: not loaded, skipped ---")
            continue
        if name == "mandates":
            part = mandates_to_counties(part, df)
        df = merge_report(df, part, name)

    # derived columns
    if "covid_deaths" in df.columns:
        no_report = df["covid_deaths"].isna()
        if no_report.any():
            print(f"{int(no_report.sum())} counties without a NYT report, deaths/cases set to 0")
        df["covid_deaths"] = df["covid_deaths"].fillna(0)
        df["covid_cases"] = df["covid_cases"].fillna(0)
        df["death_rate"] = rate_per(df["covid_deaths"], df["population"])
        df["case_rate"] = rate_per(df["covid_cases"], df["population"])

    if "land_area_sqmi" in df.columns:
        df["pop_density"] = rate_per(df["population"], df["land_area_sqmi"], per=1)
        df["log_pop_density"] = np.log(df["pop_density"].where(df["pop_density"] > 0))

    if "rep_share" in df.columns:
        df["rep_share_pct"] = 100 * df["rep_share"]

    df = df.sort_values("fips").reset_index(drop=True)
    print("merged ->", df.shape)
    return df


def load_sources(raw_dir=raw, files=None, start=STUDY_START, end=STUDY_END):
    files = files or RAW_FILES
    p = {k: os.path.join(raw_dir, v) for k, v in files.items()}

    # the two NYT files are the only remote inputs
    fetch_csv(NYT_COUNTIES_URL, p["covid"])
    fetch_csv(NYT_MASK_USE_URL, p["mask"])

    return {
        "population": load_population(p["population"]),
        "covid": load_covid_deaths(p["covid"], start, end),
        "mask": load_mask_use(p["mask"]),
        "demographics": load_demographics(p["acs"]),
        "land": load_land_area(p["land"]),
        "urban": load_urban_rural(p["urban"]),
        "election": load_election(p["election"]),
        "mandates": load_mandates(p["mandates"], start, end),
        "temp": load_climdiv(p["temp"], "mean_temp_f", start, end),
        "precip": load_climdiv(p["precip"], "mean_precip_in", start, end),
        "health": load_places(p["places"]),
    }


def write_dataset(df, out_dir=clean):
    os.makedirs(out_dir, exist_ok=True)
    today_str = date.today().strftime("%Y-%m-%d")
    out_path = os.path.join(out_dir, f"{today_str}_covid_county_merged.csv")
    df.to_csv(out_path, index=False)
    print("Saved:", out_path)
    return out_path


def main():
    sources = load_sources()
    df = build_county_dataset(sources)

    # completeness of the final table
    print(percent_missing_vs_filled(df).sort_values("filled_pct").head(15))

    write_dataset(df)


if __name__ == "__main__":
    main()
