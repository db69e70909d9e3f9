#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Mon Mar  8 10:41:02 2021

@author: covid-mandates
"""

# set packages to import - basic data manipulation
import os
import pandas as pd
import numpy as np
import glob

# packages for timestamping files
from datetime import date

# packages for visuals
import matplotlib.pyplot as plt
import seaborn as sns


# set common directories (COVID_BASE overrides the dropbox default)
db_base = os.environ.get("COVID_BASE", os.path.expanduser("~/Dropbox/Covid"))
db_data = os.path.join(db_base, "Data")

raw = os.path.join(db_data, "raw") # input
clean = os.path.join(db_data, "clean") # output
merged = os.path.join(db_data, "merged") # model tables
figs = os.environ.get("COVID_FIGS_DIR", os.path.join(merged, "figs"))


# study window - deaths, mandate days and weather are all measured over it
STUDY_START = pd.Timestamp(os.environ.get("STUDY_START", "2020-03-01"))
STUDY_END = pd.Timestamp(os.environ.get("STUDY_END", "2021-02-28"))


# remote sources (fetched once into raw/)
NYT_COUNTIES_URL = "https://raw.githubusercontent.com/nytimes/covid-19-data/master/us-counties.csv"
NYT_MASK_USE_URL = "https://raw.githubusercontent.com/nytimes/covid-19-data/master/mask-use/mask-use-by-county.csv"


# local raw files, relative to raw/
RAW_FILES = {
    "covid": "nyt-us-counties.csv",
    "mask": "nyt-mask-use-by-county.csv",
    "population": "co-est2020-alldata.csv",
    "acs": "ACSDP5Y2019.DP05-DP03-DP02.csv",
    "land": "tl_2019_us_county.dbf",
    "urban": "NCHSurb-rural-codes.csv",
    "election": "countypres_2000-2020.csv",
    "mandates": "COVID-19 US state policy database.csv",
    "temp": "climdiv-tmpccy-v1.0.0.txt",
    "precip": "climdiv-pcpncy-v1.0.0.txt",
    "places": "PLACES_County_Data_2020.csv",
}


# ACS 5-year data profile codes (2019 release)
ACS_VARS = {
    "DP05_0018E": "median_age",
    "DP05_0024PE": "pct_65_over",
    "DP05_0038PE": "pct_black",
    "DP05_0071PE": "pct_hispanic",
    "DP05_0077PE": "pct_white_nh",
    "DP03_0062E": "median_household_income",
    "DP03_0128PE": "pct_poverty",
    "DP03_0099PE": "pct_uninsured",
    "DP02_0068PE": "pct_bachelors",
}

# CDC PLACES measure ids
PLACES_MEASURES = {
    "OBESITY": "obesity",
    "DIABETES": "diabetes",
    "CSMOKING": "smoking",
    "BPHIGH": "hypertension",
    "COPD": "copd",
    "CHD": "heart_disease",
    "KIDNEY": "kidney_disease",
}

# state policy database: policy -> (start col, end col); end col None = never lifted
MANDATE_POLICIES = {
    "stay_home": ("STAYHOME", "END_STHM"),
    "business_close": ("CLBSNS", "END_BSNS"),
    "restaurant_close": ("CLREST", "ENDREST"),
    "mask_mandate": ("FM_ALL", "FM_END"),
    "school_close": ("CLSCHOOL", None),
}


# NCHS 2013 urban-rural scheme
NCHS_LABELS = {
    1: "Large central metro",
    2: "Large fringe metro",
    3: "Medium metro",
    4: "Small metro",
    5: "Micropolitan",
    6: "Noncore",
}


# NYT reports the five boroughs as one "New York City" unit
NYC_FIPS = "36061"
NYC_BOROUGH_FIPS = ["36005", "36047", "36061", "36081", "36085"]


# nClimDiv numbers states alphabetically (contiguous US + AK), not by FIPS
NOAA_STATE_TO_FIPS = {
    "01": "01", "02": "04", "03": "05", "04": "06", "05": "08", "06": "09",
    "07": "10", "08": "12", "09": "13", "10": "16", "11": "17", "12": "18",
    "13": "19", "14": "20", "15": "21", "16": "22", "17": "23", "18": "24",
    "19": "25", "20": "26", "21": "27", "22": "28", "23": "29", "24": "30",
    "25": "31", "26": "32", "27": "33", "28": "34", "29": "35", "30": "36",
    "31": "37", "32": "38", "33": "39", "34": "40", "35": "41", "36": "42",
    "37": "44", "38": "45", "39": "46", "40": "47", "41": "48", "42": "49",
    "43": "50", "44": "51", "45": "53", "46": "54", "47": "55", "48": "56",
    "50": "02",
}
