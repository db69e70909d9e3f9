#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Tue Mar 16 16:40:03 2021

@author: covid-mandates

Exploratory review of the merged county table.
Observation unit throughout: fips.
"""

from packages import *
from functions import *


# headline variables for the review
KEY_VARS = [
    "death_rate", "rep_share_pct", "mandate_days_total", "mask_mandate_days",
    "stay_home_days", "mask_freq_always", "pct_65_over", "median_household_income",
    "pct_poverty", "log_pop_density", "obesity", "diabetes", "mean_temp_f",
]


def completeness_table(df):
    summary = percent_missing_vs_filled(df).reset_index()
    summary = summary.rename(columns={"index": "column"})
    return summary.sort_values(["filled_pct", "column"]).reset_index(drop=True)


def describe_numeric(df, cols):
    cols = [c for c in cols if c in df.columns]
    num = df[cols].apply(pd.to_numeric, errors="coerce")
    return num.describe().T


def plot_correlations(df, cols, path):
    cols = [c for c in cols if c in df.columns]
    corr = df[cols].apply(pd.to_numeric, errors="coerce").corr()

    fig, ax = plt.subplots(figsize=(10, 8))
    sns.heatmap(corr, annot=True, fmt=".2f", cmap="vlag", center=0,
                annot_kws={"size": 6}, ax=ax)
    ax.set_title("Correlation of county covariates")
    fig.tight_layout()
    fig.savefig(path, dpi=200, bbox_inches="tight")
    plt.close(fig)
    print("Saved:", path)
    return corr


def plot_death_rate_scatter(df, x, path, hue=None, y="death_rate"):
    for c in (x, y):
        if c not in df.columns:
            raise KeyError(f"column '{c}' not found in df")

    tmp = df[[x, y] + ([hue] if hue else [])].copy()
    tmp[x] = pd.to_numeric(tmp[x], errors="coerce")
    tmp[y] = pd.to_numeric(tmp[y], errors="coerce")
    tmp = tmp.dropna(subset=[x, y])

    fig, ax = plt.subplots(figsize=(7, 6))
    sns.scatterplot(data=tmp, x=x, y=y, hue=hue, s=10, alpha=0.5, ax=ax)
    sns.regplot(data=tmp, x=x, y=y, scatter=False, color="black", ax=ax)
    ax.set_ylabel("COVID deaths per 100k")
    ax.set_title(f"{y} vs {x}")
    fig.tight_layout()
    fig.savefig(path, dpi=200, bbox_inches="tight")
    plt.close(fig)
    print("Saved:", path)
    return tmp


def main():
    path = latest_file(clean, "*_covid_county_merged.csv")
    df = pd.read_csv(path, dtype={"fips": str, "state_fips": str})
    print("review ->", path, df.shape)

    os.makedirs(merged, exist_ok=True)
    os.makedirs(figs, exist_ok=True)
    today_str = date.today().strftime("%Y-%m-%d")

    comp = completeness_table(df)
    comp.to_csv(os.path.join(merged, f"{today_str}_completeness.csv"), index=False)
    print(comp.head(15))

    desc = describe_numeric(df, KEY_VARS)
    desc.to_csv(os.path.join(merged, f"{today_str}_describe.csv"))
    print(desc)

    plot_correlations(df, KEY_VARS, os.path.join(figs, f"{today_str}_corr_heatmap.png"))
    plot_death_rate_scatter(df, "rep_share_pct", os.path.join(figs, f"{today_str}_deaths_vs_rep.png"),
                            hue="mask_mandate_ever" if "mask_mandate_ever" in df.columns else None)
    plot_death_rate_scatter(df, "mandate_days_total", os.path.join(figs, f"{today_str}_deaths_vs_mandates.png"))


if __name__ == "__main__":
    main()
