#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Mon Mar 22 10:17:45 2021

@author: covid-mandates
"""

# purpose: do mandates and political preference explain county covid death
# rates once states are allowed their own baseline? random intercept per state,
# ML fits so nested models can be compared by AIC/BIC and LR tests

from packages import *
from functions import *

import statsmodels.formula.api as smf
from scipy import stats


MANDATE_VARS = ["mask_mandate_days", "stay_home_days", "business_close_days", "restaurant_close_days"]
POLITICS_VARS = ["rep_share_pct"]
CONTROL_VARS = [
    "pct_65_over", "log_pop_density", "median_household_income", "pct_poverty",
    "pct_black", "pct_hispanic", "obesity", "diabetes", "mean_temp_f", "non_large_metro",
]


# 1: model frame

def prepare_model_frame(df, outcome, predictors, group="state_fips", standardize=True):
    cols = [outcome] + list(predictors) + [group]
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise KeyError(f"columns not found in df: {missing}")

    frame = df[cols].copy()
    for c in [outcome] + list(predictors):
        frame[c] = pd.to_numeric(frame[c], errors="coerce").astype(float)

    n_before = len(frame)
    frame = frame.dropna().reset_index(drop=True)
    print(f"model frame: {len(frame)} of {n_before} rows complete, "
          f"{frame[group].nunique()} groups")
    if frame.empty:
        raise ValueError("no complete rows for the model frame")

    # a constant column makes the design singular
    constant = [c for c in predictors if frame[c].nunique() <= 1]
    if constant:
        print("dropping constant predictors:", constant)
        frame = frame.drop(columns=constant)

    if standardize:
        frame = zscore(frame, [c for c in predictors if c not in constant])
    return frame


def frame_predictors(frame, predictors):
    """Predictors that survived prepare_model_frame, in the order asked for."""
    return [c for c in predictors if c in frame.columns]


def _term(name):
    return name if name.isidentifier() else f'Q("{name}")'


def build_formula(outcome, predictors):
    rhs = " + ".join(_term(p) for p in predictors) if predictors else "1"
    return f"{_term(outcome)} ~ {rhs}"


# 2: fits

def fit_mixed(frame, outcome, predictors, group="state_fips", reml=False):
    formula = build_formula(outcome, predictors)
    model = smf.mixedlm(formula, frame, groups=np.asarray(frame[group].astype(str)))
    result = model.fit(reml=reml, method=["lbfgs", "powell"])
    if not np.isfinite(result.llf):
        result = model.fit(reml=reml, method=["powell", "lbfgs"])

    # state variance stuck at zero: the likelihood is not finite there, and the
    # ML fit at that boundary is the pooled regression
    if not np.isfinite(result.llf):
        print(f"WARNING: {formula}: state variance at zero, using pooled OLS")
        result = fit_ols(frame, outcome, predictors)
    return result


def fit_ols(frame, outcome, predictors):
    return smf.ols(build_formula(outcome, predictors), data=frame).fit()


def _fixed_names(result):
    return list(getattr(result, "fe_params", result.params).index)


def coef_table(result):
    names = _fixed_names(result)
    ci = result.conf_int().loc[names]
    return pd.DataFrame({
        "estimate": result.params[names],
        "std_err": result.bse[names],
        "z": result.tvalues[names],
        "p_value": result.pvalues[names],
        "ci_low": ci.iloc[:, 0],
        "ci_high": ci.iloc[:, 1],
    })


def intraclass_corr(result):
    """Share of the (unexplained) variance that sits between groups."""
    if not hasattr(result, "cov_re"):
        return 0.0  # pooled fallback
    between = float(np.asarray(result.cov_re)[0, 0])
    return between / (between + float(result.scale))


def information_criteria(result):
    """
    AIC/BIC counted the same way for mixed fits and pooled fallbacks: fixed
    effects plus the state and residual variances, so stepwise scores compare.
    REML fits get NaN, their likelihoods are not comparable across fixed effects.
    """
    llf = float(result.llf)
    n_fixed = len(_fixed_names(result))
    n_params = n_fixed + 2
    nobs = int(result.nobs)
    if getattr(result, "reml", False):
        aic = bic = np.nan
    else:
        aic = -2 * llf + 2 * n_params
        bic = -2 * llf + np.log(nobs) * n_params
    return {
        "llf": llf,
        "aic": aic,
        "bic": bic,
        "n_params": n_params,
        "n_fixed": n_fixed,
        "nobs": nobs,
    }


def lr_test(restricted, full):
    if getattr(restricted, "reml", False) or getattr(full, "reml", False):
        raise ValueError("likelihood ratio tests need ML fits (reml=False)")

    df_diff = len(_fixed_names(full)) - len(_fixed_names(restricted))
    if df_diff <= 0:
        raise ValueError("full model must have more fixed effects than the restricted one")

    if not (np.isfinite(full.llf) and np.isfinite(restricted.llf)):
        print("WARNING: likelihood ratio test skipped, log-likelihood not finite")
        return {"lr_stat": np.nan, "df": df_diff, "p_value": np.nan}

    stat = max(2 * (full.llf - restricted.llf), 0.0)
    return {"lr_stat": stat, "df": df_diff, "p_value": float(stats.chi2.sf(stat, df_diff))}


# 3: stepwise selection on one fixed frame

def _score(result, criterion):
    if criterion not in ("aic", "bic"):
        raise ValueError(f"unknown criterion: {criterion}")
    value = information_criteria(result)[criterion]
    # a fit with no finite score can never be the best step
    return value if np.isfinite(value) else np.inf


def forward_stepwise(frame, outcome, candidates, group="state_fips", base=(), criterion="aic"):
    selected = list(base)
    remaining = [c for c in candidates if c not in selected]

    best_score = _score(fit_mixed(frame, outcome, selected, group), criterion)
    steps = [{"step": 0, "action": "start", "variable": None,
              criterion: best_score, "n_predictors": len(selected)}]

    while remaining:
        scores = {c: _score(fit_mixed(frame, outcome, selected + [c], group), criterion)
                  for c in remaining}
        best = min(scores, key=scores.get)
        if not scores[best] < best_score:
            break

        selected.append(best)
        remaining.remove(best)
        best_score = scores[best]
        steps.append({"step": len(steps), "action": "add", "variable": best,
                      criterion: best_score, "n_predictors": len(selected)})
        print(f"forward step {len(steps) - 1}: + {best} ({criterion}={best_score:.2f})")

    return selected, pd.DataFrame(steps)


def backward_stepwise(frame, outcome, candidates, group="state_fips", base=(), criterion="aic"):
    selected = list(base) + [c for c in candidates if c not in base]

    best_score = _score(fit_mixed(frame, outcome, selected, group), criterion)
    steps = [{"step": 0, "action": "start", "variable": None,
              criterion: best_score, "n_predictors": len(selected)}]

    while True:
        removable = [c for c in selected if c not in base]
        if not removable:
            break
        scores = {c: _score(fit_mixed(frame, outcome, [s for s in selected if s != c], group), criterion)
                  for c in removable}
        best = min(scores, key=scores.get)
        if not scores[best] < best_score:
            break

        selected.remove(best)
        best_score = scores[best]
        steps.append({"step": len(steps), "action": "drop", "variable": best,
                      criterion: best_score, "n_predictors": len(selected)})
        print(f"backward step {len(steps) - 1}: - {best} ({criterion}={best_score:.2f})")

    return selected, pd.DataFrame(steps)


# 4: named model comparison

def compare_models(frame, specs, outcome="death_rate", group="state_fips"):
    fits = {}
    rows = []
    for name, preds in specs.items():
        res = fit_mixed(frame, outcome, list(preds), group)
        fits[name] = res

        row = {"model": name, "predictors": " + ".join(preds) if preds else "(intercept)"}
        row.update(information_criteria(res))
        row["icc"] = intraclass_corr(res)

        # LR test against the latest earlier model nested in this one
        row.update({"vs": None, "lr_stat": np.nan, "lr_df": np.nan, "lr_p": np.nan})
        for prev in reversed(list(fits)[:-1]):
            prev_preds = set(specs[prev])
            if prev_preds < set(preds):
                lr = lr_test(fits[prev], res)
                row.update({"vs": prev, "lr_stat": lr["lr_stat"], "lr_df": lr["df"], "lr_p": lr["p_value"]})
                break
        rows.append(row)

    table = pd.DataFrame(rows)
    return table, fits


def default_specs(df):
    mandates = [c for c in MANDATE_VARS if c in df.columns]
    politics = [c for c in POLITICS_VARS if c in df.columns]
    controls = [c for c in CONTROL_VARS if c in df.columns]
    return {
        "null": [],
        "politics": politics,
        "mandates": mandates,
        "mandates_politics": mandates + politics,
        "full": mandates + politics + controls,
    }


def main(outcome="death_rate"):
    path = latest_file(clean, "*_covid_county_merged.csv")
    df = pd.read_csv(path, dtype={"fips": str, "state_fips": str})
    print("models ->", path, df.shape)

    specs = default_specs(df)
    candidates = specs["full"]
    frame = prepare_model_frame(df, outcome, candidates)
    candidates = frame_predictors(frame, candidates)
    specs = {name: frame_predictors(frame, preds) for name, preds in specs.items()}

    os.makedirs(merged, exist_ok=True)
    today_str = date.today().strftime("%Y-%m-%d")

    # named models
    table, fits = compare_models(frame, specs, outcome)
    print(table[["model", "llf", "aic", "bic", "icc", "vs", "lr_p"]])
    table.to_csv(os.path.join(merged, f"{today_str}_model_comparison.csv"), index=False)

    full = fits["full"]
    print(full.summary())
    coefs = coef_table(full)
    coefs.to_csv(os.path.join(merged, f"{today_str}_mixed_full_coefs.csv"))

    # pooled OLS for reference - how much does the state intercept buy?
    ols = fit_ols(frame, outcome, candidates)
    print(f"pooled OLS: llf={ols.llf:.2f}  mixed: llf={full.llf:.2f}")

    # stepwise in both directions over all candidates
    fwd_sel, fwd_steps = forward_stepwise(frame, outcome, candidates)
    bwd_sel, bwd_steps = backward_stepwise(frame, outcome, candidates)
    print("forward selected:", fwd_sel)
    print("backward selected:", bwd_sel)
    fwd_steps.to_csv(os.path.join(merged, f"{today_str}_stepwise_forward.csv"), index=False)
    bwd_steps.to_csv(os.path.join(merged, f"{today_str}_stepwise_backward.csv"), index=False)

    # do mandates / politics survive in the selected model?
    kept = set(fwd_sel) | set(bwd_sel)
    for v in MANDATE_VARS + POLITICS_VARS:
        print(f"{v}: {'selected' if v in kept else 'dropped'}")


if __name__ == "__main__":
    main()
