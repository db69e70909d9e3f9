#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Fri Mar 26 14:08:52 2021

@author: covid-mandates
"""

# purpose: random forest on county death rates - which covariates carry the
# prediction? ridge kept alongside as the linear benchmark

from packages import *
from functions import *

from sklearn.preprocessing import StandardScaler
from sklearn.impute import SimpleImputer
from sklearn.ensemble import RandomForestRegressor
from sklearn.inspection import permutation_importance
from sklearn.linear_model import RidgeCV
from sklearn.model_selection import train_test_split
from sklearn.metrics import mean_squared_error, r2_score, mean_absolute_error

from script2_mixed_models import MANDATE_VARS, POLITICS_VARS, CONTROL_VARS


RF_FEATURES = MANDATE_VARS + ["mandate_days_total", "mask_freq_always"] + POLITICS_VARS + CONTROL_VARS + [
    "pct_white_nh", "pct_uninsured", "pct_bachelors", "median_age", "smoking",
    "hypertension", "copd", "heart_disease", "mean_precip_in",
]


# 1: features - same thresholds + mean imputation as the ridge runs

def prepare_features(df, outcome, features, row_thresh=0.1, col_thresh=0.9):
    features = [c for c in features if c in df.columns and c != outcome]
    if outcome not in df.columns:
        raise KeyError(f"column '{outcome}' not found in df")
    if not features:
        raise ValueError("none of the requested features are in df")

    X = df[features].apply(pd.to_numeric, errors="coerce").astype(float)
    y = pd.to_numeric(df[outcome], errors="coerce").astype(float)

    # drop rows without an outcome first so the column check sees the rows that are fit
    X = X.loc[y.notna()]

    # rows need at least row_thresh of features filled
    min_filled = int(row_thresh * X.shape[1])
    X = X[X.notna().sum(axis=1) >= min_filled]
    y = y.loc[X.index]
    if X.empty:
        raise ValueError("no rows left after filtering")

    # columns more than col_thresh missing (or with nothing to impute from) are dropped
    col_mask = (X.isna().mean() <= col_thresh) & X.notna().any()
    dropped = list(X.columns[~col_mask])
    if dropped:
        print("dropping sparse features:", dropped)
    X = X.loc[:, col_mask]
    if X.shape[1] == 0:
        raise ValueError("no features left after filtering")

    imp = SimpleImputer(strategy="mean")
    X_imputed = pd.DataFrame(imp.fit_transform(X), columns=imp.get_feature_names_out(), index=X.index)

    print(f"features: {X_imputed.shape[1]} cols, {X_imputed.shape[0]} rows")
    return X_imputed, y


def _metrics(y_true, y_pred):
    mse = mean_squared_error(y_true, y_pred)
    return {
        "mse": mse,
        "rmse": mse ** 0.5,
        "mae": mean_absolute_error(y_true, y_pred),
        "r2": r2_score(y_true, y_pred),
    }


# 2: forest

def fit_forest(X, y, n_estimators=500, test_size=0.2, random_state=42, **rf_kwargs):
    X_train, X_test, y_train, y_test = train_test_split(X, y, test_size=test_size, random_state=random_state)
    print(X_train.shape, X_test.shape)

    model = RandomForestRegressor(n_estimators=n_estimators, oob_score=True,
                                  random_state=random_state, n_jobs=-1, **rf_kwargs)
    model.fit(X_train, y_train)

    metrics = _metrics(y_test, model.predict(X_test))
    metrics["oob_r2"] = model.oob_score_
    print(f"forest  MSE: {metrics['mse']:.3f}, R²: {metrics['r2']:.3f}, OOB R²: {metrics['oob_r2']:.3f}")

    return {
        "model": model,
        "X_train": X_train, "X_test": X_test,
        "y_train": y_train, "y_test": y_test,
        "metrics": metrics,
    }


# 3: ridge benchmark

def fit_ridge_baseline(X_train, y_train, X_test, y_test, alphas=(0.01, 0.1, 1, 10, 100)):
    scaler = StandardScaler().fit(X_train)
    ridge_cv = RidgeCV(alphas=list(alphas))
    ridge_cv.fit(scaler.transform(X_train), y_train)

    metrics = _metrics(y_test, ridge_cv.predict(scaler.transform(X_test)))
    metrics["alpha"] = ridge_cv.alpha_
    print(f"ridge   MSE: {metrics['mse']:.3f}, R²: {metrics['r2']:.3f}, optimal lambda: {ridge_cv.alpha_}")

    coefs = pd.Series(ridge_cv.coef_, index=X_train.columns).sort_values(key=abs, ascending=False)
    return ridge_cv, metrics, coefs


# 4: importance

def feature_importance(model, X_test, y_test, n_repeats=10, random_state=42):
    perm = permutation_importance(model, X_test, y_test, n_repeats=n_repeats,
                                  random_state=random_state)
    imp = pd.DataFrame({
        "feature": X_test.columns,
        "impurity": model.feature_importances_,
        "permutation_mean": perm.importances_mean,
        "permutation_std": perm.importances_std,
    })
    imp = imp.sort_values("permutation_mean", ascending=False).reset_index(drop=True)
    imp["rank"] = np.arange(1, len(imp) + 1)
    return imp


def plot_importance(imp, path, top_n=15):
    top = imp.head(top_n)

    fig, ax = plt.subplots(figsize=(8, max(3, 0.4 * len(top))))
    sns.barplot(data=top, x="permutation_mean", y="feature", color="steelblue", ax=ax)
    ax.errorbar(top["permutation_mean"], np.arange(len(top)), xerr=top["permutation_std"],
                fmt="none", ecolor="black", capsize=2)
    ax.set_xlabel("Permutation importance (drop in R²)")
    ax.set_ylabel("")
    ax.set_title("Random forest feature importance - COVID death rate")
    fig.tight_layout()
    fig.savefig(path, dpi=300, bbox_inches="tight")
    plt.close(fig)
    print("Saved:", path)


def main(outcome="death_rate"):
    path = latest_file(clean, "*_covid_county_merged.csv")
    df = pd.read_csv(path, dtype={"fips": str, "state_fips": str})
    print("forest ->", path, df.shape)

    X, y = prepare_features(df, outcome, RF_FEATURES)
    rf = fit_forest(X, y)
    _, ridge_metrics, ridge_coefs = fit_ridge_baseline(rf["X_train"], rf["y_train"], rf["X_test"], rf["y_test"])
    print(ridge_coefs.head(10))

    imp = feature_importance(rf["model"], rf["X_test"], rf["y_test"])
    print(imp.head(15))

    os.makedirs(merged, exist_ok=True)
    os.makedirs(figs, exist_ok=True)
    today_str = date.today().strftime("%Y-%m-%d")
    imp.to_csv(os.path.join(merged, f"{today_str}_rf_importance.csv"), index=False)
    plot_importance(imp, os.path.join(figs, f"{today_str}_rf_importance.png"))

    # where do the mandate and politics variables land?
    focus = imp[imp["feature"].isin(MANDATE_VARS + POLITICS_VARS)]
    print(focus[["feature", "rank", "permutation_mean"]])


if __name__ == "__main__":
    main()
