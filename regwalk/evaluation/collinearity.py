from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.stats.outliers_influence import variance_inflation_factor


@dataclass(frozen=True)
class CollinearitySummary:
    n_features: int
    max_abs_corr: float
    max_vif: float
    n_high_vif: int
    condition_number: float
    severe: bool
    reason: str


def correlation_table(X: pd.DataFrame) -> pd.DataFrame:
    """Upper-triangle pairwise correlations in long format, strongest first."""
    corr = pd.DataFrame(X).corr()
    cols = corr.columns.tolist()
    rows = []
    for i, a in enumerate(cols):
        for b in cols[i + 1 :]:
            r = float(corr.loc[a, b])
            rows.append({"feature_a": a, "feature_b": b, "corr": r, "abs_corr": abs(r)})
    out = pd.DataFrame(rows, columns=["feature_a", "feature_b", "corr", "abs_corr"])
    return out.sort_values(["abs_corr", "feature_a", "feature_b"], ascending=[False, True, True], kind="mergesort").reset_index(drop=True)


def vif_table(X: pd.DataFrame) -> pd.DataFrame:
    exog = sm.add_constant(pd.DataFrame(X).astype(float), has_constant="add")
    values = exog.to_numpy(dtype=float)
    rows = []
    # Column 0 is the constant.
    for j, name in enumerate(exog.columns[1:], start=1):
        with np.errstate(divide="ignore"):
            vif = float(variance_inflation_factor(values, j))
        rows.append({"feature": name, "vif": vif})
    return pd.DataFrame(rows)


def summarize_collinearity(
    X: pd.DataFrame,
    *,
    vif_threshold: float = 10.0,
    corr_threshold: float = 0.9,
) -> CollinearitySummary:
    X = pd.DataFrame(X).astype(float)
    if X.shape[1] < 2:
        raise ValueError("Collinearity needs at least two predictors.")

    corr = correlation_table(X)
    vif = vif_table(X)
    max_abs_corr = float(corr["abs_corr"].max())
    max_vif = float(vif["vif"].max())
    n_high_vif = int((vif["vif"] > vif_threshold).sum())

    Xs = (X - X.mean()) / X.std(ddof=0).replace(0.0, 1.0)
    condition_number = float(np.linalg.cond(Xs.to_numpy()))

    reasons = []
    if max_abs_corr > corr_threshold:
        reasons.append(f"max|r|>{corr_threshold:g}")
    if n_high_vif > 0:
        reasons.append(f"vif>{vif_threshold:g} for {n_high_vif} predictors")

    return CollinearitySummary(
        n_features=int(X.shape[1]),
        max_abs_corr=max_abs_corr,
        max_vif=max_vif,
        n_high_vif=n_high_vif,
        condition_number=condition_number,
        severe=(len(reasons) > 0),
        reason=";".join(reasons),
    )
