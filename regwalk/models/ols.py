from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.linear_model import LinearRegression
from sklearn.pipeline import Pipeline


@dataclass(frozen=True)
class OLSFit:
    intercept: float
    coef: pd.Series
    rsquared: float
    n_obs: int
    model: Any

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        X = pd.DataFrame(X)[list(self.coef.index)]
        return self.intercept + X.to_numpy(dtype=float) @ self.coef.to_numpy(dtype=float)


def fit_ols(X: pd.DataFrame, y: pd.Series) -> OLSFit:
    X = pd.DataFrame(X).astype(float)
    exog = sm.add_constant(X, has_constant="add")
    results = sm.OLS(np.asarray(y, dtype=float), exog).fit()
    params = pd.Series(np.asarray(results.params, dtype=float), index=exog.columns)
    return OLSFit(
        intercept=float(params["const"]),
        coef=params.drop("const").rename("ols"),
        rsquared=float(results.rsquared),
        n_obs=int(results.nobs),
        model=results,
    )


def closed_form_ols(X, y) -> np.ndarray:
    """Least-squares solution [b0, b1, ..., bp] of the normal equations."""
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    Xb = np.column_stack([np.ones(X.shape[0]), X])
    beta, *_ = np.linalg.lstsq(Xb, np.asarray(y, dtype=float), rcond=None)
    return beta


def check_against_closed_form(fit: OLSFit, X, y, *, rtol: float, atol: float) -> bool:
    beta = closed_form_ols(X, y)
    fitted = np.concatenate([[fit.intercept], fit.coef.to_numpy(dtype=float)])
    return bool(np.allclose(fitted, beta, rtol=rtol, atol=atol))


def build_ols() -> Pipeline:
    return Pipeline(steps=[("model", LinearRegression(fit_intercept=True))])
