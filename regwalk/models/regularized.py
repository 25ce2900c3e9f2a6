from __future__ import annotations

from typing import Iterable, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.linear_model import Lasso, Ridge, lasso_path
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from regwalk.config import (
    LAMBDA_MIN_RATIO_LARGE_N,
    LAMBDA_MIN_RATIO_SMALL_N,
    LASSO_MAX_ITER,
    LASSO_TOL,
    RIDGE_LAMBDA_MAX_FACTOR,
)

# Penalties are expressed on the glmnet scale for standardized predictors:
#   lasso: (1/2n) RSS + lam * ||w||_1
#   ridge: (1/2n) RSS + (lam/2) * ||w||_2^2
PENALTIES = ("ridge", "lasso")


def _check_penalty(penalty: str) -> None:
    if penalty not in PENALTIES:
        raise ValueError(f"Unknown penalty: {penalty}; expected one of {PENALTIES}.")


def to_sklearn_alpha(penalty: str, lam: float, n: int) -> float:
    _check_penalty(penalty)
    if lam < 0:
        raise ValueError(f"lambda must be >= 0; got {lam}.")
    if penalty == "lasso":
        return float(lam)
    return float(n) * float(lam)


def build_regularized(penalty: str, lam: float, n: int) -> Pipeline:
    alpha = to_sklearn_alpha(penalty, lam, n)
    if penalty == "lasso":
        model = Lasso(alpha=alpha, max_iter=LASSO_MAX_ITER, tol=LASSO_TOL)
    else:
        model = Ridge(alpha=alpha)
    return Pipeline(
        steps=[
            ("scaler", StandardScaler(with_mean=True, with_std=True)),
            ("model", model),
        ]
    )


def _standardize(X: pd.DataFrame, y) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, float]:
    scaler = StandardScaler(with_mean=True, with_std=True)
    Xs = scaler.fit_transform(np.asarray(X, dtype=float))
    y = np.asarray(y, dtype=float)
    y_mean = float(y.mean())
    return Xs, y - y_mean, scaler.mean_, scaler.scale_, y_mean


def lambda_max(X: pd.DataFrame, y, penalty: str) -> float:
    """Smallest lasso penalty at which every coefficient is zero.

    Ridge never zeroes coefficients; its grid starts a fixed factor above the
    lasso value so the largest penalty shrinks the fit to (almost) the mean.
    """
    _check_penalty(penalty)
    Xs, yc, _, _, _ = _standardize(X, y)
    lam = float(np.max(np.abs(Xs.T @ yc)) / Xs.shape[0])
    if lam <= 0:
        raise ValueError("Outcome is constant or uncorrelated with every predictor; no penalty path exists.")
    if penalty == "ridge":
        lam *= RIDGE_LAMBDA_MAX_FACTOR
    return lam


def lambda_grid(
    X: pd.DataFrame,
    y,
    penalty: str,
    n_lambda: int,
    min_ratio: Optional[float] = None,
) -> np.ndarray:
    if n_lambda < 2:
        raise ValueError(f"n_lambda must be >= 2; got {n_lambda}.")
    n, p = np.asarray(X).shape
    if min_ratio is None:
        min_ratio = LAMBDA_MIN_RATIO_LARGE_N if n >= p else LAMBDA_MIN_RATIO_SMALL_N
    if not 0.0 < min_ratio < 1.0:
        raise ValueError(f"min_ratio must be in (0, 1); got {min_ratio}.")
    top = lambda_max(X, y, penalty)
    return np.geomspace(top, top * min_ratio, n_lambda)


def pipeline_coefficients(pipeline: Pipeline, features: Iterable[str]) -> Tuple[float, pd.Series]:
    """Intercept and coefficients of a fitted pipeline on the original predictor scale."""
    model = pipeline.named_steps["model"]
    coef = np.asarray(model.coef_, dtype=float).ravel()
    intercept = float(np.asarray(model.intercept_, dtype=float))

    scaler = pipeline.named_steps.get("scaler")
    if scaler is not None:
        coef = coef / scaler.scale_
        intercept = intercept - float(np.dot(scaler.mean_, coef))

    features = list(features)
    if len(features) != coef.size:
        raise RuntimeError("Coefficient length does not match feature names.")
    return intercept, pd.Series(coef, index=features)


def regularization_path(X: pd.DataFrame, y, penalty: str, lambdas) -> pd.DataFrame:
    """Coefficients (original scale) for every lambda, ordered by decreasing lambda."""
    _check_penalty(penalty)
    features = list(pd.DataFrame(X).columns)
    lambdas = np.sort(np.asarray(lambdas, dtype=float))[::-1]
    if lambdas.size == 0 or (lambdas < 0).any():
        raise ValueError("lambdas must be a non-empty array of non-negative values.")

    Xs, yc, x_mean, x_scale, y_mean = _standardize(X, y)
    n = Xs.shape[0]

    if penalty == "lasso":
        alphas, coefs, _ = lasso_path(Xs, yc, alphas=lambdas, max_iter=LASSO_MAX_ITER, tol=LASSO_TOL)
        order = np.argsort(alphas)[::-1]
        coefs_std = coefs[:, order].T
        # Exactly zero at and above lambda_max; coordinate descent can leave ulp-sized residue there.
        coefs_std[lambdas >= np.max(np.abs(Xs.T @ yc)) / n] = 0.0
    else:
        rows = []
        for lam in lambdas:
            model = Ridge(alpha=to_sklearn_alpha("ridge", lam, n), fit_intercept=False)
            model.fit(Xs, yc)
            rows.append(model.coef_)
        coefs_std = np.vstack(rows)

    coefs_orig = coefs_std / x_scale
    intercepts = y_mean - coefs_orig @ x_mean

    path = pd.DataFrame(coefs_orig, columns=features)
    path.insert(0, "intercept", intercepts)
    path.insert(0, "lambda", lambdas)
    path["n_nonzero"] = (coefs_std != 0).sum(axis=1)
    return path


def zero_threshold(path: pd.DataFrame, feature: str) -> float:
    """Smallest lambda on the grid at and above which `feature` is exactly zero."""
    if feature not in path.columns:
        raise ValueError(f"Feature not in path: {feature}")
    ordered = path.sort_values("lambda", ascending=False, kind="mergesort")
    threshold = np.nan
    for lam, coef in zip(ordered["lambda"], ordered[feature]):
        if coef != 0.0:
            break
        threshold = float(lam)
    return threshold
