from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.pipeline import Pipeline

from regwalk.models.regularized import pipeline_coefficients


def _bootstrap_indices(n: int, rng: np.random.Generator) -> np.ndarray:
    return rng.integers(0, n, size=n, endpoint=False)


def bootstrap_coefficient_draws(
    *,
    X: pd.DataFrame,
    y: pd.Series,
    estimator_factory: Callable[[], Pipeline],
    n_boot: int,
    seed: int,
) -> pd.DataFrame:
    """Refit a fresh estimator on row-resampled data and record its coefficients."""

    X = pd.DataFrame(X).astype(float)
    features = list(X.columns)
    if n_boot <= 0:
        return pd.DataFrame(columns=["iter", "intercept"] + features)

    Xv = X.to_numpy(dtype=float)
    yv = np.asarray(y, dtype=float)
    rng = np.random.default_rng(seed)
    rows = []
    for i in range(n_boot):
        idx = _bootstrap_indices(len(yv), rng)
        est = estimator_factory()
        est.fit(pd.DataFrame(Xv[idx], columns=features), yv[idx])
        intercept, coef = pipeline_coefficients(est, features)
        rows.append({"iter": i, "intercept": intercept, **coef.to_dict()})
    return pd.DataFrame(rows)


def summarize_bootstrap_ci(
    draws: pd.DataFrame,
    *,
    alpha: float = 0.05,
    features: Optional[Iterable[str]] = None,
) -> Dict[str, Tuple[float, float]]:
    features = [c for c in draws.columns if c != "iter"] if features is None else list(features)
    if draws.empty:
        return {f: (np.nan, np.nan) for f in features}
    lo = float(100.0 * (alpha / 2.0))
    hi = float(100.0 * (1.0 - alpha / 2.0))
    out: Dict[str, Tuple[float, float]] = {}
    for f in features:
        vals = draws[f].dropna().to_numpy(dtype=float)
        if vals.size == 0:
            out[f] = (np.nan, np.nan)
        else:
            out[f] = (float(np.percentile(vals, lo)), float(np.percentile(vals, hi)))
    return out


def coefficient_spread(draws: pd.DataFrame) -> pd.DataFrame:
    features = [c for c in draws.columns if c not in {"iter", "intercept"}]
    if draws.empty:
        return pd.DataFrame({"feature": features, "mean": np.nan, "sd": np.nan})
    rows = []
    for f in features:
        vals = draws[f].to_numpy(dtype=float)
        rows.append({"feature": f, "mean": float(vals.mean()), "sd": float(vals.std(ddof=1)) if vals.size > 1 else np.nan})
    return pd.DataFrame(rows)
