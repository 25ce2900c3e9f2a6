from __future__ import annotations

from typing import Dict, Iterable, Sequence, Tuple

import numpy as np
import pandas as pd


def simulate_simple_linear(
    *,
    n: int,
    intercept: float,
    slope: float,
    noise_sd: float,
    x_range: Tuple[float, float] = (0.0, 10.0),
    seed: int,
) -> pd.DataFrame:
    """Draw y = intercept + slope * x + e with x ~ U(x_range) and e ~ N(0, noise_sd^2)."""

    if n <= 1:
        raise ValueError(f"n must be > 1; got {n}.")
    if noise_sd < 0:
        raise ValueError(f"noise_sd must be >= 0; got {noise_sd}.")
    lo, hi = float(x_range[0]), float(x_range[1])
    if not hi > lo:
        raise ValueError(f"x_range must be increasing; got {x_range}.")

    rng = np.random.default_rng(seed)
    x = rng.uniform(lo, hi, size=n)
    e = rng.normal(0.0, noise_sd, size=n)
    y = intercept + slope * x + e
    return pd.DataFrame({"x": x, "y": y})


def signal_names(k: int) -> list[str]:
    return [f"x{j}" for j in range(1, k + 1)]


def simulate_correlated_predictors(
    *,
    n: int,
    signal_coefs: Sequence[float],
    intercept: float,
    copies_per_signal: int,
    copy_noise_sd: float,
    n_noise: int,
    noise_sd: float,
    seed: int,
) -> pd.DataFrame:
    """Build a table where most predictors are redundant or irrelevant.

    Column order is y, the signal columns x1..xk, the near-duplicate copies of
    each signal (x1_c1, x1_c2, ..., x2_c1, ...) and finally the pure-noise
    columns z1..zm. Only the signal columns enter the outcome.
    """

    if n <= 1:
        raise ValueError(f"n must be > 1; got {n}.")
    if len(signal_coefs) == 0:
        raise ValueError("signal_coefs must contain at least one coefficient.")
    if copies_per_signal < 0 or n_noise < 0:
        raise ValueError("copies_per_signal and n_noise must be >= 0.")
    if copy_noise_sd <= 0:
        raise ValueError(f"copy_noise_sd must be > 0; got {copy_noise_sd}.")
    if noise_sd < 0:
        raise ValueError(f"noise_sd must be >= 0; got {noise_sd}.")

    rng = np.random.default_rng(seed)
    k = len(signal_coefs)
    beta = np.asarray(signal_coefs, dtype=float)

    signals = rng.normal(0.0, 1.0, size=(n, k))
    columns: Dict[str, np.ndarray] = {}
    for j, name in enumerate(signal_names(k)):
        columns[name] = signals[:, j]
    for j, name in enumerate(signal_names(k)):
        for c in range(1, copies_per_signal + 1):
            columns[f"{name}_c{c}"] = signals[:, j] + rng.normal(0.0, copy_noise_sd, size=n)
    for m in range(1, n_noise + 1):
        columns[f"z{m}"] = rng.normal(0.0, 1.0, size=n)

    y = intercept + signals @ beta + rng.normal(0.0, noise_sd, size=n)
    return pd.DataFrame({"y": y, **columns})


def predictor_roles(columns: Iterable[str]) -> Dict[str, str]:
    roles: Dict[str, str] = {}
    for col in columns:
        if col.startswith("x") and "_c" in col:
            roles[col] = "copy"
        elif col.startswith("x"):
            roles[col] = "signal"
        elif col.startswith("z"):
            roles[col] = "noise"
    return roles


def true_coefficients(columns: Iterable[str], signal_coefs: Sequence[float]) -> pd.Series:
    lookup = dict(zip(signal_names(len(signal_coefs)), map(float, signal_coefs)))
    roles = predictor_roles(columns)
    return pd.Series({c: lookup.get(c, 0.0) for c in roles}, dtype=float, name="truth")


def ordered_predictors(columns: Iterable[str]) -> list[str]:
    """Predictor columns ordered signals first, then their copies, then noise."""
    columns = list(columns)
    roles = predictor_roles(columns)
    rank = {"signal": 0, "copy": 1, "noise": 2}
    return sorted(roles, key=lambda c: (rank[roles[c]], columns.index(c)))
