from __future__ import annotations

from typing import Iterable, List, Optional

import pandas as pd

from regwalk.evaluation.metrics import r2, rmse
from regwalk.models.ols import fit_ols


def nested_predictor_sweep(
    X_train: pd.DataFrame,
    y_train: pd.Series,
    X_test: pd.DataFrame,
    y_test: pd.Series,
    *,
    order: Optional[Iterable[str]] = None,
    sizes: Optional[Iterable[int]] = None,
) -> pd.DataFrame:
    """Fit OLS on the first k predictors of `order` for each k in `sizes`.

    Training error can only go down as predictors are added; the held-out
    error shows where the extra (correlated or irrelevant) predictors start
    fitting noise.
    """

    order = list(X_train.columns) if order is None else list(order)
    missing = [c for c in order if c not in X_train.columns or c not in X_test.columns]
    if missing:
        raise ValueError(f"Predictors missing from train/test design: {missing}")

    n_train = len(X_train)
    max_k = min(len(order), n_train - 2)
    sizes = list(range(1, max_k + 1)) if sizes is None else sorted(set(int(k) for k in sizes))
    if not sizes:
        raise ValueError("No predictor counts to evaluate.")
    bad = [k for k in sizes if k < 1 or k > len(order) or k > n_train - 2]
    if bad:
        raise ValueError(f"Predictor counts must be in [1, min({len(order)}, n_train - 2)]; got {bad}.")

    rows: List[dict] = []
    for k in sizes:
        cols = order[:k]
        fit = fit_ols(X_train[cols], y_train)
        pred_tr = fit.predict(X_train[cols])
        pred_te = fit.predict(X_test[cols])
        rows.append(
            {
                "k": k,
                "feature_added": cols[-1],
                "train_rmse": rmse(y_train, pred_tr),
                "test_rmse": rmse(y_test, pred_te),
                "train_r2": r2(y_train, pred_tr),
                "test_r2": r2(y_test, pred_te),
            }
        )
    return pd.DataFrame(rows)
