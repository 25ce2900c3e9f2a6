from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

import numpy as np
import pandas as pd

from regwalk.models.regularized import regularization_path


@dataclass(frozen=True)
class CVResult:
    penalty: str
    table: pd.DataFrame
    fold_table: pd.DataFrame
    path: pd.DataFrame
    lambda_min: float
    lambda_1se: float


def _path_predictions(path: pd.DataFrame, features: List[str], X: pd.DataFrame) -> np.ndarray:
    # (n_rows, n_lambda)
    coefs = path[features].to_numpy(dtype=float)
    return X[features].to_numpy(dtype=float) @ coefs.T + path["intercept"].to_numpy(dtype=float)


def cross_validate_lambda(
    X: pd.DataFrame,
    y: pd.Series,
    *,
    penalty: str,
    lambdas,
    fold_ids: np.ndarray,
) -> CVResult:
    """K-fold CV error along a penalty grid.

    Each fold refits the whole path on the remaining folds and scores the
    held-out MSE at every lambda. cvm is the fold-size weighted mean MSE and
    cvsd its standard error. lambda_min is the largest lambda attaining the
    minimum cvm; lambda_1se the largest lambda whose cvm is within one cvsd of
    that minimum.
    """

    X = pd.DataFrame(X).astype(float)
    y = pd.Series(np.asarray(y, dtype=float), index=X.index)
    fold_ids = np.asarray(fold_ids, dtype=int)
    if fold_ids.shape[0] != len(X):
        raise ValueError("fold_ids must have one entry per row.")

    features = list(X.columns)
    lambdas = np.sort(np.asarray(lambdas, dtype=float))[::-1]
    folds = np.unique(fold_ids)
    if folds.size < 2:
        raise ValueError("Cross-validation needs at least two folds.")

    rows: List[dict] = []
    fold_mse = np.empty((folds.size, lambdas.size), dtype=float)
    fold_n = np.empty(folds.size, dtype=float)
    for i, fold in enumerate(folds):
        va = fold_ids == fold
        X_tr, y_tr = X.loc[~va], y.loc[~va]
        X_va, y_va = X.loc[va], y.loc[va]

        path = regularization_path(X_tr, y_tr, penalty, lambdas)
        pred = _path_predictions(path, features, X_va)
        err = np.mean((y_va.to_numpy()[:, None] - pred) ** 2, axis=0)
        fold_mse[i] = err
        fold_n[i] = float(va.sum())
        for lam, e in zip(lambdas, err):
            rows.append({"fold": int(fold), "lambda": float(lam), "mse": float(e)})

    w = fold_n / fold_n.sum()
    cvm = w @ fold_mse
    cvsd = np.sqrt((w @ (fold_mse - cvm) ** 2) / (folds.size - 1))

    full_path = regularization_path(X, y, penalty, lambdas)
    table = pd.DataFrame(
        {
            "lambda": lambdas,
            "cvm": cvm,
            "cvsd": cvsd,
            "cvup": cvm + cvsd,
            "cvlo": cvm - cvsd,
            "n_nonzero": full_path["n_nonzero"].to_numpy(dtype=int),
        }
    )

    # lambdas are descending, so the first index at the minimum is the largest lambda.
    idx_min = int(np.flatnonzero(cvm <= cvm.min())[0])
    lambda_min = float(lambdas[idx_min])
    idx_1se = int(np.flatnonzero(cvm <= cvm[idx_min] + cvsd[idx_min])[0])
    lambda_1se = float(lambdas[idx_1se])
    if lambda_1se < lambda_min:
        raise RuntimeError("lambda_1se must not be smaller than lambda_min.")

    return CVResult(
        penalty=penalty,
        table=table,
        fold_table=pd.DataFrame(rows),
        path=full_path,
        lambda_min=lambda_min,
        lambda_1se=lambda_1se,
    )


def summarize_cv(result: CVResult) -> Dict[str, float]:
    t = result.table.set_index("lambda")
    return {
        "penalty": result.penalty,
        "lambda_min": result.lambda_min,
        "lambda_1se": result.lambda_1se,
        "cvm_at_min": float(t.loc[result.lambda_min, "cvm"]),
        "cvsd_at_min": float(t.loc[result.lambda_min, "cvsd"]),
        "cvm_at_1se": float(t.loc[result.lambda_1se, "cvm"]),
        "n_nonzero_at_min": int(t.loc[result.lambda_min, "n_nonzero"]),
        "n_nonzero_at_1se": int(t.loc[result.lambda_1se, "n_nonzero"]),
        "n_folds": int(result.fold_table["fold"].nunique()),
    }
