from typing import Dict
import numpy as np
from sklearn.metrics import mean_squared_error, r2_score


def _as_arrays(y_true, y_pred):
    y_true = np.asarray(y_true, dtype=float).ravel()
    y_pred = np.asarray(y_pred, dtype=float).ravel()
    if y_true.size == 0:
        raise ValueError("Cannot score an empty prediction set.")
    if y_true.shape != y_pred.shape:
        raise ValueError(f"Shape mismatch: y_true {y_true.shape} vs y_pred {y_pred.shape}.")
    return y_true, y_pred


def mse(y_true, y_pred) -> float:
    y_true, y_pred = _as_arrays(y_true, y_pred)
    return float(mean_squared_error(y_true, y_pred))


def rmse(y_true, y_pred) -> float:
    return float(np.sqrt(mse(y_true, y_pred)))


def r2(y_true, y_pred) -> float:
    y_true, y_pred = _as_arrays(y_true, y_pred)
    if y_true.size < 2:
        return float("nan")
    return float(r2_score(y_true, y_pred))


def compute_regression_metrics(y_true, y_pred) -> Dict[str, float]:
    y_true, y_pred = _as_arrays(y_true, y_pred)
    return {
        "rmse": rmse(y_true, y_pred),
        "mse": mse(y_true, y_pred),
        "r2": r2(y_true, y_pred),
        "n": int(y_true.size),
    }
