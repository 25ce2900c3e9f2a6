from typing import Tuple
import numpy as np
from sklearn.model_selection import KFold, ShuffleSplit


def make_holdout_split(n: int, test_size: float, seed: int) -> Tuple[np.ndarray, np.ndarray]:
    if not 0.0 < test_size < 1.0:
        raise ValueError(f"test_size must be in (0, 1); got {test_size}.")
    splitter = ShuffleSplit(n_splits=1, test_size=test_size, random_state=seed)
    train_idx, test_idx = next(splitter.split(np.zeros((n, 1))))
    return np.sort(train_idx), np.sort(test_idx)


def make_fold_ids(n: int, n_folds: int, seed: int) -> np.ndarray:
    """Assign every row to exactly one of n_folds shuffled folds (0-based)."""
    if n_folds < 2 or n_folds > n:
        raise ValueError(f"n_folds must be in [2, {n}]; got {n_folds}.")
    kf = KFold(n_splits=n_folds, shuffle=True, random_state=seed)
    fold_id = np.full(n, fill_value=-1, dtype=int)
    for f, (_, va) in enumerate(kf.split(np.zeros((n, 1)))):
        fold_id[va] = f
    if (fold_id < 0).any():
        raise RuntimeError("Failed to assign all rows to CV folds.")
    return fold_id
