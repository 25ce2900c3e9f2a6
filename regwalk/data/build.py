from typing import Iterable, Optional, Tuple

import pandas as pd

from .validate import assert_finite, assert_required_columns


def build_design(
    df: pd.DataFrame,
    target: str,
    features: Optional[Iterable[str]] = None,
) -> Tuple[pd.DataFrame, pd.Series]:
    features = [c for c in df.columns if c != target] if features is None else list(features)
    if not features:
        raise ValueError("No features selected: feature set is empty.")
    if target in features:
        raise ValueError(f"Target column {target!r} cannot also be a feature.")

    required = [target] + features
    assert_required_columns(df, required)
    assert_finite(df, required)

    X = df[features].astype(float).copy()
    y = df[target].astype(float).copy()
    return X, y
