import numpy as np
import pandas as pd
import pytest

from regwalk.data.simulate import predictor_roles
from regwalk.models.ols import closed_form_ols
from regwalk.models.regularized import (
    build_regularized,
    lambda_grid,
    lambda_max,
    pipeline_coefficients,
    regularization_path,
    to_sklearn_alpha,
    zero_threshold,
)


def test_alpha_conversion():
    assert to_sklearn_alpha("lasso", 0.25, 60) == 0.25
    assert to_sklearn_alpha("ridge", 0.5, 60) == 30.0
    with pytest.raises(ValueError):
        to_sklearn_alpha("elasticnet", 0.5, 60)
    with pytest.raises(ValueError):
        to_sklearn_alpha("ridge", -1.0, 60)


def test_lambda_grid_is_decreasing_and_log_spaced(correlated_design):
    X, y = correlated_design
    grid = lambda_grid(X, y, "lasso", n_lambda=20)
    assert grid.shape == (20,)
    assert np.all(np.diff(grid) < 0)
    assert grid[0] == pytest.approx(lambda_max(X, y, "lasso"))
    # n >= p here, so the smallest penalty is 1e-4 of the largest
    assert grid[-1] / grid[0] == pytest.approx(1e-4)
    ridge = lambda_grid(X, y, "ridge", n_lambda=20)
    assert ridge[0] == pytest.approx(1000.0 * grid[0])


def test_lasso_zeroes_everything_above_lambda_max(correlated_design):
    X, y = correlated_design
    top = lambda_max(X, y, "lasso")
    path = regularization_path(X, y, "lasso", [2.0 * top, 0.5 * top, 0.01 * top])
    assert path["lambda"].tolist() == sorted(path["lambda"].tolist(), reverse=True)
    assert path.loc[0, "n_nonzero"] == 0
    assert (path.loc[0, X.columns] == 0.0).all()
    assert path.loc[0, "intercept"] == pytest.approx(float(y.mean()))
    assert path.loc[2, "n_nonzero"] > path.loc[1, "n_nonzero"] > 0


def test_lasso_path_zeroes_correlated_copies_above_threshold(correlated_design):
    X, y = correlated_design
    grid = lambda_grid(X, y, "lasso", n_lambda=50)
    path = regularization_path(X, y, "lasso", np.concatenate([[2.0 * grid[0]], grid]))
    roles = predictor_roles(X.columns)
    copies = [f for f, r in roles.items() if r == "copy"]

    for f in copies:
        thr = zero_threshold(path, f)
        assert np.isfinite(thr)
        assert (path.loc[path["lambda"] >= thr, f] == 0.0).all()
        assert thr <= path["lambda"].max()


def test_ridge_shrinks_but_never_zeroes(correlated_design):
    X, y = correlated_design
    grid = lambda_grid(X, y, "ridge", n_lambda=10)
    path = regularization_path(X, y, "ridge", grid)
    assert (path["n_nonzero"] == X.shape[1]).all()
    norms = np.linalg.norm(path[X.columns].to_numpy(), axis=1)
    assert norms[-1] > norms[0]
    assert norms[0] < 0.05 * norms[-1]


def test_ridge_with_vanishing_penalty_is_ols():
    rng = np.random.default_rng(0)
    X = pd.DataFrame(rng.normal(size=(200, 3)), columns=["a", "b", "c"])
    y = 1.0 + X @ np.array([1.0, -2.0, 0.5]) + rng.normal(scale=0.1, size=200)
    path = regularization_path(X, y, "ridge", [1e-10])
    beta = closed_form_ols(X, y)
    np.testing.assert_allclose(path.loc[0, "intercept"], beta[0], atol=1e-6)
    np.testing.assert_allclose(path.loc[0, ["a", "b", "c"]].to_numpy(dtype=float), beta[1:], atol=1e-6)


@pytest.mark.parametrize("penalty", ["ridge", "lasso"])
def test_pipeline_matches_path_coefficients(correlated_design, penalty):
    X, y = correlated_design
    lam = float(lambda_grid(X, y, penalty, n_lambda=10)[2])
    path = regularization_path(X, y, penalty, [lam])
    pipe = build_regularized(penalty, lam, len(X)).fit(X, y)
    intercept, coef = pipeline_coefficients(pipe, X.columns)
    np.testing.assert_allclose(coef.to_numpy(), path.loc[0, X.columns].to_numpy(dtype=float), rtol=1e-8, atol=1e-8)
    assert intercept == pytest.approx(path.loc[0, "intercept"], abs=1e-8)


def test_zero_threshold_on_hand_built_path():
    path = pd.DataFrame(
        {
            "lambda": [4.0, 3.0, 2.0, 1.0],
            "intercept": [0.0, 0.0, 0.0, 0.0],
            "a": [0.0, 0.0, 0.5, 1.0],
            "b": [0.0, 0.0, 0.0, 0.0],
            "c": [0.1, 0.2, 0.3, 0.4],
        }
    )
    assert zero_threshold(path, "a") == 3.0
    assert zero_threshold(path, "b") == 1.0
    assert np.isnan(zero_threshold(path, "c"))
    with pytest.raises(ValueError):
        zero_threshold(path, "missing")


def test_ridge_path_matches_penalized_normal_equations(correlated_design):
    X, y = correlated_design
    lam = float(lambda_grid(X, y, "ridge", n_lambda=10)[6])
    path = regularization_path(X, y, "ridge", [lam])

    Xv = X.to_numpy(dtype=float)
    mean, scale = Xv.mean(axis=0), Xv.std(axis=0)
    Xs = (Xv - mean) / scale
    yc = y.to_numpy(dtype=float) - y.mean()
    n, p = Xs.shape
    beta_std = np.linalg.solve(Xs.T @ Xs + n * lam * np.eye(p), Xs.T @ yc)
    beta = beta_std / scale

    np.testing.assert_allclose(path.loc[0, X.columns].to_numpy(dtype=float), beta, rtol=1e-8, atol=1e-10)
    assert path.loc[0, "intercept"] == pytest.approx(y.mean() - mean @ beta, abs=1e-8)


def test_square_design_uses_the_large_n_ratio():
    rng = np.random.default_rng(4)
    X = pd.DataFrame(rng.normal(size=(6, 6)), columns=list("abcdef"))
    y = X["a"] + rng.normal(scale=0.1, size=6)
    grid = lambda_grid(X, y, "lasso", n_lambda=5)
    assert grid[-1] / grid[0] == pytest.approx(1e-4)
    wide = lambda_grid(X.iloc[:5], y.iloc[:5], "lasso", n_lambda=5)
    assert wide[-1] / wide[0] == pytest.approx(0.01)
