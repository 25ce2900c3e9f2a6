import numpy as np
import pytest

from regwalk.data.splits import make_fold_ids
from regwalk.evaluation.cv import cross_validate_lambda, summarize_cv
from regwalk.models.regularized import lambda_grid


@pytest.mark.parametrize("penalty", ["ridge", "lasso"])
def test_cv_curve_shape_and_selection_invariants(correlated_design, penalty):
    X, y = correlated_design
    lambdas = lambda_grid(X, y, penalty, n_lambda=20)
    fold_ids = make_fold_ids(len(X), 5, seed=2026)
    result = cross_validate_lambda(X, y, penalty=penalty, lambdas=lambdas, fold_ids=fold_ids)

    assert result.penalty == penalty
    assert len(result.table) == 20
    assert len(result.fold_table) == 5 * 20
    assert (result.table["cvsd"] >= 0).all()
    assert result.lambda_min in set(result.table["lambda"])
    assert result.lambda_1se in set(result.table["lambda"])
    assert result.lambda_1se >= result.lambda_min

    t = result.table.set_index("lambda")
    assert t.loc[result.lambda_1se, "cvm"] <= t.loc[result.lambda_min, "cvup"] + 1e-12
    assert t.loc[result.lambda_min, "cvm"] == pytest.approx(t["cvm"].min())


def test_cvm_is_mean_of_equal_size_folds(correlated_design):
    X, y = correlated_design
    lambdas = lambda_grid(X, y, "lasso", n_lambda=10)
    fold_ids = make_fold_ids(len(X), 5, seed=2027)
    result = cross_validate_lambda(X, y, penalty="lasso", lambdas=lambdas, fold_ids=fold_ids)

    by_lambda = result.fold_table.groupby("lambda")["mse"]
    expected_cvm = by_lambda.mean().sort_index(ascending=False).to_numpy()
    expected_cvsd = (by_lambda.std(ddof=1) / np.sqrt(5)).sort_index(ascending=False).to_numpy()
    np.testing.assert_allclose(result.table["cvm"].to_numpy(), expected_cvm)
    np.testing.assert_allclose(result.table["cvsd"].to_numpy(), expected_cvsd)


def test_lasso_cv_prefers_a_sparse_model(correlated_design):
    X, y = correlated_design
    lambdas = lambda_grid(X, y, "lasso", n_lambda=30)
    result = cross_validate_lambda(
        X, y, penalty="lasso", lambdas=lambdas, fold_ids=make_fold_ids(len(X), 10, seed=2026)
    )
    summary = summarize_cv(result)
    assert summary["n_folds"] == 10
    assert 0 < summary["n_nonzero_at_1se"] < X.shape[1]


def test_cv_rejects_bad_fold_ids(correlated_design):
    X, y = correlated_design
    lambdas = lambda_grid(X, y, "ridge", n_lambda=5)
    with pytest.raises(ValueError):
        cross_validate_lambda(X, y, penalty="ridge", lambdas=lambdas, fold_ids=np.zeros(3, dtype=int))
    with pytest.raises(ValueError):
        cross_validate_lambda(X, y, penalty="ridge", lambdas=lambdas, fold_ids=np.zeros(len(X), dtype=int))


def test_cv_weights_uneven_folds_by_size(correlated_design):
    X, y = correlated_design
    X, y = X.iloc[:117], y.iloc[:117]
    fold_ids = make_fold_ids(len(X), 10, seed=2026)
    sizes = np.bincount(fold_ids)
    assert sorted(sizes.tolist()) == [11] * 3 + [12] * 7

    lambdas = lambda_grid(X, y, "lasso", n_lambda=10)
    result = cross_validate_lambda(X, y, penalty="lasso", lambdas=lambdas, fold_ids=fold_ids)

    mse = result.fold_table.pivot(index="fold", columns="lambda", values="mse")
    mse = mse[sorted(mse.columns, reverse=True)].to_numpy()
    w = sizes / sizes.sum()
    cvm = w @ mse
    cvsd = np.sqrt((w @ (mse - cvm) ** 2) / 9)

    np.testing.assert_allclose(result.table["cvm"].to_numpy(), cvm, rtol=1e-12)
    np.testing.assert_allclose(result.table["cvsd"].to_numpy(), cvsd, rtol=1e-10)
    assert not np.allclose(cvm, mse.mean(axis=0), rtol=1e-12, atol=0.0)
