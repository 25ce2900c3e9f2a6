from dataclasses import replace

import numpy as np
import pandas as pd

from regwalk.data.build import build_design
from regwalk.models.ols import build_ols, check_against_closed_form, closed_form_ols, fit_ols
from regwalk.models.regularized import pipeline_coefficients


def test_ols_matches_closed_form_on_simple_data(simple_df):
    X, y = build_design(simple_df, "y")
    fit = fit_ols(X, y)
    beta = closed_form_ols(X, y)

    np.testing.assert_allclose(fit.intercept, beta[0], rtol=1e-10, atol=1e-10)
    np.testing.assert_allclose(fit.coef["x"], beta[1], rtol=1e-10, atol=1e-10)
    assert check_against_closed_form(fit, X, y, rtol=1e-8, atol=1e-8)


def test_ols_recovers_generating_line(simple_df):
    X, y = build_design(simple_df, "y")
    fit = fit_ols(X, y)
    assert abs(fit.coef["x"] - 3.0) < 0.5
    assert abs(fit.intercept - 2.0) < 2.0
    assert 0.8 < fit.rsquared <= 1.0
    assert fit.n_obs == 100


def test_closed_form_check_detects_disagreement(simple_df):
    X, y = build_design(simple_df, "y")
    fit = fit_ols(X, y)
    shifted = replace(fit, intercept=fit.intercept + 1e-3)
    assert not check_against_closed_form(shifted, X, y, rtol=1e-8, atol=1e-8)


def test_predict_uses_fitted_columns_only(correlated_design):
    X, y = correlated_design
    cols = ["x1", "x2", "x3"]
    fit = fit_ols(X[cols], y)
    expected = fit.model.predict(np.column_stack([np.ones(len(X)), X[cols].to_numpy()]))
    np.testing.assert_allclose(fit.predict(X), expected)


def test_sklearn_ols_agrees_with_statsmodels(correlated_design):
    X, y = correlated_design
    fit = fit_ols(X, y)
    pipe = build_ols().fit(X, y)
    intercept, coef = pipeline_coefficients(pipe, X.columns)
    np.testing.assert_allclose(intercept, fit.intercept, rtol=1e-6, atol=1e-6)
    pd.testing.assert_series_equal(coef, fit.coef, check_names=False, rtol=1e-6, atol=1e-6)
