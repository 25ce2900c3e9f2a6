import numpy as np
import pandas as pd
import pytest

from regwalk.data.simulate import (
    ordered_predictors,
    predictor_roles,
    simulate_correlated_predictors,
    simulate_simple_linear,
    true_coefficients,
)


def test_simple_linear_is_deterministic_and_in_range(simple_df):
    again = simulate_simple_linear(n=100, intercept=2.0, slope=3.0, noise_sd=2.0, x_range=(0.0, 10.0), seed=2026)
    pd.testing.assert_frame_equal(simple_df, again)
    assert simple_df.columns.tolist() == ["x", "y"]
    assert simple_df["x"].between(0.0, 10.0).all()


def test_simple_linear_without_noise_is_exact():
    df = simulate_simple_linear(n=20, intercept=-1.0, slope=0.5, noise_sd=0.0, seed=1)
    np.testing.assert_allclose(df["y"], -1.0 + 0.5 * df["x"])


@pytest.mark.parametrize("kwargs", [{"n": 1}, {"noise_sd": -1.0}, {"x_range": (5.0, 5.0)}])
def test_simple_linear_rejects_bad_arguments(kwargs):
    params = {"n": 10, "intercept": 0.0, "slope": 1.0, "noise_sd": 1.0, "x_range": (0.0, 1.0), "seed": 0}
    params.update(kwargs)
    with pytest.raises(ValueError):
        simulate_simple_linear(**params)


def test_correlated_layout(correlated_df):
    cols = correlated_df.columns.tolist()
    assert cols[:4] == ["y", "x1", "x2", "x3"]
    assert cols[4:7] == ["x1_c1", "x1_c2", "x1_c3"]
    assert cols[-1] == "z30"
    assert len(cols) == 1 + 3 + 9 + 30


def test_copies_are_highly_correlated_with_their_signal(correlated_df):
    corr = correlated_df.corr()
    for j in (1, 2, 3):
        for c in (1, 2, 3):
            assert corr.loc[f"x{j}", f"x{j}_c{c}"] > 0.98
    assert abs(corr.loc["x1", "z1"]) < 0.4


def test_roles_and_truth(correlated_df):
    roles = predictor_roles(correlated_df.columns)
    assert "y" not in roles
    assert roles["x2"] == "signal"
    assert roles["x2_c3"] == "copy"
    assert roles["z7"] == "noise"

    truth = true_coefficients(correlated_df.columns, (3.0, -2.0, 1.5))
    assert truth["x1"] == 3.0
    assert truth["x2"] == -2.0
    assert truth["x1_c1"] == 0.0
    assert truth["z1"] == 0.0
    assert len(truth) == 42


def test_ordered_predictors_groups_by_role():
    order = ordered_predictors(["y", "z1", "x1_c1", "x2", "x1", "z2"])
    assert order == ["x2", "x1", "x1_c1", "z1", "z2"]


def test_correlated_rejects_empty_signal():
    with pytest.raises(ValueError):
        simulate_correlated_predictors(
            n=10, signal_coefs=(), intercept=0.0, copies_per_signal=1, copy_noise_sd=0.1, n_noise=0, noise_sd=1.0, seed=0
        )
