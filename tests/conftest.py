import pytest

from regwalk.data.build import build_design
from regwalk.data.simulate import ordered_predictors, simulate_correlated_predictors, simulate_simple_linear


@pytest.fixture
def simple_df():
    return simulate_simple_linear(n=100, intercept=2.0, slope=3.0, noise_sd=2.0, x_range=(0.0, 10.0), seed=2026)


@pytest.fixture
def correlated_df():
    return simulate_correlated_predictors(
        n=120,
        signal_coefs=(3.0, -2.0, 1.5),
        intercept=1.0,
        copies_per_signal=3,
        copy_noise_sd=0.1,
        n_noise=30,
        noise_sd=2.0,
        seed=2027,
    )


@pytest.fixture
def correlated_design(correlated_df):
    return build_design(correlated_df, "y", ordered_predictors(correlated_df.columns))
