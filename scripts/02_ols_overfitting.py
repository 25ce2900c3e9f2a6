from __future__ import annotations

import argparse
import sys
from dataclasses import asdict
from pathlib import Path

import numpy as np
import pandas as pd


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from regwalk.config import (  # noqa: E402
    BOOT_ALPHA,
    CORR_THRESHOLD,
    CORRELATED_FILE,
    DATASET_VERSION,
    N_BOOT,
    OLS_ATOL,
    OLS_RTOL,
    RANDOM_SEEDS,
    SIGNAL_COEFS,
    SIMPLE_FILE,
    SIMPLE_INTERCEPT,
    SIMPLE_SLOPE,
    TARGET_COL,
    TEST_SIZE,
    VIF_THRESHOLD,
)
from regwalk.data.build import build_design  # noqa: E402
from regwalk.data.ingest import load_dataset  # noqa: E402
from regwalk.data.simulate import ordered_predictors, predictor_roles, true_coefficients  # noqa: E402
from regwalk.data.splits import make_holdout_split  # noqa: E402
from regwalk.evaluation.bootstrap import (  # noqa: E402
    bootstrap_coefficient_draws,
    coefficient_spread,
    summarize_bootstrap_ci,
)
from regwalk.evaluation.collinearity import correlation_table, summarize_collinearity, vif_table  # noqa: E402
from regwalk.evaluation.metrics import compute_regression_metrics  # noqa: E402
from regwalk.evaluation.overfitting import nested_predictor_sweep  # noqa: E402
from regwalk.models.ols import build_ols, check_against_closed_form, closed_form_ols, fit_ols  # noqa: E402
from regwalk.reporting.tables import coefficient_table, render_report, write_table  # noqa: E402
from regwalk.utils.logging import resolve_git_commit, run_metadata, sha256_file, write_json  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Part 1-2: simple OLS and overfitting from correlated predictors.")
    parser.add_argument("--seed", type=int, default=2026, help="Random seed for the holdout split and bootstrap.")
    parser.add_argument(
        "--allow-any-seed",
        action="store_true",
        help="Allow seeds not listed in regwalk/config.py RANDOM_SEEDS.",
    )
    parser.add_argument("--nrows", type=int, default=None, help="Optional dev mode: head(n) rows deterministically.")
    parser.add_argument("--outdir", type=Path, default=Path("outputs"), help="Output directory (default: outputs/).")
    parser.add_argument("--simple-in", type=Path, default=SIMPLE_FILE, help="Simple dataset parquet.")
    parser.add_argument("--corr-in", type=Path, default=CORRELATED_FILE, help="Correlated dataset parquet.")
    parser.add_argument("--n-boot", type=int, default=N_BOOT, help="Bootstrap resamples for coefficient spread.")
    args = parser.parse_args()

    if (not args.allow_any_seed) and (args.seed not in RANDOM_SEEDS):
        raise SystemExit(f"--seed must be one of {RANDOM_SEEDS} unless --allow-any-seed is provided.")
    if args.nrows is not None and args.nrows <= 0:
        raise SystemExit("--nrows must be a positive integer.")
    if args.n_boot < 0:
        raise SystemExit("--n-boot must be >= 0.")
    for path in (args.simple_in, args.corr_in):
        if not path.exists():
            raise SystemExit(f"Dataset not found: {path}. Run scripts/01_generate_data.py first.")

    np.random.seed(args.seed)

    out_tables = args.outdir / "tables"
    out_metrics = args.outdir / "metrics"
    out_splits = args.outdir / "splits"
    out_logs = args.outdir / "logs"
    for d in [out_tables, out_metrics, out_splits, out_logs]:
        d.mkdir(parents=True, exist_ok=True)

    # Part 1: one predictor, OLS vs the normal equations.
    simple = load_dataset(args.simple_in)
    if args.nrows is not None:
        simple = simple.head(args.nrows).copy()
    X_s, y_s = build_design(simple, TARGET_COL, ["x"])
    simple_fit = fit_ols(X_s, y_s)
    beta = closed_form_ols(X_s, y_s)
    if not check_against_closed_form(simple_fit, X_s, y_s, rtol=OLS_RTOL, atol=OLS_ATOL):
        raise SystemExit(f"statsmodels OLS disagrees with the closed-form solution: {beta.tolist()}")

    s_train, s_test = make_holdout_split(len(X_s), TEST_SIZE, args.seed)
    simple_split_fit = fit_ols(X_s.iloc[s_train], y_s.iloc[s_train])
    simple_metrics = {
        "train": compute_regression_metrics(y_s.iloc[s_train], simple_split_fit.predict(X_s.iloc[s_train])),
        "test": compute_regression_metrics(y_s.iloc[s_test], simple_split_fit.predict(X_s.iloc[s_test])),
    }
    simple_row = {
        "dataset_version": DATASET_VERSION,
        "seed": args.seed,
        "n": len(X_s),
        "intercept_true": SIMPLE_INTERCEPT,
        "slope_true": SIMPLE_SLOPE,
        "intercept_ols": simple_fit.intercept,
        "slope_ols": float(simple_fit.coef["x"]),
        "intercept_closed_form": float(beta[0]),
        "slope_closed_form": float(beta[1]),
        "rsquared": simple_fit.rsquared,
        "train_rmse": simple_metrics["train"]["rmse"],
        "test_rmse": simple_metrics["test"]["rmse"],
    }
    write_table(pd.DataFrame([simple_row]), out_metrics / f"simple_ols_seed{args.seed}.csv")

    # Part 2: many correlated predictors on a small training set.
    corr_df = load_dataset(args.corr_in)
    if args.nrows is not None:
        corr_df = corr_df.head(args.nrows).copy()
    order = ordered_predictors(corr_df.columns)
    X, y = build_design(corr_df, TARGET_COL, order)

    train_idx, test_idx = make_holdout_split(len(X), TEST_SIZE, args.seed)
    if len(train_idx) < 3:
        raise SystemExit(f"--nrows leaves {len(train_idx)} training rows; the predictor sweep needs at least 3.")
    np.savez_compressed(out_splits / f"holdout_seed{args.seed}.npz", train_idx=train_idx, test_idx=test_idx, n_rows=len(X))
    X_train, y_train = X.iloc[train_idx], y.iloc[train_idx]
    X_test, y_test = X.iloc[test_idx], y.iloc[test_idx]

    collinearity = summarize_collinearity(X_train, vif_threshold=VIF_THRESHOLD, corr_threshold=CORR_THRESHOLD)
    write_table(vif_table(X_train), out_tables / f"vif_seed{args.seed}.csv")
    write_table(correlation_table(X_train).head(50), out_tables / f"top_correlations_seed{args.seed}.csv")

    sweep = nested_predictor_sweep(X_train, y_train, X_test, y_test, order=order)
    write_table(sweep, out_metrics / f"overfitting_sweep_seed{args.seed}.csv")

    full_fit = fit_ols(X_train, y_train)
    full_metrics = {
        "train": compute_regression_metrics(y_train, full_fit.predict(X_train)),
        "test": compute_regression_metrics(y_test, full_fit.predict(X_test)),
    }
    roles = predictor_roles(order)
    signal_cols = [c for c in order if roles[c] == "signal"]
    signal_fit = fit_ols(X_train[signal_cols], y_train)
    signal_metrics = {
        "train": compute_regression_metrics(y_train, signal_fit.predict(X_train[signal_cols])),
        "test": compute_regression_metrics(y_test, signal_fit.predict(X_test[signal_cols])),
    }

    truth = true_coefficients(order, SIGNAL_COEFS)
    coefs = coefficient_table({"ols_full": full_fit.coef, "ols_signal_only": signal_fit.coef}, truth=truth)
    write_table(coefs, out_tables / f"ols_coefficients_seed{args.seed}.csv")

    draws = bootstrap_coefficient_draws(
        X=X_train, y=y_train, estimator_factory=build_ols, n_boot=args.n_boot, seed=args.seed
    )
    spread = coefficient_spread(draws)
    if not draws.empty:
        ci = summarize_bootstrap_ci(draws, alpha=BOOT_ALPHA, features=list(spread["feature"]))
        spread["ci_low"] = [ci[f][0] for f in spread["feature"]]
        spread["ci_high"] = [ci[f][1] for f in spread["feature"]]
    write_table(spread, out_tables / f"ols_bootstrap_spread_seed{args.seed}.csv")

    comparison = pd.DataFrame(
        [
            {"model": "ols_signal_only", "k": len(signal_cols), **{f"{s}_rmse": m["rmse"] for s, m in signal_metrics.items()}},
            {"model": "ols_full", "k": X.shape[1], **{f"{s}_rmse": m["rmse"] for s, m in full_metrics.items()}},
        ]
    )
    write_table(comparison, out_metrics / f"ols_comparison_seed{args.seed}.csv")

    report = render_report(
        [
            ("Simple linear regression (OLS)", simple_row),
            ("Collinearity on the training split", asdict(collinearity)),
            ("Nested-predictor sweep (OLS)", sweep),
            ("Signal-only vs full OLS", comparison),
        ]
    )
    report_path = out_logs / f"report_ols_overfitting_seed{args.seed}.txt"
    report_path.write_text(report, encoding="utf-8")
    print(report)

    meta = run_metadata(
        dataset_version=DATASET_VERSION,
        seed=args.seed,
        nrows=args.nrows,
        n_boot=args.n_boot,
        outdir=str(args.outdir),
        git_commit=resolve_git_commit(PROJECT_ROOT),
        inputs={
            str(args.simple_in): sha256_file(args.simple_in),
            str(args.corr_in): sha256_file(args.corr_in),
        },
        n_train=int(len(train_idx)),
        n_test=int(len(test_idx)),
        closed_form_check="passed",
        collinearity=asdict(collinearity),
    )
    write_json(out_logs / f"run_ols_overfitting_seed{args.seed}.json", meta)

    print(f"Wrote OLS/overfitting artifacts to {args.outdir}/")


if __name__ == "__main__":
    main()
