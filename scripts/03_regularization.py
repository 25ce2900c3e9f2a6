from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, List

import numpy as np
import pandas as pd

import joblib


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from regwalk.config import (  # noqa: E402
    BOOT_ALPHA,
    CORRELATED_FILE,
    CV_FOLDS,
    DATASET_VERSION,
    EXPERIMENT_NAMESPACE,
    N_BOOT,
    N_LAMBDA,
    RANDOM_SEEDS,
    SIGNAL_COEFS,
    TARGET_COL,
)
from regwalk.data.build import build_design  # noqa: E402
from regwalk.data.ingest import load_dataset  # noqa: E402
from regwalk.data.simulate import ordered_predictors, predictor_roles, true_coefficients  # noqa: E402
from regwalk.data.splits import make_fold_ids  # noqa: E402
from regwalk.evaluation.bootstrap import (  # noqa: E402
    bootstrap_coefficient_draws,
    coefficient_spread,
    summarize_bootstrap_ci,
)
from regwalk.evaluation.cv import cross_validate_lambda, summarize_cv  # noqa: E402
from regwalk.evaluation.metrics import compute_regression_metrics  # noqa: E402
from regwalk.models.ols import fit_ols  # noqa: E402
from regwalk.models.regularized import (  # noqa: E402
    PENALTIES,
    build_regularized,
    lambda_grid,
    pipeline_coefficients,
    zero_threshold,
)
from regwalk.reporting.tables import coefficient_table, render_report, write_table  # noqa: E402
from regwalk.utils.logging import resolve_git_commit, run_metadata, sha256_file, write_json  # noqa: E402


def deterministic_run_id(seed: int, penalty: str) -> str:
    return f"{EXPERIMENT_NAMESPACE}_seed{seed}_{penalty}"


def load_holdout(path: Path, n_rows: int) -> tuple[np.ndarray, np.ndarray]:
    if not path.exists():
        raise SystemExit(f"Holdout split not found: {path}. Run scripts/02_ols_overfitting.py first.")
    with np.load(path) as npz:
        saved_n = int(npz["n_rows"])
        train_idx, test_idx = npz["train_idx"], npz["test_idx"]
    if saved_n != n_rows:
        raise SystemExit(
            f"Holdout split {path} was made for {saved_n} rows but the dataset has {n_rows}; "
            "rerun scripts/02_ols_overfitting.py with the same --nrows."
        )
    return train_idx, test_idx


def lasso_selection_table(path: pd.DataFrame, fits: Dict[str, pd.Series], features: List[str]) -> pd.DataFrame:
    roles = predictor_roles(features)
    rows = []
    for f in features:
        row = {"feature": f, "role": roles[f], "zero_above_lambda": zero_threshold(path, f)}
        for name, coef in fits.items():
            row[f"selected_{name}"] = bool(coef[f] != 0.0)
        rows.append(row)
    return pd.DataFrame(rows)


def main() -> None:
    parser = argparse.ArgumentParser(description="Part 3: ridge and lasso with cross-validated penalty selection.")
    parser.add_argument("--seed", type=int, default=2026, help="Random seed for CV folds and bootstrap.")
    parser.add_argument(
        "--allow-any-seed",
        action="store_true",
        help="Allow seeds not listed in regwalk/config.py RANDOM_SEEDS.",
    )
    parser.add_argument("--nrows", type=int, default=None, help="Optional dev mode: head(n) rows deterministically.")
    parser.add_argument("--outdir", type=Path, default=Path("outputs"), help="Output directory (default: outputs/).")
    parser.add_argument("--corr-in", type=Path, default=CORRELATED_FILE, help="Correlated dataset parquet.")
    parser.add_argument("--penalty", choices=list(PENALTIES) + ["both"], default="both")
    parser.add_argument("--folds", type=int, default=CV_FOLDS, help="Number of CV folds.")
    parser.add_argument("--n-lambda", type=int, default=N_LAMBDA, help="Number of penalties on the grid.")
    parser.add_argument("--n-boot", type=int, default=N_BOOT, help="Bootstrap resamples for the ridge spread.")
    args = parser.parse_args()

    if (not args.allow_any_seed) and (args.seed not in RANDOM_SEEDS):
        raise SystemExit(f"--seed must be one of {RANDOM_SEEDS} unless --allow-any-seed is provided.")
    if args.nrows is not None and args.nrows <= 0:
        raise SystemExit("--nrows must be a positive integer.")
    if args.folds < 2:
        raise SystemExit("--folds must be >= 2.")
    if args.n_lambda < 2:
        raise SystemExit("--n-lambda must be >= 2.")
    if args.n_boot < 0:
        raise SystemExit("--n-boot must be >= 0.")
    if not args.corr_in.exists():
        raise SystemExit(f"Dataset not found: {args.corr_in}. Run scripts/01_generate_data.py first.")

    np.random.seed(args.seed)

    outdir = args.outdir
    out_metrics = outdir / "metrics"
    out_tables = outdir / "tables"
    out_models = outdir / "models"
    out_splits = outdir / "splits"
    out_logs = outdir / "logs"
    for d in [out_metrics, out_tables, out_models, out_splits, out_logs]:
        d.mkdir(parents=True, exist_ok=True)

    df = load_dataset(args.corr_in)
    if args.nrows is not None:
        df = df.head(args.nrows).copy()
    features = ordered_predictors(df.columns)
    X, y = build_design(df, TARGET_COL, features)

    train_idx, test_idx = load_holdout(out_splits / f"holdout_seed{args.seed}.npz", len(X))
    X_train, y_train = X.iloc[train_idx], y.iloc[train_idx]
    X_test, y_test = X.iloc[test_idx], y.iloc[test_idx]
    n_train = len(X_train)
    if args.folds > n_train:
        raise SystemExit(f"--folds ({args.folds}) exceeds the number of training rows ({n_train}).")

    fold_id = make_fold_ids(n_train, args.folds, args.seed)
    np.savez_compressed(out_splits / f"cvfolds_seed{args.seed}.npz", train_idx=train_idx, fold_id=fold_id)

    truth = true_coefficients(features, SIGNAL_COEFS)
    ols = fit_ols(X_train, y_train)
    coef_columns: Dict[str, pd.Series] = {"ols": ols.coef}
    results_rows = [
        {
            "dataset_version": DATASET_VERSION,
            "seed": args.seed,
            "model": "ols",
            "lambda": 0.0,
            "n_nonzero": int((ols.coef != 0).sum()),
            **{f"train_{k}": v for k, v in compute_regression_metrics(y_train, ols.predict(X_train)).items()},
            **{f"test_{k}": v for k, v in compute_regression_metrics(y_test, ols.predict(X_test)).items()},
        }
    ]
    cv_rows = []
    report_sections = []
    model_paths: Dict[str, str] = {}
    final_models = {}

    penalties = list(PENALTIES) if args.penalty == "both" else [args.penalty]
    for penalty in penalties:
        run_id = deterministic_run_id(args.seed, penalty)
        lambdas = lambda_grid(X_train, y_train, penalty, args.n_lambda)
        cv = cross_validate_lambda(X_train, y_train, penalty=penalty, lambdas=lambdas, fold_ids=fold_id)

        write_table(cv.table, out_metrics / f"cv_curve_{penalty}_seed{args.seed}.csv")
        write_table(cv.fold_table, out_metrics / f"cv_folds_{penalty}_seed{args.seed}.csv")
        write_table(cv.path, out_tables / f"path_{penalty}_seed{args.seed}.csv")
        cv_rows.append({"run_id": run_id, **summarize_cv(cv)})

        penalty_fits: Dict[str, pd.Series] = {}
        for which, lam in (("min", cv.lambda_min), ("1se", cv.lambda_1se)):
            name = f"{penalty}_{which}"
            pipe = build_regularized(penalty, lam, n_train)
            pipe.fit(X_train, y_train)
            _, coef = pipeline_coefficients(pipe, features)
            coef_columns[name] = coef
            penalty_fits[which] = coef
            final_models[name] = pipe

            results_rows.append(
                {
                    "dataset_version": DATASET_VERSION,
                    "seed": args.seed,
                    "model": name,
                    "lambda": lam,
                    "n_nonzero": int((coef != 0).sum()),
                    **{f"train_{k}": v for k, v in compute_regression_metrics(y_train, pipe.predict(X_train)).items()},
                    **{f"test_{k}": v for k, v in compute_regression_metrics(y_test, pipe.predict(X_test)).items()},
                }
            )

            model_path = out_models / f"{name}_seed{args.seed}.joblib"
            joblib.dump(pipe, model_path)
            model_paths[name] = str(model_path)

        if penalty == "lasso":
            selection = lasso_selection_table(cv.path, penalty_fits, features)
            write_table(selection, out_tables / f"lasso_selection_seed{args.seed}.csv")
            report_sections.append(("Lasso selection (redundant predictors)", selection[selection["role"] != "noise"]))

    coefs = coefficient_table(coef_columns, truth=truth)
    write_table(coefs, out_tables / f"coefficients_comparison_seed{args.seed}.csv")

    results = pd.DataFrame(results_rows)
    write_table(results, out_tables / "results_summary_test.csv")
    cv_summary = pd.DataFrame(cv_rows)
    write_table(cv_summary, out_tables / "results_summary_cv.csv")

    spread_rows = []
    if "ridge_min" in final_models and args.n_boot > 0:
        lam = float(results.loc[results["model"] == "ridge_min", "lambda"].iloc[0])
        draws = bootstrap_coefficient_draws(
            X=X_train,
            y=y_train,
            estimator_factory=lambda: build_regularized("ridge", lam, n_train),
            n_boot=args.n_boot,
            seed=args.seed,
        )
        spread = coefficient_spread(draws)
        ci = summarize_bootstrap_ci(draws, alpha=BOOT_ALPHA, features=list(spread["feature"]))
        spread["ci_low"] = [ci[f][0] for f in spread["feature"]]
        spread["ci_high"] = [ci[f][1] for f in spread["feature"]]
        write_table(spread, out_tables / f"ridge_bootstrap_spread_seed{args.seed}.csv")
        spread_rows = spread.to_dict(orient="records")

    report = render_report(
        [
            ("Cross-validated penalty selection", cv_summary.drop(columns=["run_id"])),
            ("Held-out performance", results[["model", "lambda", "n_nonzero", "train_rmse", "test_rmse", "test_r2"]]),
            *report_sections,
            ("Coefficients (signals and their copies)", coefs[coefs["feature"].map(predictor_roles(features)) != "noise"]),
        ]
    )
    report_path = out_logs / f"report_regularization_seed{args.seed}.txt"
    report_path.write_text(report, encoding="utf-8")
    print(report)

    meta = run_metadata(
        dataset_version=DATASET_VERSION,
        experiment_namespace=EXPERIMENT_NAMESPACE,
        seed=args.seed,
        nrows=args.nrows,
        outdir=str(outdir),
        penalties=penalties,
        folds=args.folds,
        n_lambda=args.n_lambda,
        n_boot=args.n_boot,
        git_commit=resolve_git_commit(PROJECT_ROOT),
        input_parquet=str(args.corr_in),
        input_sha256=sha256_file(args.corr_in),
        n_train=int(n_train),
        n_test=int(len(test_idx)),
        cv=cv_rows,
        model_joblib=model_paths,
        ridge_bootstrap_rows=len(spread_rows),
    )
    write_json(out_logs / f"run_regularization_seed{args.seed}.json", meta)

    print(f"Wrote regularization artifacts to {outdir}/")


if __name__ == "__main__":
    main()
