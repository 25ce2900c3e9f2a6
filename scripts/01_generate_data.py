import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import argparse
import hashlib

import pandas as pd

from regwalk.config import (
    COPIES_PER_SIGNAL,
    COPY_NOISE_SD,
    CORR_INTERCEPT,
    CORR_N,
    CORR_NOISE_SD,
    CORRELATED_FILE,
    DATASET_VERSION,
    LOGS_DIR,
    N_NOISE_PREDICTORS,
    RANDOM_SEEDS,
    SIGNAL_COEFS,
    SIMPLE_FILE,
    SIMPLE_INTERCEPT,
    SIMPLE_N,
    SIMPLE_NOISE_SD,
    SIMPLE_SLOPE,
    SIMPLE_X_RANGE,
    TABLES_DIR,
)
from regwalk.data.simulate import (
    predictor_roles,
    simulate_correlated_predictors,
    simulate_simple_linear,
    true_coefficients,
)
from regwalk.reporting.tables import write_table
from regwalk.utils.logging import run_metadata, write_json


def _sha256_df(df: pd.DataFrame) -> str:
    h = hashlib.sha256()
    h.update("||".join(df.columns.astype(str).tolist()).encode("utf-8"))
    h.update("||".join(map(str, df.dtypes.tolist())).encode("utf-8"))
    row_hashes = pd.util.hash_pandas_object(df, index=True).to_numpy()
    h.update(row_hashes.tobytes())
    return h.hexdigest()


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate the synthetic regression datasets.")
    parser.add_argument("--seed", type=int, default=2026, help="Random seed for both generators.")
    parser.add_argument(
        "--allow-any-seed",
        action="store_true",
        help="Allow seeds not listed in regwalk/config.py RANDOM_SEEDS.",
    )
    parser.add_argument("--simple-n", type=int, default=SIMPLE_N, help="Rows in the simple dataset.")
    parser.add_argument("--corr-n", type=int, default=CORR_N, help="Rows in the correlated-predictor dataset.")
    parser.add_argument("--simple-out", type=Path, default=SIMPLE_FILE, help="Output parquet (simple).")
    parser.add_argument("--corr-out", type=Path, default=CORRELATED_FILE, help="Output parquet (correlated).")
    parser.add_argument(
        "--truth-csv",
        type=Path,
        default=TABLES_DIR / "true_coefficients.csv",
        help="Output CSV of data-generating coefficients.",
    )
    parser.add_argument(
        "--decisions-json",
        type=Path,
        default=LOGS_DIR / "data_generation.json",
        help="Output JSON file recording generation parameters.",
    )
    args = parser.parse_args()

    if (not args.allow_any_seed) and (args.seed not in RANDOM_SEEDS):
        raise SystemExit(f"--seed must be one of {RANDOM_SEEDS} unless --allow-any-seed is provided.")
    if args.simple_n <= 1 or args.corr_n <= 1:
        raise SystemExit("--simple-n and --corr-n must be integers > 1.")

    simple_params = {
        "n": args.simple_n,
        "intercept": SIMPLE_INTERCEPT,
        "slope": SIMPLE_SLOPE,
        "noise_sd": SIMPLE_NOISE_SD,
        "x_range": SIMPLE_X_RANGE,
        "seed": args.seed,
    }
    corr_params = {
        "n": args.corr_n,
        "signal_coefs": SIGNAL_COEFS,
        "intercept": CORR_INTERCEPT,
        "copies_per_signal": COPIES_PER_SIGNAL,
        "copy_noise_sd": COPY_NOISE_SD,
        "n_noise": N_NOISE_PREDICTORS,
        "noise_sd": CORR_NOISE_SD,
        "seed": args.seed + 1,
    }

    simple = simulate_simple_linear(**simple_params)
    correlated = simulate_correlated_predictors(**corr_params)

    args.simple_out.parent.mkdir(parents=True, exist_ok=True)
    simple.to_parquet(args.simple_out, index=False)
    args.corr_out.parent.mkdir(parents=True, exist_ok=True)
    correlated.to_parquet(args.corr_out, index=False)

    truth = true_coefficients(correlated.columns, SIGNAL_COEFS)
    roles = predictor_roles(correlated.columns)
    truth_df = pd.DataFrame({"feature": truth.index, "role": [roles[f] for f in truth.index], "coefficient": truth.values})
    write_table(truth_df, args.truth_csv)

    payload = run_metadata(
        dataset_version=DATASET_VERSION,
        seed=args.seed,
        simple={
            "params": simple_params,
            "rows": len(simple),
            "output_parquet": str(args.simple_out),
            "content_hash_sha256": _sha256_df(simple),
        },
        correlated={
            "params": corr_params,
            "rows": len(correlated),
            "n_predictors": len(roles),
            "roles": {role: sum(1 for r in roles.values() if r == role) for role in ("signal", "copy", "noise")},
            "output_parquet": str(args.corr_out),
            "content_hash_sha256": _sha256_df(correlated),
        },
        truth_csv=str(args.truth_csv),
    )
    write_json(args.decisions_json, payload)

    print(f"Wrote {args.simple_out}")
    print(f"Wrote {args.corr_out}")
    print(f"Wrote {args.truth_csv}")
    print(f"Wrote {args.decisions_json}")


if __name__ == "__main__":
    main()
