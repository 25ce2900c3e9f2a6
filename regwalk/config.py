from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = PROJECT_ROOT / "data"
PROCESSED_DIR = DATA_DIR / "processed"

OUTPUTS_DIR = PROJECT_ROOT / "outputs"
METRICS_DIR = OUTPUTS_DIR / "metrics"
TABLES_DIR = OUTPUTS_DIR / "tables"
MODELS_DIR = OUTPUTS_DIR / "models"
LOGS_DIR = OUTPUTS_DIR / "logs"
SPLITS_DIR = OUTPUTS_DIR / "splits"

SIMPLE_FILE = PROCESSED_DIR / "simple_linear.parquet"
CORRELATED_FILE = PROCESSED_DIR / "correlated_predictors.parquet"

# Dataset and experiment identifiers (used in outputs/ metadata)
DATASET_VERSION = "synthetic_regression_v1"
EXPERIMENT_NAMESPACE = "regularization_walkthrough_v1"

TARGET_COL = "y"

# Part 1: simple linear regression y = b0 + b1 * x + e
SIMPLE_N = 100
SIMPLE_INTERCEPT = 2.0
SIMPLE_SLOPE = 3.0
SIMPLE_NOISE_SD = 2.0
SIMPLE_X_RANGE = (0.0, 10.0)

# Part 2: correlated predictors.
# Only the signal columns x1..xk carry effect; each gets near-duplicate copies
# (x1_c1, ...) and pure-noise columns z1..zm are appended.
CORR_N = 120
CORR_INTERCEPT = 1.0
SIGNAL_COEFS = (3.0, -2.0, 1.5)
COPIES_PER_SIGNAL = 3
COPY_NOISE_SD = 0.1
N_NOISE_PREDICTORS = 30
CORR_NOISE_SD = 2.0

# Frozen validation protocol
TEST_SIZE = 0.5
CV_FOLDS = 10
RANDOM_SEEDS = [2026, 2027, 2028]

# Regularization (glmnet penalty scale on standardized predictors)
N_LAMBDA = 100
LAMBDA_MIN_RATIO_LARGE_N = 1e-4
LAMBDA_MIN_RATIO_SMALL_N = 0.01
RIDGE_LAMBDA_MAX_FACTOR = 1000.0
LASSO_MAX_ITER = 50000
LASSO_TOL = 1e-7

# Coefficient stability
N_BOOT = 500
BOOT_ALPHA = 0.05

# Collinearity flags
VIF_THRESHOLD = 10.0
CORR_THRESHOLD = 0.9

# Closed-form OLS cross-check
OLS_RTOL = 1e-8
OLS_ATOL = 1e-8
