import platform
import sys

from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from regwalk.config import CORRELATED_FILE, LOGS_DIR, SIMPLE_FILE
from regwalk.utils.logging import package_versions, write_json


def main() -> None:
    info = {
        "python_version": sys.version,
        "platform": platform.platform(),
        "packages": package_versions(),
        "simple_file_exists": SIMPLE_FILE.exists(),
        "correlated_file_exists": CORRELATED_FILE.exists(),
    }
    missing = sorted(pkg for pkg, version in info["packages"].items() if version is None)
    out_path = write_json(LOGS_DIR / "environment_check.json", info)
    print(f"Wrote {out_path}")
    if missing:
        raise SystemExit(f"Missing required packages: {missing}")


if __name__ == "__main__":
    main()
