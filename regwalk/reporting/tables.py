from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

import pandas as pd

Section = Tuple[str, Union[pd.DataFrame, Dict[str, object], str]]


def coefficient_table(fits: Dict[str, pd.Series], truth: Optional[pd.Series] = None) -> pd.DataFrame:
    """Side-by-side coefficients, one column per fit and one row per predictor."""
    columns = {}
    if truth is not None:
        columns["truth"] = truth
    columns.update(fits)
    table = pd.DataFrame(columns)
    if truth is not None:
        table = table.reindex(list(truth.index) + [f for f in table.index if f not in truth.index])
    table.index.name = "feature"
    return table.reset_index()


def write_table(df: pd.DataFrame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path


def _format_value(v) -> str:
    if isinstance(v, float):
        return f"{v:.6g}"
    return str(v)


def render_section(title: str, body) -> str:
    lines = [title, "-" * len(title)]
    if isinstance(body, pd.DataFrame):
        lines.append(body.to_string(index=False, float_format=lambda v: f"{v:.4f}"))
    elif isinstance(body, dict):
        width = max((len(str(k)) for k in body), default=0)
        lines.extend(f"{str(k).ljust(width)} : {_format_value(v)}" for k, v in body.items())
    else:
        lines.append(str(body))
    return "\n".join(lines)


def render_report(sections: Iterable[Section]) -> str:
    return "\n\n".join(render_section(title, body) for title, body in sections) + "\n"
