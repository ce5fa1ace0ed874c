"""CSV loader turning a table of mixed columns into network training pairs.

Cells that parse as numbers are used as they are. Every other cell, empty
ones included, is given a numeric alias, one code per distinct value and
per column, so ``red`` in one column and ``red`` in another may map to
different numbers. Aliases can be fixed up front with the ``aliases``
option; any other text is encoded with scikit-learn's
:class:`~sklearn.preprocessing.LabelEncoder` and a ``UserWarning`` names
the columns that were aliased.
"""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np
import pandas as pd
from sklearn.preprocessing import LabelEncoder

from .registry import DatasetSpec, DataSpec, register_dataset
from .utils import as_matrix, checksum_path, deterministic_split, standardize

FIXTURE_DIR = Path(__file__).resolve().parent / "_fixtures"

ColumnRef = Any  # column name or integer position


def _default_path(name: str) -> Path:
    return FIXTURE_DIR / name


def _resolve_columns(frame: pd.DataFrame, refs: Sequence[ColumnRef]) -> List[Any]:
    columns = list(frame.columns)
    resolved: List[Any] = []
    for ref in refs:
        if ref in columns:
            resolved.append(ref)
            continue
        position = None
        if isinstance(ref, (int, np.integer)):
            position = int(ref)
        elif isinstance(ref, str) and ref.strip().lstrip("-").isdigit():
            position = int(ref.strip())
        if position is None or not -len(columns) <= position < len(columns):
            raise KeyError(f"Column {ref!r} not found in CSV; columns are {columns}")
        resolved.append(columns[position])
    return resolved


def _alias_column(
    values: pd.Series, fixed: Mapping[str, float] | None
) -> tuple[np.ndarray, Dict[str, float]]:
    numeric = pd.to_numeric(values, errors="coerce")
    column = numeric.to_numpy(dtype=np.float64, copy=True)
    text_mask = numeric.isna().to_numpy()
    text = values[text_mask].astype(str).str.strip()
    if fixed is not None:
        table = {str(k): float(v) for k, v in fixed.items()}
        missing = sorted(set(text) - set(table))
        if missing:
            raise ValueError(
                f"Column {values.name!r} has values without an alias: {missing}"
            )
        column[text_mask] = text.map(table).to_numpy(dtype=np.float64)
        return column, table

    # only cells that do not parse as numbers are aliased
    encoder = LabelEncoder()
    column[text_mask] = encoder.fit_transform(text.to_numpy())
    table = {str(label): float(code) for code, label in enumerate(encoder.classes_)}
    return column, table


def _numeric_block(
    frame: pd.DataFrame,
    columns: Sequence[Any],
    aliases: Mapping[str, Mapping[str, float]],
    alias_tables: Dict[str, Dict[str, float]],
) -> np.ndarray:
    block: List[np.ndarray] = []
    for column in columns:
        series = frame[column]
        numeric = pd.to_numeric(series, errors="coerce")
        fixed = aliases.get(str(column))
        if fixed is None and not numeric.isna().any():
            block.append(numeric.to_numpy(dtype=np.float64))
            continue
        values, table = _alias_column(series, fixed)
        alias_tables[str(column)] = table
        block.append(values)
    return np.column_stack(block) if block else np.zeros((len(frame), 0))


def read_table(
    path: str | Path,
    *,
    header: bool = True,
    input_cols: Sequence[ColumnRef] | None = None,
    target_cols: Sequence[ColumnRef] | None = None,
    aliases: Mapping[str, Mapping[str, float]] | None = None,
) -> tuple[np.ndarray, np.ndarray, Dict[str, Any]]:
    """Read ``path`` and return ``(inputs, targets, info)``.

    By default every column but the last is an input and the last column is
    the target. ``info`` records the selected column names and the alias
    table of every text column.
    """

    frame = pd.read_csv(
        Path(path),
        header=0 if header else None,
        skipinitialspace=True,
        keep_default_na=False,
    )
    if frame.empty:
        raise ValueError(f"CSV file {str(path)!r} has no data rows")
    if frame.shape[1] < 2 and (input_cols is None or target_cols is None):
        raise ValueError("CSV needs at least one input column and one target column")

    targets_sel = _resolve_columns(frame, target_cols or [-1])
    if input_cols:
        inputs_sel = _resolve_columns(frame, input_cols)
    else:
        inputs_sel = [c for c in frame.columns if c not in targets_sel]
    if not inputs_sel:
        raise ValueError("No input columns selected")

    alias_tables: Dict[str, Dict[str, float]] = {}
    fixed = {str(k): v for k, v in (aliases or {}).items()}
    inputs = _numeric_block(frame, inputs_sel, fixed, alias_tables)
    targets = _numeric_block(frame, targets_sel, fixed, alias_tables)

    generated = sorted(name for name in alias_tables if name not in fixed)
    if generated:
        warnings.warn(
            f"Non-numeric CSV columns were given numeric aliases: {', '.join(generated)}",
            UserWarning,
            stacklevel=2,
        )

    info = {
        "input_cols": [str(c) for c in inputs_sel],
        "target_cols": [str(c) for c in targets_sel],
        "aliases": alias_tables,
    }
    return as_matrix(inputs), as_matrix(targets), info


@register_dataset("csv")
def load_csv(
    *,
    csv_path: str | Path | None = None,
    input_cols: Sequence[ColumnRef] | None = None,
    target_cols: Sequence[ColumnRef] | None = None,
    header: bool = True,
    aliases: Mapping[str, Mapping[str, float]] | None = None,
    val_split: float = 0.0,
    seed: int = 0,
    standardize_inputs: bool = False,
    standardize_targets: bool = False,
    task_type: str = "regression",
) -> DatasetSpec:
    """Load paired input/target rows from a CSV file."""

    path = Path(csv_path) if csv_path else _default_path("regression_fixture.csv")
    X, y, info = read_table(
        path,
        header=header,
        input_cols=input_cols,
        target_cols=target_cols,
        aliases=aliases,
    )

    normalization: dict[str, dict[str, list[float]]] = {}
    if standardize_inputs:
        X, mean, std = standardize(X)
        normalization["inputs"] = {
            "mean": mean.flatten().tolist(),
            "std": std.flatten().tolist(),
        }
    if standardize_targets:
        y, t_mean, t_std = standardize(y)
        normalization["targets"] = {
            "mean": t_mean.flatten().tolist(),
            "std": t_std.flatten().tolist(),
        }

    splits = deterministic_split(X.shape[0], val_split=val_split, seed=seed)

    data_spec = DataSpec(
        d_in=int(X.shape[1]),
        d_out=int(y.shape[1]),
        task_type=task_type,
        normalization=normalization,
        extra={"aliases": info["aliases"]},
    )

    provenance = {
        "path": str(path),
        "sha256": checksum_path(path),
        "header": header,
        "val_split": val_split,
        "seed": seed,
        "standardize_inputs": standardize_inputs,
        "standardize_targets": standardize_targets,
        **info,
    }

    return DatasetSpec(
        name="csv",
        inputs=X,
        targets=y,
        data_spec=data_spec,
        provenance=provenance,
        splits=splits,
    )


__all__ = ["load_csv", "read_table"]
