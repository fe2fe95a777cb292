"""
Fill fixed-shape feature/target arrays from table rows.
"""

from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .windowing import window_range

ColumnSelector = Union[str, Sequence[str]]
PrepFn = Callable[[pd.DataFrame], pd.DataFrame]


def resolve_columns(
    data: pd.DataFrame,
    selector: Optional[ColumnSelector],
    role: str = "x",
    exclude: Sequence[str] = (),
) -> List[str]:
    """
    Normalise a column selector to a list of column names.

    ``None`` selects every numeric column not listed in *exclude*.

    Raises:
        KeyError: If a named column is missing from *data*
        ValueError: If the selection is empty
    """
    if selector is None:
        columns = [
            c
            for c in data.select_dtypes(include="number").columns
            if c not in set(exclude)
        ]
    elif isinstance(selector, str):
        columns = [selector]
    else:
        columns = list(selector)

    missing = [c for c in columns if c not in data.columns]
    if missing:
        raise KeyError(f"Unknown {role} column(s): {missing}")
    if not columns:
        raise ValueError(f"No {role} columns selected")
    return columns


def _contiguous_runs(rows: np.ndarray) -> List[Tuple[int, int]]:
    """Split *rows* into (begin, stop) slices whose values increase by one."""
    if len(rows) == 0:
        return []
    breaks = np.flatnonzero(np.diff(rows) != 1) + 1
    bounds = np.concatenate(([0], breaks, [len(rows)]))
    return [(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:])]


def _prepare_frame(
    data: pd.DataFrame, lo: int, hi: int, prep_funs: Optional[PrepFn]
) -> pd.DataFrame:
    frame = data.iloc[lo : hi + 1]
    if prep_funs is None:
        return frame

    prepared = prep_funs(frame.copy())
    if not isinstance(prepared, pd.DataFrame):
        raise ValueError(
            f"prep_funs must return a pandas DataFrame, got {type(prepared).__name__}"
        )
    if len(prepared) != len(frame):
        raise ValueError(
            f"prep_funs changed the number of rows from {len(frame)} to {len(prepared)}; "
            "row-wise transforms must preserve row count and order"
        )
    return prepared


def _to_float32(frame: pd.DataFrame, columns: List[str], role: str) -> np.ndarray:
    try:
        return frame[columns].to_numpy(dtype=np.float32)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Could not convert {role} columns {columns} to float32: {e}")


def assemble_batch(
    data: pd.DataFrame,
    rows: np.ndarray,
    x: List[str],
    y: Optional[List[str]],
    lookback: int,
    timesteps: int,
    prep_funs: Optional[PrepFn] = None,
    return_target: bool = True,
    forecast: bool = False,
) -> Union[np.ndarray, Tuple[np.ndarray, np.ndarray]]:
    """
    Build one batch for the target rows in *rows*.

    Args:
        data: Source table, addressed by row position
        rows: Target row positions, one per batch slot
        x: Feature column names
        y: Target column names (ignored unless ``return_target``)
        lookback: Gap between window end and target row
        timesteps: Window length
        prep_funs: Optional ``DataFrame -> DataFrame`` transform applied to the
            raw rows of each contiguous run before numeric extraction
        return_target: Whether to build the target array
        forecast: Allow target rows past the end of the table (features only)

    Returns:
        ``features`` of shape *(len(rows), timesteps, len(x))*, or the tuple
        ``(features, targets)`` with targets of shape *(len(rows), len(y))*

    Raises:
        IndexError: If any window or target row falls outside the table
        ValueError: If *prep_funs* misbehaves or columns are not numeric
    """
    rows = np.asarray(rows, dtype=np.int64)
    last_index = len(data) - 1
    want_target = return_target and not forecast

    if want_target and not y:
        raise ValueError("Target columns are required when return_target=True")

    features = np.empty((len(rows), timesteps, len(x)), dtype=np.float32)
    targets = (
        np.empty((len(rows), len(y)), dtype=np.float32) if want_target else None
    )

    for begin, stop in _contiguous_runs(rows):
        run = rows[begin:stop]
        if want_target and run[-1] > last_index:
            raise IndexError(
                f"Target row {int(run[-1])} is past the last table row {last_index}"
            )

        lo, _ = window_range(int(run[0]), lookback, timesteps, 0, last_index)
        _, hi = window_range(int(run[-1]), lookback, timesteps, 0, last_index)
        if want_target:
            hi = int(run[-1])

        frame = _prepare_frame(data, lo, hi, prep_funs)
        x_vals = _to_float32(frame, x, "x")
        y_vals = _to_float32(frame, y, "y") if want_target else None

        for slot, t in enumerate(run, start=begin):
            start = int(t) - lookback - timesteps + 1 - lo
            features[slot] = x_vals[start : start + timesteps]
            if want_target:
                targets[slot] = y_vals[int(t) - lo]

    if want_target:
        return features, targets
    return features
