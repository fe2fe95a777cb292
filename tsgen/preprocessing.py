"""
Ready-made ``prep_funs`` transforms.

A transform takes the raw rows a batch needs and returns rows of the same
length and order. The standardiser is fitted on the training range only and
then applied unchanged to validation, test and forecast batches.
"""

from typing import Callable, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

PrepFn = Callable[[pd.DataFrame], pd.DataFrame]


def fit_standardizer(
    data: pd.DataFrame,
    columns: Sequence[str],
    start_index: int = 0,
    end_index: Optional[int] = None,
) -> PrepFn:
    """
    Fit a ``StandardScaler`` on rows ``start_index..end_index`` of *columns*.

    Returns a transform that standardises *columns* in any frame it is given.
    The fitted scaler is available as ``transform.scaler``.
    """
    columns = list(columns)
    missing = [c for c in columns if c not in data.columns]
    if missing:
        raise KeyError(f"Unknown column(s) to standardize: {missing}")

    if end_index is None:
        end_index = len(data) - 1
    if start_index < 0 or end_index >= len(data) or start_index > end_index:
        raise ValueError(
            f"Invalid fit range [{start_index}, {end_index}] for {len(data)} rows"
        )

    scaler = StandardScaler()
    scaler.fit(data.iloc[start_index : end_index + 1][columns].to_numpy(dtype=np.float64))

    def standardize(frame: pd.DataFrame) -> pd.DataFrame:
        out = frame.copy()
        out[columns] = scaler.transform(frame[columns].to_numpy(dtype=np.float64))
        return out

    standardize.scaler = scaler
    standardize.columns = columns
    return standardize


def inverse_standardize(
    values: np.ndarray, scaler: StandardScaler, column_index: int
) -> np.ndarray:
    """Map standardised values of one fitted column back to original units."""
    values = np.asarray(values, dtype=np.float64)
    return values * scaler.scale_[column_index] + scaler.mean_[column_index]


def select_columns(columns: Sequence[str]) -> PrepFn:
    columns = list(columns)

    def select(frame: pd.DataFrame) -> pd.DataFrame:
        return frame[columns]

    return select


def compose(*funcs: PrepFn) -> PrepFn:
    """Chain transforms left to right."""

    def composed(frame: pd.DataFrame) -> pd.DataFrame:
        for func in funcs:
            frame = func(frame)
        return frame

    return composed
