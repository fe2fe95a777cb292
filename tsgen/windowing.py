"""
Window index arithmetic for supervised sequence batches.

A target row ``t`` is paired with the ``timesteps`` rows that end ``lookback``
rows before it::

    [t - lookback - timesteps + 1, t - lookback]

All indices are 0-based row positions and both ends are inclusive.
"""

from typing import Optional, Tuple

import numpy as np


def _check_window_params(lookback: int, timesteps: int) -> None:
    if lookback < 0:
        raise ValueError(f"lookback must be >= 0, got {lookback}")
    if timesteps < 1:
        raise ValueError(f"timesteps must be >= 1, got {timesteps}")


def window_range(
    t: int,
    lookback: int,
    timesteps: int,
    first_index: int = 0,
    last_index: Optional[int] = None,
) -> Tuple[int, int]:
    """
    Return the inclusive feature-row range for target row *t*.

    Args:
        t: Target row position
        lookback: Gap between the end of the window and the target row
        timesteps: Window length in rows
        first_index: First valid row of the table
        last_index: Last valid row of the table, unchecked when ``None``

    Returns:
        Tuple of (start, end), both inclusive

    Raises:
        ValueError: If lookback or timesteps are out of range
        IndexError: If the window falls outside ``[first_index, last_index]``
    """
    _check_window_params(lookback, timesteps)

    end = t - lookback
    start = end - timesteps + 1

    if start < first_index:
        raise IndexError(
            f"Window [{start}, {end}] for target row {t} starts before row {first_index} "
            f"(lookback={lookback}, timesteps={timesteps})"
        )
    if last_index is not None and end > last_index:
        raise IndexError(
            f"Window [{start}, {end}] for target row {t} ends after row {last_index}"
        )
    return start, end


def window_rows(
    t: int,
    lookback: int,
    timesteps: int,
    first_index: int = 0,
    last_index: Optional[int] = None,
) -> np.ndarray:
    """Row positions of the window for *t* as an array of length *timesteps*."""
    start, end = window_range(t, lookback, timesteps, first_index, last_index)
    return np.arange(start, end + 1, dtype=np.int64)


def min_target_index(lookback: int, timesteps: int, first_index: int = 0) -> int:
    """First target row whose window fits in the table."""
    _check_window_params(lookback, timesteps)
    return first_index + lookback + timesteps - 1


def max_target_index(n_rows: int, lookback: int, forecast: bool = False) -> int:
    """
    Last admissible target row for a table of *n_rows* rows.

    In forecast mode the target may lie past the table as long as its window
    still ends on the last row.
    """
    if n_rows < 1:
        raise ValueError("Table has no rows")
    if lookback < 0:
        raise ValueError(f"lookback must be >= 0, got {lookback}")
    last = n_rows - 1
    return last + lookback if forecast else last
