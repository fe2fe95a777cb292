"""
Infinite batch generators for Keras ``fit``/``evaluate``/``predict``.

Both factories validate their arguments immediately and then hand back a
Python generator, so configuration mistakes surface where the generator is
built rather than on the first training step::

    train_gen = series_generator(df, y="T", x=["p", "rh"], lookback=144,
                                 timesteps=720, start_index=0, end_index=200000,
                                 batch_size=128)
    model.fit(train_gen, steps_per_epoch=steps_per_epoch(719 + 144, 200000, 128))
"""

import logging
from typing import Iterator, Optional

import pandas as pd

from .assembler import ColumnSelector, PrepFn, assemble_batch, resolve_columns
from .cycler import BatchCycler, WrapPolicy, coerce_policy
from .windowing import max_target_index, min_target_index, window_range

logger = logging.getLogger(__name__)


def steps_per_epoch(
    start_index: int, end_index: int, batch_size: int, wrap=WrapPolicy.CYCLE
) -> int:
    """Number of batches that visit every target row in the range once."""
    cycler = BatchCycler(start_index, end_index, batch_size, policy=wrap)
    steps = cycler.batches_per_cycle
    if steps == 0:
        raise ValueError(
            f"No complete batch of {batch_size} fits in [{start_index}, {end_index}]"
        )
    return steps


def _validate_table(data: pd.DataFrame) -> None:
    if not isinstance(data, pd.DataFrame):
        raise ValueError(f"data must be a pandas DataFrame, got {type(data).__name__}")
    if len(data) == 0:
        raise ValueError("data has no rows")


def _resolve_bounds(
    n_rows: int,
    lookback: int,
    timesteps: int,
    start_index: Optional[int],
    end_index: Optional[int],
    forecast: bool,
):
    first = min_target_index(lookback, timesteps)
    last = max_target_index(n_rows, lookback, forecast=forecast)

    if start_index is None:
        start_index = first
    if end_index is None:
        end_index = last

    if start_index > end_index:
        raise ValueError(
            f"start_index ({start_index}) must be <= end_index ({end_index})"
        )
    if end_index > last:
        raise IndexError(
            f"end_index {end_index} is past the last admissible target row {last} "
            f"for a table of {n_rows} rows"
        )
    # Raises IndexError when the first window starts before row 0.
    window_range(start_index, lookback, timesteps, 0, n_rows - 1)
    return start_index, end_index


def _batches(
    data: pd.DataFrame,
    cycler: BatchCycler,
    x,
    y,
    lookback: int,
    timesteps: int,
    prep_funs: Optional[PrepFn],
    return_target: bool,
    forecast: bool,
) -> Iterator:
    step = 0
    while True:
        rows = cycler.next_rows()
        logger.debug(
            "Batch %d: target rows %d..%d (%d rows)",
            step,
            int(rows[0]),
            int(rows[-1]),
            len(rows),
        )
        yield assemble_batch(
            data,
            rows,
            x,
            y,
            lookback,
            timesteps,
            prep_funs=prep_funs,
            return_target=return_target,
            forecast=forecast,
        )
        step += 1


def series_generator(
    data: pd.DataFrame,
    y: ColumnSelector,
    x: Optional[ColumnSelector] = None,
    lookback: int = 0,
    timesteps: int = 1,
    start_index: Optional[int] = None,
    end_index: Optional[int] = None,
    batch_size: int = 32,
    return_target: bool = True,
    prep_funs: Optional[PrepFn] = None,
    wrap=WrapPolicy.CYCLE,
) -> Iterator:
    """
    Yield ``(features, targets)`` batches for training and evaluation.

    Args:
        data: Time-ordered table; rows are addressed by position
        y: Target column name(s)
        x: Feature column name(s); ``None`` selects all numeric non-target columns
        lookback: Rows between the end of each window and its target row
        timesteps: Rows per window
        start_index: First target row, defaults to the first row with a full window
        end_index: Last target row (inclusive), defaults to the last table row
        batch_size: Target rows per batch
        return_target: Yield only the feature array when ``False``
        prep_funs: ``DataFrame -> DataFrame`` transform applied before extraction
        wrap: Policy for a batch crossing ``end_index``, see :class:`WrapPolicy`

    Returns:
        An infinite generator. Features have shape
        *(batch_size, timesteps, n_x)*, targets *(batch_size, n_y)*.

    Raises:
        ValueError: For invalid sizes or an empty range
        IndexError: If a window falls outside the table
        KeyError: For unknown columns
    """
    _validate_table(data)
    policy = coerce_policy(wrap)
    y_cols = resolve_columns(data, y, role="y")
    x_cols = resolve_columns(data, x, role="x", exclude=y_cols)
    start_index, end_index = _resolve_bounds(
        len(data), lookback, timesteps, start_index, end_index, forecast=False
    )
    cycler = BatchCycler(start_index, end_index, batch_size, policy=policy)

    logger.info(
        "series_generator: rows %d..%d, batch_size=%d, lookback=%d, timesteps=%d, "
        "x=%s, y=%s, wrap=%s",
        start_index,
        end_index,
        batch_size,
        lookback,
        timesteps,
        x_cols,
        y_cols,
        policy.value,
    )
    return _batches(
        data,
        cycler,
        x_cols,
        y_cols,
        lookback,
        timesteps,
        prep_funs,
        return_target=return_target,
        forecast=False,
    )


def forecast_generator(
    data: pd.DataFrame,
    x: Optional[ColumnSelector] = None,
    y: Optional[ColumnSelector] = None,
    lookback: int = 0,
    timesteps: int = 1,
    start_index: Optional[int] = None,
    end_index: Optional[int] = None,
    batch_size: int = 32,
    prep_funs: Optional[PrepFn] = None,
    wrap=WrapPolicy.TRUNCATE,
) -> Iterator:
    """
    Yield feature-only batches, including for target rows past the table.

    ``end_index`` may reach ``len(data) - 1 + lookback``: the furthest target
    whose window is still fully observed. With the default ``truncate`` policy,
    ``predict(gen, steps=steps_per_epoch(start, end, batch_size, "truncate"))``
    returns one prediction per target row.

    Pass the training target(s) as *y* so that the default feature columns
    match those of :func:`series_generator`. Target columns missing from a
    forecast table are ignored.
    """
    _validate_table(data)
    policy = coerce_policy(wrap)
    y_cols = [y] if isinstance(y, str) else list(y or [])
    x_cols = resolve_columns(data, x, role="x", exclude=y_cols)
    start_index, end_index = _resolve_bounds(
        len(data), lookback, timesteps, start_index, end_index, forecast=True
    )
    cycler = BatchCycler(start_index, end_index, batch_size, policy=policy)

    beyond = max(0, end_index - (len(data) - 1))
    logger.info(
        "forecast_generator: rows %d..%d (%d past the table), batch_size=%d, "
        "lookback=%d, timesteps=%d, x=%s, wrap=%s",
        start_index,
        end_index,
        beyond,
        batch_size,
        lookback,
        timesteps,
        x_cols,
        policy.value,
    )
    return _batches(
        data,
        cycler,
        x_cols,
        None,
        lookback,
        timesteps,
        prep_funs,
        return_target=False,
        forecast=True,
    )
