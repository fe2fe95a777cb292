"""Keras ``Sequence`` rendition of the windowed batch generators."""

import numpy as np
import pandas as pd
import tensorflow as tf
from typing import Optional

from .assembler import ColumnSelector, PrepFn, assemble_batch, resolve_columns
from .windowing import max_target_index, min_target_index, window_range


class WindowSequence(tf.keras.utils.Sequence):
    """Epoch-based batches of lookback windows built on demand.

    Unlike :func:`tsgen.generators.series_generator`, this object has a length,
    can be indexed in any order and lets Keras shuffle target rows between
    epochs. The last batch of an epoch may be shorter than ``batch_size``.
    """

    def __init__(self,
                 data: pd.DataFrame,
                 y: Optional[ColumnSelector] = None,
                 x: Optional[ColumnSelector] = None,
                 lookback: int = 0,
                 timesteps: int = 1,
                 start_index: Optional[int] = None,
                 end_index: Optional[int] = None,
                 batch_size: int = 32,
                 return_target: bool = True,
                 prep_funs: Optional[PrepFn] = None,
                 shuffle: bool = False,
                 seed: Optional[int] = None,
                 **kwargs):
        """
        Initialize the window sequence.

        Args:
            data: Time-ordered table, addressed by row position
            y: Target column name(s); required when ``return_target`` is True
            x: Feature column name(s); ``None`` selects numeric non-target columns
            lookback: Rows between the end of each window and its target row
            timesteps: Rows per window
            start_index: First target row (inclusive)
            end_index: Last target row (inclusive)
            batch_size: Target rows per batch
            return_target: Whether batches include the target array
            prep_funs: ``DataFrame -> DataFrame`` transform applied per batch
            shuffle: Whether to shuffle target rows at the end of each epoch
            seed: Seed for the shuffle order; ``None`` draws fresh entropy
            **kwargs: Passed to ``tf.keras.utils.Sequence`` (workers, etc.)
        """
        super().__init__(**kwargs)

        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if return_target and y is None:
            raise ValueError("y is required when return_target=True")

        self.data = data
        self.y = resolve_columns(data, y, role="y") if y is not None else []
        self.x = resolve_columns(data, x, role="x", exclude=self.y)
        self.lookback = lookback
        self.timesteps = timesteps
        self.batch_size = batch_size
        self.return_target = return_target
        self.prep_funs = prep_funs
        self.shuffle = shuffle
        self._rng = np.random.default_rng(seed)

        if start_index is None:
            start_index = min_target_index(lookback, timesteps)
        if end_index is None:
            end_index = max_target_index(len(data), lookback)
        if start_index > end_index:
            raise ValueError(
                f"start_index ({start_index}) must be <= end_index ({end_index})"
            )
        if end_index > len(data) - 1:
            raise IndexError(
                f"end_index {end_index} is past the last table row {len(data) - 1}"
            )
        window_range(start_index, lookback, timesteps, 0, len(data) - 1)

        self.start_index = start_index
        self.end_index = end_index
        self.target_rows = np.arange(start_index, end_index + 1, dtype=np.int64)
        self.n_samples = len(self.target_rows)

        self.on_epoch_end()

    def __len__(self):
        """Batches per epoch; the last one may be short."""
        return int(np.ceil(self.n_samples / self.batch_size))

    def __getitem__(self, index):
        """Batch *index* of the current epoch, in shuffled order when enabled."""
        if index < 0 or index >= len(self):
            raise IndexError(f"Batch index {index} out of range for {len(self)} batches")

        batch_rows = self.target_rows[
            self.indices[index * self.batch_size:(index + 1) * self.batch_size]
        ]
        # Sorted rows keep contiguous runs long, so prep_funs runs fewer times.
        if self.shuffle:
            order = np.argsort(batch_rows, kind="stable")
            inverse = np.empty_like(order)
            inverse[order] = np.arange(len(order))
            batch = assemble_batch(
                self.data, batch_rows[order], self.x, self.y, self.lookback,
                self.timesteps, prep_funs=self.prep_funs,
                return_target=self.return_target,
            )
            if self.return_target:
                return batch[0][inverse], batch[1][inverse]
            return batch[inverse]

        return assemble_batch(
            self.data, batch_rows, self.x, self.y, self.lookback, self.timesteps,
            prep_funs=self.prep_funs, return_target=self.return_target,
        )

    def on_epoch_end(self):
        """Reset the visiting order of target rows, reshuffled if requested."""
        self.indices = np.arange(self.n_samples)
        if self.shuffle:
            self._rng.shuffle(self.indices)
