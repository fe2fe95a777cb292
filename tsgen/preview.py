import argparse
import json
import logging
import sys
from pathlib import Path

import numpy as np

from .config import GeneratorConfig, add_generator_args, config_from_args
from .data_loader import load_table
from .preprocessing import fit_standardizer

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Build a windowed batch generator from a CSV file and preview its batches."
    )
    p.add_argument(
        "--data",
        required=True,
        type=str,
        help="Path to a CSV file with one time column and numeric columns.",
    )
    p.add_argument(
        "--time-column",
        required=True,
        type=str,
        help="Name of the timestamp column.",
    )
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON generator config; overrides the generator flags below.",
    )
    p.add_argument(
        "--standardize",
        action="store_true",
        help="Standardize x and y columns with statistics of the selected row range.",
    )
    p.add_argument(
        "--n-batches",
        type=int,
        default=3,
        help="Number of batches to draw (default 3).",
    )
    p.add_argument(
        "--out-dir",
        type=str,
        default=None,
        help="Directory to write X_000.npy, y_000.npy, ... and config.json.",
    )
    p.add_argument("--verbose", action="store_true", help="Log every batch.")
    add_generator_args(p)
    return p.parse_args(argv)


def _standardizer_for(config: GeneratorConfig, data):
    columns = list(config.x or [c for c in data.select_dtypes(include="number").columns
                                if c not in (config.y or [])])
    if not config.forecast and config.return_target:
        columns += [c for c in config.y if c not in columns]

    # Fit on every row the selected windows and targets read, and nothing later.
    last = len(data) - 1
    first_target = config.start_index or 0
    start = max(0, first_target - config.lookback - config.timesteps + 1)
    end = last if config.end_index is None else min(config.end_index, last)
    return fit_standardizer(data, columns, start_index=start, end_index=end)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        config = (
            GeneratorConfig.load_config(args.config) if args.config else config_from_args(args)
        )
        data = load_table(args.data, args.time_column)
        prep = _standardizer_for(config, data) if args.standardize else None
        gen = config.build(data, prep_funs=prep)
    except (ValueError, IndexError, KeyError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1

    if args.n_batches < 1:
        logger.error("--n-batches must be >= 1")
        return 1

    out_dir = Path(args.out_dir) if args.out_dir else None
    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)
        config.save_config(out_dir / "config.json")

    shapes = []
    for i in range(args.n_batches):
        batch = next(gen)
        X, y = batch if isinstance(batch, tuple) else (batch, None)
        shapes.append({"X": list(X.shape), "y": list(y.shape) if y is not None else None})

        if out_dir is not None:
            np.save(out_dir / f"X_{i:03d}.npy", X)
            if y is not None:
                np.save(out_dir / f"y_{i:03d}.npy", y)

    if out_dir is not None:
        logger.info("Saved %d batches to %s", args.n_batches, out_dir)

    print(json.dumps({"config": config.to_dict(), "batches": shapes}, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
