"""
Generator configuration.

A :class:`GeneratorConfig` captures every scalar parameter of a batch
generator so that a run can be reproduced from a JSON file or from
command line arguments. The preprocessing transform is code, not
configuration, and is passed separately to :meth:`GeneratorConfig.build`.
"""

import argparse
import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from .cycler import WrapPolicy, coerce_policy
from .generators import forecast_generator, series_generator

logger = logging.getLogger(__name__)


@dataclass
class GeneratorConfig:
    """Scalar parameters of a series or forecast generator."""

    y: Optional[List[str]] = None
    x: Optional[List[str]] = None
    lookback: int = 0
    timesteps: int = 1
    start_index: Optional[int] = None
    end_index: Optional[int] = None
    batch_size: int = 32
    return_target: bool = True
    wrap: Optional[WrapPolicy] = None
    forecast: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.y, str):
            self.y = [self.y]
        if isinstance(self.x, str):
            self.x = [self.x]
        if self.wrap is None:
            self.wrap = WrapPolicy.TRUNCATE if self.forecast else WrapPolicy.CYCLE
        self.wrap = coerce_policy(self.wrap)

        for name in ("lookback", "timesteps", "batch_size", "start_index", "end_index"):
            value = getattr(self, name)
            if value is None and name in ("start_index", "end_index"):
                continue
            if not isinstance(value, (int, np.integer)) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer, got {value!r}")

        if self.lookback < 0:
            raise ValueError(f"lookback must be >= 0, got {self.lookback}")
        if self.timesteps < 1:
            raise ValueError(f"timesteps must be >= 1, got {self.timesteps}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.start_index is not None and self.start_index < 0:
            raise ValueError(f"start_index must be >= 0, got {self.start_index}")
        if (
            self.start_index is not None
            and self.end_index is not None
            and self.start_index > self.end_index
        ):
            raise ValueError(
                f"start_index ({self.start_index}) must be <= end_index ({self.end_index})"
            )
        if not self.forecast and self.return_target and not self.y:
            raise ValueError("y must be set unless forecast=True or return_target=False")

    def to_dict(self) -> Dict[str, Any]:
        """Get configuration as a dictionary for logging."""
        config_dict = asdict(self)
        config_dict["wrap"] = self.wrap.value
        return config_dict

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "GeneratorConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise ValueError(f"Unknown generator config keys: {unknown}")
        return cls(**config_dict)

    def save_config(self, path: Union[str, Path]) -> None:
        """Save configuration to a JSON file."""

        def make_json_serializable(obj):
            """Recursively convert numpy types to JSON-serializable types."""
            if isinstance(obj, (np.integer, np.floating)):
                return obj.item()
            elif isinstance(obj, dict):
                return {key: make_json_serializable(value) for key, value in obj.items()}
            elif isinstance(obj, (list, tuple)):
                return [make_json_serializable(item) for item in obj]
            return obj

        with open(path, "w") as f:
            json.dump(make_json_serializable(self.to_dict()), f, indent=2)

        logger.info("Generator configuration saved to %s", path)

    @classmethod
    def load_config(cls, path: Union[str, Path]) -> "GeneratorConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Generator config not found: {path}")

        try:
            with open(path, "r") as f:
                config_dict = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in generator config {path}: {e}")

        if not isinstance(config_dict, dict):
            raise ValueError(f"Expected a JSON object in {path}, got {type(config_dict)}")
        return cls.from_dict(config_dict)

    def build(self, data: pd.DataFrame, prep_funs=None):
        """Create the generator this configuration describes."""
        if self.forecast:
            return forecast_generator(
                data,
                x=self.x,
                y=self.y,
                lookback=self.lookback,
                timesteps=self.timesteps,
                start_index=self.start_index,
                end_index=self.end_index,
                batch_size=self.batch_size,
                prep_funs=prep_funs,
                wrap=self.wrap,
            )
        return series_generator(
            data,
            y=self.y,
            x=self.x,
            lookback=self.lookback,
            timesteps=self.timesteps,
            start_index=self.start_index,
            end_index=self.end_index,
            batch_size=self.batch_size,
            return_target=self.return_target,
            prep_funs=prep_funs,
            wrap=self.wrap,
        )


def _split_names(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [name.strip() for name in value.split(",") if name.strip()]


def add_generator_args(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Register the generator flags on *parser*."""
    parser.add_argument("--x", type=str, default=None,
                        help="Comma-separated feature columns (default: all numeric non-target columns).")
    parser.add_argument("--y", type=str, default=None,
                        help="Comma-separated target columns.")
    parser.add_argument("--lookback", type=int, default=0,
                        help="Rows between the end of a window and its target row (>=0).")
    parser.add_argument("--timesteps", type=int, default=1,
                        help="Rows per feature window (>=1).")
    parser.add_argument("--start-index", type=int, default=None,
                        help="First target row, 0-based (default: first row with a full window).")
    parser.add_argument("--end-index", type=int, default=None,
                        help="Last target row, inclusive (default: last usable row).")
    parser.add_argument("--batch-size", type=int, default=32,
                        help="Target rows per batch.")
    parser.add_argument("--wrap", type=str, default=None,
                        choices=[p.value for p in WrapPolicy],
                        help="What to do with a batch that runs past --end-index "
                             "(default: cycle, or truncate with --forecast).")
    parser.add_argument("--forecast", action="store_true",
                        help="Build a forecast generator (features only).")
    parser.add_argument("--no-target", action="store_true",
                        help="Yield only features from the series generator.")
    return parser


def config_from_args(args: argparse.Namespace) -> GeneratorConfig:
    """Build a :class:`GeneratorConfig` from parsed command line arguments."""
    forecast = getattr(args, "forecast", False)

    return GeneratorConfig(
        y=_split_names(getattr(args, "y", None)),
        x=_split_names(getattr(args, "x", None)),
        lookback=getattr(args, "lookback", 0),
        timesteps=getattr(args, "timesteps", 1),
        start_index=getattr(args, "start_index", None),
        end_index=getattr(args, "end_index", None),
        batch_size=getattr(args, "batch_size", 32),
        return_target=not getattr(args, "no_target", False),
        wrap=getattr(args, "wrap", None),
        forecast=forecast,
    )
