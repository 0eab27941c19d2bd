"""
Engine configuration parameters for crlottery.

Defines the timing constants the client mirrors from the lottery
contract and the block-time estimator's tuning parameters.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values

# Protocol timing
REFUND_GRACE_PERIOD = 24 * 60 * 60  # Seconds after reveal time before refund opens

# Block time estimation
BLOCK_SAMPLE_CAPACITY = 20  # Samples kept per chain
MIN_BLOCK_INTERVAL = 0.1  # Seconds per block, exclusive lower bound
MAX_BLOCK_INTERVAL = 60.0  # Seconds per block, exclusive upper bound
DEFAULT_BLOCK_TIME = 12.0  # Fallback when no usable interval exists
HIGH_CONFIDENCE_SAMPLES = 10
MEDIUM_CONFIDENCE_SAMPLES = 3

# Polling
POLL_INTERVAL = 5  # Seconds between contract reads

ENV_PREFIX = "CRLOTTERY_"


@dataclass
class LotteryConfig:
    """Client-side engine configuration"""

    # Protocol timing
    refund_grace_period: int = REFUND_GRACE_PERIOD

    # Block time estimation
    block_sample_capacity: int = BLOCK_SAMPLE_CAPACITY
    min_block_interval: float = MIN_BLOCK_INTERVAL
    max_block_interval: float = MAX_BLOCK_INTERVAL
    default_block_time: float = DEFAULT_BLOCK_TIME
    high_confidence_samples: int = HIGH_CONFIDENCE_SAMPLES
    medium_confidence_samples: int = MEDIUM_CONFIDENCE_SAMPLES

    # Polling
    poll_interval: int = POLL_INTERVAL

    # Paths
    data_dir: Path = field(default_factory=lambda: Path("~/.crlottery").expanduser())
    log_dir: Path = field(default_factory=lambda: Path("logs"))

    def __post_init__(self):
        if self.refund_grace_period < 0:
            raise ValueError("refund_grace_period must be non-negative")
        if self.block_sample_capacity < 2:
            raise ValueError("block_sample_capacity must be at least 2")
        if not 0 <= self.min_block_interval < self.max_block_interval:
            raise ValueError("min_block_interval must be below max_block_interval")
        if self.default_block_time <= 0:
            raise ValueError("default_block_time must be positive")


# Global config instance (can be overridden)
config = LotteryConfig()


def _coerce(raw: str, current):
    if isinstance(current, Path):
        return Path(raw).expanduser()
    if isinstance(current, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(current, int):
        return int(raw)
    if isinstance(current, float):
        return float(raw)
    return raw


def load_config(env_file: Optional[str] = None) -> LotteryConfig:
    """
    Load configuration from the environment.

    Every field can be set as CRLOTTERY_<FIELD_NAME>, e.g.
    CRLOTTERY_REFUND_GRACE_PERIOD=86400. Values from `env_file` are read
    first; the process environment overrides them.

    Args:
        env_file: Optional path to a .env file

    Returns:
        LotteryConfig instance
    """
    values: Dict[str, Optional[str]] = {}
    if env_file:
        values.update(dotenv_values(env_file))
    values.update({k: v for k, v in os.environ.items() if k.startswith(ENV_PREFIX)})

    defaults = LotteryConfig()
    overrides = {}
    for f in fields(LotteryConfig):
        raw = values.get(ENV_PREFIX + f.name.upper())
        if raw is None or raw == "":
            continue
        try:
            overrides[f.name] = _coerce(raw, getattr(defaults, f.name))
        except ValueError as exc:
            raise ValueError(f"Invalid value for {ENV_PREFIX}{f.name.upper()}: {raw!r}") from exc

    return LotteryConfig(**overrides)
