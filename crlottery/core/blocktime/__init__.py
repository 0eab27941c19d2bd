"""
Block time estimation module.
"""

from crlottery.core.blocktime.estimator import (
    BlockTimeEstimator,
    BlockTimeEstimate,
    BlockSample,
    Confidence,
    BLOCK_TIME_KEY,
)

__all__ = [
    "BlockTimeEstimator",
    "BlockTimeEstimate",
    "BlockSample",
    "Confidence",
    "BLOCK_TIME_KEY",
]
