"""
Block Time Estimator - Observed seconds-per-block per chain.

Deadlines measured in blocks are shown to users as wall-clock estimates.
Nominal block times are unreliable (local dev chains mine on demand,
L2s vary), so the estimate is built from block numbers observed by the
polling loop together with the local time they were seen.

Algorithm:
1. Keep the last N (block_number, observed_at_ms) samples per chain
2. For each consecutive pair with a positive block delta, compute
   seconds per block
3. Discard intervals outside (0.1s, 60s)
4. Take the median, so one stalled or burst interval cannot skew it

Samples can be persisted through the KeyValueStore port so estimates
survive restarts.
"""

import math
from collections import deque
from dataclasses import dataclass
from enum import Enum
from statistics import median
from typing import Deque, Dict, List, Optional

from crlottery.core.config import LotteryConfig
from crlottery.core.storage.port import KeyValueStore, load_json, save_json
from crlottery.utils.logger import get_logger

logger = get_logger("blocktime")


BLOCK_TIME_KEY = "blockTimeData"


class Confidence(str, Enum):
    """How much to trust a block time estimate."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class BlockSample:
    """A block number and the local time it was first observed."""
    block_number: int
    observed_at_ms: int


@dataclass(frozen=True)
class BlockTimeEstimate:
    """Result of a block time estimate."""
    seconds_per_block: float
    confidence: Confidence
    sample_size: int

    def seconds_for(self, blocks: int) -> float:
        """Estimated wall-clock seconds for a number of blocks (clamped at 0)."""
        return max(0, blocks) * self.seconds_per_block


class BlockTimeEstimator:
    """
    Per-chain rolling estimate of seconds per block.

    Args:
        config: Capacity, outlier bounds and fallback
        store: Optional persistence port for samples
    """

    def __init__(
        self,
        config: Optional[LotteryConfig] = None,
        store: Optional[KeyValueStore] = None,
    ):
        self.config = config or LotteryConfig()
        self.store = store
        self._samples: Dict[int, Deque[BlockSample]] = {}
        if store is not None:
            self._load()

    # =========================================================================
    # Recording
    # =========================================================================

    def _buffer(self, chain_id: int) -> Deque[BlockSample]:
        buffer = self._samples.get(chain_id)
        if buffer is None:
            buffer = deque(maxlen=self.config.block_sample_capacity)
            self._samples[chain_id] = buffer
        return buffer

    def record_block(self, chain_id: int, block_number: int, now_ms: int) -> bool:
        """
        Record an observed block.

        A block number equal to the most recent sample is ignored, so
        duplicate notifications do not distort the estimate.

        Returns:
            True if a sample was added
        """
        buffer = self._buffer(chain_id)
        if buffer and buffer[-1].block_number == block_number:
            return False

        buffer.append(BlockSample(block_number=block_number, observed_at_ms=now_ms))
        self._persist(chain_id, now_ms)
        return True

    def samples(self, chain_id: int) -> List[BlockSample]:
        return list(self._samples.get(chain_id, ()))

    def reset(self, chain_id: int) -> None:
        """Forget all samples for a chain."""
        self._samples.pop(chain_id, None)
        if self.store is not None:
            data = load_json(self.store, BLOCK_TIME_KEY, {})
            if isinstance(data, dict) and data.pop(str(chain_id), None) is not None:
                save_json(self.store, BLOCK_TIME_KEY, data)

    # =========================================================================
    # Estimation
    # =========================================================================

    def _intervals(self, samples: List[BlockSample]) -> List[float]:
        low = self.config.min_block_interval
        high = self.config.max_block_interval
        intervals = []
        for prev, cur in zip(samples, samples[1:]):
            block_diff = cur.block_number - prev.block_number
            if block_diff <= 0:
                continue
            seconds_per_block = (cur.observed_at_ms - prev.observed_at_ms) / block_diff / 1000
            if low < seconds_per_block < high:
                intervals.append(seconds_per_block)
        return intervals

    def _confidence(self, sample_size: int) -> Confidence:
        if sample_size >= self.config.high_confidence_samples:
            return Confidence.HIGH
        if sample_size >= self.config.medium_confidence_samples:
            return Confidence.MEDIUM
        return Confidence.LOW

    def estimate(self, chain_id: int) -> BlockTimeEstimate:
        """
        Estimate seconds per block for a chain.

        Falls back to the configured default when there is no usable
        interval.
        """
        samples = self.samples(chain_id)
        intervals = self._intervals(samples)

        if intervals:
            # Tenths, halves rounded up
            seconds_per_block = math.floor(median(intervals) * 10 + 0.5) / 10
        else:
            seconds_per_block = self.config.default_block_time

        return BlockTimeEstimate(
            seconds_per_block=seconds_per_block,
            confidence=self._confidence(len(samples)),
            sample_size=len(samples),
        )

    # =========================================================================
    # Persistence
    # =========================================================================

    def _load(self) -> None:
        data = load_json(self.store, BLOCK_TIME_KEY, {})
        if not isinstance(data, dict):
            return
        for chain_key, entry in data.items():
            try:
                chain_id = int(chain_key)
                loaded = [
                    BlockSample(int(block["number"]), int(block["timestamp"]))
                    for block in entry["blocks"]
                ]
            except (KeyError, TypeError, ValueError):
                logger.warning(f"Dropping malformed block samples for chain {chain_key!r}")
                continue
            self._buffer(chain_id).extend(loaded)
        logger.debug(f"Loaded block samples for {len(self._samples)} chain(s)")

    def _persist(self, chain_id: int, now_ms: int) -> None:
        if self.store is None:
            return
        data = load_json(self.store, BLOCK_TIME_KEY, {})
        if not isinstance(data, dict):
            data = {}
        data[str(chain_id)] = {
            # Block numbers as strings, as the browser client stores them
            "blocks": [
                {"number": str(s.block_number), "timestamp": s.observed_at_ms}
                for s in self._samples[chain_id]
            ],
            "lastUpdated": now_ms,
        }
        save_json(self.store, BLOCK_TIME_KEY, data)
