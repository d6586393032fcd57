"""Hard-coded checkpoints and sync progress estimation.

A checkpoint asserts that the block at a given height is known to be good.
The summary values stored next to the checkpoints are only used to estimate
how far along an initial sync is, never to decide validity.
"""

from __future__ import annotations

import time
import typing as t
from collections.abc import Mapping
from dataclasses import dataclass

from .exceptions import ConfigurationError
from .utils import uint256_from_hex

SECONDS_PER_DAY = 24 * 60 * 60

SIGCHECK_VERIFICATION_FACTOR = 5.0
"""How much more expensive it is to verify a transaction after the last checkpoint."""


@dataclass(frozen=True)
class CheckpointTable(Mapping[int, bytes]):
    checkpoints: tuple[tuple[int, bytes], ...]
    last_checkpoint_time: int
    """UNIX timestamp of the last checkpoint block."""
    transactions_at_checkpoint: int
    """Total number of transactions between genesis and the last checkpoint."""
    transactions_per_day: float
    """Estimated number of transactions per day after the last checkpoint."""

    def __post_init__(self) -> None:
        if not self.checkpoints:
            raise ConfigurationError("Checkpoint table must not be empty")
        heights = [height for height, _ in self.checkpoints]
        if any(a >= b for a, b in zip(heights, heights[1:])):
            raise ConfigurationError("Checkpoint heights must be strictly increasing")
        for height, block_hash in self.checkpoints:
            if len(block_hash) != 32:
                raise ConfigurationError(f"Invalid checkpoint hash at height {height}")

    @classmethod
    def from_hex(
        cls,
        checkpoints: t.Iterable[tuple[int, str]],
        *,
        last_checkpoint_time: int,
        transactions_at_checkpoint: int,
        transactions_per_day: float,
    ) -> CheckpointTable:
        return cls(
            checkpoints=tuple(
                (height, uint256_from_hex(block_hash))
                for height, block_hash in checkpoints
            ),
            last_checkpoint_time=last_checkpoint_time,
            transactions_at_checkpoint=transactions_at_checkpoint,
            transactions_per_day=transactions_per_day,
        )

    def __getitem__(self, height: int) -> bytes:
        for checkpoint_height, block_hash in self.checkpoints:
            if checkpoint_height == height:
                return block_hash
        raise KeyError(height)

    def __iter__(self) -> t.Iterator[int]:
        return (height for height, _ in self.checkpoints)

    def __len__(self) -> int:
        return len(self.checkpoints)

    @property
    def last_height(self) -> int:
        """Height of the last checkpoint, a lower bound for the chain height."""
        return self.checkpoints[-1][0]

    def check_block(self, height: int, block_hash: bytes) -> bool:
        """Return False only if a checkpoint at `height` disagrees with `block_hash`."""
        expected = self.get(height)
        return expected is None or expected == block_hash

    def last_checkpoint(
        self, block_index: t.Container[bytes]
    ) -> tuple[int, bytes] | None:
        """Return the highest checkpoint whose block is present in `block_index`."""
        for height, block_hash in reversed(self.checkpoints):
            if block_hash in block_index:
                return height, block_hash
        return None

    def guess_verification_progress(
        self,
        chain_tx: int,
        block_time: int,
        *,
        now: float | None = None,
        sigchecks: bool = True,
    ) -> float:
        """Estimate how much of the chain has been verified.

        `chain_tx` is the number of transactions up to and including the tip
        the node has verified, `block_time` that tip's timestamp.
        """
        if now is None:
            now = time.time()
        factor = SIGCHECK_VERIFICATION_FACTOR if sigchecks else 1.0

        if chain_tx <= self.transactions_at_checkpoint:
            cheap_before = chain_tx
            cheap_after = self.transactions_at_checkpoint - chain_tx
            expensive_after = (
                (now - self.last_checkpoint_time) / SECONDS_PER_DAY
            ) * self.transactions_per_day
            work_before = cheap_before
            work_after = cheap_after + expensive_after * factor
        else:
            cheap_before = self.transactions_at_checkpoint
            expensive_before = chain_tx - self.transactions_at_checkpoint
            expensive_after = (
                (now - block_time) / SECONDS_PER_DAY
            ) * self.transactions_per_day
            work_before = cheap_before + expensive_before * factor
            work_after = expensive_after * factor

        work_after = max(work_after, 0.0)
        total = work_before + work_after
        if total <= 0:
            return 1.0
        return work_before / total
