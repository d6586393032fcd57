"""Construction of genesis blocks.

`build_genesis` rebuilds a network's first block from a handful of fixed
inputs, and `check_genesis` compares it to the hashes compiled into the
network parameters. `discover_genesis` is the maintenance-time search for a
nonce and timestamp that satisfy the target; it can run for a very long
time and is only reachable from the command-line tool.
"""

from __future__ import annotations

import logging
import struct
import typing as t
from dataclasses import dataclass, field, replace

from .block import Block, bits_to_target
from .exceptions import ConfigurationError
from .opcodes import build_op_push, build_script_int, build_script_num, iter_pushes
from .transaction import Transaction, TxInput, TxOutput
from .utils import hash256

LOG = logging.getLogger(__name__)

COINBASE_BITS = 486604799
"""Integer pushed first in the genesis coinbase script, 0x1d00ffff."""
COINBASE_EXTRA = 4


@dataclass(frozen=True)
class GenesisTemplate:
    """Fixed inputs of a genesis block."""

    message: str
    timestamp: int
    bits: int
    nonce: int
    version: int = 1
    output: TxOutput = field(default_factory=TxOutput.empty)

    def coinbase_script(self) -> bytes:
        return (
            build_script_int(COINBASE_BITS)
            + build_script_num(COINBASE_EXTRA)
            + build_op_push(self.message.encode())
        )

    def coinbase(self) -> Transaction:
        return Transaction(
            version=1,
            inputs=(TxInput.coinbase(self.coinbase_script()),),
            outputs=(self.output,),
            lock_time=0,
        )


def build_genesis(template: GenesisTemplate) -> Block:
    """Build the genesis block described by `template`.

    Its single coinbase output never entered the UTXO set, so it can never
    be spent.
    """
    return Block.from_transactions(
        [template.coinbase()],
        version=template.version,
        timestamp=template.timestamp,
        bits=template.bits,
        nonce=template.nonce,
    )


def coinbase_message(block: Block) -> str:
    """Read back the message embedded in a genesis coinbase script."""
    pushes = list(iter_pushes(block.transactions[0].inputs[0].script_sig))
    if len(pushes) != 3:
        raise ValueError("Not a genesis coinbase script")
    return pushes[2].decode()


def check_genesis(
    block: Block,
    expected_hash: bytes,
    expected_merkle_root: bytes,
    *,
    label: str = "genesis",
) -> None:
    """Make sure a rebuilt genesis block matches the compiled-in constants."""
    block_hash = block.get_hash()
    LOG.debug("%s --- nonce: %d time: %d", label, block.nonce, block.timestamp)
    LOG.debug("%s --- hash: 0x%s", label, block_hash.hex())
    LOG.debug("%s --- merklehash: 0x%s", label, block.merkle_root.hex())

    if block_hash != expected_hash:
        raise ConfigurationError(
            f"{label}: genesis hash 0x{block_hash.hex()} does not match 0x{expected_hash.hex()}"
        )
    if block.merkle_root != expected_merkle_root:
        raise ConfigurationError(
            f"{label}: genesis merkle root 0x{block.merkle_root.hex()} "
            f"does not match 0x{expected_merkle_root.hex()}"
        )


def discover_genesis(
    template: GenesisTemplate,
    *,
    report_every: int = 1_000_000,
    progress: t.Callable[[int, int, int], None] | None = None,
) -> Block:
    """Search for a nonce and timestamp that satisfy the template's target.

    Starting from the template's nonce and timestamp, the nonce is
    incremented until the block hash is at most the target; when the nonce
    wraps around, the timestamp moves forward by one second. There is no
    limit on the number of attempts.
    """
    block = build_genesis(template)
    target = bits_to_target(block.bits)
    # version, prev_block and merkle_root stay fixed
    prefix = block.header.build()[:68]
    timestamp, nonce = block.timestamp, block.nonce

    attempts = 0
    while True:
        header = prefix + struct.pack("<III", timestamp, block.bits, nonce)
        if int.from_bytes(hash256(header), "little") <= target:
            break
        nonce = (nonce + 1) & 0xFFFF_FFFF
        if nonce == 0:
            timestamp += 1
        attempts += 1
        if attempts % report_every == 0:
            LOG.info("Searching genesis: nonce %d time %d", nonce, timestamp)
            if progress is not None:
                progress(attempts, nonce, timestamp)

    found = replace(block, timestamp=timestamp, nonce=nonce)
    LOG.info(
        "Found genesis after %d attempts: nonce %d time %d hash 0x%s",
        attempts,
        nonce,
        timestamp,
        found.get_hash().hex(),
    )
    return found
