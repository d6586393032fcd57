from __future__ import annotations

import typing as t
from dataclasses import dataclass

import construct as c

from .struct import Struct, subcon
from .transaction import NULL_HASH, Transaction
from .utils import CompactUint, Hash256, hash256, uint256_to_int

HEADER_SIZE = 80

_HEADER_FIELDS = (
    "version" / c.Int32ul,
    "prev_block" / Hash256,
    "merkle_root" / Hash256,
    "timestamp" / c.Int32ul,
    "bits" / c.Int32ul,
    "nonce" / c.Int32ul,
)


def compute_merkle_root(txids: t.Sequence[bytes]) -> bytes:
    """Compute the Merkle root of a list of display-order txids.

    Odd levels duplicate their last element. A single transaction is its
    own Merkle root.
    """
    if not txids:
        return NULL_HASH

    level = [txid[::-1] for txid in txids]
    while len(level) > 1:
        if len(level) % 2 == 1:
            level.append(level[-1])
        level = [
            hash256(level[i] + level[i + 1]) for i in range(0, len(level), 2)
        ]
    return level[0][::-1]


def decode_compact(bits: int) -> tuple[int, bool, bool]:
    """Expand a compact difficulty value.

    Returns the target together with the `negative` and `overflow` flags,
    mirroring how Bitcoin Core reads nBits.
    """
    size = bits >> 24
    word = bits & 0x007F_FFFF
    if size <= 3:
        target = word >> (8 * (3 - size))
    else:
        target = word << (8 * (size - 3))
    negative = word != 0 and bool(bits & 0x0080_0000)
    overflow = word != 0 and (
        size > 34 or (word > 0xFF and size > 33) or (word > 0xFFFF and size > 32)
    )
    return target, negative, overflow


def bits_to_target(bits: int) -> int:
    """Convert compact bits to the 256-bit target they encode."""
    target, negative, overflow = decode_compact(bits)
    if negative:
        raise ValueError(f"Negative target in bits 0x{bits:08x}")
    if overflow:
        raise ValueError(f"Target in bits 0x{bits:08x} does not fit in 256 bits")
    return target


def target_to_bits(target: int) -> int:
    """Convert a 256-bit target to its compact representation."""
    if target < 0:
        raise ValueError("Target must not be negative")
    size = (target.bit_length() + 7) // 8
    if size <= 3:
        compact = target << (8 * (3 - size))
    else:
        compact = target >> (8 * (size - 3))
    # the mantissa is signed, keep its top bit clear
    if compact & 0x0080_0000:
        compact >>= 8
        size += 1
    return compact | (size << 24)


def check_proof_of_work(block_hash: bytes, bits: int, pow_limit: int) -> bool:
    """Check that a display-order block hash satisfies its claimed target."""
    target, negative, overflow = decode_compact(bits)
    if negative or overflow or target == 0 or target > pow_limit:
        return False
    return uint256_to_int(block_hash) <= target


@dataclass(frozen=True)
class BlockHeader(Struct):
    """80-byte block header."""

    version: int
    prev_block: bytes
    merkle_root: bytes
    timestamp: int
    bits: int
    nonce: int

    SUBCON = c.Struct(*_HEADER_FIELDS)

    def get_hash(self) -> bytes:
        return hash256(self.build())[::-1]

    @property
    def target(self) -> int:
        return bits_to_target(self.bits)


@dataclass(frozen=True)
class Block(Struct):
    """Block header followed by its transactions."""

    version: int
    prev_block: bytes
    merkle_root: bytes
    timestamp: int
    bits: int
    nonce: int
    transactions: tuple[Transaction, ...] = subcon(Transaction)

    SUBCON = c.Struct(
        *_HEADER_FIELDS,
        "transactions" / c.PrefixedArray(CompactUint, Transaction.SUBCON),
    )

    @classmethod
    def from_transactions(
        cls,
        transactions: t.Sequence[Transaction],
        *,
        version: int,
        timestamp: int,
        bits: int,
        nonce: int,
        prev_block: bytes = NULL_HASH,
    ) -> Block:
        transactions = tuple(transactions)
        return cls(
            version=version,
            prev_block=prev_block,
            merkle_root=compute_merkle_root([tx.get_txid() for tx in transactions]),
            timestamp=timestamp,
            bits=bits,
            nonce=nonce,
            transactions=transactions,
        )

    @property
    def header(self) -> BlockHeader:
        return BlockHeader(
            version=self.version,
            prev_block=self.prev_block,
            merkle_root=self.merkle_root,
            timestamp=self.timestamp,
            bits=self.bits,
            nonce=self.nonce,
        )

    def get_hash(self) -> bytes:
        return self.header.get_hash()

    def compute_merkle_root(self) -> bytes:
        return compute_merkle_root([tx.get_txid() for tx in self.transactions])
