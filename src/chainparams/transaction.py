from __future__ import annotations

from dataclasses import dataclass

import construct as c

from .struct import Struct, subcon
from .utils import BitcoinBytes, CompactUint, Hash256, hash256

NULL_HASH = b"\x00" * 32
NULL_INDEX = 0xFFFF_FFFF
SEQUENCE_FINAL = 0xFFFF_FFFF


@dataclass(frozen=True)
class TxInput(Struct):
    """Transaction input."""

    prev_tx: bytes
    index: int
    script_sig: bytes
    sequence: int

    SUBCON = c.Struct(
        "prev_tx" / Hash256,
        "index" / c.Int32ul,
        "script_sig" / BitcoinBytes,
        "sequence" / c.Int32ul,
    )

    @classmethod
    def coinbase(cls, script_sig: bytes) -> TxInput:
        return cls(
            prev_tx=NULL_HASH,
            index=NULL_INDEX,
            script_sig=script_sig,
            sequence=SEQUENCE_FINAL,
        )

    def is_null_prevout(self) -> bool:
        return self.prev_tx == NULL_HASH and self.index == NULL_INDEX


@dataclass(frozen=True)
class TxOutput(Struct):
    """Transaction output."""

    value: int
    script_pubkey: bytes

    SUBCON = c.Struct("value" / c.Int64ul, "script_pubkey" / BitcoinBytes)

    @classmethod
    def empty(cls) -> TxOutput:
        """Output with no value and no script, as used by the genesis coinbase."""
        return cls(value=0, script_pubkey=b"")

    def is_empty(self) -> bool:
        return self.value == 0 and not self.script_pubkey


@dataclass(frozen=True)
class Transaction(Struct):
    """Transaction in the legacy (non-segwit) serialization."""

    version: int
    inputs: tuple[TxInput, ...] = subcon(TxInput)
    outputs: tuple[TxOutput, ...] = subcon(TxOutput)
    lock_time: int = 0

    SUBCON = c.Struct(
        "version" / c.Int32ul,
        "inputs" / c.PrefixedArray(CompactUint, TxInput.SUBCON),
        "outputs" / c.PrefixedArray(CompactUint, TxOutput.SUBCON),
        "lock_time" / c.Int32ul,
    )

    def get_txid(self) -> bytes:
        return hash256(self.build())[::-1]

    def is_coinbase(self) -> bool:
        return len(self.inputs) == 1 and self.inputs[0].is_null_prevout()

