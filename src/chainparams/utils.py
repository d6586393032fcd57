from __future__ import annotations

import hashlib

import construct as c


def hash256(data: bytes) -> bytes:
    """Double SHA-256, the hash of block headers and transactions."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def uint256_from_hex(value: str) -> bytes:
    """Parse a hash written the way Bitcoin Core prints it.

    An optional "0x" prefix is accepted. The result is in display order,
    the same order used by `Hash256` fields.
    """
    if value.startswith(("0x", "0X")):
        value = value[2:]
    data = bytes.fromhex(value)
    if len(data) != 32:
        raise ValueError("uint256 must be exactly 32 bytes")
    return data


def uint256_to_int(value: bytes) -> int:
    """Interpret a display-order hash as an unsigned 256-bit integer."""
    return int.from_bytes(value, "big")


# marker byte -> (smallest value, largest value, construct for the value)
_COMPACT_SIZES = {
    0xFD: (0xFD, 0xFFFF, c.Int16ul),
    0xFE: (0x1_0000, 0xFFFF_FFFF, c.Int32ul),
    0xFF: (0x1_0000_0000, 0xFFFF_FFFF_FFFF_FFFF, c.Int64ul),
}


class _CompactSizeAdapter(c.Adapter):
    def _encode(self, obj: int, context, path):
        if obj < 0:
            raise ValueError("CompactSize cannot be negative")
        if obj < 0xFD:
            return {"marker": obj, "value": None}
        for marker, (_, limit, _) in _COMPACT_SIZES.items():
            if obj <= limit:
                return {"marker": marker, "value": obj}
        raise ValueError(f"{obj} does not fit in a CompactSize")

    def _decode(self, obj: c.Container, context, path):
        if obj["value"] is None:
            return obj["marker"]
        # values must use the shortest encoding
        minimum, _, _ = _COMPACT_SIZES[obj["marker"]]
        if obj["value"] < minimum:
            raise c.ValidationError(
                f"Non-canonical CompactSize {obj['value']:#x}", path=path
            )
        return obj["value"]


CompactUint = _CompactSizeAdapter(
    c.Struct(
        "marker" / c.Int8ul,
        "value"
        / c.Switch(
            c.this.marker,
            {marker: con for marker, (_, _, con) in _COMPACT_SIZES.items()},
        ),
    )
)
"""CompactSize integer, used for lengths and counts.

Values below 0xFD take a single byte. Larger values are written as a marker
byte (0xFD, 0xFE or 0xFF) followed by a 2, 4 or 8 byte little-endian value.
"""

BitcoinBytes = c.Prefixed(CompactUint, c.GreedyBytes)
"""Byte string prefixed with its CompactSize length, as used for scripts."""

Hash256 = c.Transformed(c.Bytes(32), lambda b: b[::-1], 32, lambda b: b[::-1], 32)
"""32-byte hash, encoded as a reversed sequence of bytes.

Values are kept in display order, i.e. the order in which block and
transaction hashes are usually printed.
"""
