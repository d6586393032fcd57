"""The few script opcodes needed to write and read coinbase scripts."""

from __future__ import annotations

import struct
import typing as t
from enum import IntEnum


class Opcode(IntEnum):
    OP_0 = 0x00
    OP_PUSHDATA1 = 0x4C
    OP_PUSHDATA2 = 0x4D
    OP_PUSHDATA4 = 0x4E
    OP_1NEGATE = 0x4F
    OP_1 = 0x51
    OP_16 = 0x60


# (largest length, opcode, length format)
_PUSHDATA = (
    (0xFF, Opcode.OP_PUSHDATA1, "<B"),
    (0xFFFF, Opcode.OP_PUSHDATA2, "<H"),
    (0xFFFF_FFFF, Opcode.OP_PUSHDATA4, "<I"),
)


def op_push(length: int) -> bytes:
    """Return the instruction that pushes the next `length` bytes."""
    if length < Opcode.OP_PUSHDATA1:
        return bytes([length])
    for limit, opcode, fmt in _PUSHDATA:
        if length <= limit:
            return bytes([opcode]) + struct.pack(fmt, length)
    raise ValueError(f"Cannot push {length} bytes")


def build_op_push(data: bytes) -> bytes:
    return op_push(len(data)) + data


def small_int_opcode(n: int) -> int:
    """Opcode that pushes one of -1, 0, 1..16."""
    if n == 0:
        return Opcode.OP_0
    if n == -1:
        return Opcode.OP_1NEGATE
    if 1 <= n <= 16:
        return Opcode.OP_1 + n - 1
    raise ValueError(f"{n} has no small integer opcode")


def script_num(n: int) -> bytes:
    """Serialize an integer as a script number.

    Little-endian magnitude, with the sign carried in the top bit of the
    last byte. Zero is the empty byte string.
    """
    if n == 0:
        return b""
    negative = n < 0
    magnitude = abs(n)
    result = bytearray()
    while magnitude:
        result.append(magnitude & 0xFF)
        magnitude >>= 8
    if result[-1] & 0x80:
        result.append(0x80 if negative else 0x00)
    elif negative:
        result[-1] |= 0x80
    return bytes(result)


def build_script_num(n: int) -> bytes:
    """Push a serialized script number as data, whatever its value."""
    return build_op_push(script_num(n))


def build_script_int(n: int) -> bytes:
    """Push an integer the way a script builder does.

    0, -1 and 1..16 become single opcodes, anything else is pushed
    as a script number.
    """
    if -1 <= n <= 16:
        return bytes([small_int_opcode(n)])
    return build_script_num(n)


def iter_pushes(script: bytes) -> t.Iterator[bytes]:
    """Yield the data pushed by a push-only script.

    Small integer opcodes yield their script number encoding. Any other
    opcode, or a push running past the end of the script, is a ValueError.
    """
    pos = 0
    while pos < len(script):
        opcode = script[pos]
        pos += 1
        if opcode < Opcode.OP_PUSHDATA1:
            length = opcode
        elif opcode in (Opcode.OP_PUSHDATA1, Opcode.OP_PUSHDATA2, Opcode.OP_PUSHDATA4):
            fmt = _PUSHDATA[opcode - Opcode.OP_PUSHDATA1][2]
            size = struct.calcsize(fmt)
            if pos + size > len(script):
                raise ValueError("Truncated push length")
            (length,) = struct.unpack_from(fmt, script, pos)
            pos += size
        elif opcode == Opcode.OP_1NEGATE or Opcode.OP_1 <= opcode <= Opcode.OP_16:
            yield script_num(opcode - Opcode.OP_1 + 1)
            continue
        else:
            raise ValueError(f"Not a push opcode: 0x{opcode:02x}")

        if pos + length > len(script):
            raise ValueError("Push runs past the end of the script")
        yield script[pos : pos + length]
        pos += length
