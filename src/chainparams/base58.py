"""Base58 and base58check, as used for addresses and keys."""

from __future__ import annotations

import typing as t
from enum import Enum

from .utils import hash256

ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
CHECKSUM_SIZE = 4


class Base58Type(Enum):
    """Kinds of data that get a network-specific base58 version prefix."""

    PUBKEY_ADDRESS = "pubkey_address"
    SCRIPT_ADDRESS = "script_address"
    SECRET_KEY = "secret_key"
    EXT_PUBLIC_KEY = "ext_public_key"
    EXT_SECRET_KEY = "ext_secret_key"
    EXT_COIN_TYPE = "ext_coin_type"


def b58encode(data: bytes) -> str:
    # each leading zero byte is written as the first character of the alphabet
    zeros = len(data) - len(data.lstrip(b"\x00"))
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, digit = divmod(number, len(ALPHABET))
        digits.append(ALPHABET[digit])
    return ALPHABET[0] * zeros + "".join(reversed(digits))


def b58decode(text: str) -> bytes:
    number = 0
    for char in text:
        digit = ALPHABET.find(char)
        if digit < 0:
            raise ValueError(f"Invalid base58 character: {char!r}")
        number = number * len(ALPHABET) + digit
    zeros = len(text) - len(text.lstrip(ALPHABET[0]))
    return b"\x00" * zeros + number.to_bytes((number.bit_length() + 7) // 8, "big")


def b58check_encode(
    data: bytes, *, digest: t.Callable[[bytes], bytes] = hash256
) -> str:
    return b58encode(data + digest(data)[:CHECKSUM_SIZE])


def b58check_decode(
    text: str, *, digest: t.Callable[[bytes], bytes] = hash256
) -> bytes:
    """Decode base58check text and return the payload without its checksum."""
    raw = b58decode(text)
    if len(raw) < CHECKSUM_SIZE:
        raise ValueError("Base58 data too short for a checksum")
    data, checksum = raw[:-CHECKSUM_SIZE], raw[-CHECKSUM_SIZE:]
    if digest(data)[:CHECKSUM_SIZE] != checksum:
        raise ValueError("Invalid base58 checksum")
    return data
