"""Reading and writing raw block files.

Block files in `<datadir>/blocks/` are a sequence of records: the network
magic, the little-endian length of the serialized block, and the block.
`verify_genesis` checks that the first record of the first file is the
genesis block of the network in use, so that a node never starts on a data
directory that belongs to a different chain.
"""

from __future__ import annotations

import logging
import os
import struct
import typing as t

import construct as c

from .block import HEADER_SIZE, Block
from .exceptions import BlockFileError, BlockFormatError, GenesisMismatchError
from .network import NetworkParameters
from .registry import current_network

LOG = logging.getLogger(__name__)

MAX_BLOCK_SIZE = 2_000_000

_LENGTH = struct.Struct("<I")


def block_file_path(data_dir: str | os.PathLike, number: int = 0) -> str:
    return os.path.join(data_dir, "blocks", f"blk{number:05d}.dat")


def _read_exact(stream: t.BinaryIO, size: int, what: str, path: str | None) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise BlockFormatError(f"Unexpected end of file while reading {what}", path)
    return data


def read_block_record(
    stream: t.BinaryIO, message_start: bytes, *, path: str | None = None
) -> Block:
    """Read one record from a block file and parse its block."""
    magic = _read_exact(stream, len(message_start), "magic", path)
    if magic != message_start:
        raise BlockFormatError(
            f"Bad magic: expected {message_start.hex()}, found {magic.hex()}", path
        )

    (length,) = _LENGTH.unpack(_read_exact(stream, _LENGTH.size, "block size", path))
    if not HEADER_SIZE <= length <= MAX_BLOCK_SIZE:
        raise BlockFormatError(f"Invalid block size {length}", path)

    data = _read_exact(stream, length, "block", path)
    try:
        return Block.parse(data)
    except c.ConstructError as e:
        raise BlockFormatError(f"Malformed block: {e}", path) from e


def write_block_record(stream: t.BinaryIO, block: Block, message_start: bytes) -> None:
    data = block.build()
    stream.write(message_start)
    stream.write(_LENGTH.pack(len(data)))
    stream.write(data)


def verify_genesis(
    data_dir: str | os.PathLike,
    expected_hash: bytes,
    *,
    network: NetworkParameters | None = None,
) -> Block:
    """Check that the data directory starts with the expected genesis block.

    The magic bytes are taken from `network`, or from the active network if
    not given. Returns the stored genesis block.
    """
    if network is None:
        network = current_network()
    path = block_file_path(data_dir)

    try:
        with open(path, "rb") as f:
            block = read_block_record(f, network.message_start, path=path)
    except OSError as e:
        LOG.warning("Unable to read %s: %s", path, e)
        raise BlockFileError(f"Unable to open block file: {e}", path) from e
    except BlockFormatError as e:
        LOG.warning("Invalid genesis record in %s: %s", path, e)
        raise

    found = block.get_hash()
    if found != expected_hash:
        LOG.warning(
            "Genesis block mismatch in %s: found 0x%s, expected 0x%s",
            path,
            found.hex(),
            expected_hash.hex(),
        )
        raise GenesisMismatchError(
            f"Genesis block 0x{found.hex()} does not match 0x{expected_hash.hex()}",
            path,
            found=found,
            expected=expected_hash,
        )

    LOG.debug("Genesis block 0x%s verified in %s", found.hex(), path)
    return block
