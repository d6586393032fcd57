from __future__ import annotations


class ChainParamsError(Exception):
    pass


class ConfigurationError(ChainParamsError):
    """Compiled-in network constants are inconsistent.

    Raised while the parameter sets are built. The process must not go on
    running with such a build.
    """


class SelectionError(ChainParamsError):
    """Network selection was used out of order."""


class VerificationError(ChainParamsError):
    """The block storage in a data directory failed verification."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class BlockFileError(VerificationError):
    """The block file could not be opened or read."""


class BlockFormatError(VerificationError):
    """The block file does not hold a well-formed record for this network."""


class GenesisMismatchError(VerificationError):
    """The stored genesis block belongs to a different chain."""

    def __init__(
        self, message: str, path: str | None = None, *, found: bytes, expected: bytes
    ) -> None:
        super().__init__(message, path)
        self.found = found
        self.expected = expected


__all__ = [
    "ChainParamsError",
    "ConfigurationError",
    "SelectionError",
    "VerificationError",
    "BlockFileError",
    "BlockFormatError",
    "GenesisMismatchError",
]
