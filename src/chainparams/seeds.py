from __future__ import annotations

import ipaddress
import random
import time
import typing as t
from dataclasses import dataclass

ONE_WEEK = 7 * 24 * 60 * 60

IPAddress = t.Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass(frozen=True)
class DNSSeed:
    name: str
    host: str


@dataclass(frozen=True)
class SeedSpec:
    """Entry of a compiled-in fixed seed table.

    `address` is always 16 bytes: IPv4 nodes are stored IPv4-mapped.
    """

    address: bytes
    port: int

    def __post_init__(self) -> None:
        if len(self.address) != 16:
            raise ValueError("Seed address must be 16 bytes")
        if not 0 < self.port <= 0xFFFF:
            raise ValueError("Invalid seed port")

    @classmethod
    def from_host(cls, host: str, port: int) -> SeedSpec:
        ip = ipaddress.ip_address(host)
        if isinstance(ip, ipaddress.IPv4Address):
            ip = ipaddress.IPv6Address(b"\x00" * 10 + b"\xff\xff" + ip.packed)
        return cls(address=ip.packed, port=port)

    def ip_address(self) -> IPAddress:
        ip = ipaddress.IPv6Address(self.address)
        return ip.ipv4_mapped or ip


@dataclass(frozen=True)
class FixedSeed:
    address: IPAddress
    port: int
    last_seen: int


def load_fixed_seeds(
    specs: t.Iterable[SeedSpec],
    *,
    now: int | None = None,
    rng: random.Random | None = None,
) -> tuple[FixedSeed, ...]:
    """Turn a seed table into peer addresses.

    Each seed gets a random "last seen" time between one and two weeks ago.
    A node only needs one or two of them: once connected it learns plenty of
    addresses with fresher timestamps.
    """
    if now is None:
        now = int(time.time())
    if rng is None:
        rng = random.SystemRandom()
    return tuple(
        FixedSeed(
            address=spec.ip_address(),
            port=spec.port,
            last_seen=now - rng.randrange(ONE_WEEK) - ONE_WEEK,
        )
        for spec in specs
    )


# TODO: populate from the crawler output of the DNS seeders
MAIN_SEEDS: tuple[SeedSpec, ...] = ()
TEST_SEEDS: tuple[SeedSpec, ...] = ()
