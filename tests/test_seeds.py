import ipaddress
import random

import pytest

from chainparams import seeds
from chainparams.network import MAIN, REGTEST, TEST, UNITTEST
from chainparams.seeds import DNSSeed, SeedSpec


def test_ipv4_seed_is_mapped():
    spec = SeedSpec.from_host("1.2.3.4", 32201)
    assert spec.address == b"\x00" * 10 + b"\xff\xff" + bytes([1, 2, 3, 4])
    assert spec.ip_address() == ipaddress.IPv4Address("1.2.3.4")


def test_ipv6_seed():
    spec = SeedSpec.from_host("2001:db8::1", 32203)
    assert spec.ip_address() == ipaddress.IPv6Address("2001:db8::1")
    assert spec.port == 32203


@pytest.mark.parametrize(
    "address, port",
    [(b"\x00" * 4, 32201), (b"\x00" * 16, 0), (b"\x00" * 16, 0x10000)],
)
def test_invalid_seed_spec(address, port):
    with pytest.raises(ValueError):
        SeedSpec(address, port)


def test_load_fixed_seeds_last_seen():
    now = 1_700_000_000
    specs = [SeedSpec.from_host(f"10.0.0.{i}", 32201) for i in range(1, 50)]
    fixed = seeds.load_fixed_seeds(specs, now=now, rng=random.Random(1))
    assert len(fixed) == len(specs)
    for spec, seed in zip(specs, fixed):
        assert seed.address == spec.ip_address()
        assert seed.port == 32201
        assert now - 2 * seeds.ONE_WEEK < seed.last_seen <= now - seeds.ONE_WEEK


def test_network_seeds():
    assert MAIN.dns_seeds[0] == DNSSeed("dns1", "dns01.bare.network")
    assert [seed.host for seed in MAIN.dns_seeds] == [
        "dns01.bare.network",
        "dns02.bare.network",
        "dns03.bare.network",
        "dns04.bare.network",
        "zxsow7urhijswnvp.onion",
    ]
    assert TEST.dns_seeds == (DNSSeed("testnetdns", "testnetdns.bare.network"),)
    assert REGTEST.dns_seeds == ()
    assert UNITTEST.dns_seeds == ()
    assert REGTEST.fixed_seeds == ()
    assert UNITTEST.fixed_seeds == ()
