"""Per-network constants.

`MAIN` is written out in full. The other networks are derived from it by
applying an explicit record of overrides to a copy, so every instance is a
complete, independent value.

Building a parameter set rebuilds its genesis block and checks it against
the compiled-in hash and Merkle root. A mismatch raises `ConfigurationError`
while this module is imported.
"""

from __future__ import annotations

import typing as t
from dataclasses import dataclass, field, fields
from enum import Enum

from ecdsa import SECP256k1, VerifyingKey
from ecdsa.keys import MalformedPointError

from . import base58
from .base58 import Base58Type
from .block import Block, check_proof_of_work
from .checkpoints import CheckpointTable
from .exceptions import ConfigurationError, SelectionError
from .genesis import GenesisTemplate, build_genesis, check_genesis
from .seeds import MAIN_SEEDS, TEST_SEEDS, DNSSeed, FixedSeed, SeedSpec, load_fixed_seeds
from .utils import uint256_from_hex

COIN = 100_000_000

BLOCKCHAIN_SIZE_ESTIMATE = 1_000_000_000
"""Rough size of the block chain in bytes, used to warn about disk space."""


class NetworkId(Enum):
    MAIN = "main"
    TEST = "test"
    REGTEST = "regtest"
    UNITTEST = "unittest"

    @classmethod
    def from_name(cls, name: str) -> NetworkId:
        try:
            return cls(name)
        except ValueError:
            raise SelectionError(f"Unknown network: {name!r}") from None

    @classmethod
    def from_flags(cls, testnet: bool = False, regtest: bool = False) -> NetworkId:
        """Pick a network the way -testnet / -regtest command-line flags do."""
        if testnet and regtest:
            raise SelectionError("Invalid combination of -regtest and -testnet.")
        if regtest:
            return cls.REGTEST
        if testnet:
            return cls.TEST
        return cls.MAIN


@dataclass(frozen=True)
class Base58Prefixes:
    """Version bytes prepended before base58check encoding."""

    pubkey_address: bytes
    script_address: bytes
    secret_key: bytes
    ext_public_key: bytes
    ext_secret_key: bytes
    ext_coin_type: bytes

    def get(self, kind: Base58Type) -> bytes:
        return getattr(self, kind.value)


def _decode_pubkey(key: str, what: str) -> VerifyingKey:
    try:
        return VerifyingKey.from_string(bytes.fromhex(key), curve=SECP256k1)
    except (ValueError, MalformedPointError) as e:
        raise ConfigurationError(f"Invalid {what}: {key}") from e


@dataclass(frozen=True)
class NetworkParameters:
    # identity
    network_id: NetworkId
    name: str
    message_start: bytes
    default_port: int
    bech32_hrp: str
    alert_pubkey: str

    # consensus timing
    pow_limit: int
    max_reorganization_depth: int
    enforce_block_upgrade_majority: int
    reject_block_outdated_majority: int
    to_check_block_upgrade_majority: int
    miner_threads: int
    target_timespan: int
    target_spacing: int
    maturity: int
    last_pow_block: int
    modifier_update_block: int

    # economics
    max_money_out: int

    # genesis
    genesis_template: GenesisTemplate
    genesis_hash: bytes
    genesis_merkle_root: bytes

    # encoding
    base58_prefixes: Base58Prefixes

    # discovery
    dns_seeds: tuple[DNSSeed, ...]
    seed_specs: tuple[SeedSpec, ...]

    # flags
    mining_requires_peers: bool
    allow_min_difficulty_blocks: bool
    default_consistency_checks: bool
    require_standard: bool
    mine_blocks_on_demand: bool
    skip_proof_of_work_check: bool
    testnet_to_be_deprecated_field_rpc: bool
    headers_first_syncing_active: bool

    # governance
    pool_max_transactions: int
    spork_key: str
    spork_key_temp: str
    obfuscation_pool_dummy_address: str
    masternode_count_drift: int
    budget_fee_confirmations: int

    checkpoints: CheckpointTable
    bootstrap_url: str

    genesis: Block = field(init=False, repr=False)
    fixed_seeds: tuple[FixedSeed, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.message_start) != 4:
            raise ConfigurationError(f"{self.name}: message start must be 4 bytes")

        genesis = build_genesis(self.genesis_template)
        check_genesis(
            genesis, self.genesis_hash, self.genesis_merkle_root, label=self.name
        )
        if self.checkpoints.get(0) != self.genesis_hash:
            raise ConfigurationError(
                f"{self.name}: checkpoint at height 0 is not the genesis block"
            )

        object.__setattr__(self, "genesis", genesis)
        object.__setattr__(self, "fixed_seeds", load_fixed_seeds(self.seed_specs))

    @property
    def interval(self) -> int:
        """Number of blocks between difficulty retargets."""
        return self.target_timespan // self.target_spacing

    @property
    def coin(self) -> int:
        return COIN

    def money_range(self, value: int) -> bool:
        return 0 <= value <= self.max_money_out

    def is_proof_of_work_height(self, height: int) -> bool:
        return height <= self.last_pow_block

    def check_proof_of_work(self, block_hash: bytes, bits: int) -> bool:
        if self.skip_proof_of_work_check:
            return True
        return check_proof_of_work(block_hash, bits, self.pow_limit)

    def base58_prefix(self, kind: Base58Type) -> bytes:
        return self.base58_prefixes.get(kind)

    def encode_base58(self, kind: Base58Type, payload: bytes) -> str:
        return base58.b58check_encode(self.base58_prefix(kind) + payload)

    def decode_base58(self, kind: Base58Type, text: str) -> bytes:
        """Decode base58check data and strip this network's prefix for `kind`."""
        prefix = self.base58_prefix(kind)
        data = base58.b58check_decode(text)
        if not data.startswith(prefix):
            raise ValueError(f"Not a {kind.name} on {self.name}")
        return data[len(prefix) :]

    def spork_verifying_key(self, *, temp: bool = False) -> VerifyingKey:
        key = self.spork_key_temp if temp else self.spork_key
        return _decode_pubkey(key, "spork key")

    def alert_verifying_key(self) -> VerifyingKey:
        return _decode_pubkey(self.alert_pubkey, "alert key")


@dataclass(frozen=True, eq=False)
class UnitTestParameters(NetworkParameters):
    """Parameters of the unit test network.

    Unlike the other networks, a handful of values can be changed after
    construction so that tests can exercise different consensus settings.
    """

    # setters change fields, so hash by identity
    __hash__ = object.__hash__

    def _set(self, name: str, value: t.Any) -> None:
        object.__setattr__(self, name, value)

    def set_enforce_block_upgrade_majority(self, value: int) -> None:
        self._set("enforce_block_upgrade_majority", value)

    def set_reject_block_outdated_majority(self, value: int) -> None:
        self._set("reject_block_outdated_majority", value)

    def set_to_check_block_upgrade_majority(self, value: int) -> None:
        self._set("to_check_block_upgrade_majority", value)

    def set_default_consistency_checks(self, value: bool) -> None:
        self._set("default_consistency_checks", value)

    def set_allow_min_difficulty_blocks(self, value: bool) -> None:
        self._set("allow_min_difficulty_blocks", value)

    def set_skip_proof_of_work_check(self, value: bool) -> None:
        self._set("skip_proof_of_work_check", value)


P = t.TypeVar("P", bound=NetworkParameters)


def derive(
    base: NetworkParameters,
    overrides: t.Mapping[str, t.Any],
    *,
    cls: type[P] = NetworkParameters,  # type: ignore[assignment]
) -> P:
    """Build a new parameter set from all fields of `base` plus `overrides`."""
    names = {f.name for f in fields(base) if f.init}
    unknown = set(overrides) - names
    if unknown:
        raise ConfigurationError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")
    values = {name: getattr(base, name) for name in names}
    values.update(overrides)
    return cls(**values)


def estimated_blockchain_size() -> int:
    return BLOCKCHAIN_SIZE_ESTIMATE


GENESIS_MESSAGE = (
    "BARE v2, The Adult Coin - Bitcoin Block 621074 - "
    "000000000000000000020f62ea032afcca69a64f1e012f63a1a1aa9a486d1e66"
)
GENESIS_MERKLE_ROOT = uint256_from_hex(
    "0xbfe8624eaa27b3eb3f6258bca5f866147660de77582088229d865399c9d4c3eb"
)

MAIN_GENESIS_HASH = uint256_from_hex(
    "0x30ef80527cafd9e8685412f85e30efc2ffbfa15398c2852fe5ba0ace7f6cb741"
)
TEST_GENESIS_HASH = uint256_from_hex(
    "0x554ec25d2f508143b7b137727a0f04052c405b01a1e3a2a42eebf943c316266d"
)
REGTEST_GENESIS_HASH = uint256_from_hex(
    "0x6a7fd108b4ef0aab9ce43734d66a04dc83ac4c49a5b3a3e23387dbfcdcaca765"
)

# What makes a good checkpoint block?
# + Is surrounded by blocks with reasonable timestamps
#   (no blocks before with a timestamp after, none after with
#    timestamp before)
# + Contains no strange transactions
MAIN_CHECKPOINTS = CheckpointTable.from_hex(
    [
        (0, "30ef80527cafd9e8685412f85e30efc2ffbfa15398c2852fe5ba0ace7f6cb741"),
        (46028, "d7b8aa83b193e4dfa7ba0b663ee0188a5f29b5a06bda34901c698aa7c7b5c245"),
        (95015, "5ef62dd9404ab16a2b810011cd2eead361280a43557945df1d44cf51b8edfc3b"),
        (151978, "a80a559478d02adc7130d5859dcd9847561c1ab84dd7750ba1a604b817a77c62"),
        (218512, "6f4064590ac7d130a56a32bcec43d578c2b1ae51eb440636d4b019874dbeceef"),
        (313388, "787f8254c99998b65dc7fc66065f8134be33b36fe331147cd0747295dd8b6325"),
        (468790, "79e10eb4729fe00b97197c13ec23ba20d9d86c47c5e005cb8f9adf3f849f56cb"),
        (500175, "68d5f1216a1fbf44c29f9d1c24afe22abc70cbc769989b1da3666cc818b606be"),
        (964891, "52913ee603c8e7f220fd4beb0591272bda859b8e6438c3f1b0abaefab243289a"),
    ],
    last_checkpoint_time=1642437487,
    transactions_at_checkpoint=2053000,
    transactions_per_day=1600,
)

TEST_CHECKPOINTS = CheckpointTable.from_hex(
    [(0, "554ec25d2f508143b7b137727a0f04052c405b01a1e3a2a42eebf943c316266d")],
    last_checkpoint_time=1581171337,
    transactions_at_checkpoint=0,
    transactions_per_day=250,
)

REGTEST_CHECKPOINTS = CheckpointTable.from_hex(
    [(0, "6a7fd108b4ef0aab9ce43734d66a04dc83ac4c49a5b3a3e23387dbfcdcaca765")],
    last_checkpoint_time=1581171338,
    transactions_at_checkpoint=0,
    transactions_per_day=100,
)

MAIN_SPORK_KEY = (
    "048a6bf259eac7886037b9daad4d43856eeab0c1408671436f1f24a067d8dadf79"
    "ef721f0eb053b5444e01932387e2c6c03466bf0dbbdeba84302434fd3e28b077"
)
TEST_SPORK_KEY = (
    "044555edf92189a03a509d89ab69e76148c7b4f59291e2195736b43e968694a80e"
    "11e927c8cd1dd605bc3c6809a1cadb330d230fb7a3d4a98833c5940641895abd"
)
REGTEST_SPORK_KEY = (
    "041d6a87defe52522360ce74e5215df97fd3e167b71509b883c6c43f65666b15b5"
    "e7897cab47331d48bf50352b8d0d6d51769c12a422126ce5087e4b605de83cb9"
)

MAIN = NetworkParameters(
    network_id=NetworkId.MAIN,
    name="main",
    # The message start string is designed to be unlikely to occur in normal data.
    # The characters are rarely used upper ASCII, not valid as UTF-8, and produce
    # a large 4-byte int at any alignment.
    message_start=bytes([0x25, 0x65, 0x72, 0x34]),
    default_port=32201,
    bech32_hrp="bare",
    alert_pubkey=(
        "044bcdbe70298b5521ca91a85b97f95212f123b3b68afc8b1903d24e98537f0a82"
        "4db22b41345b29e81d266c24437382c19cc27191049c2473c9f500f9addd6a41"
    ),
    pow_limit=(2**256 - 1) >> 1,
    max_reorganization_depth=100,
    enforce_block_upgrade_majority=750,
    reject_block_outdated_majority=950,
    to_check_block_upgrade_majority=1000,
    miner_threads=0,
    target_timespan=24 * 60 * 60,  # 1 day
    target_spacing=1 * 60,  # 60 seconds
    maturity=50,
    last_pow_block=500,
    modifier_update_block=1,
    max_money_out=1_410_000 * COIN,
    genesis_template=GenesisTemplate(
        message=GENESIS_MESSAGE,
        timestamp=1584227334,  # Saturday, March 14, 2020 11:08:54 PM GMT
        bits=0x207FFFFF,
        nonce=0,
    ),
    genesis_hash=MAIN_GENESIS_HASH,
    genesis_merkle_root=GENESIS_MERKLE_ROOT,
    base58_prefixes=Base58Prefixes(
        pubkey_address=bytes([25]),
        script_address=bytes([16]),
        secret_key=bytes([110]),
        ext_public_key=bytes([0x04, 0x88, 0xB2, 0x1E]),
        ext_secret_key=bytes([0x04, 0x88, 0xAD, 0xE4]),
        # SLIP-0044 coin type 475
        ext_coin_type=bytes([0x80, 0x00, 0x01, 0xDB]),
    ),
    dns_seeds=(
        DNSSeed("dns1", "dns01.bare.network"),
        DNSSeed("dns2", "dns02.bare.network"),
        DNSSeed("dns3", "dns03.bare.network"),
        DNSSeed("dns4", "dns04.bare.network"),
        DNSSeed("onion", "zxsow7urhijswnvp.onion"),
    ),
    seed_specs=MAIN_SEEDS,
    mining_requires_peers=True,
    allow_min_difficulty_blocks=False,
    default_consistency_checks=False,
    require_standard=True,
    mine_blocks_on_demand=False,
    skip_proof_of_work_check=False,
    testnet_to_be_deprecated_field_rpc=False,
    headers_first_syncing_active=False,
    pool_max_transactions=3,
    spork_key=MAIN_SPORK_KEY,
    spork_key_temp=MAIN_SPORK_KEY,
    obfuscation_pool_dummy_address="BPTA3JSwXuzHWs56xU7v1ezAWoBFeYXmKV",
    masternode_count_drift=20,
    budget_fee_confirmations=6,  # for the finalization fee
    checkpoints=MAIN_CHECKPOINTS,
    bootstrap_url="https://bootstrap.bare.network/v2/mainnet",
)

TEST_OVERRIDES: dict[str, t.Any] = dict(
    network_id=NetworkId.TEST,
    name="test",
    message_start=bytes([0xCE, 0xFF, 0xCA, 0x44]),
    alert_pubkey=(
        "046dce17c38e0f92e6aaa7b744aaaa8be89a007a2e66d62b3944c659239d87e372"
        "1bd429a7f1f7cdf02763f3aaa7e8d6f4ac9541f6b9aa78b21b9b1e12fab307b8"
    ),
    default_port=32203,
    enforce_block_upgrade_majority=51,
    reject_block_outdated_majority=75,
    to_check_block_upgrade_majority=100,
    target_timespan=6 * 60 * 60,  # 6 hours
    target_spacing=1 * 30,  # 30 seconds
    maturity=15,
    masternode_count_drift=4,
    modifier_update_block=51197,
    max_money_out=1_500_000 * COIN,
    last_pow_block=250,
    genesis_template=GenesisTemplate(
        message=GENESIS_MESSAGE,
        timestamp=1581171337,  # Saturday, February 8, 2020 2:15:37 PM GMT
        bits=0x207FFFFF,
        nonce=0,
    ),
    genesis_hash=TEST_GENESIS_HASH,
    dns_seeds=(DNSSeed("testnetdns", "testnetdns.bare.network"),),
    seed_specs=TEST_SEEDS,
    base58_prefixes=Base58Prefixes(
        pubkey_address=bytes([139]),  # addresses start with 'x' or 'y'
        script_address=bytes([19]),  # script addresses start with '8' or '9'
        secret_key=bytes([239]),  # private keys start with '9' or 'c'
        ext_public_key=bytes([0x3A, 0x80, 0x61, 0xA0]),  # 'DRKV'
        ext_secret_key=bytes([0x3A, 0x80, 0x58, 0x37]),  # 'DRKP'
        ext_coin_type=bytes([0x80, 0x00, 0x00, 0x01]),
    ),
    bech32_hrp="tbare",
    mining_requires_peers=True,
    allow_min_difficulty_blocks=True,
    default_consistency_checks=False,
    require_standard=True,
    mine_blocks_on_demand=False,
    testnet_to_be_deprecated_field_rpc=True,
    pool_max_transactions=2,
    spork_key=TEST_SPORK_KEY,
    spork_key_temp=TEST_SPORK_KEY,
    obfuscation_pool_dummy_address="7vRzZ63yCrXCf8C8sXnCuLbLf4L2kemrLkmF4MJp22JVG93VHdi",
    # testnet only has an 8 block finalization window
    budget_fee_confirmations=3,
    checkpoints=TEST_CHECKPOINTS,
    bootstrap_url="https://bootstrap.bare.network/v2/testnet",
)

TEST = derive(MAIN, TEST_OVERRIDES)

REGTEST_OVERRIDES: dict[str, t.Any] = dict(
    network_id=NetworkId.REGTEST,
    name="regtest",
    message_start=bytes([0x54, 0x14, 0x64, 0x95]),
    enforce_block_upgrade_majority=750,
    reject_block_outdated_majority=950,
    to_check_block_upgrade_majority=1000,
    miner_threads=1,
    target_timespan=24 * 60 * 60,  # 1 day
    target_spacing=1 * 60,  # 1 minute
    pow_limit=(2**256 - 1) >> 1,
    genesis_template=GenesisTemplate(
        message=GENESIS_MESSAGE,
        timestamp=1581171338,  # Saturday, February 8, 2020 2:15:38 PM GMT
        bits=0x207FFFFF,
        nonce=1,
    ),
    genesis_hash=REGTEST_GENESIS_HASH,
    maturity=0,
    # proof of stake complicates regtest because of timing issues
    last_pow_block=999999999,
    default_port=32205,
    bech32_hrp="bart",
    dns_seeds=(),
    seed_specs=(),
    mining_requires_peers=False,
    allow_min_difficulty_blocks=True,
    default_consistency_checks=True,
    require_standard=False,
    mine_blocks_on_demand=True,
    testnet_to_be_deprecated_field_rpc=False,
    spork_key=REGTEST_SPORK_KEY,
    spork_key_temp=REGTEST_SPORK_KEY,
    checkpoints=REGTEST_CHECKPOINTS,
)

REGTEST = derive(TEST, REGTEST_OVERRIDES)

UNITTEST_OVERRIDES: dict[str, t.Any] = dict(
    network_id=NetworkId.UNITTEST,
    name="unittest",
    default_port=32207,
    dns_seeds=(),
    seed_specs=(),
    mining_requires_peers=False,
    default_consistency_checks=True,
    allow_min_difficulty_blocks=False,
    mine_blocks_on_demand=True,
)

# shares the genesis block and checkpoints of the main network
UNITTEST = derive(MAIN, UNITTEST_OVERRIDES, cls=UnitTestParameters)

ALL_NETWORKS: tuple[NetworkParameters, ...] = (MAIN, TEST, REGTEST, UNITTEST)
