import logging
from dataclasses import replace

import pytest

from chainparams import genesis
from chainparams.block import bits_to_target
from chainparams.exceptions import ConfigurationError
from chainparams.network import GENESIS_MERKLE_ROOT, GENESIS_MESSAGE, MAIN, REGTEST, TEST
from chainparams.opcodes import iter_pushes
from chainparams.transaction import Transaction, TxInput, TxOutput
from chainparams.utils import uint256_to_int

GENESIS_VECTORS = (
    (MAIN, 1584227334, 0, "30ef80527cafd9e8685412f85e30efc2ffbfa15398c2852fe5ba0ace7f6cb741"),
    (TEST, 1581171337, 0, "554ec25d2f508143b7b137727a0f04052c405b01a1e3a2a42eebf943c316266d"),
    (REGTEST, 1581171338, 1, "6a7fd108b4ef0aab9ce43734d66a04dc83ac4c49a5b3a3e23387dbfcdcaca765"),
)


@pytest.mark.parametrize(
    "params, timestamp, nonce, block_hash",
    GENESIS_VECTORS,
    ids=(params.name for params, _, _, _ in GENESIS_VECTORS),
)
def test_build_genesis(params, timestamp, nonce, block_hash):
    block = genesis.build_genesis(params.genesis_template)
    assert block.get_hash().hex() == block_hash
    assert block.merkle_root == GENESIS_MERKLE_ROOT
    assert block.timestamp == timestamp
    assert block.nonce == nonce
    assert block.bits == 0x207FFFFF
    assert block.version == 1
    assert block == params.genesis


def test_coinbase_script():
    script = MAIN.genesis_template.coinbase_script()
    assert script[:7] == bytes.fromhex("04ffff001d0104")
    assert list(iter_pushes(script))[2] == GENESIS_MESSAGE.encode()


@pytest.mark.parametrize("params", [MAIN, TEST, REGTEST], ids=lambda p: p.name)
def test_coinbase_message(params):
    assert genesis.coinbase_message(params.genesis) == GENESIS_MESSAGE


def test_coinbase_message_rejects_other_scripts():
    template = replace(MAIN.genesis_template, message="")
    block = genesis.build_genesis(template)
    assert genesis.coinbase_message(block) == ""
    coinbase = Transaction(
        version=1,
        inputs=(TxInput.coinbase(b"\x01\x04"),),
        outputs=(TxOutput.empty(),),
    )
    with pytest.raises(ValueError):
        genesis.coinbase_message(replace(block, transactions=(coinbase,)))


def test_check_genesis_accepts_matching_block():
    genesis.check_genesis(MAIN.genesis, MAIN.genesis_hash, GENESIS_MERKLE_ROOT)


def test_check_genesis_wrong_hash():
    with pytest.raises(ConfigurationError, match="genesis hash"):
        genesis.check_genesis(TEST.genesis, MAIN.genesis_hash, GENESIS_MERKLE_ROOT)


def test_check_genesis_wrong_merkle_root():
    with pytest.raises(ConfigurationError, match="merkle root"):
        genesis.check_genesis(MAIN.genesis, MAIN.genesis_hash, MAIN.genesis_hash)


def test_check_genesis_logs_details(caplog):
    with caplog.at_level(logging.DEBUG, logger="chainparams.genesis"):
        genesis.check_genesis(
            MAIN.genesis, MAIN.genesis_hash, GENESIS_MERKLE_ROOT, label="main"
        )
    assert MAIN.genesis_hash.hex() in caplog.text


def test_discover_genesis_keeps_valid_template():
    block = genesis.discover_genesis(MAIN.genesis_template)
    assert block == MAIN.genesis


def test_discover_genesis_finds_valid_nonce():
    template = replace(MAIN.genesis_template, bits=0x200FFFFF, nonce=0)
    block = genesis.discover_genesis(template)
    assert uint256_to_int(block.get_hash()) <= bits_to_target(0x200FFFFF)
    assert block.timestamp == template.timestamp
    assert block.merkle_root == GENESIS_MERKLE_ROOT


def _accept_nonce(accepted):
    def fake_hash256(header):
        if int.from_bytes(header[76:80], "little") == accepted:
            return b"\x00" * 32
        return b"\xff" * 32

    return fake_hash256


def test_discover_genesis_nonce_wraps_around(monkeypatch):
    monkeypatch.setattr(genesis, "hash256", _accept_nonce(0))
    template = replace(MAIN.genesis_template, nonce=0xFFFF_FFFF)
    block = genesis.discover_genesis(template)
    assert block.nonce == 0
    assert block.timestamp == template.timestamp + 1


def test_discover_genesis_reports_progress(monkeypatch):
    monkeypatch.setattr(genesis, "hash256", _accept_nonce(5))
    calls = []
    block = genesis.discover_genesis(
        MAIN.genesis_template,
        report_every=2,
        progress=lambda *args: calls.append(args),
    )
    assert block.nonce == 5
    t = MAIN.genesis_template.timestamp
    assert calls == [(2, 2, t), (4, 4, t)]
