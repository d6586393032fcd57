import construct as c
import pytest

from chainparams import opcodes, utils

COMPACT_UINT_VECTORS = (
    (0, "00"),
    (0xFC, "fc"),
    (0xFD, "fdfd00"),
    (0xFFFF, "fdffff"),
    (0x10000, "fe00000100"),
    (0xFFFF_FFFF, "feffffffff"),
    (0x1_0000_0000, "ff0000000001000000"),
)


@pytest.mark.parametrize("value, encoded", COMPACT_UINT_VECTORS)
def test_compact_uint(value, encoded):
    assert utils.CompactUint.build(value).hex() == encoded
    assert utils.CompactUint.parse(bytes.fromhex(encoded)) == value


def test_compact_uint_too_big():
    with pytest.raises(ValueError):
        utils.CompactUint.build(2**64)


@pytest.mark.parametrize(
    "encoded",
    ["fd0100", "fdfc00", "feffff0000", "ff0000000000000000", "ffffffffff00000000"],
)
def test_compact_uint_non_canonical(encoded):
    with pytest.raises(c.ValidationError, match="Non-canonical"):
        utils.CompactUint.parse(bytes.fromhex(encoded))


def test_hash256():
    assert (
        utils.hash256(b"").hex()
        == "5df6e0e2761359d30a8275058e299fcc0381534545f55cf43e41983f5d4c9456"
    )


def test_hash256_field_is_reversed():
    data = bytes(range(32))
    assert utils.Hash256.build(data) == data[::-1]
    assert utils.Hash256.parse(data[::-1]) == data


def test_uint256_from_hex():
    value = "30ef80527cafd9e8685412f85e30efc2ffbfa15398c2852fe5ba0ace7f6cb741"
    assert utils.uint256_from_hex(value) == bytes.fromhex(value)
    assert utils.uint256_from_hex("0x" + value) == bytes.fromhex(value)
    assert utils.uint256_to_int(bytes.fromhex(value)) == int(value, 16)


@pytest.mark.parametrize("value", ["", "0x1234", "00" * 33, "zz" * 32])
def test_uint256_from_hex_invalid(value):
    with pytest.raises(ValueError):
        utils.uint256_from_hex(value)


SCRIPT_NUM_VECTORS = (
    (0, ""),
    (1, "01"),
    (-1, "81"),
    (127, "7f"),
    (128, "8000"),
    (-128, "8080"),
    (255, "ff00"),
    (256, "0001"),
    (486604799, "ffff001d"),
)


@pytest.mark.parametrize("n, encoded", SCRIPT_NUM_VECTORS)
def test_script_num(n, encoded):
    assert opcodes.script_num(n).hex() == encoded


def test_build_script_int_small_numbers():
    assert opcodes.build_script_int(0) == b"\x00"
    assert opcodes.build_script_int(-1) == b"\x4f"
    assert opcodes.build_script_int(4) == b"\x54"
    assert opcodes.build_script_int(16) == b"\x60"
    assert opcodes.build_script_int(17) == b"\x01\x11"


def test_build_script_num_always_pushes_data():
    assert opcodes.build_script_num(4) == b"\x01\x04"
    assert opcodes.build_script_num(486604799).hex() == "04ffff001d"


@pytest.mark.parametrize(
    "length, header",
    [(0, "00"), (75, "4b"), (76, "4c4c"), (255, "4cff"), (256, "4d0001"), (0x10000, "4e00000100")],
)
def test_op_push(length, header):
    assert opcodes.op_push(length).hex() == header


@pytest.mark.parametrize("length", [0, 1, 75, 76, 300, 0x10000])
def test_iter_pushes_data(length):
    data = b"\x42" * length
    assert list(opcodes.iter_pushes(opcodes.build_op_push(data))) == [data]


def test_iter_pushes_numbers():
    script = (
        opcodes.build_script_int(486604799)
        + opcodes.build_script_num(4)
        + opcodes.build_script_int(-1)
        + opcodes.build_script_int(16)
    )
    assert list(opcodes.iter_pushes(script)) == [
        bytes.fromhex("ffff001d"),
        b"\x04",
        b"\x81",
        b"\x10",
    ]


@pytest.mark.parametrize("script", [b"\x05abc", b"\x4c", b"\x4d\x01", b"\x4c\x05ab", b"\x76"])
def test_iter_pushes_invalid(script):
    with pytest.raises(ValueError):
        list(opcodes.iter_pushes(script))


@pytest.mark.parametrize("n, opcode", [(0, 0x00), (-1, 0x4F), (1, 0x51), (16, 0x60)])
def test_small_int_opcode(n, opcode):
    assert opcodes.small_int_opcode(n) == opcode


@pytest.mark.parametrize("n", [17, -2])
def test_small_int_opcode_invalid(n):
    with pytest.raises(ValueError):
        opcodes.small_int_opcode(n)
