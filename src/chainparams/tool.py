"""Maintenance command line for the network parameters."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import typing as t
from dataclasses import replace

from .blockfile import block_file_path, verify_genesis, write_block_record
from .exceptions import ChainParamsError, VerificationError
from .genesis import coinbase_message, discover_genesis
from .network import NetworkId, NetworkParameters
from .registry import lookup_network

LOG = logging.getLogger(__name__)


def describe(params: NetworkParameters) -> dict[str, t.Any]:
    """Summarize a parameter set as JSON-friendly values."""
    return {
        "name": params.name,
        "message_start": params.message_start.hex(),
        "default_port": params.default_port,
        "bech32_hrp": params.bech32_hrp,
        "genesis_hash": params.genesis_hash.hex(),
        "genesis_merkle_root": params.genesis_merkle_root.hex(),
        "genesis_time": params.genesis.timestamp,
        "genesis_nonce": params.genesis.nonce,
        "genesis_bits": f"0x{params.genesis.bits:08x}",
        "genesis_message": coinbase_message(params.genesis),
        "target_timespan": params.target_timespan,
        "target_spacing": params.target_spacing,
        "interval": params.interval,
        "maturity": params.maturity,
        "last_pow_block": params.last_pow_block,
        "max_money_out": params.max_money_out,
        "dns_seeds": [seed.host for seed in params.dns_seeds],
        "checkpoints": {
            str(height): block_hash.hex()
            for height, block_hash in params.checkpoints.items()
        },
    }


def _show(args: argparse.Namespace) -> int:
    print(json.dumps(describe(args.params), indent=2))
    return 0


def _mine_genesis(args: argparse.Namespace) -> int:
    template = args.params.genesis_template
    if args.time is not None:
        template = replace(template, timestamp=args.time)
    if args.nonce is not None:
        template = replace(template, nonce=args.nonce)

    block = discover_genesis(template)
    print(f"nonce={block.nonce}")
    print(f"time={block.timestamp}")
    print(f"hash=0x{block.get_hash().hex()}")
    print(f"merkle=0x{block.merkle_root.hex()}")
    return 0


def _verify_genesis(args: argparse.Namespace) -> int:
    params = args.params
    try:
        verify_genesis(args.datadir, params.genesis_hash, network=params)
    except VerificationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    print(f"{block_file_path(args.datadir)}: genesis block of {params.name} OK")
    return 0


def _write_genesis(args: argparse.Namespace) -> int:
    params = args.params
    path = block_file_path(args.datadir)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        write_block_record(f, params.genesis, params.message_start)
    LOG.info("Wrote genesis block of %s to %s", params.name, path)
    print(path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    networks = [network_id.value for network_id in NetworkId]

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--network", choices=networks, default=NetworkId.MAIN.value)

    parser = argparse.ArgumentParser(
        prog="chainparams", description="Inspect and verify network parameters."
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", parents=[common], help="print network constants")
    show.set_defaults(func=_show)

    mine = sub.add_parser(
        "mine-genesis", parents=[common], help="search for a genesis nonce"
    )
    mine.add_argument("--time", type=int, help="starting block time")
    mine.add_argument("--nonce", type=int, help="starting nonce")
    mine.set_defaults(func=_mine_genesis)

    verify = sub.add_parser(
        "verify-genesis", parents=[common], help="check the genesis block on disk"
    )
    verify.add_argument("--datadir", required=True)
    verify.set_defaults(func=_verify_genesis)

    write = sub.add_parser(
        "write-genesis", parents=[common], help="write a block file with the genesis block"
    )
    write.add_argument("--datadir", required=True)
    write.set_defaults(func=_write_genesis)

    return parser


def main(argv: t.Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        args.params = lookup_network(args.network)
        return args.func(args)
    except ChainParamsError as e:
        parser.exit(1, f"error: {e}\n")


if __name__ == "__main__":
    sys.exit(main())
