#!/usr/bin/env python3
"""
Command-line tools for inspecting trie records offline.
"""

import argparse
import logging
import sys

from .config import LOG_LEVELS, load_config, validate_config
from .contract import TrieContract
from .datum import Datum, Action, OutputReference
from .exceptions import TrieError
from .identity import token_name

logger = logging.getLogger(__name__)


def setup_logging(log_level="INFO"):
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="utxo-trie - tools for tries stored as UTxOs"
    )

    parser.add_argument(
        "--config",
        "-c",
        help="Path to configuration file",
        default=None
    )

    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Set logging level"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    token = commands.add_parser("token-name", help="Derive the asset name of a trie from its seed UTxO")
    token.add_argument("tx_hash", help="Seed transaction hash (hex)")
    token.add_argument("index", type=int, help="Seed output index")

    commands.add_parser("script-info", help="Show script hash, policy id and addresses of the configured validator")

    encode = commands.add_parser("encode-node", help="Encode a node datum")
    encode.add_argument("key", help="Full key of the node")
    encode.add_argument("children", nargs="*", help="Child suffixes")

    decode = commands.add_parser("decode", help="Decode a datum or redeemer")
    decode.add_argument("cbor", help="CBOR (hex)")

    return parser.parse_args(argv)


def _decode(raw):
    try:
        return Datum.decode(raw)
    except TrieError:
        logger.debug("Not a datum, trying as an action")
        return Action.decode(raw)


def run(args, config):
    if args.command == "token-name":
        reference = OutputReference(bytes.fromhex(args.tx_hash), args.index)
        print(token_name(reference).hex())

    elif args.command == "script-info":
        contract = TrieContract.from_config(config)
        print(f"script hash:    {contract.script_hash.hex()}")
        print(f"policy id:      {contract.policy_id.hex()}")
        print(f"address:        {contract.address.hex()}")
        print(f"reward address: {contract.reward_address.hex()}")

    elif args.command == "encode-node":
        children = sorted(set(c.encode('utf-8') for c in args.children))
        print(Datum.Node(args.key.encode('utf-8'), children).encode().hex())

    elif args.command == "decode":
        print(repr(_decode(bytes.fromhex(args.cbor))))


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
        if args.log_level:
            config["log_level"] = args.log_level
        validate_config(config)
    except (RuntimeError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config["log_level"])

    try:
        run(args, config)
    except (TrieError, ValueError, KeyError, OSError) as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
