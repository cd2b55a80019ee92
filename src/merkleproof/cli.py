"""
merkleproof - CLI Entry Point

Usage:
    merkleproof display <data_file>
    merkleproof verify <data_file> <leaf> <proof_file>
    merkleproof proof <data_file> <index> [--compact]
"""

import argparse
import os
import sys
from collections.abc import Sequence
from pathlib import Path

import structlog

from merkleproof.core.config import settings
from merkleproof.core.errors import MerkleError
from merkleproof.core.logging import setup_logging
from merkleproof.services.dataset import load_proof, load_records
from merkleproof.services.tree_service import TreeService

logger = structlog.get_logger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def display_cmd(args: argparse.Namespace) -> int:
    """Print every node of the flattened tree as (index, digest)."""
    report = TreeService().build_and_report(load_records(args.data_file))
    for node in report.nodes:
        print(node)
    return EXIT_SUCCESS


def verify_cmd(args: argparse.Namespace) -> int:
    """Print 1 if the leaf is a member of the dataset, 0 otherwise."""
    records = load_records(args.data_file)
    proof = load_proof(args.proof_file)
    verified = TreeService().build_and_verify(records, os.fsencode(args.leaf), proof)
    print("1" if verified else "0")
    return EXIT_SUCCESS


def proof_cmd(args: argparse.Namespace) -> int:
    """Print the inclusion proof for one leaf, leaf to root."""
    try:
        proof = TreeService().build_proof(load_records(args.data_file), args.index)
    except IndexError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    entries = proof.to_compact() if args.compact else [d.hex for d in proof.digests]
    for entry in entries:
        print(entry)
    return EXIT_SUCCESS


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="merkleproof",
        description="Build Merkle trees over datasets and verify membership proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {settings.VERSION}"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    display_parser = subparsers.add_parser(
        "display",
        help="Displays the Merkle tree from provided dataset",
    )
    display_parser.add_argument("data_file", type=Path, help="Newline-delimited dataset")
    display_parser.set_defaults(func=display_cmd)

    verify_parser = subparsers.add_parser(
        "verify",
        help="Verifies a membership proof against the given Merkle tree",
    )
    verify_parser.add_argument("data_file", type=Path, help="Newline-delimited dataset")
    verify_parser.add_argument("leaf", type=str, help="Candidate record")
    verify_parser.add_argument(
        "proof_file",
        type=Path,
        help="Proof file: one hex digest per line, leaf to root (optionally L:/R: prefixed)",
    )
    verify_parser.set_defaults(func=verify_cmd)

    proof_parser = subparsers.add_parser(
        "proof",
        help="Prints the membership proof for a leaf",
    )
    proof_parser.add_argument("data_file", type=Path, help="Newline-delimited dataset")
    proof_parser.add_argument("index", type=int, help="Leaf index (0-based)")
    proof_parser.add_argument(
        "--compact",
        action="store_true",
        default=False,
        help="Prefix each digest with its direction (L: or R:)",
    )
    proof_parser.set_defaults(func=proof_cmd)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    try:
        return args.func(args)
    except MerkleError as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
