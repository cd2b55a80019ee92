"""
merkleproof - Dataset Loader

Reads record files and proof files from disk and decodes them into the
values the Merkle core works with.

Record file: newline-delimited raw byte lines.
Proof file: one entry per line, leaf to root. Each entry is a hex digest,
optionally prefixed with "L:" or "R:" to fix the sibling's side.
"""

from collections.abc import Iterable
from pathlib import Path

import structlog

from merkleproof.core.errors import DatasetReadError, ProofFormatError
from merkleproof.crypto.merkle import Digest, ProofElement, ProofEntry

logger = structlog.get_logger(__name__)


def split_records(data: bytes) -> list[bytes]:
    """
    Split raw file content into records.

    A trailing newline does not produce an empty final record, and a
    trailing carriage return on each line is dropped.
    """
    if not data:
        return []
    lines = data.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    return [line[:-1] if line.endswith(b"\r") else line for line in lines]


def parse_proof_entry(text: str) -> ProofEntry:
    """
    Parse one proof entry.

    Raises:
        ProofFormatError: If the entry is not a valid digest or direction
    """
    try:
        if ":" in text:
            return ProofElement.from_compact(text)
        return Digest.from_hex(text)
    except ValueError as e:
        raise ProofFormatError(f"Invalid proof entry {text!r}", cause=e) from e


def parse_proof(lines: Iterable[str]) -> list[ProofEntry]:
    """Parse proof entries, skipping blank lines."""
    return [parse_proof_entry(line.strip()) for line in lines if line.strip()]


def _read_bytes(path: Path, kind: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        logger.error(f"Failed to read {kind} file", path=str(path), error=str(e))
        raise DatasetReadError(f"Failed to read {kind} file {path}", cause=e) from e


def load_records(path: Path) -> list[bytes]:
    """
    Load records from a newline-delimited dataset file.

    Raises:
        DatasetReadError: If the file cannot be read
    """
    records = split_records(_read_bytes(path, "dataset"))
    logger.debug("Loaded dataset", path=str(path), record_count=len(records))
    return records


def load_proof(path: Path) -> list[ProofEntry]:
    """
    Load a proof from a file of hex digests.

    Raises:
        DatasetReadError: If the file cannot be read or is not text
        ProofFormatError: If an entry is malformed
    """
    raw = _read_bytes(path, "proof")
    try:
        text = raw.decode("ascii")
    except UnicodeDecodeError as e:
        raise ProofFormatError(f"Proof file {path} is not ASCII text", cause=e) from e
    proof = parse_proof(text.splitlines())
    logger.debug("Loaded proof", path=str(path), length=len(proof))
    return proof
