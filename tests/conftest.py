"""
Pytest configuration and shared fixtures for merkleproof tests.
"""

from pathlib import Path

import pytest

from merkleproof.crypto.merkle import MerkleTree


@pytest.fixture
def abcd_records() -> list[bytes]:
    """Four single-byte records."""
    return [b"a", b"b", b"c", b"d"]


@pytest.fixture
def abcd_tree(abcd_records: list[bytes]) -> MerkleTree:
    """Tree over a, b, c, d."""
    return MerkleTree.from_records(abcd_records)


@pytest.fixture
def dataset_file(tmp_path: Path, abcd_records: list[bytes]) -> Path:
    """Newline-delimited dataset file holding a, b, c, d."""
    path = tmp_path / "data.txt"
    path.write_bytes(b"\n".join(abcd_records) + b"\n")
    return path


@pytest.fixture
def proof_file_for_c(tmp_path: Path, abcd_tree: MerkleTree) -> Path:
    """Proof file (bare hex digests) for record c."""
    path = tmp_path / "proof.txt"
    proof = abcd_tree.get_proof(2)
    path.write_text("\n".join(d.hex for d in proof.digests) + "\n")
    return path
