"""
merkleproof - Cryptographic Utilities

Provides Merkle tree construction, proof generation, and verification.
"""

from merkleproof.crypto.merkle import (
    Digest,
    Internal,
    Leaf,
    MerkleNode,
    MerkleProof,
    MerkleTree,
    ProofDirection,
    ProofElement,
    build_tree,
    combine,
    hash_record,
    verify_membership,
    verify_proof,
)

__all__ = [
    "Digest",
    "Internal",
    "Leaf",
    "MerkleNode",
    "MerkleProof",
    "MerkleTree",
    "ProofDirection",
    "ProofElement",
    "build_tree",
    "combine",
    "hash_record",
    "verify_membership",
    "verify_proof",
]
