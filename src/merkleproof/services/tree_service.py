"""
merkleproof - Tree Service

Build-and-report and build-and-verify operations used by the CLI and the
HTTP API. Adds logging and metrics around the Merkle core.
"""

import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from merkleproof.core.errors import MerkleError
from merkleproof.crypto.merkle import (
    Digest,
    MerkleProof,
    MerkleTree,
    ProofEntry,
    verify_membership,
)
from merkleproof.metrics import get_merkle_metrics

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NodeReport:
    """Position of a node in the pre-order listing and its root digest."""

    index: int
    digest: Digest

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "digest": self.digest.hex}

    def __str__(self) -> str:
        return f"({self.index}, {self.digest.hex})"


@dataclass
class TreeReport:
    """Flattened tree listing."""

    root: Digest
    height: int
    leaf_count: int
    nodes: list[NodeReport]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "root": self.root.hex,
            "height": self.height,
            "leaf_count": self.leaf_count,
            "nodes": [n.to_dict() for n in self.nodes],
        }


class TreeService:
    """
    Tree operations service.

    Orchestrates:
    - Tree construction with timing and failure tracking
    - Flattened reporting
    - Proof generation
    - Membership verification
    """

    def __init__(self) -> None:
        self._metrics = get_merkle_metrics()

    def build(self, records: Sequence[bytes]) -> MerkleTree:
        """
        Build a tree, recording duration and size.

        Raises:
            MerkleError: If the records cannot form a complete tree
        """
        start = time.perf_counter()
        try:
            tree = MerkleTree.from_records(records)
        except MerkleError as e:
            self._metrics.record_build_failure(type(e).__name__)
            logger.warning(
                "Rejected tree input",
                record_count=len(records),
                error=str(e),
            )
            raise

        duration = time.perf_counter() - start
        self._metrics.record_build(duration, tree.leaf_count)
        logger.debug(
            "Built Merkle tree",
            leaf_count=tree.leaf_count,
            height=tree.height,
            root=tree.root_hash.hex,
            duration=duration,
        )
        return tree

    def build_and_report(self, records: Sequence[bytes]) -> TreeReport:
        """Build a tree and list every node with its root digest, pre-order."""
        tree = self.build(records)
        nodes = [
            NodeReport(index=i, digest=node.root)
            for i, node in enumerate(tree.flatten())
        ]
        return TreeReport(
            root=tree.root_hash,
            height=tree.height,
            leaf_count=tree.leaf_count,
            nodes=nodes,
        )

    def build_and_verify(
        self,
        records: Sequence[bytes],
        candidate: bytes,
        proof: Sequence[ProofEntry],
    ) -> bool:
        """Build a tree and check candidate's membership using proof."""
        return self.verify(self.build(records), candidate, proof)

    def verify(
        self,
        tree: MerkleTree,
        candidate: bytes,
        proof: Sequence[ProofEntry],
    ) -> bool:
        """Check candidate's membership in an already built tree."""
        verified = verify_membership(tree, candidate, proof)
        self._metrics.record_verification(verified)
        logger.info(
            "Verified membership",
            verified=verified,
            proof_length=len(proof),
            height=tree.height,
        )
        return verified

    def build_proof(self, records: Sequence[bytes], index: int) -> MerkleProof:
        """
        Build a tree and generate the inclusion proof for leaf index.

        Raises:
            IndexError: If index out of bounds
        """
        tree = self.build(records)
        start = time.perf_counter()
        proof = tree.get_proof(index)
        self._metrics.record_proof_generation(time.perf_counter() - start)
        return proof
