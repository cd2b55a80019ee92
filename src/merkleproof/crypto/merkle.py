"""
merkleproof - Merkle Tree Implementation

Provides deterministic binary Merkle tree construction with SHA-256 hashing,
root and height computation, pre-order flattening, inclusion proof generation
and membership verification.

Hashing conventions:
- A leaf holds SHA256(record)
- An internal node holds SHA256(left_root || right_root)

No domain-separation prefixes are applied. Trees must be complete: the
record count has to be a non-zero power of two. Other counts are rejected
rather than padded or promoted.
"""

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from merkleproof.core.errors import EmptyInputError, UnbalancedInputError

DIGEST_SIZE = hashlib.sha256().digest_size


@dataclass(frozen=True)
class Digest:
    """
    Fixed-length SHA-256 digest.

    Attributes:
        value: Raw digest bytes (always DIGEST_SIZE long)
    """

    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != DIGEST_SIZE:
            raise ValueError(
                f"Digest must be {DIGEST_SIZE} bytes, got {len(self.value)}"
            )

    @property
    def hex(self) -> str:
        """Lowercase hexadecimal representation."""
        return self.value.hex()

    @classmethod
    def from_hex(cls, text: str) -> "Digest":
        """
        Parse a digest from its hexadecimal representation.

        Raises:
            ValueError: If text is not valid hex or has the wrong length
        """
        return cls(bytes.fromhex(text.strip()))

    def __str__(self) -> str:
        return self.hex


def hash_record(data: bytes) -> Digest:
    """
    Hash an arbitrary byte sequence.

    Args:
        data: Record bytes

    Returns:
        SHA-256 digest of data
    """
    return Digest(hashlib.sha256(data).digest())


def concat_digests(left: Digest, right: Digest) -> bytes:
    """Concatenate two digests, left first."""
    return left.value + right.value


def combine(left: Digest, right: Digest) -> Digest:
    """Compute the digest of an internal node from its children's roots."""
    return hash_record(concat_digests(left, right))


class ProofDirection(str, Enum):
    """Side of the sibling digest relative to the path being reconstructed."""

    LEFT = "L"
    RIGHT = "R"


@dataclass(frozen=True)
class Leaf:
    """Tree node wrapping the digest of one record."""

    digest: Digest

    @property
    def root(self) -> Digest:
        return self.digest

    @property
    def height(self) -> int:
        return 0

    def __str__(self) -> str:
        return self.digest.hex


@dataclass(frozen=True)
class Internal:
    """
    Tree node owning two ordered children.

    Both children always have the same height. The root digest and height
    are computed once, at construction.
    """

    left: "MerkleNode"
    right: "MerkleNode"

    root: Digest = field(init=False, repr=False, compare=False)
    height: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Children already hold their roots, so this is a single hash
        object.__setattr__(self, "root", combine(self.left.root, self.right.root))
        object.__setattr__(self, "height", 1 + self.left.height)

    def __str__(self) -> str:
        return f"({self.left}, {self.right})"


MerkleNode = Union[Leaf, Internal]


@dataclass(frozen=True)
class ProofElement:
    """
    Single element in a Merkle proof path.

    Attributes:
        digest: The sibling digest at this level
        direction: Whether the sibling is LEFT or RIGHT of the path
    """

    digest: Digest
    direction: ProofDirection

    def to_dict(self) -> dict[str, str]:
        """Serialize to dictionary."""
        return {"hash": self.digest.hex, "direction": self.direction.value}

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> "ProofElement":
        """Deserialize from dictionary."""
        return cls(
            digest=Digest.from_hex(data["hash"]),
            direction=ProofDirection(data["direction"]),
        )

    def to_compact(self) -> str:
        """Serialize as "L:<hex>" or "R:<hex>"."""
        return f"{self.direction.value}:{self.digest.hex}"

    @classmethod
    def from_compact(cls, item: str) -> "ProofElement":
        """Parse an "L:<hex>" / "R:<hex>" entry."""
        direction, hash_value = item.split(":", 1)
        return cls(
            digest=Digest.from_hex(hash_value),
            direction=ProofDirection(direction.strip().upper()),
        )


ProofEntry = Union[Digest, ProofElement]


@dataclass
class MerkleProof:
    """
    Merkle inclusion proof for a leaf.

    Attributes:
        leaf_digest: Digest of the leaf being proven
        leaf_index: Position of the leaf in the record list
        proof_path: Sibling digests with directions, leaf to root
        root: Expected Merkle root
        tree_size: Total number of leaves in the tree
    """

    leaf_digest: Digest
    leaf_index: int
    proof_path: list[ProofElement]
    root: Digest
    tree_size: int

    @property
    def digests(self) -> list[Digest]:
        """Sibling digests without direction flags."""
        return [e.digest for e in self.proof_path]

    def to_dict(self) -> dict[str, Any]:
        """Serialize proof to dictionary."""
        return {
            "leaf_hash": self.leaf_digest.hex,
            "leaf_index": self.leaf_index,
            "proof_path": [e.to_dict() for e in self.proof_path],
            "root_hash": self.root.hex,
            "tree_size": self.tree_size,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MerkleProof":
        """Deserialize proof from dictionary."""
        return cls(
            leaf_digest=Digest.from_hex(data["leaf_hash"]),
            leaf_index=data["leaf_index"],
            proof_path=[ProofElement.from_dict(e) for e in data["proof_path"]],
            root=Digest.from_hex(data["root_hash"]),
            tree_size=data["tree_size"],
        )

    def to_compact(self) -> list[str]:
        """
        Serialize the path to compact format.

        Format: ["L:hash1", "R:hash2", ...]
        """
        return [e.to_compact() for e in self.proof_path]


def _is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


class MerkleTree:
    """
    Complete binary Merkle tree over an ordered list of records.

    Immutable after construction.

    Example:
        >>> tree = MerkleTree.from_records([b"a", b"b", b"c", b"d"])
        >>> proof = tree.get_proof(2)
        >>> tree.verify(b"c", proof.digests)
        True
    """

    def __init__(self, root: MerkleNode, leaves: list[Leaf]) -> None:
        """
        Initialize Merkle tree (internal use).

        Use from_records() to construct trees.
        """
        self._root = root
        self._leaves = leaves

    @classmethod
    def from_records(cls, records: Sequence[bytes]) -> "MerkleTree":
        """
        Construct a Merkle tree from record data.

        Args:
            records: Ordered record bytes; count must be a power of two

        Returns:
            Constructed MerkleTree

        Raises:
            EmptyInputError: If records is empty
            UnbalancedInputError: If the record count is not a power of two
        """
        if not records:
            raise EmptyInputError()
        if not _is_power_of_two(len(records)):
            raise UnbalancedInputError(len(records))

        leaves = [Leaf(hash_record(data)) for data in records]

        current_level: list[MerkleNode] = list(leaves)
        while len(current_level) > 1:
            next_level: list[MerkleNode] = []
            for i in range(0, len(current_level), 2):
                next_level.append(Internal(current_level[i], current_level[i + 1]))
            current_level = next_level

        return cls(current_level[0], leaves)

    @property
    def root(self) -> MerkleNode:
        """Get the root node."""
        return self._root

    @property
    def root_hash(self) -> Digest:
        """Get the root digest (Merkle root)."""
        return self._root.root

    @property
    def height(self) -> int:
        """Number of edges from the root to any leaf."""
        return self._root.height

    @property
    def leaf_count(self) -> int:
        return len(self._leaves)

    @property
    def leaf_digests(self) -> list[Digest]:
        return [leaf.digest for leaf in self._leaves]

    def get_leaf_digest(self, index: int) -> Digest:
        """
        Get the digest of a leaf by index.

        Raises:
            IndexError: If index out of bounds
        """
        if index < 0 or index >= len(self._leaves):
            raise IndexError(f"Leaf index {index} out of bounds")
        return self._leaves[index].digest

    def positions_of(self, digest: Digest) -> list[int]:
        """Indices of every leaf holding digest."""
        return [i for i, leaf_digest in enumerate(self.leaf_digests) if leaf_digest == digest]

    def flatten(self) -> list[MerkleNode]:
        """
        Produce the pre-order node list: node, left subtree, right subtree.

        A tree of N leaves yields exactly 2N - 1 nodes.
        """
        nodes: list[MerkleNode] = []
        stack: list[MerkleNode] = [self._root]
        while stack:
            node = stack.pop()
            nodes.append(node)
            if isinstance(node, Internal):
                stack.append(node.right)
                stack.append(node.left)
        return nodes

    def get_proof(self, leaf_index: int) -> MerkleProof:
        """
        Generate inclusion proof for a leaf.

        Args:
            leaf_index: Index of the leaf to prove

        Returns:
            MerkleProof for the leaf, path ordered leaf to root

        Raises:
            IndexError: If leaf_index out of bounds
        """
        leaf_digest = self.get_leaf_digest(leaf_index)

        path: list[ProofElement] = []
        node = self._root
        level = self.height
        while isinstance(node, Internal):
            level -= 1
            if (leaf_index >> level) & 1:
                path.append(ProofElement(node.left.root, ProofDirection.LEFT))
                node = node.right
            else:
                path.append(ProofElement(node.right.root, ProofDirection.RIGHT))
                node = node.left
        path.reverse()

        return MerkleProof(
            leaf_digest=leaf_digest,
            leaf_index=leaf_index,
            proof_path=path,
            root=self.root_hash,
            tree_size=len(self._leaves),
        )

    def get_all_proofs(self) -> list[MerkleProof]:
        """Generate proofs for all leaves."""
        return [self.get_proof(i) for i in range(len(self._leaves))]

    def verify(self, candidate: bytes, proof: Sequence[ProofEntry]) -> bool:
        """Check whether candidate is a member; see verify_membership()."""
        return verify_membership(self, candidate, proof)

    def __str__(self) -> str:
        return str(self._root)


def build_tree(records: Sequence[bytes]) -> MerkleTree:
    """Build a MerkleTree from ordered records."""
    return MerkleTree.from_records(records)


def resolve_path(leaf_index: int, proof: Sequence[ProofEntry]) -> list[ProofElement]:
    """
    Attach a direction to every proof entry.

    ProofElement entries keep their own direction. For a bare Digest at
    level k, bit k of leaf_index selects the side: 0 means the running
    digest is the left operand (sibling RIGHT), 1 means it is the right
    operand (sibling LEFT).
    """
    path = []
    for level, entry in enumerate(proof):
        if isinstance(entry, ProofElement):
            path.append(entry)
            continue
        direction = (
            ProofDirection.LEFT if (leaf_index >> level) & 1 else ProofDirection.RIGHT
        )
        path.append(ProofElement(digest=entry, direction=direction))
    return path


def compute_root_from_path(
    leaf_digest: Digest,
    proof_path: Sequence[ProofElement],
) -> Digest:
    """
    Compute the root digest from a leaf and a directed proof path.

    Args:
        leaf_digest: Digest of the leaf
        proof_path: List of proof elements, leaf to root

    Returns:
        Computed root digest
    """
    current = leaf_digest

    for element in proof_path:
        if element.direction == ProofDirection.LEFT:
            current = combine(element.digest, current)
        else:
            current = combine(current, element.digest)

    return current


def verify_proof_against_root(
    leaf_digest: Digest,
    proof_path: Sequence[ProofElement],
    expected_root: Digest,
) -> bool:
    """Verify a directed proof path against a specific root digest."""
    return compute_root_from_path(leaf_digest, proof_path) == expected_root


def verify_proof(proof: MerkleProof) -> bool:
    """
    Verify a self-contained Merkle inclusion proof.

    Reconstructs the root from the leaf digest and proof path, then compares
    with the root recorded in the proof.
    """
    return verify_proof_against_root(proof.leaf_digest, proof.proof_path, proof.root)


def verify_membership(
    tree: MerkleTree,
    candidate: bytes,
    proof: Sequence[ProofEntry],
) -> bool:
    """
    Determine whether candidate is a member of the tree's record set.

    Steps:
    1. Reject proofs whose length differs from the tree height
    2. Reject candidates whose digest is not among the leaves
    3. For each leaf position holding the candidate digest, fold the proof
       upward and compare the result with the tree's root

    Args:
        tree: Tree to check against
        candidate: Raw record bytes
        proof: Sibling digests leaf to root, bare or with explicit direction

    Returns:
        True if the proof reconstructs the tree's root from candidate
    """
    if len(proof) != tree.height:
        return False

    candidate_digest = hash_record(candidate)
    positions = tree.positions_of(candidate_digest)
    if not positions:
        return False

    expected = tree.root_hash
    return any(
        verify_proof_against_root(candidate_digest, resolve_path(i, proof), expected)
        for i in positions
    )
