"""
Unit tests for the Merkle Tree implementation.

Includes test vectors and edge case coverage.
"""

import hashlib

import pytest

from merkleproof.core.errors import (
    EmptyInputError,
    ErrorCode,
    MerkleError,
    UnbalancedInputError,
)
from merkleproof.crypto.merkle import (
    DIGEST_SIZE,
    Digest,
    Internal,
    Leaf,
    MerkleProof,
    MerkleTree,
    ProofDirection,
    ProofElement,
    build_tree,
    combine,
    compute_root_from_path,
    hash_record,
    resolve_path,
    verify_membership,
    verify_proof,
    verify_proof_against_root,
)


def sha(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


class TestDigest:
    """Tests for the Digest value type."""

    def test_hex_is_lowercase(self) -> None:
        """Test canonical text representation."""
        digest = hash_record(b"a")
        assert digest.hex == sha(b"a").hex()
        assert str(digest) == digest.hex
        assert digest.hex == digest.hex.lower()

    def test_from_hex(self) -> None:
        """Test parsing from hex, including uppercase."""
        digest = hash_record(b"a")
        assert Digest.from_hex(digest.hex) == digest
        assert Digest.from_hex(digest.hex.upper()) == digest

    def test_wrong_length_rejected(self) -> None:
        """Test that only 32-byte values are digests."""
        with pytest.raises(ValueError):
            Digest(b"short")
        with pytest.raises(ValueError):
            Digest.from_hex("ab" * 31)

    def test_invalid_hex_rejected(self) -> None:
        with pytest.raises(ValueError):
            Digest.from_hex("zz" * DIGEST_SIZE)

    def test_equality_is_bytewise(self) -> None:
        assert hash_record(b"x") == Digest(sha(b"x"))
        assert hash_record(b"x") != hash_record(b"y")


class TestHashFunctions:
    """Tests for hash computation functions."""

    def test_hash_record(self) -> None:
        """Test record hash is plain SHA-256."""
        assert hash_record(b"hello").value == sha(b"hello")

    def test_hash_record_deterministic(self) -> None:
        data = b"test data"
        assert hash_record(data) == hash_record(data)

    def test_hash_empty_record(self) -> None:
        assert hash_record(b"").value == sha(b"")

    def test_combine(self) -> None:
        """Test parent hash is SHA-256 of left || right."""
        left = hash_record(b"a")
        right = hash_record(b"b")
        assert combine(left, right).value == sha(left.value + right.value)

    def test_combine_order_matters(self) -> None:
        left = hash_record(b"a")
        right = hash_record(b"b")
        assert combine(left, right) != combine(right, left)


class TestMerkleTree:
    """Tests for MerkleTree construction."""

    def test_single_leaf(self) -> None:
        """Test tree with single leaf."""
        tree = MerkleTree.from_records([b"only"])

        assert tree.leaf_count == 1
        assert tree.height == 0
        assert isinstance(tree.root, Leaf)
        assert tree.root_hash == hash_record(b"only")

    def test_two_leaves(self) -> None:
        """Test tree with two leaves."""
        tree = MerkleTree.from_records([b"a", b"b"])

        assert tree.leaf_count == 2
        assert tree.root == Internal(Leaf(hash_record(b"a")), Leaf(hash_record(b"b")))
        assert tree.root_hash.value == sha(sha(b"a") + sha(b"b"))

    def test_four_leaves(self, abcd_tree: MerkleTree) -> None:
        """Test tree with four leaves (perfect binary tree)."""
        h0, h1, h2, h3 = (hash_record(x) for x in [b"a", b"b", b"c", b"d"])

        expected_root = combine(combine(h0, h1), combine(h2, h3))

        assert abcd_tree.leaf_count == 4
        assert abcd_tree.height == 2
        assert abcd_tree.root_hash == expected_root

    def test_empty_records_raises(self) -> None:
        """Test that empty records raise a distinct error."""
        with pytest.raises(EmptyInputError) as exc_info:
            MerkleTree.from_records([])

        assert exc_info.value.code == ErrorCode.EMPTY_INPUT
        assert "empty" in str(exc_info.value)

    @pytest.mark.parametrize("count", [3, 5, 6, 7, 9, 12])
    def test_non_power_of_two_raises(self, count: int) -> None:
        """Test that unbalanced inputs are rejected, not padded."""
        records = [f"leaf{i}".encode() for i in range(count)]

        with pytest.raises(UnbalancedInputError) as exc_info:
            MerkleTree.from_records(records)

        assert exc_info.value.code == ErrorCode.UNBALANCED_INPUT
        assert exc_info.value.count == count
        assert isinstance(exc_info.value, MerkleError)

    @pytest.mark.parametrize("count,height", [(1, 0), (2, 1), (4, 2), (8, 3), (64, 6)])
    def test_height_is_log2(self, count: int, height: int) -> None:
        records = [f"leaf{i}".encode() for i in range(count)]
        assert MerkleTree.from_records(records).height == height

    def test_internal_holds_root_and_height(self) -> None:
        """Test parent root and height are available right after construction."""
        node = Internal(Leaf(hash_record(b"a")), Leaf(hash_record(b"b")))

        assert node.root == combine(hash_record(b"a"), hash_record(b"b"))
        assert node.height == 1

    def test_leaf_digests_and_positions(self) -> None:
        tree = MerkleTree.from_records([b"x", b"y", b"x", b"z"])

        assert tree.leaf_digests == [hash_record(r) for r in [b"x", b"y", b"x", b"z"]]
        assert tree.positions_of(hash_record(b"x")) == [0, 2]
        assert tree.positions_of(hash_record(b"missing")) == []

    def test_build_tree_alias(self, abcd_records: list[bytes], abcd_tree: MerkleTree) -> None:
        assert build_tree(abcd_records).root_hash == abcd_tree.root_hash

    def test_get_leaf_digest(self, abcd_tree: MerkleTree) -> None:
        """Test getting leaf digest by index."""
        assert abcd_tree.get_leaf_digest(0) == hash_record(b"a")
        assert abcd_tree.get_leaf_digest(3) == hash_record(b"d")

    def test_get_leaf_digest_out_of_bounds(self, abcd_tree: MerkleTree) -> None:
        with pytest.raises(IndexError):
            abcd_tree.get_leaf_digest(4)

        with pytest.raises(IndexError):
            abcd_tree.get_leaf_digest(-1)

    def test_deterministic_root(self, abcd_records: list[bytes]) -> None:
        """Test that same records produce same root."""
        tree1 = MerkleTree.from_records(abcd_records)
        tree2 = MerkleTree.from_records(abcd_records)

        assert tree1.root_hash == tree2.root_hash

    def test_different_order_different_root(self) -> None:
        tree1 = MerkleTree.from_records([b"a", b"b"])
        tree2 = MerkleTree.from_records([b"b", b"a"])

        assert tree1.root_hash != tree2.root_hash

    def test_single_byte_change_changes_root(self) -> None:
        """Test that flipping one byte in any record changes the root."""
        records = [f"record-{i}".encode() for i in range(8)]
        original = MerkleTree.from_records(records).root_hash

        for i in range(len(records)):
            tampered = list(records)
            tampered[i] = bytes([records[i][0] ^ 0x01]) + records[i][1:]
            assert MerkleTree.from_records(tampered).root_hash != original

    def test_str_nests_children(self) -> None:
        tree = MerkleTree.from_records([b"a", b"b"])
        assert str(tree) == f"({hash_record(b'a').hex}, {hash_record(b'b').hex})"


class TestFlatten:
    """Tests for pre-order flattening."""

    @pytest.mark.parametrize("count", [1, 2, 4, 8, 16])
    def test_node_count(self, count: int) -> None:
        records = [f"leaf{i}".encode() for i in range(count)]
        assert len(MerkleTree.from_records(records).flatten()) == 2 * count - 1

    def test_pre_order(self, abcd_tree: MerkleTree) -> None:
        """Test node, left subtree, right subtree ordering."""
        h0, h1, h2, h3 = (hash_record(x) for x in [b"a", b"b", b"c", b"d"])

        roots = [node.root for node in abcd_tree.flatten()]

        assert roots == [
            abcd_tree.root_hash,
            combine(h0, h1),
            h0,
            h1,
            combine(h2, h3),
            h2,
            h3,
        ]

    def test_restartable(self, abcd_tree: MerkleTree) -> None:
        assert abcd_tree.flatten() == abcd_tree.flatten()


class TestProofGeneration:
    """Tests for proof generation."""

    def test_proof_single_leaf(self) -> None:
        tree = MerkleTree.from_records([b"only"])
        proof = tree.get_proof(0)

        assert proof.leaf_digest == hash_record(b"only")
        assert proof.proof_path == []
        assert proof.root == tree.root_hash
        assert proof.tree_size == 1

    def test_proof_two_leaves(self) -> None:
        tree = MerkleTree.from_records([b"a", b"b"])

        proof0 = tree.get_proof(0)
        assert proof0.proof_path == [
            ProofElement(hash_record(b"b"), ProofDirection.RIGHT)
        ]

        proof1 = tree.get_proof(1)
        assert proof1.proof_path == [
            ProofElement(hash_record(b"a"), ProofDirection.LEFT)
        ]

    def test_proof_for_c(self, abcd_tree: MerkleTree) -> None:
        """Test c's proof is [H(d), H(H(a)||H(b))], leaf to root."""
        proof = abcd_tree.get_proof(2)

        assert proof.digests == [
            hash_record(b"d"),
            combine(hash_record(b"a"), hash_record(b"b")),
        ]
        assert [e.direction for e in proof.proof_path] == [
            ProofDirection.RIGHT,
            ProofDirection.LEFT,
        ]

    def test_proof_out_of_bounds(self, abcd_tree: MerkleTree) -> None:
        with pytest.raises(IndexError):
            abcd_tree.get_proof(4)

    def test_get_all_proofs(self, abcd_tree: MerkleTree) -> None:
        proofs = abcd_tree.get_all_proofs()

        assert len(proofs) == 4
        for i, proof in enumerate(proofs):
            assert proof.leaf_index == i
            assert len(proof.proof_path) == abcd_tree.height


class TestMembershipVerification:
    """Tests for verify_membership."""

    def test_two_leaf_scenario(self) -> None:
        tree = MerkleTree.from_records([b"a", b"b"])

        assert verify_membership(tree, b"a", [hash_record(b"b")])
        assert verify_membership(tree, b"b", [hash_record(b"a")])
        assert not verify_membership(tree, b"a", [hash_record(b"a")])
        assert not verify_membership(tree, b"c", [hash_record(b"b")])

    def test_four_leaf_scenario(self, abcd_tree: MerkleTree) -> None:
        proof = [hash_record(b"d"), combine(hash_record(b"a"), hash_record(b"b"))]

        assert abcd_tree.verify(b"c", proof)
        assert not abcd_tree.verify(b"d", proof)

    def test_single_leaf_tree(self) -> None:
        tree = MerkleTree.from_records([b"only"])

        assert tree.verify(b"only", [])
        assert not tree.verify(b"other", [])

    @pytest.mark.parametrize("count", [1, 2, 4, 8, 16, 32])
    def test_every_leaf_verifies(self, count: int) -> None:
        """Test bare-digest and directed proofs for every position."""
        records = [f"leaf{i}".encode() for i in range(count)]
        tree = MerkleTree.from_records(records)

        for i, record in enumerate(records):
            proof = tree.get_proof(i)
            assert tree.verify(record, proof.digests), f"Bare proof failed for leaf {i}"
            assert tree.verify(record, proof.proof_path), f"Directed proof failed for leaf {i}"

    def test_wrong_length_fails(self, abcd_tree: MerkleTree) -> None:
        proof = abcd_tree.get_proof(0).digests

        assert not abcd_tree.verify(b"a", proof[:1])
        assert not abcd_tree.verify(b"a", proof + [hash_record(b"x")])
        assert not abcd_tree.verify(b"a", [])

    def test_altered_digest_fails(self) -> None:
        records = [f"leaf{i}".encode() for i in range(8)]
        tree = MerkleTree.from_records(records)
        proof = tree.get_proof(5).digests

        for level in range(len(proof)):
            tampered = list(proof)
            tampered[level] = hash_record(b"tampered")
            assert not tree.verify(records[5], tampered)

    def test_other_leafs_proof_fails(self) -> None:
        records = [f"leaf{i}".encode() for i in range(8)]
        tree = MerkleTree.from_records(records)

        for i in range(8):
            for j in range(8):
                if i != j:
                    assert not tree.verify(records[i], tree.get_proof(j).digests)

    def test_flipped_direction_fails(self, abcd_tree: MerkleTree) -> None:
        """Test that sibling side is honoured for directed entries."""
        path = abcd_tree.get_proof(2).proof_path
        flipped = [
            ProofElement(
                e.digest,
                ProofDirection.LEFT if e.direction == ProofDirection.RIGHT else ProofDirection.RIGHT,
            )
            for e in path
        ]

        assert not abcd_tree.verify(b"c", flipped)

    def test_duplicate_records(self) -> None:
        """Test every position of a repeated record can be proven."""
        records = [b"x", b"y", b"x", b"z"]
        tree = MerkleTree.from_records(records)

        assert tree.verify(b"x", tree.get_proof(0).digests)
        assert tree.verify(b"x", tree.get_proof(2).digests)

    def test_mixed_entries(self, abcd_tree: MerkleTree) -> None:
        """Test bare and directed entries can be combined in one proof."""
        path = abcd_tree.get_proof(1).proof_path
        proof = [path[0].digest, path[1]]

        assert abcd_tree.verify(b"b", proof)


class TestStandaloneVerification:
    """Tests for proof-record verification helpers."""

    def test_resolve_path_uses_index_bits(self) -> None:
        d = hash_record(b"s")
        path = resolve_path(0b10, [d, d])

        assert [e.direction for e in path] == [ProofDirection.RIGHT, ProofDirection.LEFT]

    def test_verify_proof(self, abcd_tree: MerkleTree) -> None:
        for proof in abcd_tree.get_all_proofs():
            assert verify_proof(proof)

    def test_verify_tampered_leaf_fails(self, abcd_tree: MerkleTree) -> None:
        proof = abcd_tree.get_proof(0)
        tampered = MerkleProof(
            leaf_digest=hash_record(b"wrong"),
            leaf_index=proof.leaf_index,
            proof_path=proof.proof_path,
            root=proof.root,
            tree_size=proof.tree_size,
        )

        assert not verify_proof(tampered)

    def test_verify_proof_against_root(self, abcd_tree: MerkleTree) -> None:
        proof = abcd_tree.get_proof(0)

        assert verify_proof_against_root(proof.leaf_digest, proof.proof_path, abcd_tree.root_hash)
        assert not verify_proof_against_root(
            proof.leaf_digest, proof.proof_path, hash_record(b"other root")
        )

    def test_compute_root_from_path(self, abcd_tree: MerkleTree) -> None:
        proof = abcd_tree.get_proof(2)

        assert compute_root_from_path(proof.leaf_digest, proof.proof_path) == abcd_tree.root_hash


class TestProofSerialization:
    """Tests for proof serialization/deserialization."""

    def test_proof_to_dict(self) -> None:
        tree = MerkleTree.from_records([b"a", b"b"])
        data = tree.get_proof(0).to_dict()

        assert data["leaf_hash"] == hash_record(b"a").hex
        assert data["leaf_index"] == 0
        assert data["proof_path"] == [{"hash": hash_record(b"b").hex, "direction": "R"}]
        assert data["root_hash"] == tree.root_hash.hex
        assert data["tree_size"] == 2

    def test_proof_from_dict(self, abcd_tree: MerkleTree) -> None:
        restored = MerkleProof.from_dict(abcd_tree.get_proof(3).to_dict())

        assert restored.leaf_index == 3
        assert verify_proof(restored)

    def test_proof_to_compact(self, abcd_tree: MerkleTree) -> None:
        compact = abcd_tree.get_proof(0).to_compact()

        assert len(compact) == 2
        assert all(item[:2] in ("L:", "R:") for item in compact)

    def test_element_from_compact(self) -> None:
        digest = hash_record(b"s")
        element = ProofElement.from_compact(f"l:{digest.hex}")

        assert element == ProofElement(digest, ProofDirection.LEFT)

    def test_element_from_compact_bad_direction(self) -> None:
        with pytest.raises(ValueError):
            ProofElement.from_compact(f"X:{hash_record(b's').hex}")
