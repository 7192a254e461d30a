"""
Flatmerkle - Merkle Tree

Owns one flat tree buffer per tree: hashes (or accepts) the leaves,
builds every branch layer once, then serves the root and inclusion proofs
from the frozen buffer.

Hashing conventions:
- Leaf hash = H(data)
- Branch hash = H(left || right)
- An odd layer is paired by duplicating its last hash

Duplication means a tree of leaves [a, b, c] and one of [a, b, c, c]
share a root. Anyone trusting a root must also trust the tree_size it
was published with; MerkleProof carries tree_size for that reason.
"""

import time
from dataclasses import dataclass
from typing import Any

import structlog

from flatmerkle.core.config import settings
from flatmerkle.crypto.buffer import TreeBuffer
from flatmerkle.crypto.builder import build_tree
from flatmerkle.crypto.digest import Hasher, get_default_hasher
from flatmerkle.crypto.errors import (
    BufferSizeError,
    DigestError,
    EmptyTreeError,
    LeafIndexError,
    ProofError,
    TreeTooLargeError,
)
from flatmerkle.crypto.proof import extract_chain, locate_root, reconstruct_root
from flatmerkle.crypto.sizing import height, iter_layers, weight
from flatmerkle.metrics import get_tree_metrics

logger = structlog.get_logger(__name__)


def _as_bytes(data: bytes | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _as_hash(value: bytes | str, hash_size: int) -> bytes:
    raw = bytes.fromhex(value) if isinstance(value, str) else bytes(value)
    if len(raw) != hash_size:
        raise BufferSizeError(f"Leaf hash must be {hash_size} bytes, got {len(raw)}")
    return raw


def _check_width(leaf_count: int) -> None:
    if leaf_count > settings.MAX_TREE_WIDTH:
        raise TreeTooLargeError(
            f"Tree of {leaf_count} leaves exceeds MAX_TREE_WIDTH={settings.MAX_TREE_WIDTH}"
        )


@dataclass
class MerkleProof:
    """
    Merkle inclusion proof for a leaf.

    Attributes:
        leaf_index: Original index of the leaf
        chain: Hex-encoded sibling hashes, leaf to root
        root_hash: Expected Merkle root (hex)
        tree_size: Total number of leaves in the tree
        algorithm: Name of the hasher the tree was built with
    """

    leaf_index: int
    chain: list[str]
    root_hash: str
    tree_size: int
    algorithm: str

    @property
    def height(self) -> int:
        """Number of chain entries."""
        return len(self.chain)

    def chain_bytes(self) -> list[bytes]:
        """Decode the chain to raw hashes."""
        try:
            return [bytes.fromhex(entry) for entry in self.chain]
        except ValueError as e:
            raise ProofError(f"Chain entry is not valid hex: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Serialize proof to dictionary for storage."""
        return {
            "leaf_index": self.leaf_index,
            "chain": list(self.chain),
            "root_hash": self.root_hash,
            "tree_size": self.tree_size,
            "algorithm": self.algorithm,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MerkleProof":
        """Deserialize proof from dictionary."""
        return cls(
            leaf_index=data["leaf_index"],
            chain=list(data["chain"]),
            root_hash=data["root_hash"],
            tree_size=data["tree_size"],
            algorithm=data["algorithm"],
        )


class MerkleTree:
    """
    Merkle tree stored in a single flat buffer.

    Features:
    - Deterministic construction from ordered leaves
    - One contiguous buffer for all layers, padding slots included
    - Proof extraction straight from the buffer
    - Immutable after construction

    Example:
        >>> tree = MerkleTree.from_leaves([b"a", b"b", b"c"])
        >>> proof = tree.get_proof(2)
        >>> verify_proof(b"c", proof)
        True
    """

    def __init__(self, buffer: TreeBuffer, leaf_count: int, hasher: Hasher) -> None:
        """
        Build the tree over a buffer whose leaf slots are written.

        Use from_leaves() or from_hashes() to construct trees.
        """
        _check_width(leaf_count)

        started = time.perf_counter()
        build_tree(buffer, leaf_count, hasher)
        buffer.freeze()
        duration = time.perf_counter() - started

        self._buffer = buffer
        self._leaf_count = leaf_count
        self._hasher = hasher
        self._root = locate_root(buffer, leaf_count)

        if settings.METRICS_ENABLED:
            get_tree_metrics().record_build(
                duration=duration,
                tree_size=leaf_count,
                weight=len(buffer),
                algorithm=hasher.name,
            )

        logger.info(
            "Built Merkle tree",
            leaf_count=leaf_count,
            weight=len(buffer),
            algorithm=hasher.name,
            root=self.root_hash[:16] + "...",
        )

    @classmethod
    def from_leaves(
        cls,
        leaves: list[bytes | str],
        hasher: Hasher | None = None,
    ) -> "MerkleTree":
        """
        Construct a Merkle tree from leaf data.

        Args:
            leaves: List of leaf data (str is UTF-8 encoded)
            hasher: Digest to use (defaults to the configured one)

        Returns:
            Constructed MerkleTree

        Raises:
            EmptyTreeError: If leaves is empty
            TreeTooLargeError: If there are more than MAX_TREE_WIDTH leaves
        """
        if not leaves:
            raise EmptyTreeError("Cannot create Merkle tree from empty leaves")
        _check_width(len(leaves))

        hasher = hasher or get_default_hasher()
        return cls.from_hashes(
            [hasher.digest(_as_bytes(data)) for data in leaves],
            hasher=hasher,
        )

    @classmethod
    def from_hashes(
        cls,
        hashes: list[bytes | str],
        hasher: Hasher | None = None,
    ) -> "MerkleTree":
        """
        Construct a Merkle tree using hashes directly as leaves.

        Args:
            hashes: Leaf hashes, raw or hex-encoded
            hasher: Digest to use (defaults to the configured one)

        Returns:
            Constructed MerkleTree

        Raises:
            EmptyTreeError: If hashes is empty
            TreeTooLargeError: If there are more than MAX_TREE_WIDTH hashes
            BufferSizeError: If a hash is not digest_size bytes
        """
        if not hashes:
            raise EmptyTreeError("Cannot create Merkle tree from empty hashes")
        _check_width(len(hashes))

        hasher = hasher or get_default_hasher()
        leaf_hashes = [_as_hash(value, hasher.digest_size) for value in hashes]
        buffer = TreeBuffer.from_leaf_hashes(leaf_hashes, hasher.digest_size)
        return cls(buffer, len(leaf_hashes), hasher)

    @property
    def root(self) -> bytes:
        """Get the root hash."""
        return self._root

    @property
    def root_hash(self) -> str:
        """Get the root hash (hex)."""
        return self._root.hex()

    @property
    def leaf_count(self) -> int:
        """Get the number of leaves."""
        return self._leaf_count

    @property
    def height(self) -> int:
        """Get the number of chain entries per proof."""
        return height(self._leaf_count)

    @property
    def weight(self) -> int:
        """Get the number of slots in the buffer."""
        return weight(self._leaf_count)

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    @property
    def buffer(self) -> TreeBuffer:
        """Get the (frozen) tree buffer."""
        return self._buffer

    @property
    def leaves(self) -> list[bytes]:
        """Get all leaf hashes."""
        return [self._buffer[i] for i in range(self._leaf_count)]

    def get_leaf_hash(self, index: int) -> str:
        """
        Get the hash of a leaf by index.

        Args:
            index: Leaf index (0-based)

        Returns:
            Hex-encoded leaf hash

        Raises:
            LeafIndexError: If index out of bounds
        """
        if index < 0 or index >= self._leaf_count:
            raise LeafIndexError(f"Leaf index {index} out of bounds")
        return self._buffer[index].hex()

    def layer(self, index: int, include_padding: bool = False) -> list[bytes]:
        """
        Get the hashes of one layer (0 = leaves, height = root).

        Raises:
            IndexError: If the tree has no such layer
        """
        for layer in iter_layers(self._leaf_count):
            if layer.index == index:
                width = layer.padded_width if include_padding else layer.width
                return [self._buffer[layer.offset + i] for i in range(width)]
        raise IndexError(f"Layer {index} out of bounds for tree of height {self.height}")

    def get_proof(self, leaf_index: int) -> MerkleProof:
        """
        Generate inclusion proof for a leaf.

        Args:
            leaf_index: Index of the leaf to prove

        Returns:
            MerkleProof for the leaf

        Raises:
            LeafIndexError: If leaf_index out of bounds
        """
        started = time.perf_counter()
        chain = extract_chain(self._buffer, self._leaf_count, leaf_index)

        if settings.METRICS_ENABLED:
            get_tree_metrics().record_proof(time.perf_counter() - started)

        return MerkleProof(
            leaf_index=leaf_index,
            chain=[entry.hex() for entry in chain],
            root_hash=self.root_hash,
            tree_size=self._leaf_count,
            algorithm=self._hasher.name,
        )

    def get_all_proofs(self) -> list[MerkleProof]:
        """
        Generate proofs for all leaves.

        Returns:
            List of MerkleProof for each leaf
        """
        return [self.get_proof(i) for i in range(self._leaf_count)]


def _resolve_hasher(proof: MerkleProof, hasher: Hasher | None) -> Hasher:
    if hasher is not None:
        return hasher
    default = get_default_hasher()
    if proof.algorithm == default.name:
        return default
    try:
        return Hasher.from_name(*_split_algorithm(proof.algorithm))
    except DigestError as e:
        raise ProofError(
            f"Proof algorithm {proof.algorithm!r} is not a known hashlib digest; pass hasher= explicitly"
        ) from e


def _split_algorithm(name: str) -> tuple[str, int | None]:
    # "blake2b-256" -> ("blake2b", 32)
    algorithm, _, bits = name.partition("-")
    if bits.isdigit():
        return algorithm, int(bits) // 8
    return name, None


def compute_root_from_proof(
    leaf_data: bytes | str,
    proof: MerkleProof,
    hasher: Hasher | None = None,
) -> str:
    """
    Compute the root hash from leaf data and a proof.

    Args:
        leaf_data: Original (unhashed) leaf data
        proof: Proof extracted for that leaf
        hasher: Digest to use (defaults to the proof's algorithm)

    Returns:
        Computed root hash (hex)

    Raises:
        ProofError: If the proof is malformed, its chain length does not
            match its tree_size, or its algorithm needs an explicit hasher
    """
    if proof.leaf_index < 0 or proof.leaf_index >= proof.tree_size:
        raise ProofError(
            f"Leaf index {proof.leaf_index} out of bounds for tree of {proof.tree_size} leaves"
        )

    root = reconstruct_root(
        _as_bytes(leaf_data),
        proof.leaf_index,
        proof.chain_bytes(),
        height(proof.tree_size),
        _resolve_hasher(proof, hasher),
    )
    return root.hex()


def verify_proof_against_root(
    leaf_data: bytes | str,
    proof: MerkleProof,
    expected_root: str,
    hasher: Hasher | None = None,
) -> bool:
    """
    Verify a proof against a specific root hash.

    Args:
        leaf_data: Original (unhashed) leaf data
        proof: Proof extracted for that leaf
        expected_root: Trusted Merkle root (hex)
        hasher: Digest to use (defaults to the proof's algorithm)

    Returns:
        True if proof reconstructs to expected root
    """
    valid = compute_root_from_proof(leaf_data, proof, hasher) == expected_root.lower()

    if settings.METRICS_ENABLED:
        get_tree_metrics().record_verification(valid)
    if not valid:
        logger.warning(
            "Merkle proof rejected",
            leaf_index=proof.leaf_index,
            tree_size=proof.tree_size,
        )

    return valid


def verify_proof(
    leaf_data: bytes | str,
    proof: MerkleProof,
    hasher: Hasher | None = None,
) -> bool:
    """
    Verify a Merkle inclusion proof against the root it carries.

    Args:
        leaf_data: Original (unhashed) leaf data
        proof: MerkleProof to verify
        hasher: Digest to use (defaults to the proof's algorithm)

    Returns:
        True if proof is valid
    """
    return verify_proof_against_root(leaf_data, proof, proof.root_hash, hasher)
