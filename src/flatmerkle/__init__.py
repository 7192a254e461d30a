"""
Flatmerkle

Merkle hash trees laid out in a single flat buffer: sizing, in-place
construction, root lookup, authentication chains and root reconstruction.
"""

from flatmerkle.crypto import (
    Hasher,
    MerkleError,
    MerkleProof,
    MerkleTree,
    TreeBuffer,
    build_tree,
    extract_chain,
    height,
    locate_root,
    reconstruct_root,
    verify_proof,
    weight,
)

__version__ = "1.0.0"

__all__ = [
    "Hasher",
    "MerkleError",
    "MerkleProof",
    "MerkleTree",
    "TreeBuffer",
    "build_tree",
    "extract_chain",
    "height",
    "locate_root",
    "reconstruct_root",
    "verify_proof",
    "weight",
]
