"""
Flatmerkle - Cryptographic Utilities

Provides flat-buffer Merkle tree construction, proof extraction, and
root reconstruction.
"""

from flatmerkle.crypto.buffer import TreeBuffer
from flatmerkle.crypto.builder import build_tree
from flatmerkle.crypto.digest import Hasher, get_default_hasher
from flatmerkle.crypto.errors import (
    BufferFrozenError,
    BufferSizeError,
    DigestError,
    EmptyTreeError,
    LeafIndexError,
    MerkleError,
    ProofError,
    TreeTooLargeError,
)
from flatmerkle.crypto.merkle import (
    MerkleProof,
    MerkleTree,
    compute_root_from_proof,
    verify_proof,
    verify_proof_against_root,
)
from flatmerkle.crypto.proof import extract_chain, locate_root, reconstruct_root
from flatmerkle.crypto.sizing import Layer, height, iter_layers, weight

__all__ = [
    "TreeBuffer",
    "build_tree",
    "Hasher",
    "get_default_hasher",
    "BufferFrozenError",
    "BufferSizeError",
    "DigestError",
    "EmptyTreeError",
    "LeafIndexError",
    "MerkleError",
    "ProofError",
    "TreeTooLargeError",
    "MerkleProof",
    "MerkleTree",
    "compute_root_from_proof",
    "verify_proof",
    "verify_proof_against_root",
    "extract_chain",
    "locate_root",
    "reconstruct_root",
    "Layer",
    "height",
    "iter_layers",
    "weight",
]
