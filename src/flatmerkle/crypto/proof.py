"""
Flatmerkle - Root Lookup, Chain Extraction and Root Reconstruction

Authentication chains are ordered leaf to root and hold one sibling hash
per branch layer. At every layer the sibling of position ``i`` sits at
``i ^ 1``; for the last genuine hash of an odd layer that is its own
padding copy.
"""

from collections.abc import Sequence

from flatmerkle.crypto.buffer import TreeBuffer
from flatmerkle.crypto.builder import check_buffer
from flatmerkle.crypto.digest import Hasher
from flatmerkle.crypto.errors import LeafIndexError, ProofError
from flatmerkle.crypto.sizing import iter_layers, root_offset


def locate_root(buffer: TreeBuffer, leaf_count: int) -> bytes:
    """
    Read the root hash of a built buffer.

    Args:
        buffer: Buffer previously passed to build_tree()
        leaf_count: Number of leaves

    Returns:
        Hash stored in slot weight(leaf_count) - 1
    """
    check_buffer(buffer, leaf_count)
    return buffer[root_offset(leaf_count)]


def extract_chain(buffer: TreeBuffer, leaf_count: int, index: int) -> list[bytes]:
    """
    Collect the authentication chain for one leaf.

    Args:
        buffer: Buffer previously passed to build_tree()
        leaf_count: Number of leaves
        index: Leaf index (0-based)

    Returns:
        Sibling hashes from the leaf layer up to, not including, the root

    Raises:
        LeafIndexError: If index is outside [0, leaf_count)
    """
    check_buffer(buffer, leaf_count)
    if index < 0 or index >= leaf_count:
        raise LeafIndexError(f"Leaf index {index} out of bounds for {leaf_count} leaves")

    chain = []
    for layer in iter_layers(leaf_count):
        if layer.width < 2:
            break
        chain.append(buffer[layer.offset + (index ^ 1)])
        index >>= 1

    return chain


def reconstruct_root(
    leaf_data: bytes,
    index: int,
    chain: Sequence[bytes],
    tree_height: int,
    hasher: Hasher,
) -> bytes:
    """
    Fold raw leaf data and its chain into a candidate root.

    The leaf is hashed here, from its original data, rather than taken as
    a hash. Inclusion holds when the result equals the trusted root.

    Args:
        leaf_data: Original (unhashed) leaf data
        index: Leaf index the chain was extracted for
        chain: Authentication chain, leaf to root
        tree_height: height() of the tree the chain came from
        hasher: Digest the tree was built with

    Returns:
        Candidate root hash

    Raises:
        ProofError: If the chain length or an entry's size is wrong
    """
    if index < 0:
        raise ProofError(f"Leaf index cannot be negative, got {index}")
    if len(chain) != tree_height:
        raise ProofError(
            f"Chain has {len(chain)} entries, tree height is {tree_height}"
        )

    current = hasher.digest(leaf_data)

    for level, sibling in enumerate(chain):
        if len(sibling) != hasher.digest_size:
            raise ProofError(
                f"Chain entry {level} is {len(sibling)} bytes, expected {hasher.digest_size}"
            )
        if index & 1:
            current = hasher.combine(sibling, current)
        else:
            current = hasher.combine(current, sibling)
        index >>= 1

    return current
