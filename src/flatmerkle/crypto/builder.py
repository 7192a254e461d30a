"""
Flatmerkle - Tree Builder

Fills the branch layers of a tree buffer whose leaf slots are already
written. Odd layers are padded by physically duplicating their last hash
into the slot after it; proof extraction later reads that slot back, so
it must exist in the buffer rather than be recomputed.
"""

import structlog

from flatmerkle.crypto.buffer import TreeBuffer
from flatmerkle.crypto.digest import Hasher
from flatmerkle.crypto.errors import BufferSizeError
from flatmerkle.crypto.sizing import check_leaf_count, iter_layers, weight

logger = structlog.get_logger(__name__)


def check_buffer(buffer: TreeBuffer, leaf_count: int) -> None:
    """
    Check a buffer can hold a tree of leaf_count leaves.

    Raises:
        EmptyTreeError: If leaf_count is zero
        BufferSizeError: If the buffer has fewer than weight(leaf_count) slots
    """
    check_leaf_count(leaf_count)
    required = weight(leaf_count)
    if len(buffer) < required:
        raise BufferSizeError(
            f"Buffer holds {len(buffer)} slots, tree of {leaf_count} leaves needs {required}"
        )


def build_tree(buffer: TreeBuffer, leaf_count: int, hasher: Hasher) -> None:
    """
    Build every branch layer in place.

    Slots below leaf_count are read but never written. For a single leaf
    nothing is built: the leaf slot is the root.

    Args:
        buffer: Buffer whose first leaf_count slots hold leaf hashes
        leaf_count: Number of leaves
        hasher: Digest used to combine sibling pairs

    Raises:
        EmptyTreeError: If leaf_count is zero
        BufferSizeError: If the buffer is too small or its slot size
            differs from the hasher's digest size
    """
    check_buffer(buffer, leaf_count)
    if buffer.hash_size != hasher.digest_size:
        raise BufferSizeError(
            f"Buffer slots are {buffer.hash_size} bytes, {hasher.name} produces {hasher.digest_size}"
        )

    for layer in iter_layers(leaf_count):
        if layer.width < 2:
            break

        if layer.is_padded:
            last = layer.offset + layer.width - 1
            buffer.copy_slot(last, last + 1)

        # Next layer starts right after the padded current one
        for pair in range(layer.padded_width // 2):
            left = layer.offset + 2 * pair
            buffer[layer.end + pair] = hasher.digest(buffer.span(left, 2))

        logger.debug(
            "Built layer",
            layer=layer.index + 1,
            width=layer.padded_width // 2,
            padded=layer.is_padded,
        )
