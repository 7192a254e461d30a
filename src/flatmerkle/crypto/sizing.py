"""
Flatmerkle - Tree Sizing

Layer layout of a flat tree buffer. Layers are stored back to back,
leaves first and root last. A layer of width >= 2 with an odd width owns
one extra padding slot, so its physical (padded) width is always even and
the next layer starts right after it.

Example for 5 leaves (13 slots):

    slot:   0  1  2  3  4  5 | 6  7  8  9 | 10 11 | 12
    layer:  L0 (5 + pad)     | L1 (3 + pad)| L2   | root

Builder, root lookup and chain extraction all walk iter_layers() so the
padding convention lives in exactly one place.
"""

from collections.abc import Iterator
from typing import NamedTuple

from flatmerkle.crypto.errors import EmptyTreeError


class Layer(NamedTuple):
    """
    One layer of a tree buffer.

    Attributes:
        index: Layer number (0 = leaves)
        offset: Slot index of the layer's first hash
        width: Number of genuine hashes in the layer
    """

    index: int
    offset: int
    width: int

    @property
    def is_padded(self) -> bool:
        """Whether the layer carries a duplicated trailing slot."""
        return self.width >= 2 and self.width % 2 == 1

    @property
    def padded_width(self) -> int:
        """Slots the layer occupies in the buffer."""
        return self.width + 1 if self.is_padded else self.width

    @property
    def end(self) -> int:
        """Slot index just past the layer, padding included."""
        return self.offset + self.padded_width


def check_leaf_count(leaf_count: int) -> None:
    """
    Raises:
        EmptyTreeError: If leaf_count is below one
    """
    if leaf_count < 1:
        raise EmptyTreeError(f"Merkle tree needs at least one leaf, got {leaf_count}")


def iter_layers(leaf_count: int) -> Iterator[Layer]:
    """
    Yield every layer of a tree, leaves first and root last.

    Each layer's width is the ceiling of half the previous one. Nothing
    is yielded for zero leaves; a single leaf is its own root.
    """
    index = 0
    offset = 0
    width = leaf_count

    while width >= 1:
        layer = Layer(index=index, offset=offset, width=width)
        yield layer
        if width == 1:
            return
        index += 1
        offset = layer.end
        width = layer.padded_width // 2


def height(leaf_count: int) -> int:
    """
    Number of authentication chain entries for a tree.

    Args:
        leaf_count: Number of leaves (>= 1)

    Returns:
        Number of branch layers above the leaves

    Raises:
        EmptyTreeError: If leaf_count is zero
    """
    check_leaf_count(leaf_count)
    return sum(1 for _ in iter_layers(leaf_count)) - 1


def weight(leaf_count: int) -> int:
    """
    Total slots a tree buffer needs, padding and root included.

    Args:
        leaf_count: Number of leaves (>= 0)

    Returns:
        Slot count; equals leaf_count for fewer than two leaves
    """
    if leaf_count < 0:
        raise ValueError(f"Leaf count cannot be negative, got {leaf_count}")
    return sum(layer.padded_width for layer in iter_layers(leaf_count))


def root_offset(leaf_count: int) -> int:
    """Slot index of the root hash."""
    check_leaf_count(leaf_count)
    return weight(leaf_count) - 1
