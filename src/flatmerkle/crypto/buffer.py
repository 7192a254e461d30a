"""
Flatmerkle - Tree Buffer

A tree buffer is a single bytearray holding fixed-size hash slots. Slot
``i`` occupies bytes ``[i * hash_size, (i + 1) * hash_size)``, which keeps
every layer jump a plain offset computation and lets two adjacent siblings
be hashed straight out of the buffer as one contiguous span.
"""

from collections.abc import Iterable, Iterator

from flatmerkle.crypto.errors import BufferFrozenError, BufferSizeError
from flatmerkle.crypto.sizing import weight


class TreeBuffer:
    """
    Flat, indexable storage for every layer of one Merkle tree.

    Attributes:
        hash_size: Bytes per slot
    """

    def __init__(self, slot_count: int, hash_size: int) -> None:
        """
        Allocate a zero-filled buffer.

        Use allocate() or from_leaf_hashes() to size it for a tree.
        """
        if slot_count < 0:
            raise BufferSizeError(f"Slot count cannot be negative, got {slot_count}")
        if hash_size < 1:
            raise BufferSizeError(f"Hash size must be positive, got {hash_size}")

        self.hash_size = hash_size
        self._slot_count = slot_count
        self._data = bytearray(slot_count * hash_size)
        self._frozen = False

    @classmethod
    def allocate(cls, leaf_count: int, hash_size: int) -> "TreeBuffer":
        """Allocate exactly weight(leaf_count) slots."""
        return cls(weight(leaf_count), hash_size)

    @classmethod
    def from_leaf_hashes(
        cls,
        leaf_hashes: Iterable[bytes],
        hash_size: int,
    ) -> "TreeBuffer":
        """
        Allocate a buffer for a tree and write its leaf layer.

        Args:
            leaf_hashes: Leaf hashes in tree order
            hash_size: Bytes per slot

        Returns:
            TreeBuffer whose first slots hold the leaves
        """
        leaf_hashes = list(leaf_hashes)
        buffer = cls.allocate(len(leaf_hashes), hash_size)
        for i, leaf_hash in enumerate(leaf_hashes):
            buffer[i] = leaf_hash
        return buffer

    def __len__(self) -> int:
        return self._slot_count

    def _check_slot(self, index: int, count: int = 1) -> None:
        if index < 0 or index + count > self._slot_count:
            raise IndexError(
                f"Slot range [{index}, {index + count}) outside buffer of {self._slot_count} slots"
            )

    def _check_writable(self) -> None:
        if self._frozen:
            raise BufferFrozenError("Tree buffer is frozen")

    def __getitem__(self, index: int) -> bytes:
        self._check_slot(index)
        start = index * self.hash_size
        return bytes(self._data[start:start + self.hash_size])

    def __setitem__(self, index: int, value: bytes) -> None:
        self._check_writable()
        self._check_slot(index)
        if len(value) != self.hash_size:
            raise BufferSizeError(
                f"Slot value must be {self.hash_size} bytes, got {len(value)}"
            )
        start = index * self.hash_size
        self._data[start:start + self.hash_size] = value

    def __iter__(self) -> Iterator[bytes]:
        for i in range(self._slot_count):
            yield self[i]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TreeBuffer):
            return NotImplemented
        return self.hash_size == other.hash_size and self._data == other._data

    def __repr__(self) -> str:
        return f"TreeBuffer(slots={self._slot_count}, hash_size={self.hash_size})"

    def span(self, index: int, count: int) -> memoryview:
        """Read-only view over ``count`` contiguous slots."""
        self._check_slot(index, count)
        start = index * self.hash_size
        return memoryview(self._data)[start:start + count * self.hash_size].toreadonly()

    def copy_slot(self, source: int, destination: int) -> None:
        """Duplicate one slot's bytes into another slot."""
        self[destination] = self[source]

    def freeze(self) -> None:
        """Reject any further writes."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def to_bytes(self) -> bytes:
        """Raw buffer contents."""
        return bytes(self._data)
