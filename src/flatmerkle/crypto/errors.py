"""
Flatmerkle - Errors

All precondition failures raised by the tree engine. Each error also
derives from the builtin a caller would expect (ValueError, IndexError)
so generic handlers keep working.
"""


class MerkleError(Exception):
    """Base exception for Merkle tree errors."""

    pass


class EmptyTreeError(MerkleError, ValueError):
    """A tree was requested over zero leaves."""

    pass


class LeafIndexError(MerkleError, IndexError):
    """A leaf index is outside the tree."""

    pass


class BufferSizeError(MerkleError, ValueError):
    """A buffer or slot value does not match the expected layout."""

    pass


class BufferFrozenError(MerkleError):
    """A write was attempted on a buffer that has been frozen."""

    pass


class DigestError(MerkleError, ValueError):
    """The digest function is unknown or misbehaved."""

    pass


class ProofError(MerkleError, ValueError):
    """An authentication chain is malformed."""

    pass


class TreeTooLargeError(MerkleError, ValueError):
    """Leaf count exceeds the configured maximum tree width."""

    pass
