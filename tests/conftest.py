"""
Pytest configuration and shared fixtures for tree engine tests.
"""

import pytest

from flatmerkle.crypto.buffer import TreeBuffer
from flatmerkle.crypto.builder import build_tree
from flatmerkle.crypto.digest import Hasher


def make_leaves(count: int) -> list[bytes]:
    """Distinct leaf data blocks."""
    return [f"leaf{i}".encode() for i in range(count)]


def build_buffer(leaves: list[bytes], hasher: Hasher) -> TreeBuffer:
    """Hash leaf data into a fresh buffer and build it."""
    buffer = TreeBuffer.from_leaf_hashes(
        [hasher.digest(data) for data in leaves],
        hasher.digest_size,
    )
    build_tree(buffer, len(leaves), hasher)
    return buffer


@pytest.fixture
def hasher() -> Hasher:
    """Plain SHA-256 hasher."""
    return Hasher.from_name("sha256")


@pytest.fixture
def abc_buffer(hasher: Hasher) -> TreeBuffer:
    """Built buffer for leaves a, b, c."""
    return build_buffer([b"a", b"b", b"c"], hasher)
