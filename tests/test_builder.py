"""
Unit tests for in-place tree construction.
"""

import hashlib

import pytest

from conftest import build_buffer, make_leaves

from flatmerkle.crypto.buffer import TreeBuffer
from flatmerkle.crypto.builder import build_tree
from flatmerkle.crypto.digest import Hasher
from flatmerkle.crypto.errors import BufferSizeError, EmptyTreeError
from flatmerkle.crypto.sizing import iter_layers, weight


def H(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


class TestBuildTree:
    """Tests for build_tree."""

    def test_three_leaves_layout(self, abc_buffer: TreeBuffer) -> None:
        """Test the padded layout of a three-leaf tree."""
        ha, hb, hc = H(b"a"), H(b"b"), H(b"c")
        n0 = H(ha + hb)
        n1 = H(hc + hc)

        assert list(abc_buffer) == [ha, hb, hc, hc, n0, n1, H(n0 + n1)]

    def test_two_leaves(self, hasher: Hasher) -> None:
        """Test a two-leaf tree has no padding."""
        buffer = build_buffer([b"a", b"b"], hasher)

        assert list(buffer) == [H(b"a"), H(b"b"), H(H(b"a") + H(b"b"))]

    def test_single_leaf_untouched(self, hasher: Hasher) -> None:
        """Test one leaf is its own root and nothing is built."""
        buffer = build_buffer([b"only"], hasher)

        assert len(buffer) == 1
        assert buffer[0] == H(b"only")

    def test_five_leaves_padding(self, hasher: Hasher) -> None:
        """Test every odd layer carries a copy of its last hash."""
        buffer = build_buffer(make_leaves(5), hasher)

        assert len(buffer) == 13
        for layer in iter_layers(5):
            if layer.is_padded:
                last = layer.offset + layer.width - 1
                assert buffer[last + 1] == buffer[last]

    def test_branch_slots_hash_children(self, hasher: Hasher) -> None:
        """Test every branch slot is the digest of its two children."""
        for leaf_count in [2, 3, 6, 7, 11, 16]:
            buffer = build_buffer(make_leaves(leaf_count), hasher)
            for layer in iter_layers(leaf_count):
                if layer.width < 2:
                    break
                for pair in range(layer.padded_width // 2):
                    left = buffer[layer.offset + 2 * pair]
                    right = buffer[layer.offset + 2 * pair + 1]
                    assert buffer[layer.end + pair] == H(left + right)

    def test_leaf_slots_not_rewritten(self, hasher: Hasher) -> None:
        """Test building leaves the leaf layer as written."""
        leaf_hashes = [H(data) for data in make_leaves(9)]
        buffer = TreeBuffer.from_leaf_hashes(leaf_hashes, 32)
        build_tree(buffer, 9, hasher)

        assert [buffer[i] for i in range(9)] == leaf_hashes

    def test_rebuild_is_identical(self, hasher: Hasher) -> None:
        """Test building twice from the same leaves gives the same buffer."""
        first = build_buffer(make_leaves(13), hasher)
        second = build_buffer(make_leaves(13), hasher)

        assert first == second
        assert first.to_bytes() == second.to_bytes()

    def test_oversized_buffer(self, hasher: Hasher) -> None:
        """Test spare slots past weight(n) are left alone."""
        buffer = TreeBuffer(weight(3) + 2, 32)
        for i, data in enumerate([b"a", b"b", b"c"]):
            buffer[i] = H(data)
        build_tree(buffer, 3, hasher)

        assert buffer[6] != b"\x00" * 32
        assert buffer[7] == b"\x00" * 32
        assert buffer[8] == b"\x00" * 32

    def test_zero_leaves_raises(self, hasher: Hasher) -> None:
        """Test zero leaves raises before touching the buffer."""
        buffer = TreeBuffer(1, 32)

        with pytest.raises(EmptyTreeError):
            build_tree(buffer, 0, hasher)

    def test_buffer_too_small_raises(self, hasher: Hasher) -> None:
        """Test an undersized buffer is rejected without mutation."""
        buffer = TreeBuffer(weight(5) - 1, 32)
        for i in range(5):
            buffer[i] = H(bytes([i]))
        before = buffer.to_bytes()

        with pytest.raises(BufferSizeError):
            build_tree(buffer, 5, hasher)

        assert buffer.to_bytes() == before

    def test_slot_size_mismatch_raises(self) -> None:
        """Test the hasher must produce slot-sized digests."""
        buffer = TreeBuffer.allocate(2, 32)

        with pytest.raises(BufferSizeError):
            build_tree(buffer, 2, Hasher.from_name("sha512"))

    def test_other_digest(self) -> None:
        """Test building with a non-default digest size."""
        hasher = Hasher.from_name("blake2s", 16)
        buffer = build_buffer([b"a", b"b", b"c"], hasher)

        assert buffer.hash_size == 16
        assert len(buffer[6]) == 16
