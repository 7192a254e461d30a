"""
Flatmerkle - Digest Functions

The tree engine never hashes anything itself. It is handed a Hasher,
which wraps any ``bytes -> bytes`` function together with the fixed
output size every slot in a tree buffer will share.
"""

import hashlib
from collections.abc import Callable
from functools import lru_cache

from flatmerkle.core.config import settings
from flatmerkle.crypto.errors import DigestError

# Algorithms whose output size can be chosen at construction time
VARIABLE_SIZE_ALGORITHMS = {
    "blake2b": 64,
    "blake2s": 32,
}

FIXED_SIZE_ALGORITHMS = (
    "sha256",
    "sha384",
    "sha512",
    "sha3_256",
    "sha3_384",
    "sha3_512",
)


class Hasher:
    """
    Fixed-size digest function used for leaves and branch nodes.

    Example:
        >>> hasher = Hasher.from_name("sha256")
        >>> len(hasher.digest(b"a"))
        32
    """

    def __init__(
        self,
        func: Callable[[bytes], bytes],
        digest_size: int,
        name: str = "custom",
    ) -> None:
        if digest_size < 1:
            raise DigestError(f"Digest size must be positive, got {digest_size}")
        self._func = func
        self._digest_size = digest_size
        self._name = name

    @classmethod
    def from_name(cls, algorithm: str, digest_size: int | None = None) -> "Hasher":
        """
        Create a hasher backed by a hashlib algorithm.

        Args:
            algorithm: hashlib algorithm name (e.g. "sha256", "blake2b")
            digest_size: Output size in bytes (blake2 families only)

        Returns:
            Hasher for the algorithm

        Raises:
            DigestError: If the algorithm is unknown or the size is not supported
        """
        algorithm = algorithm.lower().replace("-", "_")

        if algorithm in VARIABLE_SIZE_ALGORITHMS:
            max_size = VARIABLE_SIZE_ALGORITHMS[algorithm]
            size = max_size if digest_size is None else digest_size
            if not 1 <= size <= max_size:
                raise DigestError(
                    f"{algorithm} digest size must be between 1 and {max_size}, got {size}"
                )
            constructor = getattr(hashlib, algorithm)

            def func(data: bytes) -> bytes:
                return constructor(data, digest_size=size).digest()

            name = algorithm if size == max_size else f"{algorithm}-{size * 8}"
            return cls(func, size, name)

        if algorithm in FIXED_SIZE_ALGORITHMS:
            constructor = getattr(hashlib, algorithm)
            size = constructor().digest_size
            if digest_size is not None and digest_size != size:
                raise DigestError(
                    f"{algorithm} has a fixed digest size of {size}, got {digest_size}"
                )

            def func(data: bytes) -> bytes:
                return constructor(data).digest()

            return cls(func, size, algorithm)

        raise DigestError(f"Unknown hash algorithm: {algorithm}")

    @property
    def name(self) -> str:
        return self._name

    @property
    def digest_size(self) -> int:
        return self._digest_size

    def digest(self, data: bytes | bytearray | memoryview) -> bytes:
        """
        Hash a byte range.

        The input is fully consumed before the result is returned, so
        callers may write the result back over the region they read from.

        Raises:
            DigestError: If the wrapped function returns the wrong size
        """
        result = bytes(self._func(bytes(data)))
        if len(result) != self._digest_size:
            raise DigestError(
                f"{self._name} returned {len(result)} bytes, expected {self._digest_size}"
            )
        return result

    def combine(self, left: bytes, right: bytes) -> bytes:
        """Hash the concatenation of two node hashes."""
        return self.digest(left + right)

    def __repr__(self) -> str:
        return f"Hasher(name={self._name!r}, digest_size={self._digest_size})"


@lru_cache
def get_default_hasher() -> Hasher:
    """Get the hasher selected by HASH_ALGORITHM / HASH_SIZE."""
    return Hasher.from_name(settings.HASH_ALGORITHM, settings.HASH_SIZE)
