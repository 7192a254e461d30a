"""
Flatmerkle - Tree Metrics

Prometheus metrics for Merkle tree construction and proofs.

Metrics Categories:
- Tree building
- Proof extraction
- Proof verification
"""

from prometheus_client import Counter, Histogram, Info

import structlog

logger = structlog.get_logger(__name__)


class TreeMetrics:
    """
    Centralized metrics for the tree engine.

    Provides visibility into:
    - Build times and tree dimensions
    - Proof extraction times
    - Verification outcomes
    """

    def __init__(self) -> None:
        """Initialize all tree metrics."""
        self._init_build_metrics()
        self._init_proof_metrics()
        self._init_info_metrics()

    def _init_build_metrics(self) -> None:
        """Initialize tree build metrics."""
        self.build_duration = Histogram(
            "flatmerkle_build_duration_seconds",
            "Merkle tree build time",
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
        )

        self.tree_size = Histogram(
            "flatmerkle_tree_size",
            "Number of leaves in Merkle tree",
            buckets=[1, 10, 50, 100, 500, 1000, 5000, 10000, 50000],
        )

        self.buffer_weight = Histogram(
            "flatmerkle_buffer_weight",
            "Number of hash slots in tree buffer",
            buckets=[1, 25, 100, 250, 1000, 2500, 10000, 25000, 100000],
        )

        self.trees_built = Counter(
            "flatmerkle_trees_built_total",
            "Total Merkle trees built",
            ["algorithm"],
        )

    def _init_proof_metrics(self) -> None:
        """Initialize proof metrics."""
        self.proof_duration = Histogram(
            "flatmerkle_proof_duration_seconds",
            "Authentication chain extraction time",
            buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01],
        )

        self.verifications = Counter(
            "flatmerkle_verifications_total",
            "Merkle proof verifications",
            ["result"],
        )

    def _init_info_metrics(self) -> None:
        """Initialize info metrics."""
        self.library_info = Info(
            "flatmerkle",
            "Tree engine information",
        )

    # Convenience methods

    def record_build(
        self,
        duration: float,
        tree_size: int,
        weight: int,
        algorithm: str,
    ) -> None:
        """Record Merkle tree build."""
        self.build_duration.observe(duration)
        self.tree_size.observe(tree_size)
        self.buffer_weight.observe(weight)
        self.trees_built.labels(algorithm=algorithm).inc()

    def record_proof(self, duration: float) -> None:
        """Record authentication chain extraction."""
        self.proof_duration.observe(duration)

    def record_verification(self, valid: bool) -> None:
        """Record Merkle proof verification."""
        result = "valid" if valid else "invalid"
        self.verifications.labels(result=result).inc()

    def set_library_info(
        self,
        version: str,
        algorithm: str,
    ) -> None:
        """Set library info labels."""
        self.library_info.info({
            "version": version,
            "algorithm": algorithm,
        })


# Singleton instance
_tree_metrics: TreeMetrics | None = None


def get_tree_metrics() -> TreeMetrics:
    """Get global tree metrics instance."""
    global _tree_metrics
    if _tree_metrics is None:
        from flatmerkle import __version__
        from flatmerkle.core.config import settings

        _tree_metrics = TreeMetrics()
        _tree_metrics.set_library_info(
            version=__version__,
            algorithm=settings.HASH_ALGORITHM,
        )
        logger.debug("Registered tree metrics")
    return _tree_metrics
