"""
Flatmerkle - Metrics Module

Prometheus metrics for the tree engine.

Exports:
- Merkle tree build times and dimensions
- Proof extraction latency
- Verification outcomes
"""

from flatmerkle.metrics.tree_metrics import (
    TreeMetrics,
    get_tree_metrics,
)

__all__ = [
    "TreeMetrics",
    "get_tree_metrics",
]
