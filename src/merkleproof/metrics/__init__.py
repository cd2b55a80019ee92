"""
merkleproof - Metrics Module

Prometheus metrics for tree building and verification.
"""

from merkleproof.metrics.merkle_metrics import (
    MerkleMetrics,
    get_merkle_metrics,
)

__all__ = [
    "MerkleMetrics",
    "get_merkle_metrics",
]
