"""
merkleproof - Merkle Metrics

Prometheus metrics for tree construction and proof verification.

Metrics Categories:
- Merkle tree building
- Build failures
- Proof generation
- Membership verification
"""

from prometheus_client import Counter, Histogram, Info


class MerkleMetrics:
    """
    Centralized metrics for merkleproof.

    Provides visibility into:
    - Tree build times and sizes
    - Rejected inputs
    - Verification outcomes
    """

    def __init__(self) -> None:
        """Initialize all metrics."""
        self._init_build_metrics()
        self._init_proof_metrics()
        self._init_info_metrics()

    def _init_build_metrics(self) -> None:
        """Initialize tree build metrics."""
        self.trees_built = Counter(
            "merkleproof_trees_built_total",
            "Total Merkle trees built",
        )

        self.build_duration = Histogram(
            "merkleproof_build_duration_seconds",
            "Merkle tree build time",
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
        )

        self.tree_size = Histogram(
            "merkleproof_tree_size",
            "Number of leaves in Merkle tree",
            buckets=[1, 2, 16, 128, 1024, 8192, 65536],
        )

        self.build_failures = Counter(
            "merkleproof_build_failures_total",
            "Rejected tree builds",
            ["reason"],
        )

    def _init_proof_metrics(self) -> None:
        """Initialize proof metrics."""
        self.proof_generation = Histogram(
            "merkleproof_proof_duration_seconds",
            "Merkle proof generation time",
            buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01],
        )

        self.verifications = Counter(
            "merkleproof_verifications_total",
            "Membership verifications",
            ["result"],
        )

    def _init_info_metrics(self) -> None:
        """Initialize info metrics."""
        self.service_info = Info(
            "merkleproof_service",
            "merkleproof service information",
        )

    # Convenience methods

    def record_build(self, duration: float, tree_size: int) -> None:
        """Record a successful tree build."""
        self.trees_built.inc()
        self.build_duration.observe(duration)
        self.tree_size.observe(tree_size)

    def record_build_failure(self, reason: str) -> None:
        """Record a rejected tree build."""
        self.build_failures.labels(reason=reason).inc()

    def record_proof_generation(self, duration: float) -> None:
        self.proof_generation.observe(duration)

    def record_verification(self, valid: bool) -> None:
        """Record a membership verification."""
        result = "valid" if valid else "invalid"
        self.verifications.labels(result=result).inc()

    def set_service_info(self, version: str, environment: str) -> None:
        """Set service info labels."""
        self.service_info.info({
            "version": version,
            "environment": environment,
        })


# Singleton instance
_merkle_metrics: MerkleMetrics | None = None


def get_merkle_metrics() -> MerkleMetrics:
    """Get global metrics instance."""
    global _merkle_metrics
    if _merkle_metrics is None:
        _merkle_metrics = MerkleMetrics()
    return _merkle_metrics
