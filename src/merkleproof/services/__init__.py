"""
merkleproof - Services Package

Tree operations and dataset loading on top of the Merkle core.
"""

from merkleproof.services.dataset import load_proof, load_records, parse_proof
from merkleproof.services.tree_service import NodeReport, TreeReport, TreeService

__all__ = [
    "NodeReport",
    "TreeReport",
    "TreeService",
    "load_proof",
    "load_records",
    "parse_proof",
]
