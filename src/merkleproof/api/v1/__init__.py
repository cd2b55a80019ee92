"""
merkleproof API v1

Endpoints:
- POST /trees/display - List tree nodes with root digests
- POST /trees/verify - Verify membership proof
- POST /trees/proof - Generate inclusion proof
"""

from fastapi import APIRouter

from merkleproof.api.v1.endpoints import trees

router = APIRouter()
router.include_router(trees.router, prefix="/trees", tags=["Trees"])
