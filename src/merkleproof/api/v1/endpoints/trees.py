"""
merkleproof API - Tree Endpoints

- POST /trees/display: Flattened node listing with root digests
- POST /trees/verify: Verify membership of a record using a proof
- POST /trees/proof: Generate the inclusion proof for a leaf
"""

from typing import Any, Literal

import structlog
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field, model_validator

from merkleproof.core.config import settings
from merkleproof.core.errors import MerkleError
from merkleproof.services.dataset import parse_proof_entry
from merkleproof.services.tree_service import TreeService

logger = structlog.get_logger(__name__)
router = APIRouter()

Encoding = Literal["utf-8", "hex"]


def _decode(value: str, encoding: Encoding) -> bytes:
    if encoding == "hex":
        return bytes.fromhex(value)
    return value.encode("utf-8")


# Request/Response Models
class RecordsRequest(BaseModel):
    """Ordered records for building a tree."""

    records: list[str] = Field(
        ...,
        description="Ordered records; count must be a power of two",
    )
    encoding: Encoding = Field(
        default="utf-8",
        description="How records (and leaf) are encoded: utf-8 text or hex",
    )

    @model_validator(mode="after")
    def check_limits(self) -> "RecordsRequest":
        if len(self.records) > settings.MAX_RECORDS:
            raise ValueError(f"At most {settings.MAX_RECORDS} records are accepted")
        return self

    def decoded_records(self) -> list[bytes]:
        try:
            return [_decode(r, self.encoding) for r in self.records]
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Invalid {self.encoding} record: {e}",
            )


class NodeResponse(BaseModel):
    index: int
    digest: str


class DisplayResponse(BaseModel):
    """Flattened tree listing."""

    root: str
    height: int
    leaf_count: int
    nodes: list[NodeResponse]


class VerifyRequest(RecordsRequest):
    """Request to verify membership of a record."""

    leaf: str = Field(..., description="Candidate record")
    proof: list[str] = Field(
        ...,
        description="Sibling digests leaf to root, as hex or L:hash / R:hash",
    )


class VerifyResponse(BaseModel):
    """Verification result."""

    verified: bool
    root: str
    message: str


class ProofRequest(RecordsRequest):
    """Request to generate an inclusion proof."""

    index: int = Field(..., ge=0, description="Leaf index")


def _merkle_error(e: MerkleError) -> HTTPException:
    logger.warning("Request rejected", error=str(e), code=int(e.code))
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=e.to_dict(),
    )


@router.post(
    "/display",
    response_model=DisplayResponse,
    summary="Display tree",
    description="Build a tree and list every node's root digest in pre-order.",
)
def display_tree(request: RecordsRequest) -> DisplayResponse:
    service = TreeService()
    try:
        report = service.build_and_report(request.decoded_records())
    except MerkleError as e:
        raise _merkle_error(e)

    return DisplayResponse(**report.to_dict())


@router.post(
    "/verify",
    response_model=VerifyResponse,
    summary="Verify membership proof",
    description="Verify that a record belongs to the tree built from records.",
)
def verify_membership(request: VerifyRequest) -> VerifyResponse:
    """
    Verify membership of a record.

    Steps:
    1. Build the tree from the supplied records
    2. Reconstruct the root from the leaf and proof
    3. Compare with the tree's actual root
    """
    logger.info(
        "Verifying membership",
        record_count=len(request.records),
        proof_length=len(request.proof),
    )

    service = TreeService()
    try:
        records = request.decoded_records()
        leaf = _decode(request.leaf, request.encoding)
        proof = [parse_proof_entry(entry.strip()) for entry in request.proof]
        tree = service.build(records)
        verified = service.verify(tree, leaf, proof)
    except MerkleError as e:
        raise _merkle_error(e)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid {request.encoding} leaf: {e}",
        )

    return VerifyResponse(
        verified=verified,
        root=tree.root_hash.hex,
        message="Verification successful" if verified else "Merkle proof verification failed",
    )


@router.post(
    "/proof",
    summary="Generate inclusion proof",
    description="Build a tree and return the proof for one leaf.",
    responses={404: {"description": "Leaf index out of range"}},
)
def generate_proof(request: ProofRequest) -> dict[str, Any]:
    service = TreeService()
    try:
        proof = service.build_proof(request.decoded_records(), request.index)
    except MerkleError as e:
        raise _merkle_error(e)
    except IndexError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )

    return {**proof.to_dict(), "compact": proof.to_compact()}
