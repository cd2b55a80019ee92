"""
merkleproof - Error Types

Every failure surfaced to callers is a MerkleError carrying a numeric code,
a message and an optional nested cause, so the CLI and API can tell failure
classes apart without string matching.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Numeric error codes."""

    DATASET_READ = 1
    EMPTY_INPUT = 2
    UNBALANCED_INPUT = 3
    PROOF_FORMAT = 4


class MerkleError(Exception):
    """
    Base exception for merkleproof errors.

    Subclasses fix their code; the base class requires one explicitly.
    """

    code: ErrorCode

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        elif not hasattr(self, "code"):
            raise TypeError(f"{type(self).__name__} requires an error code")
        self.message = message
        self.cause = cause
        self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"E{int(self.code)}: {self.message} due to {self.cause}"
        return f"E{int(self.code)}: {self.message}"

    def to_dict(self) -> dict[str, int | str]:
        """Serialize for API error responses."""
        return {"code": int(self.code), "message": self.message}


class DatasetReadError(MerkleError):
    """Raised when a record or proof file cannot be read."""

    code = ErrorCode.DATASET_READ


class EmptyInputError(MerkleError):
    """Raised when a tree is requested over zero records."""

    code = ErrorCode.EMPTY_INPUT

    def __init__(self) -> None:
        super().__init__("Cannot create Merkle tree from empty records")


class UnbalancedInputError(MerkleError):
    """Raised when the record count is not a power of two."""

    code = ErrorCode.UNBALANCED_INPUT

    def __init__(self, count: int) -> None:
        super().__init__(f"Record count {count} is not a power of two")
        self.count = count


class ProofFormatError(MerkleError):
    """Raised when a proof entry is not a valid digest or direction."""

    code = ErrorCode.PROOF_FORMAT
