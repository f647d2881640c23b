"""
Shared error handling for the MQTT claims service.
"""

from typing import Dict, Any, Optional

from opentelemetry import trace
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ClaimsLayerException(Exception):
    """Base exception for the claims service."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ClaimNotFoundError(ClaimsLayerException):
    """The referenced claim identifier does not exist."""

    status_code = 404

    def __init__(self, claim_id: int):
        self.claim_id = claim_id
        super().__init__(
            "NOT_FOUND",
            f"Claim with identifier {claim_id} not found.",
            {"claim_id": claim_id}
        )


class StorageError(ClaimsLayerException):
    """Unexpected fault from the persistence layer."""

    status_code = 500

    def __init__(self, message: str = "Storage error", details: Optional[Dict[str, Any]] = None,
                 code: str = "STORAGE_ERROR"):
        super().__init__(code, message, details)


class ClaimConflictError(StorageError):
    """A claim for the same user and claim type already exists."""

    def __init__(self, user_id: int, claim_type: str):
        self.user_id = user_id
        self.claim_type = claim_type
        super().__init__(
            f"Claim {claim_type} already exists for user {user_id}",
            {"user_id": user_id, "claim_type": claim_type},
            code="CLAIM_CONFLICT"
        )


class ClaimValueDecodeError(StorageError):
    """A stored claim value blob could not be decoded."""

    def __init__(self, message: str = "Stored claim value is not a list of strings"):
        super().__init__(message, code="CLAIM_VALUE_DECODE_ERROR")
