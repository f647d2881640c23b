"""
Conversions between the persisted claim record and its transfer shapes.
"""

from .codec import decode_claim_values, encode_claim_values
from .models import ClaimInput, ClaimRecord, ClaimView


def record_to_view(record: ClaimRecord) -> ClaimView:
    """Convert a stored record to its read representation."""
    return ClaimView(
        id=record.id,
        user_id=record.user_id,
        claim_type=record.claim_type,
        claim_values=decode_claim_values(record.claim_value),
        created_at=record.created_at,
        updated_at=record.updated_at
    )


def view_to_record(view: ClaimView) -> ClaimRecord:
    """Convert a read representation back to a record."""
    return ClaimRecord(
        id=view.id,
        user_id=view.user_id,
        claim_type=view.claim_type,
        claim_value=encode_claim_values(view.claim_values),
        created_at=view.created_at,
        updated_at=view.updated_at
    )


def input_to_record(claim_input: ClaimInput) -> ClaimRecord:
    """Build an unsaved record from a write request, values unchanged."""
    return ClaimRecord(
        user_id=claim_input.user_id,
        claim_type=claim_input.claim_type,
        claim_value=encode_claim_values(claim_input.claim_values)
    )


def record_to_input(record: ClaimRecord) -> ClaimInput:
    return ClaimInput(
        user_id=record.user_id,
        claim_type=record.claim_type,
        claim_values=decode_claim_values(record.claim_value)
    )


def view_to_input(view: ClaimView) -> ClaimInput:
    return ClaimInput(
        user_id=view.user_id,
        claim_type=view.claim_type,
        claim_values=list(view.claim_values)
    )
