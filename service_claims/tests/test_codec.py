"""
Unit tests for claim value encoding and record/view mapping.
"""

import pytest
from datetime import datetime, timezone

from service_claims.app.claims.codec import decode_claim_values, distinct, encode_claim_values
from service_claims.app.claims.mapping import (
    input_to_record, record_to_input, record_to_view, view_to_input, view_to_record
)
from service_claims.app.claims.models import ClaimInput, ClaimRecord, ClaimType, ClaimView
from shared.errors import ClaimValueDecodeError, StorageError


class TestClaimValueCodec:
    """Test cases for the claim value codec."""

    def test_codec_keeps_duplicates(self):
        """Test encode/decode is lossless, duplicates included."""
        assert decode_claim_values(encode_claim_values(["a", "a", "b"])) == ["a", "a", "b"]

    def test_encode_is_json_array(self):
        """Test values are stored as a JSON array."""
        assert encode_claim_values(["topic/a", "topic/#"]) == '["topic/a", "topic/#"]'

    def test_decode_empty(self):
        """Test decoding an empty array."""
        assert decode_claim_values("[]") == []

    @pytest.mark.parametrize("blob", ["not json", '{"a": 1}', "[1, 2]", '"topic"', None])
    def test_decode_rejects_non_string_lists(self, blob):
        """Test malformed stored values raise a storage-level decode error."""
        with pytest.raises(ClaimValueDecodeError) as exc_info:
            decode_claim_values(blob)

        assert isinstance(exc_info.value, StorageError)
        assert exc_info.value.status_code == 500

    def test_distinct_keeps_first_occurrence_order(self):
        """Test deduplication keeps first occurrences in order."""
        assert distinct(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


class TestClaimMapping:
    """Test cases for record and transfer shape conversions."""

    @pytest.fixture
    def record(self):
        """Create stored record."""
        return ClaimRecord(
            id=3,
            user_id=11,
            claim_type=ClaimType.PUBLISH_WHITELIST,
            claim_value='["a", "a", "b"]',
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            updated_at=datetime(2024, 2, 1, tzinfo=timezone.utc)
        )

    def test_record_to_view(self, record):
        """Test the read shape decodes the stored values."""
        view = record_to_view(record)

        assert view.id == 3
        assert view.user_id == 11
        assert view.claim_type == ClaimType.PUBLISH_WHITELIST
        assert view.claim_values == ["a", "a", "b"]
        assert view.created_at == record.created_at
        assert view.updated_at == record.updated_at

    def test_record_view_round_trip(self, record):
        """Test record -> view -> record is lossless."""
        assert view_to_record(record_to_view(record)) == record

    def test_input_to_record(self):
        """Test write shape keeps values as given and leaves id unset."""
        record = input_to_record(ClaimInput(
            user_id=1,
            claim_type=ClaimType.SUBSCRIPTION_BLACKLIST,
            claim_values=["x", "x"]
        ))

        assert record.id is None
        assert record.updated_at is None
        assert decode_claim_values(record.claim_value) == ["x", "x"]

    def test_record_to_input(self, record):
        """Test record converts back to the write shape."""
        claim_input = record_to_input(record)

        assert claim_input.user_id == 11
        assert claim_input.claim_values == ["a", "a", "b"]

    def test_view_to_input(self, record):
        """Test read shape converts to write shape."""
        view = record_to_view(record)

        claim_input = view_to_input(view)

        assert claim_input == ClaimInput(
            user_id=11,
            claim_type=ClaimType.PUBLISH_WHITELIST,
            claim_values=["a", "a", "b"]
        )


class TestWireFormat:
    """Test cases for the JSON shape of the transfer models."""

    def test_input_accepts_camel_case(self):
        """Test input is parsed from camelCase keys."""
        claim_input = ClaimInput.model_validate({
            "userId": 1,
            "claimType": "SubscriptionWhitelist",
            "claimValues": ["topic/a"]
        })

        assert claim_input.claim_type == ClaimType.SUBSCRIPTION_WHITELIST

    def test_input_accepts_snake_case(self):
        """Test input is parsed from snake_case keys."""
        claim_input = ClaimInput.model_validate({
            "user_id": 1,
            "claim_type": "PublishBlacklist",
            "claim_values": []
        })

        assert claim_input.claim_type == ClaimType.PUBLISH_BLACKLIST

    def test_view_serializes_claim_type_by_name(self):
        """Test claim types go over the wire as their symbolic name."""
        view = ClaimView(
            id=1,
            user_id=2,
            claim_type=ClaimType.PUBLISH_WHITELIST,
            claim_values=["a"],
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc)
        )

        data = view.model_dump(mode="json", by_alias=True)

        assert data["claimType"] == "PublishWhitelist"
        assert data["claimValues"] == ["a"]
        assert data["updatedAt"] is None
