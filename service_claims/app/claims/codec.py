"""
Encoding of claim value lists into the single stored ``claim_value`` field.

The codec is lossless: duplicates and order survive a round trip.
Deduplication is a service decision, see :func:`distinct`.
"""

import json
from typing import Iterable, List

from shared.errors import ClaimValueDecodeError


def encode_claim_values(values: Iterable[str]) -> str:
    """Encode claim values as a JSON array."""
    return json.dumps(list(values))


def decode_claim_values(blob: str) -> List[str]:
    """Decode a stored JSON array of claim values."""
    try:
        values = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise ClaimValueDecodeError(f"Stored claim value is not valid JSON: {e}") from e

    if not isinstance(values, list) or not all(isinstance(value, str) for value in values):
        raise ClaimValueDecodeError()

    return values


def distinct(values: Iterable[str]) -> List[str]:
    """Drop repeated values, keeping first occurrences in order."""
    return list(dict.fromkeys(values))
