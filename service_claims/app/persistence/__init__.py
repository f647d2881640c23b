"""
Claim persistence backends.
"""

from .store import ClaimStore, InMemoryClaimStore
from .postgres import PostgresClaimStore

__all__ = ["ClaimStore", "InMemoryClaimStore", "PostgresClaimStore"]
