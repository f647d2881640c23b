"""
Claim store contract and the in-memory implementation.
"""

import dataclasses
import itertools
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from shared.errors import ClaimConflictError, StorageError
from shared.logging import get_logger
from ..claims.models import ClaimRecord, ClaimType


class ClaimStore(ABC):
    """Durable keyed storage for claim records.

    Every operation is atomic for a single record. ``insert`` raises
    :class:`ClaimConflictError` when a record for the same user and claim
    type already exists.
    """

    async def start(self):
        """Open connections. No-op by default."""

    async def stop(self):
        """Release connections. No-op by default."""

    async def health_check(self) -> bool:
        return True

    @abstractmethod
    async def list_all(self) -> List[ClaimRecord]:
        ...

    @abstractmethod
    async def find_by_id(self, claim_id: int) -> Optional[ClaimRecord]:
        ...

    @abstractmethod
    async def find_by_user_and_type(self, user_id: int, claim_type: ClaimType) -> Optional[ClaimRecord]:
        ...

    @abstractmethod
    async def insert(self, record: ClaimRecord) -> ClaimRecord:
        """Persist a new record and return it with its id assigned."""

    @abstractmethod
    async def replace(self, record: ClaimRecord) -> ClaimRecord:
        """Overwrite the row with ``record.id``; raises if it does not exist."""

    @abstractmethod
    async def delete(self, claim_id: int) -> bool:
        """Remove the row if present. Returns whether a row was removed."""


class InMemoryClaimStore(ClaimStore):
    """Process-local claim store used for tests and local runs."""

    def __init__(self):
        self.logger = get_logger("claims.persistence.memory")
        self._records: Dict[int, ClaimRecord] = {}
        self._ids = itertools.count(1)

    async def list_all(self) -> List[ClaimRecord]:
        return [dataclasses.replace(record) for _, record in sorted(self._records.items())]

    async def find_by_id(self, claim_id: int) -> Optional[ClaimRecord]:
        record = self._records.get(claim_id)
        return dataclasses.replace(record) if record else None

    async def find_by_user_and_type(self, user_id: int, claim_type: ClaimType) -> Optional[ClaimRecord]:
        for record in self._records.values():
            if record.user_id == user_id and record.claim_type == claim_type:
                return dataclasses.replace(record)
        return None

    async def insert(self, record: ClaimRecord) -> ClaimRecord:
        if await self.find_by_user_and_type(record.user_id, record.claim_type):
            raise ClaimConflictError(record.user_id, record.claim_type.value)

        stored = dataclasses.replace(record, id=next(self._ids))
        self._records[stored.id] = stored
        self.logger.debug("Claim inserted", claim_id=stored.id)
        return dataclasses.replace(stored)

    async def replace(self, record: ClaimRecord) -> ClaimRecord:
        if record.id not in self._records:
            raise StorageError(f"Claim row {record.id} does not exist", {"claim_id": record.id})

        existing = await self.find_by_user_and_type(record.user_id, record.claim_type)
        if existing and existing.id != record.id:
            raise ClaimConflictError(record.user_id, record.claim_type.value)

        self._records[record.id] = dataclasses.replace(record)
        return dataclasses.replace(record)

    async def delete(self, claim_id: int) -> bool:
        return self._records.pop(claim_id, None) is not None
