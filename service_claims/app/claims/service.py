"""
Claim service: the create-or-merge engine over a claim store.

``upsert`` keys on (user_id, claim_type). A missing claim is created with
its values deduplicated; an existing claim only ever gains values, the
stored ones first followed by new input values in input order.
``update_by_id`` is different on purpose: it replaces the values wholesale.
"""

import dataclasses
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterable, List, Optional

import structlog

from shared.errors import ClaimConflictError, ClaimNotFoundError, ClaimsLayerException, StorageError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from shared.tracing import trace_operation
from ..persistence.store import ClaimStore
from .codec import decode_claim_values, distinct, encode_claim_values
from .mapping import input_to_record, record_to_view
from .models import ClaimDeleteResult, ClaimInput, ClaimRecord, ClaimView, utc_now


class ClaimService:
    """Implements list, get, upsert, update and delete for user claims."""

    def __init__(self, store: ClaimStore,
                 logger: Optional[structlog.stdlib.BoundLogger] = None,
                 metrics: Optional[MetricsCollector] = None,
                 clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.logger = logger or get_logger("claims.service")
        self.metrics = metrics
        self._clock = clock

    async def list_claims(self) -> List[ClaimView]:
        """Return every stored claim; an empty store yields an empty list."""
        with self._operation("list"):
            records = await self.store.list_all()
            views = [record_to_view(record) for record in records]
            self._outcome("list", "ok", count=len(views))
            return views

    async def get_by_id(self, claim_id: int) -> ClaimView:
        with self._operation("get", claim_id=claim_id):
            record = await self.store.find_by_id(claim_id)
            if record is None:
                self._outcome("get", "not_found", claim_id=claim_id)
                raise ClaimNotFoundError(claim_id)

            self._outcome("get", "ok", claim_id=claim_id)
            return record_to_view(record)

    async def upsert(self, claim_input: ClaimInput) -> ClaimView:
        """Create the claim for (user_id, claim_type) or merge values into it."""
        user_id = claim_input.user_id
        claim_type = claim_input.claim_type

        with self._operation("upsert", user_id=user_id, claim_type=claim_type.value):
            existing = await self.store.find_by_user_and_type(user_id, claim_type)

            if existing is None:
                try:
                    created = await self._create(claim_input)
                except ClaimConflictError:
                    # Another upsert inserted the same slot first; merge into it.
                    self.logger.warning(
                        "Claim insert conflicted, merging instead",
                        user_id=user_id,
                        claim_type=claim_type.value
                    )
                    existing = await self.store.find_by_user_and_type(user_id, claim_type)
                    if existing is None:
                        raise
                else:
                    self._outcome("upsert", "created", claim_id=created.id)
                    return record_to_view(created)

            merged = await self._merge(existing, claim_input.claim_values)
            self._outcome("upsert", "merged", claim_id=merged.id)
            return record_to_view(merged)

    async def update_by_id(self, claim_id: int, claim_input: ClaimInput) -> ClaimView:
        """Overwrite the claim with ``claim_id``; values are replaced, not merged."""
        with self._operation("update", claim_id=claim_id):
            existing = await self.store.find_by_id(claim_id)
            if existing is None:
                self._outcome("update", "not_found", claim_id=claim_id)
                raise ClaimNotFoundError(claim_id)

            record = dataclasses.replace(
                input_to_record(claim_input),
                id=claim_id,
                created_at=existing.created_at,
                updated_at=self._clock()
            )
            saved = await self.store.replace(record)

            self._outcome("update", "replaced", claim_id=claim_id)
            return record_to_view(saved)

    async def delete_by_id(self, claim_id: int) -> ClaimDeleteResult:
        """Delete the claim if present. Deleting a missing id succeeds."""
        with self._operation("delete", claim_id=claim_id):
            existing = await self.store.find_by_id(claim_id)
            if existing is None:
                self._outcome("delete", "absent", claim_id=claim_id)
                return ClaimDeleteResult(id=claim_id, deleted=False)

            deleted = await self.store.delete(claim_id)
            self._outcome("delete", "deleted" if deleted else "absent", claim_id=claim_id)
            return ClaimDeleteResult(id=claim_id, deleted=deleted)

    async def _create(self, claim_input: ClaimInput) -> ClaimRecord:
        record = ClaimRecord(
            user_id=claim_input.user_id,
            claim_type=claim_input.claim_type,
            claim_value=encode_claim_values(distinct(claim_input.claim_values)),
            created_at=self._clock(),
            updated_at=None
        )
        return await self.store.insert(record)

    async def _merge(self, existing: ClaimRecord, values: Iterable[str]) -> ClaimRecord:
        merged_values = distinct(decode_claim_values(existing.claim_value) + list(values))
        record = dataclasses.replace(
            existing,
            claim_value=encode_claim_values(merged_values),
            updated_at=self._clock()
        )
        return await self.store.replace(record)

    @contextmanager
    def _operation(self, operation: str, **fields):
        """Log, trace and translate failures for one service operation."""
        self.logger.info("Claim operation started", operation=operation, **fields)

        with trace_operation(f"claims.{operation}", **fields):
            try:
                yield
            except ClaimNotFoundError:
                raise
            except ClaimsLayerException as e:
                self._failed(operation, e, fields)
                raise
            except Exception as e:
                self._failed(operation, e, fields)
                raise StorageError(str(e)) from e

    def _outcome(self, operation: str, outcome: str, **fields):
        log = self.logger.warning if outcome == "not_found" else self.logger.info
        log("Claim operation completed", operation=operation, outcome=outcome, **fields)
        if self.metrics:
            self.metrics.increment_counter("claim_operations_total", operation=operation, outcome=outcome)

    def _failed(self, operation: str, error: Exception, fields):
        self.logger.error(
            "Claim operation failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            exc_info=error,
            **fields
        )
        if self.metrics:
            self.metrics.increment_counter("claim_operations_total", operation=operation, outcome="failed")
