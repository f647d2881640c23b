"""
PostgreSQL persistence layer for the Claims Service.
"""

from typing import List, Optional

import asyncpg

from shared.config import DatabaseConnectionSettings
from shared.errors import ClaimConflictError, StorageError
from shared.logging import get_logger
from ..claims.models import ClaimRecord, ClaimType
from .store import ClaimStore


class PostgresClaimStore(ClaimStore):
    """Claim store backed by a ``user_claims`` table."""

    def __init__(self, settings: DatabaseConnectionSettings):
        self.settings = settings
        self.logger = get_logger("claims.persistence.postgres")
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Start the persistence layer."""
        pool_size = 10 if self.settings.pooling else 1
        try:
            self.pool = await asyncpg.create_pool(
                self.settings.to_dsn(),
                min_size=1,
                max_size=pool_size,
                command_timeout=30,
                server_settings={"timezone": self.settings.timezone}
            )

            await self._create_tables()

            self.logger.info(
                "PostgreSQL persistence started",
                host=self.settings.host,
                database=self.settings.database,
                max_pool_size=pool_size
            )

        except Exception as e:
            self.logger.error("Failed to start PostgreSQL persistence", error=str(e))
            raise StorageError(str(e), code="POSTGRES_START_FAILED") from e

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL persistence stopped")

    async def _create_tables(self):
        """Create database tables."""
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS user_claims (
                    id BIGSERIAL PRIMARY KEY,
                    user_id BIGINT NOT NULL,
                    claim_type VARCHAR(50) NOT NULL,
                    claim_value TEXT NOT NULL DEFAULT '[]',
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                    updated_at TIMESTAMP WITH TIME ZONE,
                    CONSTRAINT uq_user_claims_user_type UNIQUE (user_id, claim_type)
                );
            """)

    async def list_all(self) -> List[ClaimRecord]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch("""
                SELECT * FROM user_claims ORDER BY id ASC
            """)
            return [self._row_to_record(row) for row in rows]

    async def find_by_id(self, claim_id: int) -> Optional[ClaimRecord]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow("""
                SELECT * FROM user_claims WHERE id = $1
            """, claim_id)
            return self._row_to_record(row) if row else None

    async def find_by_user_and_type(self, user_id: int, claim_type: ClaimType) -> Optional[ClaimRecord]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow("""
                SELECT * FROM user_claims WHERE user_id = $1 AND claim_type = $2
            """, user_id, claim_type.value)
            return self._row_to_record(row) if row else None

    async def insert(self, record: ClaimRecord) -> ClaimRecord:
        async with self.pool.acquire() as conn:
            try:
                row = await conn.fetchrow("""
                    INSERT INTO user_claims (user_id, claim_type, claim_value, created_at, updated_at)
                    VALUES ($1, $2, $3, $4, $5)
                    RETURNING *
                """,
                    record.user_id, record.claim_type.value, record.claim_value,
                    record.created_at, record.updated_at
                )
            except asyncpg.UniqueViolationError as e:
                raise ClaimConflictError(record.user_id, record.claim_type.value) from e

            self.logger.info("Claim inserted", claim_id=row["id"], user_id=record.user_id)
            return self._row_to_record(row)

    async def replace(self, record: ClaimRecord) -> ClaimRecord:
        async with self.pool.acquire() as conn:
            try:
                row = await conn.fetchrow("""
                    UPDATE user_claims SET
                        user_id = $2,
                        claim_type = $3,
                        claim_value = $4,
                        created_at = $5,
                        updated_at = $6
                    WHERE id = $1
                    RETURNING *
                """,
                    record.id, record.user_id, record.claim_type.value, record.claim_value,
                    record.created_at, record.updated_at
                )
            except asyncpg.UniqueViolationError as e:
                raise ClaimConflictError(record.user_id, record.claim_type.value) from e

            if row is None:
                raise StorageError(f"Claim row {record.id} does not exist", {"claim_id": record.id})

            self.logger.info("Claim replaced", claim_id=record.id)
            return self._row_to_record(row)

    async def delete(self, claim_id: int) -> bool:
        async with self.pool.acquire() as conn:
            result = await conn.execute("""
                DELETE FROM user_claims WHERE id = $1
            """, claim_id)

            if result == "DELETE 1":
                self.logger.info("Claim deleted", claim_id=claim_id)
                return True
            return False

    def _row_to_record(self, row) -> ClaimRecord:
        """Convert database row to ClaimRecord object."""
        return ClaimRecord(
            id=row['id'],
            user_id=row['user_id'],
            claim_type=ClaimType(row['claim_type']),
            claim_value=row['claim_value'],
            created_at=row['created_at'],
            updated_at=row['updated_at']
        )

    async def health_check(self) -> bool:
        """Check database health."""
        if self.pool is None:
            return False
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
                return True
        except (OSError, asyncpg.PostgresError) as e:
            self.logger.warning("PostgreSQL health check failed", error=str(e))
            return False
