"""
Claims service for the MQTT identity configuration.
"""

from typing import List, Optional

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config

from .claims.models import ClaimDeleteResult, ClaimInput, ClaimView
from .claims.service import ClaimService
from .persistence.postgres import PostgresClaimStore
from .persistence.store import ClaimStore, InMemoryClaimStore


def create_store(config: ServiceConfig) -> ClaimStore:
    """Build the claim store selected by ``store_backend``."""
    if config.store_backend == "memory":
        return InMemoryClaimStore()
    if config.store_backend == "postgres":
        return PostgresClaimStore(config.database)
    raise ValueError(f"Unknown claim store backend: {config.store_backend}")


class ClaimsService(BaseService):
    """Claims service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None, store: Optional[ClaimStore] = None):
        config = config or get_config("claims", 8020)
        super().__init__("claims", config.port, config)

        self.store = store or create_store(self.config)
        self.claim_service = ClaimService(
            self.store,
            logger=self.logger,
            metrics=self.metrics
        )

        self._setup_claims_routes()

    def _setup_claims_routes(self):
        """Set up claim routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "claims",
                "message": "MQTT identity configuration - Claims Service",
                "version": "1.0.0",
                "store": self.config.store_backend
            }

        @self.app.get("/claim", response_model=List[ClaimView], tags=["Claim"])
        async def get_claims():
            """Get all claims."""
            return await self.claim_service.list_claims()

        @self.app.get("/claim/{claim_id}", response_model=ClaimView, tags=["Claim"])
        async def get_claim_by_id(claim_id: int):
            """Get a claim by its identifier."""
            return await self.claim_service.get_by_id(claim_id)

        @self.app.post("/claim", response_model=ClaimView, tags=["Claim"])
        async def create_or_update_claim(request: ClaimInput):
            """Create the user's claim of this type, or merge values into it."""
            return await self.claim_service.upsert(request)

        @self.app.put("/claim/{claim_id}", response_model=ClaimView, tags=["Claim"])
        async def update_claim(claim_id: int, request: ClaimInput):
            """Replace a claim by its identifier."""
            return await self.claim_service.update_by_id(claim_id, request)

        @self.app.delete("/claim/{claim_id}", response_model=ClaimDeleteResult, tags=["Claim"])
        async def delete_claim_by_id(claim_id: int):
            """Delete a claim by its identifier. Missing claims are not an error."""
            return await self.claim_service.delete_by_id(claim_id)

    async def _check_dependencies(self):
        """Check claims service dependencies."""
        healthy = await self.store.health_check()
        return {"store": "ok" if healthy else "error"}

    async def start(self):
        """Start claims service components."""
        await self.store.start()
        self.logger.info("Claims service started", store=self.config.store_backend)

    async def stop(self):
        """Stop claims service components."""
        await self.store.stop()
        self.logger.info("Claims service stopped")


def create_app(config: Optional[ServiceConfig] = None, store: Optional[ClaimStore] = None):
    """Create claims service application."""
    service = ClaimsService(config, store)
    return service.app


if __name__ == "__main__":
    service = ClaimsService()
    service.run()
