"""
Claims Service package for the MQTT identity configuration.

This package stores per-user claims (typed, multi-valued attributes such
as topic publish/subscribe grants) consumed by the broker's access
control. It provides:

- app.main: API surface for claim CRUD and the upsert path, plus health.
- app.claims: Claim model, value codec, mapping and the create-or-merge
  service.
- app.persistence: Claim store contract with in-memory and PostgreSQL
  backends.

Guidelines:
- The service is stateless; claim state lives in the store.
- At most one claim exists per (user, claim type); upserts merge values
  and never drop existing ones.
"""
