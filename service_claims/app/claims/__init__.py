"""
Claims package.

Defines the claim model and the create-or-merge engine used by the
Claims Service.

Modules of interest:
- models: ClaimType, the persisted ClaimRecord and the wire shapes.
- codec: Lossless encoding of claim value lists and deduplication.
- mapping: Pure conversions between records and wire shapes.
- service: The ClaimService operations over a ClaimStore.
"""
