"""Pydantic Schemas: request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Entry values are arbitrary JSON; the store stays schema-agnostic

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
