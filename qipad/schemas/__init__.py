"""Pydantic Schemas - request/response validation for the REST API.

Invariants:
    - Schemas validate at the system boundary (request bodies, response shapes)
    - JSON keys are camelCase on the wire, snake_case in Python (CamelModel)
    - Money-like values leave the API as floats

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
