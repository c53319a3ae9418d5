"""Core Layer - domain types, errors and security primitives; no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, client/, infrastructure/ or db/
"""
