"""Database Package - SQLAlchemy Base and standalone engine factory.

Invariants:
    - All engines and sessions are async
"""
