"""Infrastructure Layer - database session management and logging setup.

Invariants:
    - SQLAlchemy exceptions are mapped to core.errors.DatabaseError here,
      never in services or routes
"""
