"""Standalone Engine Factory - async engines for code running outside FastAPI.

Invariants:
    - Meant for scripts (cleanup command) and test fixtures
    - Callers own the engine lifecycle (dispose when done)
"""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine


def create_engine_for(database_url: str) -> AsyncEngine:
    """Create a standalone async engine (no pool tuning, no echo)."""
    return create_async_engine(database_url, echo=False)
