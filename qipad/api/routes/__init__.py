"""Route Modules - one file per resource.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes hold no business rules (delegate to services/)

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
