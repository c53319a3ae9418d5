"""Services Layer - business rules over an AsyncSession, one class per concern.

Invariants:
    - Services raise QipadError subclasses; routes never translate errors
    - A service method that writes either commits once or, when composed
      (commit=False), leaves the commit to its caller
"""
