"""Core Layer — pure domain logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are deterministic except IdentifierCodec (randomized by contract)

Design Decisions:
    - Functional core separated from imperative shell
"""
