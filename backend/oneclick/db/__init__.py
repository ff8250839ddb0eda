"""Database Infrastructure — SQLAlchemy Base and session factory.

Invariants:
    - All sessions are async (AsyncSession)
"""
