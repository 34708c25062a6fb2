"""Database Infrastructure - SQLAlchemy declarative Base.

Invariants:
    - All sessions are async (AsyncSession)
"""
