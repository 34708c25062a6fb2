"""Infrastructure Layer - SQL record store, cache, sessions and logging.

Invariants:
    - Implements the core.repository_protocols contracts; services never import from here
    - SQLAlchemy exceptions surface as core.errors.DatabaseError
"""
