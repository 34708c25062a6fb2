"""Pydantic Schemas - field-level validation for node records entering the store.

Invariants:
    - Schemas validate at the persistence boundary (create/update payloads)
    - Interval fields are never accepted from callers
"""
