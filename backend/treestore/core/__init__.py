"""Core Layer - pure tree logic, error types and collaborator contracts.

Invariants:
    - No module in core/ imports from services/, infrastructure/, models/ or db/
    - Functions here do no IO
"""
