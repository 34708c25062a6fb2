"""Services Layer - tree reader, mutation guard, tree writer and their facade.

Invariants:
    - Services talk to storage only through core.repository_protocols
    - Every structural write ends with an interval rebuild
"""
