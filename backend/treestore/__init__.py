"""treestore - nested-set tree storage over a flat record collection.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
