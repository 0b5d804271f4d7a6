"""Infrastructure Layer — database sessions and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from core/ lifecycle rules (errors excepted)
    - All driver exceptions mapped to core error types before leaving this layer
"""
