"""Services Layer — donation store and the lifecycle components built on it.

Invariants:
    - Components (coordinator, gate, ledger) write ONLY through conditional_update
    - The orchestrator is the only entry point used by routes

Design Decisions:
    - One file per component for locality; each owns exactly one transition family
"""
