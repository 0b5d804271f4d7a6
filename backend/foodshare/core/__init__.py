"""Core Layer — pure lifecycle rules, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Clocks and random sources are injectable; nothing here reads the wall clock
"""
