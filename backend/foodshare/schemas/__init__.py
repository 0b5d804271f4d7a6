"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas check SHAPE only; domain rules live in core/validate_input.py
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
