"""FoodShare Application Package — surplus-food donation lifecycle service.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
