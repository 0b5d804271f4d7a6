"""Verification Codes — 6-digit codes minted per reservation.

Invariants:
    - Codes are exactly six ASCII digits, uniform in [100000, 999999]
    - Codes are scoped to one donation; global uniqueness is not checked
    - Generators are injectable (CodeGenerator) so tests can pin the value
"""

import random
import re
from typing import Callable

CODE_MIN = 100_000
CODE_MAX = 999_999

CodeGenerator = Callable[[], str]

_CODE_PATTERN = re.compile(r"^[0-9]{6}$")
_system_random = random.SystemRandom()


def generate_verification_code(rng: random.Random | None = None) -> str:
    return str((rng or _system_random).randint(CODE_MIN, CODE_MAX))


def is_well_formed(code: str | None) -> bool:
    return bool(code) and bool(_CODE_PATTERN.match(code))


def fixed_code_generator(code: str) -> CodeGenerator:
    """Generator that always returns `code`. Rejects malformed codes up front."""
    if not is_well_formed(code):
        raise ValueError(f"Not a 6-digit verification code: {code!r}")
    return lambda: code
