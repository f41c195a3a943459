"""Deterministic pool selection for regeneration variants.

Every phrase, verb and emoji choice in the engine goes through
``seeded_choice`` so that the same ``(pool, variant, salt)`` always lands on
the same entry and incrementing the variant walks the pool predictably.
"""

from typing import Sequence, TypeVar

T = TypeVar('T')

# Linear-congruential style mixing constants
MULTIPLIER = 9301
INCREMENT = 49297
SALT_FACTOR = 233
MODULUS = 233280


def salt_for(*parts: str) -> int:
    """Stable salt from a pool key and auxiliary strings (never uses hash())."""
    value = 0
    for char in ':'.join(parts):
        value = (value * 31 + ord(char)) % MODULUS
    return value


def seeded_index(length: int, variant: int, salt: int) -> int:
    if length <= 0:
        raise ValueError("Cannot choose from an empty pool")
    seed = (variant * MULTIPLIER + INCREMENT + salt * SALT_FACTOR) % MODULUS
    return seed % length


def seeded_choice(pool: Sequence[T], variant: int, salt: int) -> T:
    return pool[seeded_index(len(pool), variant, salt)]
