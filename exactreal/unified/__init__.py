"""Exact-when-possible reals: a bounded rational times a constructive real."""

from .unified_real import (
    UnifiedReal,
    PI,
    E,
    ZERO,
    ONE,
    MINUS_ONE,
    TWO,
    MINUS_TWO,
    HALF,
    MINUS_HALF,
    TEN,
    RADIANS_PER_DEGREE,
    asin_halves,
)

__all__ = [
    "UnifiedReal",
    "PI",
    "E",
    "ZERO",
    "ONE",
    "MINUS_ONE",
    "TWO",
    "MINUS_TWO",
    "HALF",
    "MINUS_HALF",
    "TEN",
    "RADIANS_PER_DEGREE",
    "asin_halves",
]
