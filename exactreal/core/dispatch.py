"""Closed set of constructive-real node kinds and their approximation functions."""

from enum import Enum, auto
from typing import Callable, Dict


class CRKind(Enum):
    INT_CONSTANT = auto()
    ASSUMED_INT = auto()
    ADD = auto()
    SHIFTED = auto()
    NEGATE = auto()
    SELECT = auto()
    MULTIPLY = auto()
    INVERSE = auto()
    PRESCALED_EXP = auto()
    PRESCALED_COS = auto()
    INTEGRAL_ATAN = auto()
    PRESCALED_LN = auto()
    PRESCALED_ASIN = auto()
    SQRT = auto()
    GL_PI = auto()


# Kinds whose approximate() is expensive enough that the engine evaluates
# them at a coarser-rounded, tighter precision than requested.
SLOW_KINDS = frozenset({
    CRKind.PRESCALED_COS,
    CRKind.INTEGRAL_ATAN,
    CRKind.PRESCALED_LN,
    CRKind.PRESCALED_ASIN,
    CRKind.GL_PI,
})

# Maps each kind to ``f(node, precision) -> int``.
APPROXIMATORS: Dict[CRKind, Callable] = {}


def approximator(kind: CRKind):
    """Register the approximation function for ``kind``."""
    def register(func):
        if kind in APPROXIMATORS:
            raise ValueError(f"Approximator for {kind.name} already registered")
        APPROXIMATORS[kind] = func
        return func
    return register


def check_complete() -> None:
    missing = [kind.name for kind in CRKind if kind not in APPROXIMATORS]
    if missing:
        raise ImportError(f"No approximator registered for: {', '.join(missing)}")
