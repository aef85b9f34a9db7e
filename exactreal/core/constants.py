"""
Named constructive-real constants.

Each named constant is a process-wide singleton carrying a ``NamedConstant``
tag. The unified-real layer recognises these factors by tag, which is what
lets it keep results such as ``2·√3`` or ``(1/2)·π`` exact and decide that,
e.g., a rational multiple of ``ln 2`` can never equal one of ``ln 3``.
"""

from enum import Enum
from typing import Dict, Optional

from . import cr as _cr
from .cr import CR


class NamedConstant(Enum):
    """Tags for the recognised constants: (display name, square, log argument)."""
    ONE = ("", 1, None)
    PI = ("π", None, None)
    E = ("e", None, None)
    SQRT2 = ("√2", 2, None)
    SQRT3 = ("√3", 3, None)
    SQRT5 = ("√5", 5, None)
    SQRT6 = ("√6", 6, None)
    SQRT7 = ("√7", 7, None)
    SQRT10 = ("√10", 10, None)
    LN2 = ("ln(2)", None, 2)
    LN3 = ("ln(3)", None, 3)
    LN5 = ("ln(5)", None, 5)
    LN6 = ("ln(6)", None, 6)
    LN7 = ("ln(7)", None, 7)
    LN10 = ("ln(10)", None, 10)

    def __init__(self, display: str, square: Optional[int], log_argument: Optional[int]):
        self.display = display
        self.square = square
        self.log_argument = log_argument

    @property
    def algebraic(self) -> bool:
        return self.square is not None


def _named(value: CR, tag: NamedConstant) -> CR:
    value.tag = tag
    return value


ZERO = CR.from_int(0)
TWO = CR.from_int(2)
FOUR = CR.from_int(4)

ONE = _named(_cr.ONE, NamedConstant.ONE)
PI = _named(_cr.PI, NamedConstant.PI)
HALF_PI = _cr.HALF_PI
E = _named(ONE.exp(), NamedConstant.E)

SQRT2 = _named(CR.from_int(2).sqrt(), NamedConstant.SQRT2)
SQRT3 = _named(CR.from_int(3).sqrt(), NamedConstant.SQRT3)
SQRT5 = _named(CR.from_int(5).sqrt(), NamedConstant.SQRT5)
SQRT6 = _named(CR.from_int(6).sqrt(), NamedConstant.SQRT6)
SQRT7 = _named(CR.from_int(7).sqrt(), NamedConstant.SQRT7)
SQRT10 = _named(CR.from_int(10).sqrt(), NamedConstant.SQRT10)

LN2 = _named(_cr.LN2, NamedConstant.LN2)
LN3 = _named(CR.from_int(3).ln(), NamedConstant.LN3)
LN5 = _named(CR.from_int(5).ln(), NamedConstant.LN5)
LN6 = _named(CR.from_int(6).ln(), NamedConstant.LN6)
LN7 = _named(CR.from_int(7).ln(), NamedConstant.LN7)
LN10 = _named(CR.from_int(10).ln(), NamedConstant.LN10)

# pi/4 = 4 atan(1/5) - atan(1/239). Slower than PI for most precisions.
ATAN_PI = FOUR.multiply(FOUR.multiply(CR.atan_reciprocal(5)).subtract(CR.atan_reciprocal(239)))

# Square roots of small integers, by radicand. SQRTS[1] is ONE.
SQRTS: Dict[int, CR] = {
    1: ONE, 2: SQRT2, 3: SQRT3, 5: SQRT5, 6: SQRT6, 7: SQRT7, 10: SQRT10,
}

# Natural logarithms of small integers, by argument.
LOGS: Dict[int, CR] = {
    2: LN2, 3: LN3, 5: LN5, 6: LN6, 7: LN7, 10: LN10,
}

_BY_TAG: Dict[NamedConstant, CR] = {
    value.tag: value for value in (ONE, PI, E, *SQRTS.values(), *LOGS.values())
}


def by_tag(tag: NamedConstant) -> CR:
    return _BY_TAG[tag]


def same_factor(x: CR, y: CR) -> bool:
    """True if ``x`` and ``y`` are the same node or the same named constant."""
    return x is y or (x.tag is not None and x.tag is y.tag)


def is_named(x: CR) -> bool:
    return x.tag is not None


def square_of(x: CR) -> Optional[int]:
    """The integer whose square root ``x`` is, if ``x`` is ONE or a named square root."""
    return x.tag.square if x.tag is not None else None


def log_argument_of(x: CR) -> Optional[int]:
    """The integer whose natural log ``x`` is, if ``x`` is a named logarithm."""
    return x.tag.log_argument if x.tag is not None else None


def display_name(x: CR) -> Optional[str]:
    return x.tag.display if x.tag is not None else None


def definitely_algebraic(x: CR) -> bool:
    return x.tag is not None and x.tag.algebraic


def definitely_independent(x: CR, y: CR) -> bool:
    """
    True if no rational ``q`` satisfies ``x = q·y`` for the two named factors.

    Named square roots of square-free integers are pairwise independent, as
    are the named logarithms; a logarithm is transcendental and so independent
    of every square root; e and pi are transcendental, but whether e/pi is
    rational is not known, so only e or pi against an algebraic factor counts.
    """
    if same_factor(x, y):
        return False
    if x.tag in (NamedConstant.E, NamedConstant.PI):
        return definitely_algebraic(y)
    if y.tag in (NamedConstant.E, NamedConstant.PI):
        return definitely_algebraic(x)
    return is_named(x) and is_named(y)
