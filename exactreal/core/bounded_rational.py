"""
Size-bounded exact rationals.

``BoundedRational`` wraps ``fractions.Fraction``. The arithmetic helpers are
static and accept ``None`` operands: a result whose numerator and denominator
together exceed ``EvaluationConfig.rational_max_bits`` bits is reported as
``None`` rather than computed, and ``None`` propagates through later helpers.
Callers treat ``None`` as "no exact answer cheaply available" and fall back to
constructive-real evaluation.
"""

import math
from fractions import Fraction
from typing import Optional, Union

from .errors import ArithmeticDomainError, DivisionByZeroError
from .precision_config import EvaluationConfig

Q = Fraction

MAX_INT = (1 << 31) - 1
MIN_INT = -(1 << 31)


class BoundedRational:
    """An exact fraction. Instances are immutable and always in lowest terms."""

    __slots__ = ("_value",)

    def __init__(self, numerator: Union[int, Fraction], denominator: int = 1):
        if denominator == 0:
            raise DivisionByZeroError()
        self._value = Q(numerator, denominator) if denominator != 1 else Q(numerator)

    @classmethod
    def _of(cls, value: Fraction) -> "BoundedRational":
        result = cls.__new__(cls)
        result._value = value
        return result

    @property
    def numerator(self) -> int:
        return self._value.numerator

    @property
    def denominator(self) -> int:
        return self._value.denominator

    @property
    def fraction(self) -> Fraction:
        return self._value

    # -- Queries -----------------------------------------------------------

    def signum(self) -> int:
        return (self._value > 0) - (self._value < 0)

    def compare_to(self, other: "BoundedRational") -> int:
        return (self._value > other._value) - (self._value < other._value)

    def bit_size(self) -> int:
        return abs(self.numerator).bit_length() + self.denominator.bit_length()

    def whole_number_bits(self) -> int:
        """Approximate number of bits to the left of the binary point; MIN_INT for zero."""
        if self.signum() == 0:
            return MIN_INT
        return abs(self.numerator).bit_length() - self.denominator.bit_length()

    def double_value(self) -> float:
        try:
            return float(self._value)
        except OverflowError:
            return float("inf") if self._value > 0 else float("-inf")

    def int_value(self) -> int:
        """Integer part, truncated toward zero."""
        return int(self._value)

    def cr_value(self):
        from .cr import CR
        result = CR.from_int(self.numerator)
        if self.denominator != 1:
            result = result.divide(CR.from_int(self.denominator))
        return result

    # -- Text --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"

    def __repr__(self) -> str:
        return f"BoundedRational({self.numerator}, {self.denominator})"

    def to_nice_string(self) -> str:
        """``n`` or ``n/d`` in lowest terms."""
        if self.denominator == 1:
            return str(self.numerator)
        return f"{self.numerator}/{self.denominator}"

    def to_string_truncated(self, n: int) -> str:
        """Decimal text with exactly ``n`` digits after the point, truncated toward zero."""
        digits = str(abs(self.numerator) * 10 ** n // self.denominator)
        length = len(digits)
        if length < n + 1:
            digits = "0" * (n + 1 - length) + digits
            length = n + 1
        sign = "-" if self.signum() < 0 else ""
        return f"{sign}{digits[:length - n]}.{digits[length - n:]}"

    # -- Value semantics ---------------------------------------------------

    def __eq__(self, other) -> bool:
        if isinstance(other, BoundedRational):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __lt__(self, other: "BoundedRational") -> bool:
        return self._value < other._value

    def __le__(self, other: "BoundedRational") -> bool:
        return self._value <= other._value

    def __gt__(self, other: "BoundedRational") -> bool:
        return self._value > other._value

    def __ge__(self, other: "BoundedRational") -> bool:
        return self._value >= other._value

    # -- Construction ------------------------------------------------------

    @staticmethod
    def value_of(x: Union[int, float, Fraction, "BoundedRational"]) -> "BoundedRational":
        """Exact conversion; a float gives its exact binary value."""
        if isinstance(x, BoundedRational):
            return x
        if isinstance(x, float):
            if x != x or x in (float("inf"), float("-inf")):
                raise ArithmeticDomainError(f"Cannot convert {x} to a rational")
            return BoundedRational._of(Q(*x.as_integer_ratio()))
        return BoundedRational._of(Q(x))

    # -- None-propagating arithmetic ---------------------------------------

    @staticmethod
    def _bounded(value: Fraction) -> Optional["BoundedRational"]:
        size = abs(value.numerator).bit_length() + value.denominator.bit_length()
        if size > EvaluationConfig.get_rational_max_bits():
            return None
        return BoundedRational._of(value)

    @staticmethod
    def add(r1: Optional["BoundedRational"], r2: Optional["BoundedRational"]) -> Optional["BoundedRational"]:
        if r1 is None or r2 is None:
            return None
        return BoundedRational._bounded(r1._value + r2._value)

    @staticmethod
    def subtract(r1: Optional["BoundedRational"], r2: Optional["BoundedRational"]) -> Optional["BoundedRational"]:
        if r1 is None or r2 is None:
            return None
        return BoundedRational._bounded(r1._value - r2._value)

    @staticmethod
    def negate(r: Optional["BoundedRational"]) -> Optional["BoundedRational"]:
        if r is None:
            return None
        return BoundedRational._of(-r._value)

    @staticmethod
    def multiply(r1: Optional["BoundedRational"], r2: Optional["BoundedRational"]) -> Optional["BoundedRational"]:
        if r1 is None or r2 is None:
            return None
        return BoundedRational._bounded(r1._value * r2._value)

    @staticmethod
    def inverse(r: Optional["BoundedRational"]) -> Optional["BoundedRational"]:
        if r is None:
            return None
        if r.signum() == 0:
            raise DivisionByZeroError()
        return BoundedRational._of(1 / r._value)

    @staticmethod
    def divide(r1: Optional["BoundedRational"], r2: Optional["BoundedRational"]) -> Optional["BoundedRational"]:
        return BoundedRational.multiply(r1, BoundedRational.inverse(r2))

    @staticmethod
    def sqrt(r: Optional["BoundedRational"]) -> Optional["BoundedRational"]:
        """Exact square root, or None if it is irrational."""
        if r is None:
            return None
        if r.signum() < 0:
            raise ArithmeticDomainError("sqrt(negative)")
        num_sqrt = _isqrt_exact(r.numerator)
        if num_sqrt is None:
            return None
        den_sqrt = _isqrt_exact(r.denominator)
        if den_sqrt is None:
            return None
        return BoundedRational._of(Q(num_sqrt, den_sqrt))

    @staticmethod
    def pow(base: Optional["BoundedRational"],
            exp: Union[int, "BoundedRational", None]) -> Optional["BoundedRational"]:
        """
        ``base ** exp`` for an integral exponent.

        Returns None for a non-integral exponent or when the result would
        exceed the size bound. Zero to a negative power raises
        DivisionByZeroError.
        """
        if base is None or exp is None:
            return None
        if isinstance(exp, BoundedRational):
            exp = BoundedRational.as_big_integer(exp)
            if exp is None:
                return None
        if exp == 0:
            return ONE
        value = base._value
        if value == 1:
            return ONE
        if value == -1:
            return ONE if exp % 2 == 0 else MINUS_ONE
        if value == 0:
            if exp < 0:
                raise DivisionByZeroError()
            return ZERO
        # Cheap size estimate before doing the work.
        estimate = abs(exp) * max(abs(value.numerator).bit_length(), value.denominator.bit_length())
        if estimate > EvaluationConfig.get_rational_max_bits() + 64:
            return None
        return BoundedRational._bounded(value ** exp)

    @staticmethod
    def as_big_integer(r: Optional["BoundedRational"]) -> Optional[int]:
        """The integer value of ``r``, or None if ``r`` is None or not integral."""
        if r is None or r.denominator != 1:
            return None
        return r.numerator

    @staticmethod
    def digits_required(r: Optional["BoundedRational"]) -> int:
        """
        Decimal digits after the point needed to write ``r`` exactly.

        MAX_INT if the expansion does not terminate (or ``r`` is None).
        """
        if r is None:
            return MAX_INT
        den = r.denominator
        if den == 1:
            return 0
        if den.bit_length() > EvaluationConfig.get_rational_max_bits():
            return MAX_INT
        powers_of_two = (den & -den).bit_length() - 1
        den >>= powers_of_two
        powers_of_five = 0
        while den % 5 == 0:
            den //= 5
            powers_of_five += 1
        if den != 1:
            return MAX_INT
        return max(powers_of_two, powers_of_five)


def _isqrt_exact(n: int) -> Optional[int]:
    root = math.isqrt(n)
    return root if root * root == n else None


ZERO = BoundedRational(0)
ONE = BoundedRational(1)
MINUS_ONE = BoundedRational(-1)
TWO = BoundedRational(2)
MINUS_TWO = BoundedRational(-2)
HALF = BoundedRational(1, 2)
MINUS_HALF = BoundedRational(-1, 2)
THIRD = BoundedRational(1, 3)
QUARTER = BoundedRational(1, 4)
SIXTH = BoundedRational(1, 6)
TEN = BoundedRational(10)
TWELVE = BoundedRational(12)

for _name in ("ZERO", "ONE", "MINUS_ONE", "TWO", "MINUS_TWO", "HALF", "MINUS_HALF",
              "THIRD", "QUARTER", "SIXTH", "TEN", "TWELVE"):
    setattr(BoundedRational, _name, globals()[_name])
del _name
