"""
Constructive real numbers.

A ``CR`` represents a real number ``x`` by its ability to produce, for any
precision ``p``, an integer ``m`` with ``|x - m * 2**p| < 2**p``. Nodes form an
immutable DAG built by the arithmetic methods below; each node remembers the
tightest approximation it has produced so far and reuses it for coarser
requests.

Comparisons are only semi-decidable. ``compare_to(other)`` and ``signum()``
without a tolerance loop forever (until precision overflow or cancellation)
when the two values are equal; use the tolerance forms when equality is
possible.
"""

from __future__ import annotations

import logging
import math
import re
import threading
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .cancellation import check_cancelled
from .dispatch import APPROXIMATORS, SLOW_KINDS, CRKind, check_complete
from .errors import ArithmeticDomainError, FormatError, PrecisionOverflowError
from .precision_config import EvaluationConfig, PrecisionConfig, PrecisionMode
from .scaling import INT_MAX, INT_MIN, MSD_UNKNOWN, check_prec, div_trunc, scale

logger = logging.getLogger(__name__)

_DOUBLE_LOG2 = math.log(2.0)

# Rough-approximation thresholds used by ln(), in sixteenths.
_LOW_LN_LIMIT = 8
_HIGH_LN_LIMIT = 16 + 8
_SCALED_4 = 4 * 16

_NUMBER_RE = re.compile(r"^(-?)([0-9a-fA-F]*)(?:\.([0-9a-fA-F]*))?$")


class ApproximationCache:
    """
    Mutex-guarded record of the tightest approximation a node has produced.

    The node itself is logically immutable; this is its only mutable state
    apart from per-kind auxiliary memos. The lock is held only while reading
    or writing these fields, never while evaluating operands.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.min_prec = 0
        self.max_appr: Optional[int] = None
        self.valid = False

    def lookup(self, precision: int) -> Optional[int]:
        with self._lock:
            if self.valid and precision >= self.min_prec:
                return scale(self.max_appr, self.min_prec - precision)
        return None

    def store(self, precision: int, appr: int) -> None:
        with self._lock:
            # Another thread may have stored a tighter value meanwhile.
            if not self.valid or precision < self.min_prec:
                self.min_prec = precision
                self.max_appr = appr
                self.valid = True

    def snapshot(self) -> Optional[Tuple[int, int]]:
        with self._lock:
            if not self.valid:
                return None
            return self.min_prec, self.max_appr


@dataclass(frozen=True)
class ScientificRep:
    """Sign, mantissa digits and exponent, denoting ``0.mantissa * radix**exponent``."""
    sign: int
    mantissa: str
    radix: int
    exponent: int

    def __str__(self) -> str:
        sign = "-" if self.sign < 0 else ""
        return f"{sign}0.{self.mantissa}*{self.radix}^{self.exponent}"


Operand = Union["CR", int]


class CR:
    """A node of the constructive-real operator DAG."""

    def __init__(self, kind: CRKind, operands: Tuple["CR", ...] = (), param=None):
        self.kind = kind
        self.operands = operands
        self.param = param
        self.tag = None
        self.aux = None
        self._cache = ApproximationCache()

    # ------------------------------------------------------------------
    # Approximation
    # ------------------------------------------------------------------

    def approximate(self, precision: int) -> int:
        """Compute a fresh approximation with error < 2**precision (no caching)."""
        return APPROXIMATORS[self.kind](self, precision)

    def approx_get(self, precision: int) -> int:
        """
        Return an integer ``m`` with ``|self - m * 2**precision| < 2**precision``.

        Reuses the cached approximation when it is at least as precise.
        Expensive nodes evaluate at a tighter precision than asked, rounded to
        a multiple of ``EvaluationConfig.slow_prec_incr``, so that a sequence of
        slowly increasing requests does not recompute every time.
        """
        check_prec(precision)
        cached = self._cache.lookup(precision)
        if cached is not None:
            return cached
        if self.kind in SLOW_KINDS:
            max_prec = EvaluationConfig.get_slow_max_prec()
            if precision >= max_prec:
                eval_prec = max_prec
            else:
                incr = EvaluationConfig.get_slow_prec_incr()
                eval_prec = (precision - incr + 1) & ~(incr - 1)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("evaluating %s at %d for request %d", self.kind.name, eval_prec, precision)
            result = self.approximate(eval_prec)
            self._cache.store(eval_prec, result)
            return scale(result, eval_prec - precision)
        result = self.approximate(precision)
        self._cache.store(precision, result)
        return result

    def cached_approximation(self) -> Optional[Tuple[int, int]]:
        """``(min_prec, max_appr)`` of the tightest approximation so far, or None."""
        return self._cache.snapshot()

    def _seed(self, precision: int, appr: int) -> None:
        self._cache.store(precision, appr)

    # ------------------------------------------------------------------
    # Most significant digit
    # ------------------------------------------------------------------

    def known_msd(self) -> int:
        """
        Position of the most significant bit, from the cached approximation.

        The cached approximation must be valid and have magnitude > 1; then
        ``2**(msd-1) < |self| < 2**(msd+1)``.
        """
        min_prec, max_appr = self._cache.snapshot()
        return min_prec + abs(max_appr).bit_length() - 1

    def msd(self, n: Optional[int] = None) -> int:
        """
        MSD, or MSD_UNKNOWN if ``|self|`` may be below ``2**n``.

        Without an argument, searches with increasing precision and never
        returns for a value that is exactly zero.
        """
        if n is None:
            return self.iter_msd(INT_MIN)
        snap = self._cache.snapshot()
        if snap is None or abs(snap[1]) <= 1:
            self.approx_get(n - 1)
            snap = self._cache.snapshot()
            if abs(snap[1]) <= 1:
                return MSD_UNKNOWN
        return snap[0] + abs(snap[1]).bit_length() - 1

    def iter_msd(self, n: int) -> int:
        """MSD search with geometrically decreasing precision, down to ``n``."""
        prec = 0
        while prec > n + 30:
            msd = self.msd(prec)
            if msd != MSD_UNKNOWN:
                return msd
            check_prec(prec)
            check_cancelled()
            prec = div_trunc(prec * 3, 2) - 16
        return self.msd(n)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def compare_to(self, other: "CR", a: Optional[int] = None, r: Optional[int] = None) -> int:
        """
        Three-way comparison.

        compare_to(x): exact; never returns if the values are equal.
        compare_to(x, a): returns 0 if the values are within about 2**a of each
            other, which does not imply equality.
        compare_to(x, a, r): like the two-argument form with the tolerance
            relaxed to 2**r relative to the larger magnitude.
        """
        if a is None:
            if r is not None:
                raise ValueError("relative tolerance requires an absolute tolerance")
            return self._compare_exact(other)
        if r is None:
            return self._compare_absolute(other, a)
        this_msd = self.iter_msd(a)
        other_msd = other.iter_msd(this_msd if this_msd > a else a)
        max_msd = other_msd if other_msd > this_msd else this_msd
        if max_msd == MSD_UNKNOWN:
            return 0
        check_prec(r)
        rel = max_msd + r
        abs_prec = rel if rel > a else a
        return self._compare_absolute(other, abs_prec)

    def _compare_absolute(self, other: "CR", a: int) -> int:
        needed_prec = a - 1
        this_appr = self.approx_get(needed_prec)
        other_appr = other.approx_get(needed_prec)
        if this_appr > other_appr + 1:
            return 1
        if this_appr < other_appr - 1:
            return -1
        return 0

    def _compare_exact(self, other: "CR") -> int:
        a = -20
        while True:
            check_prec(a)
            result = self._compare_absolute(other, a)
            if result != 0:
                return result
            check_cancelled()
            a *= 2

    def signum(self, a: Optional[int] = None) -> int:
        """
        Sign of the value.

        With a tolerance ``a`` the result may be 0 for values within 2**a of
        zero. Without one, never returns for zero.
        """
        if a is None:
            a = -20
            while True:
                check_prec(a)
                result = self.signum(a)
                if result != 0:
                    return result
                check_cancelled()
                a *= 2
        snap = self._cache.snapshot()
        if snap is not None and snap[1] != 0:
            return 1 if snap[1] > 0 else -1
        appr = self.approx_get(a - 1)
        return (appr > 0) - (appr < 0)

    # ------------------------------------------------------------------
    # Textual output
    # ------------------------------------------------------------------

    def _truncated_magnitude(self) -> Tuple[int, int]:
        """(sign, floor(|self|)), with guard bits; may round up within 2**-(guard-1) of an integer."""
        guard = EvaluationConfig.get_display_guard_bits()
        appr = self.approx_get(-guard)
        magnitude = (abs(appr) + 1) >> guard
        if magnitude == 0:
            return 0, 0
        return (1 if appr > 0 else -1), magnitude

    def to_decimal_string(self, n: int = 10, radix: int = 10) -> str:
        """
        Text with exactly ``n`` digits after the radix point, truncated toward zero.

        Values within a tiny fraction of a unit in the last place below a digit
        boundary may be shown at that boundary.
        """
        if n < 0:
            raise ValueError(f"digit count must be non-negative, got {n}")
        _check_radix(radix)
        if radix == 16:
            scaled = self.shift_left(4 * n)
        else:
            scaled = self.multiply(CR.from_int(radix ** n))
        sign, magnitude = scaled._truncated_magnitude()
        digits = int_to_radix(magnitude, radix)
        if n == 0:
            result = digits
        else:
            if len(digits) <= n:
                digits = "0" * (n + 1 - len(digits)) + digits
            result = digits[:-n] + "." + digits[-n:]
        if sign < 0:
            result = "-" + result
        return result

    def __str__(self) -> str:
        return self.to_decimal_string(10)

    def __repr__(self) -> str:
        name = f" {self.tag.name}" if self.tag is not None else ""
        return f"<CR {self.kind.name}{name} at {id(self):#x}>"

    def to_scientific_string(self, n: int, radix: int = 10, m: int = -1000) -> ScientificRep:
        """
        ``n`` significant digits and an exponent.

        Values below about ``radix**m`` in magnitude may be reported as zero
        (sign 0, mantissa "0").
        """
        if n <= 0:
            raise ValueError("Bad precision argument")
        _check_radix(radix)
        log2_radix = math.log(radix) / _DOUBLE_LOG2
        long_msd_prec = int(log2_radix * m)
        if long_msd_prec > INT_MAX or long_msd_prec < INT_MIN:
            raise PrecisionOverflowError()
        msd_prec = long_msd_prec
        check_prec(msd_prec)
        msd = self.iter_msd(msd_prec - 2)
        if msd == MSD_UNKNOWN:
            return ScientificRep(0, "0", radix, 0)
        exponent = int(math.ceil(msd / log2_radix))
        scale_exp = exponent - n
        if scale_exp > 0:
            scale_factor = CR.from_int(radix ** scale_exp).inverse()
        else:
            scale_factor = CR.from_int(radix ** -scale_exp)
        scaled_res = self.multiply(scale_factor)
        sign, magnitude = scaled_res._truncated_magnitude()
        while magnitude == 0 or len(int_to_radix(magnitude, radix)) < n:
            scaled_res = scaled_res.multiply(CR.from_int(radix))
            exponent -= 1
            sign, magnitude = scaled_res._truncated_magnitude()
        digits = int_to_radix(magnitude, radix)
        if len(digits) > n:
            exponent += len(digits) - n
            digits = digits[:n]
        return ScientificRep(sign, digits, radix, exponent)

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def big_integer_value(self) -> int:
        """An integer within 1 of the value."""
        return self.approx_get(0)

    def int_value(self) -> int:
        return _wrap(self.big_integer_value(), 32)

    def long_value(self) -> int:
        return _wrap(self.big_integer_value(), 64)

    def byte_value(self) -> int:
        return _wrap(self.big_integer_value(), 8)

    def double_value(self) -> float:
        """Nearest-ish float; overflow gives a signed infinity."""
        my_msd = self.iter_msd(-1080)  # slightly beyond the double exponent range
        if my_msd == MSD_UNKNOWN:
            return 0.0
        needed_prec = my_msd - 60
        scaled_int = self.approx_get(needed_prec)
        try:
            return math.ldexp(float(scaled_int), needed_prec)
        except OverflowError:
            return math.copysign(math.inf, scaled_int)

    def float_value(self):
        """Value as a numpy float32."""
        return PrecisionConfig.narrow(self.double_value(), PrecisionMode.FLOAT32)

    def to_float(self, mode: Union[PrecisionMode, str, None] = None):
        """Value in the configured (or given) numpy float format."""
        return PrecisionConfig.narrow(self.double_value(), mode)

    def __float__(self) -> float:
        return self.double_value()

    def __int__(self) -> int:
        return self.big_integer_value()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @staticmethod
    def from_int(n: int) -> "CR":
        return CR(CRKind.INT_CONSTANT, param=int(n))

    @staticmethod
    def from_float(x: float) -> "CR":
        """The exact binary value of ``x``."""
        if math.isnan(x):
            raise ArithmeticDomainError("Nan argument")
        if math.isinf(x):
            raise ArithmeticDomainError("Infinite argument")
        numerator, denominator = float(x).as_integer_ratio()
        result = CR.from_int(numerator)
        if denominator != 1:
            result = result.shift_right(denominator.bit_length() - 1)
        return result

    @staticmethod
    def from_string(s: str, radix: int = 10) -> "CR":
        """Parse ``[-]digits[.digits]`` in the given radix (2..16)."""
        _check_radix(radix)
        match = _NUMBER_RE.match(s.strip())
        if match is None:
            raise FormatError(f"Malformed number: {s!r}")
        sign, whole, fraction = match.group(1), match.group(2), match.group(3) or ""
        digits = whole + fraction
        if not digits:
            raise FormatError(f"No digits in {s!r}")
        for ch in digits:
            if int(ch, 16) >= radix:
                raise FormatError(f"Digit {ch!r} not valid in radix {radix}")
        scaled_result = int(sign + digits, radix)
        divisor = radix ** len(fraction)
        return CR.from_int(scaled_result).divide(CR.from_int(divisor))

    @staticmethod
    def value_of(x: Union[int, float, str], radix: int = 10) -> "CR":
        if isinstance(x, CR):
            return x
        if isinstance(x, bool):
            raise TypeError("bool is not a number here")
        if isinstance(x, int):
            return CR.from_int(x)
        if isinstance(x, float):
            return CR.from_float(x)
        if isinstance(x, str):
            return CR.from_string(x, radix)
        raise TypeError(f"Cannot build a CR from {type(x).__name__}")

    @staticmethod
    def seeded_sqrt(x: "CR", min_prec: int, max_appr: int) -> "CR":
        """sqrt(x) whose cache starts from a known approximation, for Newton refinement."""
        node = CR(CRKind.SQRT, (x,))
        node._seed(min_prec, max_appr)
        return node

    @staticmethod
    def gauss_legendre_pi() -> "CR":
        """A fresh pi node using the Gauss-Legendre iteration."""
        from .roots import PiTermArena
        node = CR(CRKind.GL_PI)
        node.aux = PiTermArena()
        return node

    @staticmethod
    def atan_reciprocal(n: int) -> "CR":
        """atan(1/n) for an integer n > 1."""
        if n <= 1:
            raise ValueError(f"atan_reciprocal needs n > 1, got {n}")
        return CR(CRKind.INTEGRAL_ATAN, param=int(n))

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def add(self, x: Operand) -> "CR":
        return CR(CRKind.ADD, (self, _coerce(x)))

    def subtract(self, x: Operand) -> "CR":
        return CR(CRKind.ADD, (self, _coerce(x).negate()))

    def negate(self) -> "CR":
        return CR(CRKind.NEGATE, (self,))

    def multiply(self, x: Operand) -> "CR":
        return CR(CRKind.MULTIPLY, (self, _coerce(x)))

    def inverse(self) -> "CR":
        return CR(CRKind.INVERSE, (self,))

    def divide(self, x: Operand) -> "CR":
        return CR(CRKind.MULTIPLY, (self, _coerce(x).inverse()))

    def shift_left(self, n: int) -> "CR":
        check_prec(n)
        return CR(CRKind.SHIFTED, (self,), param=n)

    def shift_right(self, n: int) -> "CR":
        check_prec(n)
        return CR(CRKind.SHIFTED, (self,), param=-n)

    def assume_int(self) -> "CR":
        """Same value, promising it is an integer so coarse requests are exact."""
        return CR(CRKind.ASSUMED_INT, (self,))

    def select(self, x: Operand, y: Operand) -> "CR":
        """``x`` if self < 0 else ``y``; either is acceptable when self is 0."""
        from .nodes import SelectorMemo
        node = CR(CRKind.SELECT, (self, _coerce(x), _coerce(y)))
        node.aux = SelectorMemo(self.approx_get(-20))
        return node

    def max(self, x: Operand) -> "CR":
        x = _coerce(x)
        return self.subtract(x).select(x, self)

    def min(self, x: Operand) -> "CR":
        x = _coerce(x)
        return self.subtract(x).select(self, x)

    def abs(self) -> "CR":
        return self.select(self.negate(), self)

    def __add__(self, other):
        return self.add(other) if isinstance(other, (CR, int)) else NotImplemented

    def __radd__(self, other):
        return _coerce(other).add(self) if isinstance(other, int) else NotImplemented

    def __sub__(self, other):
        return self.subtract(other) if isinstance(other, (CR, int)) else NotImplemented

    def __rsub__(self, other):
        return _coerce(other).subtract(self) if isinstance(other, int) else NotImplemented

    def __mul__(self, other):
        return self.multiply(other) if isinstance(other, (CR, int)) else NotImplemented

    def __rmul__(self, other):
        return _coerce(other).multiply(self) if isinstance(other, int) else NotImplemented

    def __truediv__(self, other):
        return self.divide(other) if isinstance(other, (CR, int)) else NotImplemented

    def __rtruediv__(self, other):
        return _coerce(other).divide(self) if isinstance(other, int) else NotImplemented

    def __neg__(self):
        return self.negate()

    def __abs__(self):
        return self.abs()

    # ------------------------------------------------------------------
    # Transcendental functions
    # ------------------------------------------------------------------

    def exp(self) -> "CR":
        rough_appr = self.approx_get(-10)
        if rough_appr > 2 or rough_appr < -2:
            square_root = self.shift_right(1).exp()
            return square_root.multiply(square_root)
        return CR(CRKind.PRESCALED_EXP, (self,))

    def cos(self) -> "CR":
        halfpi_multiples = self.divide(PI).approx_get(-1)
        if abs(halfpi_multiples) >= 2:
            # Subtract a multiple of pi; odd multiples flip the sign.
            pi_multiples = scale(halfpi_multiples, -1)
            adjustment = PI.multiply(CR.from_int(pi_multiples))
            if pi_multiples & 1:
                return self.subtract(adjustment).cos().negate()
            return self.subtract(adjustment).cos()
        if abs(self.approx_get(-1)) >= 2:
            # cos(x) = 2 cos(x/2)^2 - 1
            cos_half = self.shift_right(1).cos()
            return cos_half.multiply(cos_half).shift_left(1).subtract(ONE)
        return CR(CRKind.PRESCALED_COS, (self,))

    def sin(self) -> "CR":
        return HALF_PI.subtract(self).cos()

    def asin(self) -> "CR":
        rough_appr = self.approx_get(-10)
        if abs(rough_appr) > 1025:
            raise ArithmeticDomainError("inverse trig argument out of range")
        if rough_appr > 750:  # 1/sqrt(2) + a bit
            new_arg = ONE.subtract(self.multiply(self)).sqrt()
            return new_arg.acos()
        if rough_appr < -750:
            return self.negate().asin().negate()
        return CR(CRKind.PRESCALED_ASIN, (self,))

    def acos(self) -> "CR":
        return HALF_PI.subtract(self.asin())

    def atan(self) -> "CR":
        """atan(x) = asin(x / sqrt(1 + x^2)), taking the sign from x."""
        x2 = self.multiply(self)
        abs_sin_atan = x2.divide(ONE.add(x2)).sqrt()
        sin_atan = self.select(abs_sin_atan.negate(), abs_sin_atan)
        return sin_atan.asin()

    def ln(self) -> "CR":
        rough_appr = self.approx_get(-4)  # in sixteenths
        if rough_appr < 0:
            raise ArithmeticDomainError("ln(negative)")
        if rough_appr <= _LOW_LN_LIMIT:
            return self.inverse().ln().negate()
        if rough_appr >= _HIGH_LN_LIMIT:
            if rough_appr <= _SCALED_4:
                quarter = self.sqrt().sqrt().ln()
                return quarter.shift_left(2)
            extra_bits = rough_appr.bit_length() - 3
            scaled_result = self.shift_right(extra_bits).ln()
            return scaled_result.add(CR.from_int(extra_bits).multiply(LN2))
        return self.simple_ln()

    def simple_ln(self) -> "CR":
        """ln(x) by the ln(1 + y) series; only accurate for x near 1."""
        return CR(CRKind.PRESCALED_LN, (self.subtract(ONE),))

    def sqrt(self) -> "CR":
        return CR(CRKind.SQRT, (self,))


def _coerce(x: Operand) -> CR:
    if isinstance(x, CR):
        return x
    if isinstance(x, int) and not isinstance(x, bool):
        return CR.from_int(x)
    raise TypeError(f"Expected CR or int, got {type(x).__name__}")


def _check_radix(radix: int) -> None:
    if not 2 <= radix <= 16:
        raise FormatError(f"radix must be between 2 and 16, got {radix}")


def _wrap(value: int, bits: int) -> int:
    """Two's complement truncation to ``bits`` bits."""
    half = 1 << (bits - 1)
    return ((value + half) & ((1 << bits) - 1)) - half


_DIGITS = "0123456789abcdef"


def int_to_radix(k: int, radix: int) -> str:
    """Digits of a non-negative integer in the given radix."""
    if radix == 10:
        return str(k)
    if radix == 16:
        return format(k, "x")
    if radix == 8:
        return format(k, "o")
    if radix == 2:
        return format(k, "b")
    if k == 0:
        return "0"
    out = []
    while k:
        k, digit = divmod(k, radix)
        out.append(_DIGITS[digit])
    return "".join(reversed(out))


# Register the approximation function of every kind before any node is
# evaluated.
from . import nodes, series, roots  # noqa: E402,F401

check_complete()

# Constants the builders above use for range reduction. They are tagged and
# published with the other named constants in ``constants``.
ONE = CR.from_int(1)
PI = CR.gauss_legendre_pi()
HALF_PI = PI.shift_right(1)
# ln(2) = 7 ln(10/9) - 2 ln(25/24) + 3 ln(81/80), each argument close to 1.
LN2 = (
    CR.from_int(7).multiply(CR.from_int(10).divide(CR.from_int(9)).simple_ln())
    .subtract(CR.from_int(2).multiply(CR.from_int(25).divide(CR.from_int(24)).simple_ln()))
    .add(CR.from_int(3).multiply(CR.from_int(81).divide(CR.from_int(80)).simple_ln()))
)
