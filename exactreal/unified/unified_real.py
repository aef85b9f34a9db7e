"""
Unified reals: a bounded rational times a constructive real.

A ``UnifiedReal`` is the product ``rat_factor × cr_factor``. Operations first
look for an exact answer in terms of the rational factor and the named
constant table (1, π, e, √n, ln n) and fall back to constructive-real
evaluation only when none applies. This keeps values such as ``√2·√2``,
``sin(π/6)`` or ``ln(8)`` exact, and lets many comparisons be decided without
risking a non-terminating evaluation.

Value equality is not decidable in general, so instances only compare equal
to themselves. Use ``definitely_equals``, ``definitely_not_equals`` or
``approx_equals`` instead.
"""

import logging
import math
from fractions import Fraction
from typing import Optional, Union

from ..core import constants as named
from ..core.bounded_rational import BoundedRational
from ..core.cancellation import check_cancelled
from ..core.constants import NamedConstant
from ..core.cr import CR
from ..core.errors import ArithmeticDomainError, DivisionByZeroError, FormatError
from ..core.precision_config import EvaluationConfig
from ..core.scaling import bit_length

logger = logging.getLogger(__name__)

BR = BoundedRational

MAX_INT = (1 << 31) - 1
MIN_INT = -(1 << 31)

# pow() with a rational base never recurses beyond this many bits of exponent.
HARD_RECURSIVE_POW_LIMIT = 1 << 1000

_FACTORIAL_MAX_BITS = 20


def _is_one(cr: CR) -> bool:
    return cr.tag is NamedConstant.ONE


class UnifiedReal:
    """
    Immutable ``rat_factor × cr_factor``.

    Construct from a CR, a BoundedRational (optionally with a CR factor) or an
    int:

        UnifiedReal(CR.from_int(2).sqrt())
        UnifiedReal(BoundedRational(1, 2), named.PI)
        UnifiedReal(7)
    """

    __slots__ = ("_rat", "_cr")

    def __init__(self, value: Union[CR, BoundedRational, int], cr_factor: Optional[CR] = None):
        if isinstance(value, CR):
            if cr_factor is not None:
                raise TypeError("cr_factor given twice")
            self._rat = BR.ONE
            self._cr = value
            return
        if isinstance(value, BoundedRational):
            self._rat = value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._rat = BR(value)
        else:
            raise TypeError(f"Cannot build a UnifiedReal from {type(value).__name__}")
        self._cr = named.ONE if cr_factor is None else cr_factor

    @property
    def rat_factor(self) -> BoundedRational:
        return self._rat

    @property
    def cr_factor(self) -> CR:
        return self._cr

    @staticmethod
    def value_of(x: Union[int, float, str, BoundedRational, "UnifiedReal"]) -> "UnifiedReal":
        """
        Exact conversion.

        Floats give their exact binary value; strings are read as decimals or
        fractions ("-1.25", "1/3").
        """
        if isinstance(x, UnifiedReal):
            return x
        if isinstance(x, BoundedRational):
            return UnifiedReal(x)
        if isinstance(x, bool):
            raise TypeError("bool is not a number here")
        if isinstance(x, int):
            if x == 0:
                return ZERO
            if x == 1:
                return ONE
            return UnifiedReal(BR(x))
        if isinstance(x, float):
            if x == 0.0 or x == 1.0:
                return UnifiedReal.value_of(int(x))
            return UnifiedReal(BR.value_of(x))
        if isinstance(x, str):
            try:
                return UnifiedReal(BR.value_of(Fraction(x.strip())))
            except (ValueError, ZeroDivisionError) as exc:
                raise FormatError(f"Malformed number: {x!r}") from exc
        raise TypeError(f"Cannot build a UnifiedReal from {type(x).__name__}")

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def definitely_rational(self) -> bool:
        return _is_one(self._cr) or self._rat.signum() == 0

    def definitely_irrational(self) -> bool:
        return not self.definitely_rational() and named.is_named(self._cr)

    def definitely_algebraic(self) -> bool:
        return named.definitely_algebraic(self._cr) or self._rat.signum() == 0

    def definitely_transcendental(self) -> bool:
        return not self.definitely_algebraic() and named.is_named(self._cr)

    def definitely_zero(self) -> bool:
        return self._rat.signum() == 0

    def definitely_non_zero(self) -> bool:
        return named.is_named(self._cr) and self._rat.signum() != 0

    def definitely_one(self) -> bool:
        return _is_one(self._cr) and self._rat == BR.ONE

    def bounded_rational_value(self) -> Optional[BoundedRational]:
        """The value as a rational if it is known to be one, else None."""
        if _is_one(self._cr) or self._rat.signum() == 0:
            return self._rat
        return None

    def big_integer_value(self) -> Optional[int]:
        return BR.as_big_integer(self.bounded_rational_value())

    def cr_value(self) -> CR:
        if self._rat == BR.ONE:
            return self._cr
        return self._rat.cr_value().multiply(self._cr)

    def double_value(self) -> float:
        if _is_one(self._cr):
            return self._rat.double_value()
        return self.cr_value().double_value()

    def __float__(self) -> float:
        return self.double_value()

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self._rat}*{self._cr}"

    def __repr__(self) -> str:
        return f"UnifiedReal({self._rat!r}, {self._cr!r})"

    def to_nice_string(self) -> str:
        """Exact text such as ``3/4``, ``2√3``, ``(1/2)π`` or ``ln(2)``, where possible."""
        if _is_one(self._cr) or self._rat.signum() == 0:
            return self._rat.to_nice_string()
        name = named.display_name(self._cr)
        if name is not None:
            as_int = BR.as_big_integer(self._rat)
            if as_int is not None:
                if as_int == 1:
                    return name
                return self._rat.to_nice_string() + name
            return f"({self._rat.to_nice_string()}){name}"
        if self._rat == BR.ONE:
            return str(self._cr)
        return str(self.cr_value())

    def exactly_displayable(self) -> bool:
        return named.display_name(self._cr) is not None

    def exactly_truncatable(self) -> bool:
        """
        True if truncation to a digit count can be done exactly.

        Rationals compare exactly; a known irrational can never equal the
        rational truncation, so those comparisons terminate.
        """
        return _is_one(self._cr) or self._rat.signum() == 0 or self.definitely_irrational()

    def to_string_truncated(self, n: int) -> str:
        """``n`` digits after the decimal point, truncated toward zero."""
        if _is_one(self._cr) or self._rat.signum() == 0:
            return self._rat.to_string_truncated(n)
        scaled = CR.from_int(10 ** n).multiply(self.cr_value())
        negative = False
        if self.exactly_truncatable():
            int_scaled = scaled.approx_get(0)
            if int_scaled < 0:
                negative = True
                int_scaled = -int_scaled
            if CR.from_int(int_scaled).compare_to(scaled.abs()) > 0:
                int_scaled -= 1
        else:
            # Exact comparisons are impossible; truncate a guarded approximation.
            extra_prec = EvaluationConfig.get_display_guard_bits()
            int_scaled = scaled.approx_get(-extra_prec)
            if int_scaled < 0:
                negative = True
                int_scaled = -int_scaled
            int_scaled >>= extra_prec
        digits = str(int_scaled)
        length = len(digits)
        if length < n + 1:
            digits = "0" * (n + 1 - length) + digits
            length = n + 1
        sign = "-" if negative else ""
        return f"{sign}{digits[:length - n]}.{digits[length - n:]}"

    def digits_required(self) -> int:
        """Decimal digits needed to show the value exactly, MAX_INT if unknown or infinite."""
        if _is_one(self._cr) or self._rat.signum() == 0:
            return BR.digits_required(self._rat)
        return MAX_INT

    def leading_binary_zeroes(self) -> int:
        """Upper bound on the zero bits right of the binary point before the first one bit."""
        if named.is_named(self._cr):
            # Only ln(2) is below one; 3 extra bits is a loose bound.
            whole_bits = self._rat.whole_number_bits()
            if whole_bits == MIN_INT:
                return MAX_INT
            if whole_bits >= 3:
                return 0
            return -whole_bits + 3
        return MAX_INT

    def approx_whole_number_bits_greater_than(self, bound: int) -> bool:
        if named.is_named(self._cr):
            return self._rat.whole_number_bits() > bound
        return bit_length(self.cr_value().approx_get(bound - 2)) > 2

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def is_comparable(self, u: "UnifiedReal") -> bool:
        """
        True if ``compare_to(u)`` is guaranteed to terminate.

        The tolerance used for the last clause means this may spuriously
        return False, never spuriously True.
        """
        tolerance = EvaluationConfig.get_compare_tolerance()
        return (
            (named.same_factor(self._cr, u._cr)
             and (named.is_named(self._cr) or self._cr.signum(tolerance) != 0))
            or (self._rat.signum() == 0 and u._rat.signum() == 0)
            or named.definitely_independent(self._cr, u._cr)
            or self.cr_value().compare_to(u.cr_value(), tolerance) != 0
        )

    def compare_to(self, u: "UnifiedReal", a: Optional[int] = None) -> int:
        """
        Three-way comparison.

        Without a tolerance this may not terminate unless ``is_comparable(u)``.
        With one, incomparable values within about ``2**a`` compare as 0.
        """
        if a is not None:
            if self.is_comparable(u):
                return self.compare_to(u)
            return self.cr_value().compare_to(u.cr_value(), a)
        if self.definitely_zero() and u.definitely_zero():
            return 0
        if named.same_factor(self._cr, u._cr):
            signum = self._cr.signum()  # diverges if the factor is zero
            return signum * self._rat.compare_to(u._rat)
        return self.cr_value().compare_to(u.cr_value())

    def signum(self, a: Optional[int] = None) -> int:
        return self.compare_to(ZERO, a)

    def approx_equals(self, u: "UnifiedReal", a: int) -> bool:
        """Equal, or within about ``2**a`` when equality cannot be decided."""
        if self.is_comparable(u):
            if (named.definitely_independent(self._cr, u._cr)
                    and (self._rat.signum() != 0 or u._rat.signum() != 0)):
                return False
            return self.compare_to(u) == 0
        return self.cr_value().compare_to(u.cr_value(), a) == 0

    def definitely_equals(self, u: "UnifiedReal") -> bool:
        """True only if the values are provably equal; False may be conservative."""
        return self.is_comparable(u) and self.compare_to(u) == 0

    def definitely_not_equals(self, u: "UnifiedReal") -> bool:
        """True only if the values are provably different; never evaluates."""
        is_named = named.is_named(self._cr)
        u_is_named = named.is_named(u._cr)
        if is_named and u_is_named:
            if named.definitely_independent(self._cr, u._cr):
                return self._rat.signum() != 0 or u._rat.signum() != 0
            if named.same_factor(self._cr, u._cr):
                return self._rat != u._rat
            # e against pi: rational multiples are not known to differ.
            return False
        if self._rat.signum() == 0:
            return u_is_named and u._rat.signum() != 0
        if u._rat.signum() == 0:
            return is_named and self._rat.signum() != 0
        return False

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def add(self, u: "UnifiedReal") -> "UnifiedReal":
        if named.same_factor(self._cr, u._cr):
            rat = BR.add(self._rat, u._rat)
            if rat is not None:
                return UnifiedReal(rat, self._cr)
        if self.definitely_zero():
            return u
        if u.definitely_zero():
            return self
        return _evaluated("add", self.cr_value().add(u.cr_value()))

    def negate(self) -> "UnifiedReal":
        return UnifiedReal(BR.negate(self._rat), self._cr)

    def subtract(self, u: "UnifiedReal") -> "UnifiedReal":
        return self.add(u.negate())

    def multiply(self, u: "UnifiedReal") -> "UnifiedReal":
        # Keep an existing named factor where possible.
        if _is_one(self._cr):
            rat = BR.multiply(self._rat, u._rat)
            if rat is not None:
                return UnifiedReal(rat, u._cr)
        if _is_one(u._cr):
            rat = BR.multiply(self._rat, u._rat)
            if rat is not None:
                return UnifiedReal(rat, self._cr)
        if self.definitely_zero() or u.definitely_zero():
            return ZERO
        if named.same_factor(self._cr, u._cr):
            square = named.square_of(self._cr)
            if square is not None:
                rat = BR.multiply(BR.multiply(BR(square), self._rat), u._rat)
                if rat is not None:
                    return UnifiedReal(rat)
        rat = BR.multiply(self._rat, u._rat)
        if rat is not None:
            return UnifiedReal(rat, self._cr.multiply(u._cr))
        return _evaluated("multiply", self.cr_value().multiply(u.cr_value()))

    def inverse(self) -> "UnifiedReal":
        if self.definitely_zero():
            raise DivisionByZeroError()
        square = named.square_of(self._cr)
        if square is not None:
            # 1/(r·√n) = (1/(r·n))·√n
            rat = BR.inverse(BR.multiply(self._rat, BR(square)))
            if rat is not None:
                return UnifiedReal(rat, self._cr)
        return UnifiedReal(BR.inverse(self._rat), self._cr.inverse())

    def divide(self, u: "UnifiedReal") -> "UnifiedReal":
        if named.same_factor(self._cr, u._cr):
            if u.definitely_zero():
                raise DivisionByZeroError()
            rat = BR.divide(self._rat, u._rat)
            if rat is not None:
                return UnifiedReal(rat, named.ONE)
        return self.multiply(u.inverse())

    def sqrt(self) -> "UnifiedReal":
        if self.definitely_zero():
            return ZERO
        if _is_one(self._cr):
            # Try <perfect rational square> × n for each n with a named root,
            # which includes n = 1.
            for radicand, root in named.SQRTS.items():
                rat_sqrt = BR.sqrt(BR.divide(self._rat, BR(radicand)))
                if rat_sqrt is not None:
                    return UnifiedReal(rat_sqrt, root)
        return _evaluated("sqrt", self.cr_value().sqrt())

    # ------------------------------------------------------------------
    # Trigonometry
    # ------------------------------------------------------------------

    def _pi_twelfths(self) -> Optional[int]:
        """``n mod 24`` if the value is ``n·π/12`` for an integer n, else None."""
        if self.definitely_zero():
            return 0
        if self._cr.tag is NamedConstant.PI:
            quotient = BR.as_big_integer(BR.multiply(self._rat, BR.TWELVE))
            if quotient is None:
                return None
            return quotient % 24
        return None

    def sin(self) -> "UnifiedReal":
        twelfths = self._pi_twelfths()
        if twelfths is not None:
            result = _sin_pi_twelfths(twelfths)
            if result is not None:
                return result
        return _evaluated("sin", self.cr_value().sin())

    def cos(self) -> "UnifiedReal":
        twelfths = self._pi_twelfths()
        if twelfths is not None:
            result = _cos_pi_twelfths(twelfths)
            if result is not None:
                return result
        return _evaluated("cos", self.cr_value().cos())

    def tan(self) -> "UnifiedReal":
        twelfths = self._pi_twelfths()
        if twelfths is not None:
            if twelfths in (6, 18):
                raise ArithmeticDomainError("Tangent undefined")
            top = _sin_pi_twelfths(twelfths)
            bottom = _cos_pi_twelfths(twelfths)
            if top is not None and bottom is not None:
                return top.divide(bottom)
        return self.sin().divide(self.cos())

    def _check_asin_domain(self) -> None:
        if self.is_comparable(ONE) and (
                self.compare_to(ONE) > 0
                or (self.is_comparable(MINUS_ONE) and self.compare_to(MINUS_ONE) < 0)):
            raise ArithmeticDomainError("inverse trig argument out of range")

    def asin_non_halves(self) -> "UnifiedReal":
        if self.compare_to(ZERO, -10) < 0:
            return self.negate().asin_non_halves().negate()
        if self.definitely_equals(HALF_SQRT2):
            return PI_OVER_4
        if self.definitely_equals(HALF_SQRT3):
            return PI_OVER_3
        return _evaluated("asin", self.cr_value().asin())

    def asin(self) -> "UnifiedReal":
        self._check_asin_domain()
        halves = self.multiply(TWO).big_integer_value()
        if halves is not None:
            return asin_halves(halves)
        return self.asin_non_halves()

    def acos(self) -> "UnifiedReal":
        return PI_OVER_2.subtract(self.asin())

    def atan(self) -> "UnifiedReal":
        if self.compare_to(ZERO, -10) < 0:
            return self.negate().atan().negate()
        as_int = self.big_integer_value()
        if as_int is not None and as_int <= 1:
            return ZERO if as_int == 0 else PI_OVER_4
        if self.definitely_equals(THIRD_SQRT3):
            return PI_OVER_6
        if self.definitely_equals(SQRT3):
            return PI_OVER_3
        return _evaluated("atan", self.cr_value().atan())

    # ------------------------------------------------------------------
    # Powers, logarithms and factorial
    # ------------------------------------------------------------------

    def _exp_ln_pow(self, exp: int) -> "UnifiedReal":
        sign = self.signum(EvaluationConfig.get_compare_tolerance())
        if sign > 0:
            # Safe to take the log; avoids deep recursion for huge exponents.
            return _evaluated("pow", self.cr_value().ln().multiply(CR.from_int(exp)).exp())
        if sign < 0:
            result = self.cr_value().negate().ln().multiply(CR.from_int(exp)).exp()
            if exp & 1:
                result = result.negate()
            return _evaluated("pow", result)
        # Base of unknown sign with an integer exponent.
        if exp < 0:
            return _evaluated("pow", _recursive_pow(self.cr_value(), -exp).inverse())
        return _evaluated("pow", _recursive_pow(self.cr_value(), exp))

    def _pow_int(self, exp: int) -> "UnifiedReal":
        if exp == 1:
            return self
        if exp == 0:
            # 0**0 and the like give 1, as float pow() does.
            return ONE
        abs_exp = abs(exp)
        if _is_one(self._cr) and abs_exp <= HARD_RECURSIVE_POW_LIMIT:
            rat_pow = BR.pow(self._rat, exp)
            if rat_pow is not None:
                return UnifiedReal(rat_pow)
        if abs_exp > EvaluationConfig.get_recursive_pow_limit():
            return self._exp_ln_pow(exp)
        square = named.square_of(self._cr)
        if square is not None:
            rat = BR.multiply(BR.pow(self._rat, exp), BR.pow(BR(square), exp >> 1))
            if rat is not None:
                if exp & 1:
                    # Odd power keeps one square root.
                    return UnifiedReal(rat, self._cr)
                return UnifiedReal(rat)
        return self._exp_ln_pow(exp)

    def pow(self, expon: "UnifiedReal") -> "UnifiedReal":
        """
        ``self ** expon``.

        Integral and half-integral rational exponents are handled exactly where
        possible. Raises ArithmeticDomainError for a negative base with any
        other exponent.
        """
        if self._cr.tag is NamedConstant.E:
            if self._rat == BR.ONE:
                return expon.exp()
            rat_part = UnifiedReal(self._rat).pow(expon)
            return expon.exp().multiply(rat_part)
        exp_as_rat = expon.bounded_rational_value()
        if exp_as_rat is not None:
            exp_as_int = BR.as_big_integer(exp_as_rat)
            if exp_as_int is not None:
                return self._pow_int(exp_as_int)
            exp_as_int = BR.as_big_integer(BR.multiply(BR.TWO, exp_as_rat))
            if exp_as_int is not None:
                return self._pow_int(exp_as_int).sqrt()
        if self.definitely_zero():
            return ZERO
        if self.signum(EvaluationConfig.get_compare_tolerance()) < 0:
            raise ArithmeticDomainError("Negative base for pow() with non-integer exponent")
        return _evaluated("pow", self.cr_value().ln().multiply(expon.cr_value()).exp())

    def ln(self) -> "UnifiedReal":
        if self._cr.tag is NamedConstant.E:
            return UnifiedReal(self._rat, named.ONE).ln().add(ONE)
        if self.is_comparable(ZERO):
            if self.signum() <= 0:
                raise ArithmeticDomainError("log(non-positive)")
            compare1 = self.compare_to(ONE, EvaluationConfig.get_compare_tolerance())
            if compare1 == 0:
                if self.definitely_equals(ONE):
                    return ZERO
            elif compare1 < 0:
                return self.inverse().ln().negate()
            as_int = BR.as_big_integer(self._rat)
            if as_int is not None:
                if _is_one(self._cr):
                    # Powers of small integers give a multiple of a named log.
                    for base, log in named.LOGS.items():
                        int_log = _int_log(as_int, base)
                        if int_log != 0:
                            return UnifiedReal(BR(int_log), log)
                else:
                    # n**k · √n gives (k + 1/2)·ln(n).
                    square = named.square_of(self._cr)
                    if square is not None and square in named.LOGS:
                        int_log = _int_log(as_int, square)
                        if int_log != 0:
                            rat = BR.add(BR(int_log), BR.HALF)
                            if rat is not None:
                                return UnifiedReal(rat, named.LOGS[square])
        return _evaluated("ln", self.cr_value().ln())

    def exp(self) -> "UnifiedReal":
        if self.definitely_equals(ZERO):
            return ONE
        if self.definitely_equals(ONE):
            # Every exp(1) shares the named factor.
            return E
        log_argument = named.log_argument_of(self._cr)
        if log_argument is not None:
            need_sqrt = False
            rat_exponent = self._rat
            if BR.as_big_integer(rat_exponent) is None:
                # Possibly a multiple of one half.
                need_sqrt = True
                rat_exponent = BR.multiply(rat_exponent, BR.TWO)
            rat = BR.pow(BR(log_argument), rat_exponent)
            if rat is not None:
                result = UnifiedReal(rat)
                if need_sqrt:
                    result = result.sqrt()
                return result
        return _evaluated("exp", self.cr_value().exp())

    def fact(self) -> "UnifiedReal":
        """Factorial of a non-negative integer value."""
        as_int = self.big_integer_value()
        if as_int is None:
            # Correct if the value is an integer.
            as_int = self.cr_value().approx_get(0)
            if not self.approx_equals(UnifiedReal(as_int), EvaluationConfig.get_compare_tolerance()):
                raise ArithmeticDomainError("Non-integral factorial argument")
        if as_int < 0:
            raise ArithmeticDomainError("Negative factorial argument")
        if as_int.bit_length() > _FACTORIAL_MAX_BITS:
            raise ArithmeticDomainError("Factorial argument too big")
        return UnifiedReal(BR(_gen_factorial(as_int, 1)))

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def __add__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.add(other)

    def __radd__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.add(self)

    def __sub__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.subtract(other)

    def __rsub__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.subtract(self)

    def __mul__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.multiply(other)

    def __rmul__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.multiply(self)

    def __truediv__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.divide(other)

    def __rtruediv__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.divide(self)

    def __pow__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.pow(other)

    def __rpow__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.pow(self)

    def __neg__(self):
        return self.negate()


def _coerce(x) -> Optional[UnifiedReal]:
    if isinstance(x, UnifiedReal):
        return x
    if isinstance(x, (int, float, BoundedRational)) and not isinstance(x, bool):
        return UnifiedReal.value_of(x)
    return None


def _evaluated(operation: str, cr: CR) -> UnifiedReal:
    logger.debug("no exact form for %s; using constructive-real evaluation", operation)
    return UnifiedReal(cr)


def _recursive_pow(base: CR, exp: int) -> CR:
    if exp == 1:
        return base
    if exp & 1:
        return base.multiply(_recursive_pow(base, exp - 1))
    tmp = _recursive_pow(base, exp >> 1)
    check_cancelled()
    return tmp.multiply(tmp)


def _int_log(n: int, base: int) -> int:
    """k if n == base**k for some k > 0, else 0."""
    try:
        approx = math.log(float(n)) / math.log(base)
    except OverflowError:
        approx = None
    # Quick rejection; too-large values skip straight to division.
    if approx is not None and abs(approx - round(approx)) > 1.0e-6:
        return 0
    result = 0
    base16 = None
    while n % base == 0:
        check_cancelled()
        n //= base
        result += 1
        if base16 is None:
            base16 = base ** 16
        while n % base16 == 0:
            n //= base16
            result += 16
    return result if n == 1 else 0


def _gen_factorial(n: int, step: int) -> int:
    """n · (n - step) · (n - 2·step) · ..., multiplied as a balanced tree."""
    if n > 4 * step:
        prod1 = _gen_factorial(n, 2 * step)
        check_cancelled()
        prod2 = _gen_factorial(n - step, 2 * step)
        check_cancelled()
        return prod1 * prod2
    if n == 0:
        return 1
    result = n
    i = n - step
    while i > 1:
        result *= i
        i -= step
    return result


PI = UnifiedReal(named.PI)
E = UnifiedReal(named.E)
ZERO = UnifiedReal(BR.ZERO)
ONE = UnifiedReal(BR.ONE)
MINUS_ONE = UnifiedReal(BR.MINUS_ONE)
TWO = UnifiedReal(BR.TWO)
MINUS_TWO = UnifiedReal(BR.MINUS_TWO)
HALF = UnifiedReal(BR.HALF)
MINUS_HALF = UnifiedReal(BR.MINUS_HALF)
TEN = UnifiedReal(BR.TEN)
RADIANS_PER_DEGREE = UnifiedReal(BR(1, 180), named.PI)

HALF_SQRT2 = UnifiedReal(BR.HALF, named.SQRT2)
SQRT3 = UnifiedReal(named.SQRT3)
HALF_SQRT3 = UnifiedReal(BR.HALF, named.SQRT3)
THIRD_SQRT3 = UnifiedReal(BR.THIRD, named.SQRT3)
PI_OVER_2 = UnifiedReal(BR.HALF, named.PI)
PI_OVER_3 = UnifiedReal(BR.THIRD, named.PI)
PI_OVER_4 = UnifiedReal(BR.QUARTER, named.PI)
PI_OVER_6 = UnifiedReal(BR.SIXTH, named.PI)

_SIN_PI_TWELFTHS = {
    0: ZERO,
    2: HALF,         # 30 degrees
    3: HALF_SQRT2,   # 45 degrees
    4: HALF_SQRT3,   # 60 degrees
    6: ONE,
    8: HALF_SQRT3,
    9: HALF_SQRT2,
    10: HALF,
}


def _sin_pi_twelfths(n: int) -> Optional[UnifiedReal]:
    """sin(n·π/12) for 0 <= n < 24, when it has a simple exact form."""
    if n >= 12:
        result = _sin_pi_twelfths(n - 12)
        return None if result is None else result.negate()
    return _SIN_PI_TWELFTHS.get(n)


def _cos_pi_twelfths(n: int) -> Optional[UnifiedReal]:
    return _sin_pi_twelfths((n + 6) % 24)


def asin_halves(n: int) -> UnifiedReal:
    """asin(n/2) for n in -2..2."""
    if n < 0:
        return asin_halves(-n).negate()
    if n == 0:
        return ZERO
    if n == 1:
        return PI_OVER_6
    if n == 2:
        return PI_OVER_2
    raise ArithmeticDomainError("inverse trig argument out of range")


for _name in ("PI", "E", "ZERO", "ONE", "MINUS_ONE", "TWO", "MINUS_TWO", "HALF",
              "MINUS_HALF", "TEN", "RADIANS_PER_DEGREE"):
    setattr(UnifiedReal, _name, globals()[_name])
del _name
