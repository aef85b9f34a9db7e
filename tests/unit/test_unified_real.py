"""Unit tests for UnifiedReal."""

import math

import pytest

from exactreal import (
    CR,
    ArithmeticDomainError,
    BoundedRational,
    DivisionByZeroError,
    FormatError,
    NamedConstant,
    UnifiedReal,
)
from exactreal.core import constants
from exactreal.unified import E, HALF, MINUS_ONE, ONE, PI, TEN, TWO, ZERO, asin_halves
from exactreal.unified.unified_real import MAX_INT

BR = BoundedRational


def u(num: int, den: int = 1) -> UnifiedReal:
    return UnifiedReal(BR(num, den))


def assert_exact(x: UnifiedReal, rat: BoundedRational, tag: NamedConstant) -> None:
    assert x.rat_factor == rat
    assert x.cr_factor.tag is tag


class TestConstruction:
    """Test construction and conversion."""

    def test_forms(self):
        """From a CR, a rational with a factor, or an int."""
        assert_exact(UnifiedReal(7), BR(7), NamedConstant.ONE)
        assert_exact(UnifiedReal(BR(1, 2), constants.PI), HALF.rat_factor, NamedConstant.PI)
        x = UnifiedReal(CR.from_int(3).sqrt())
        assert x.rat_factor == BR(1)
        assert x.cr_factor.tag is None

    def test_rejects_other_types(self):
        """Floats and bools are not accepted by the constructor."""
        with pytest.raises(TypeError):
            UnifiedReal(1.5)
        with pytest.raises(TypeError):
            UnifiedReal(True)
        with pytest.raises(TypeError):
            UnifiedReal(CR.from_int(1), constants.PI)

    def test_value_of(self):
        """Exact conversion of numbers and text."""
        assert UnifiedReal.value_of(0) is ZERO
        assert UnifiedReal.value_of(1.0) is ONE
        assert UnifiedReal.value_of(0.375).rat_factor == BR(3, 8)
        assert UnifiedReal.value_of("-1.25").rat_factor == BR(-5, 4)
        assert UnifiedReal.value_of(" 1/3 ").rat_factor == BR(1, 3)
        for text in ("abc", "1/0", ""):
            with pytest.raises(FormatError):
                UnifiedReal.value_of(text)

    def test_conversions(self):
        """Rational, integer, CR and float values."""
        assert u(3, 4).bounded_rational_value() == BR(3, 4)
        assert PI.bounded_rational_value() is None
        assert u(12).big_integer_value() == 12
        assert HALF.big_integer_value() is None
        assert PI.cr_value() is constants.PI
        assert HALF.double_value() == 0.5
        assert float(PI) == pytest.approx(math.pi, rel=1e-15)
        assert UnifiedReal(BR(1, 3), constants.SQRT2).cr_value().compare_to(
            CR.from_int(2).sqrt().divide(CR.from_int(3)), -100) == 0

    def test_identity_equality(self):
        """Instances only compare equal to themselves."""
        assert ONE == ONE
        assert UnifiedReal(1) != UnifiedReal(1)


class TestClassification:
    """Test the definitely_* predicates."""

    def test_rationals(self):
        """Rationals, including a zero multiple of pi."""
        zero_pi = UnifiedReal(BR(0), constants.PI)
        for x in (HALF, ZERO, zero_pi):
            assert x.definitely_rational()
            assert x.definitely_algebraic()
            assert not x.definitely_irrational()
        assert zero_pi.definitely_zero()
        assert not HALF.definitely_zero()
        assert ONE.definitely_one()
        assert not TWO.definitely_one()

    def test_named_irrationals(self):
        """pi and e are transcendental; square roots algebraic."""
        assert PI.definitely_irrational()
        assert PI.definitely_transcendental()
        assert E.definitely_transcendental()
        root2 = TWO.sqrt()
        assert root2.definitely_irrational()
        assert root2.definitely_algebraic()
        assert not root2.definitely_transcendental()
        assert PI.definitely_non_zero()

    def test_unknown_values(self):
        """Nothing is claimed about an unnamed constructive real."""
        x = UnifiedReal(CR.from_int(3).sqrt())
        assert not x.definitely_rational()
        assert not x.definitely_irrational()
        assert not x.definitely_algebraic()
        assert not x.definitely_transcendental()
        assert not x.definitely_non_zero()


class TestArithmetic:
    """Test that arithmetic keeps results exact."""

    def test_rational_arithmetic(self):
        """Rational operands stay rational."""
        assert (u(1, 2) + u(1, 3)).rat_factor == BR(5, 6)
        assert (u(1, 2) - 1).rat_factor == BR(-1, 2)
        assert (u(2, 3) * u(3, 4)).rat_factor == BR(1, 2)
        assert (u(2, 3) / u(4, 9)).rat_factor == BR(3, 2)
        assert (-u(5)).rat_factor == BR(-5)
        assert (1 / u(4)).rat_factor == BR(1, 4)

    def test_same_factor_addition(self):
        """Rational multiples of the same constant add exactly."""
        x = PI + PI / 2
        assert_exact(x, BR(3, 2), NamedConstant.PI)
        assert (PI - PI).definitely_zero()

    def test_square_roots(self):
        """Square roots of rationals use the named roots."""
        assert_exact(TWO.sqrt(), BR(1), NamedConstant.SQRT2)
        assert_exact(u(8).sqrt(), BR(2), NamedConstant.SQRT2)
        assert_exact(u(1, 2).sqrt(), BR(1, 2), NamedConstant.SQRT2)
        assert_exact(u(9, 4).sqrt(), BR(3, 2), NamedConstant.ONE)
        assert_exact(u(12).sqrt(), BR(2), NamedConstant.SQRT3)
        assert ZERO.sqrt() is ZERO
        assert u(11).sqrt().cr_factor.tag is None

    def test_root_squared_is_rational(self):
        """sqrt(2) * sqrt(2) is exactly 2."""
        root = TWO.sqrt()
        square = root * root
        assert_exact(square, BR(2), NamedConstant.ONE)
        assert square.definitely_equals(TWO)
        assert (u(3).sqrt() * u(6).sqrt()).approx_equals(u(18).sqrt(), -100)

    def test_inverse(self):
        """Inverses keep square roots in the numerator."""
        assert_exact(TWO.sqrt().inverse(), BR(1, 2), NamedConstant.SQRT2)
        assert PI.inverse().cr_value().compare_to(constants.PI.inverse(), -100) == 0
        with pytest.raises(DivisionByZeroError):
            ZERO.inverse()
        with pytest.raises(DivisionByZeroError):
            PI / UnifiedReal(BR(0), constants.PI)

    def test_division_by_same_factor(self):
        """A quotient of multiples of one constant is rational."""
        assert_exact((PI * 3) / (PI / 2), BR(6), NamedConstant.ONE)

    def test_multiplication_by_zero(self):
        """Zero absorbs any factor."""
        assert (ZERO * UnifiedReal(CR.from_int(5).ln())).definitely_zero()


class TestComparison:
    """Test comparisons and equality predicates."""

    def test_compare_exact(self):
        """Comparable values are ordered without a tolerance."""
        assert PI.compare_to(u(3)) == 1
        assert u(1, 3).compare_to(HALF) == -1
        assert (PI / 2).compare_to(PI / 3) == 1
        assert (-PI).compare_to(-PI / 2) == -1
        assert ZERO.compare_to(UnifiedReal(BR(0), constants.E)) == 0
        assert E.signum() == 1
        assert MINUS_ONE.signum() == -1

    def test_is_comparable(self):
        """Comparability is decided without risking divergence."""
        assert PI.is_comparable(E)
        assert HALF.is_comparable(ONE)
        assert TWO.sqrt().is_comparable(u(3).sqrt())
        unknown = UnifiedReal(CR.from_int(2).sqrt())
        assert unknown.is_comparable(ONE)
        assert not unknown.multiply(unknown).is_comparable(TWO)

    def test_compare_with_tolerance(self):
        """Incomparable values within the tolerance compare as 0."""
        unknown = UnifiedReal(CR.from_int(2).sqrt())
        assert unknown.multiply(unknown).compare_to(TWO, -100) == 0
        assert unknown.compare_to(ONE, -100) == 1

    def test_equality_predicates(self):
        """definitely_equals, definitely_not_equals and approx_equals."""
        assert HALF.definitely_equals(u(2, 4))
        assert not HALF.definitely_equals(ONE)
        assert not PI.definitely_not_equals(E)
        assert PI.definitely_not_equals(TWO.sqrt())
        assert HALF.definitely_not_equals(ONE)
        assert ZERO.definitely_not_equals(PI)
        unknown = UnifiedReal(CR.from_int(2).sqrt())
        assert not unknown.definitely_not_equals(ONE)
        square = unknown.multiply(unknown)
        assert square.approx_equals(TWO, -100)
        assert not square.definitely_equals(TWO)
        assert not PI.approx_equals(u(355, 113), -10)


class TestTranscendental:
    """Test exact special cases of the elementary functions."""

    @pytest.mark.parametrize(
        "num, den, sin, cos",
        [
            (1, 6, BR(1, 2), None),
            (1, 3, None, BR(1, 2)),
            (1, 2, BR(1), BR(0)),
            (7, 6, BR(-1, 2), None),
            (2, 1, BR(0), BR(1)),
            (-1, 2, BR(-1), BR(0)),
        ],
    )
    def test_sin_cos_of_pi_multiples(self, num, den, sin, cos):
        """Multiples of pi/12 with rational results."""
        x = PI * u(num, den)
        if sin is not None:
            assert x.sin().bounded_rational_value() == sin
        if cos is not None:
            assert x.cos().bounded_rational_value() == cos

    def test_sin_with_square_roots(self):
        """sin(pi/4) and cos(pi/6) are exact multiples of named roots."""
        assert_exact((PI / 4).sin(), BR(1, 2), NamedConstant.SQRT2)
        assert_exact((PI / 6).cos(), BR(1, 2), NamedConstant.SQRT3)

    def test_tan(self):
        """tan of exact angles and its poles."""
        assert (PI / 4).tan().definitely_one()
        assert_exact((PI / 3).tan(), BR(1), NamedConstant.SQRT3)
        with pytest.raises(ArithmeticDomainError):
            (PI / 2).tan()
        with pytest.raises(ArithmeticDomainError):
            (PI * u(3, 2)).tan()

    def test_evaluated_trig(self):
        """Other arguments fall back to evaluation."""
        x = u(1).sin()
        assert x.cr_factor.tag is None
        assert x.double_value() == pytest.approx(math.sin(1.0), rel=1e-15)
        assert u(2).tan().double_value() == pytest.approx(math.tan(2.0), rel=1e-14)

    def test_inverse_trig(self):
        """asin, acos and atan of the special values."""
        assert_exact(HALF.asin(), BR(1, 6), NamedConstant.PI)
        assert_exact(MINUS_ONE.asin(), BR(-1, 2), NamedConstant.PI)
        assert ONE.acos().definitely_zero()
        assert_exact((TWO.sqrt() / 2).asin(), BR(1, 4), NamedConstant.PI)
        assert_exact((u(3).sqrt() / 2).asin(), BR(1, 3), NamedConstant.PI)
        assert_exact(ONE.atan(), BR(1, 4), NamedConstant.PI)
        assert_exact(MINUS_ONE.atan(), BR(-1, 4), NamedConstant.PI)
        assert_exact(u(3).sqrt().atan(), BR(1, 3), NamedConstant.PI)
        assert_exact((u(3).sqrt() / 3).atan(), BR(1, 6), NamedConstant.PI)
        assert ZERO.atan().definitely_zero()
        assert u(1, 3).asin().double_value() == pytest.approx(math.asin(1 / 3), rel=1e-15)

    def test_asin_domain(self):
        """Arguments outside [-1, 1] are rejected."""
        with pytest.raises(ArithmeticDomainError):
            TWO.asin()
        with pytest.raises(ArithmeticDomainError):
            u(-3, 2).acos()
        with pytest.raises(ArithmeticDomainError):
            asin_halves(3)
        assert asin_halves(-2).rat_factor == BR(-1, 2)
        assert asin_halves(1).rat_factor == BR(1, 6)

    def test_exp(self):
        """exp(0), exp(1) and exp of named logarithms."""
        assert ONE.exp() is E
        assert ZERO.exp() is ONE
        ln2 = UnifiedReal(constants.LN2)
        assert (ln2 * 3).exp().rat_factor == BR(8)
        assert_exact((ln2 / 2).exp(), BR(1), NamedConstant.SQRT2)
        assert (ln2 * -2).exp().rat_factor == BR(1, 4)
        assert TWO.exp().double_value() == pytest.approx(math.exp(2.0), rel=1e-15)

    def test_ln(self):
        """Logarithms of powers of small integers are named."""
        assert_exact(u(8).ln(), BR(3), NamedConstant.LN2)
        assert_exact(u(1, 8).ln(), BR(-3), NamedConstant.LN2)
        assert_exact(u(100).ln(), BR(2), NamedConstant.LN10)
        assert_exact(u(49).ln(), BR(2), NamedConstant.LN7)
        assert_exact((TWO.sqrt() * 2).ln(), BR(3, 2), NamedConstant.LN2)
        assert ONE.ln().definitely_zero()
        assert_exact(E.ln(), BR(1), NamedConstant.ONE)
        assert u(11).ln().double_value() == pytest.approx(math.log(11.0), rel=1e-15)

    def test_ln_domain(self):
        """Non-positive arguments are rejected."""
        with pytest.raises(ArithmeticDomainError):
            MINUS_ONE.ln()
        with pytest.raises(ArithmeticDomainError):
            ZERO.ln()
        with pytest.raises(ArithmeticDomainError):
            (-PI).ln()


class TestPowAndFactorial:
    """Test pow and fact."""

    def test_rational_powers(self):
        """Rational bases with integer exponents stay rational."""
        assert (TWO ** TEN).rat_factor == BR(1024)
        assert (u(2, 3) ** -2).rat_factor == BR(9, 4)
        assert (ZERO ** ZERO) is ONE
        assert (PI ** 1) is PI
        assert (2 ** u(5)).rat_factor == BR(32)

    def test_half_integer_powers(self):
        """Exponents that are multiples of one half use square roots."""
        assert_exact(TWO ** HALF, BR(1), NamedConstant.SQRT2)
        assert_exact(u(4) ** u(3, 2), BR(8), NamedConstant.ONE)

    def test_powers_of_roots(self):
        """Powers of named square roots."""
        root2 = TWO.sqrt()
        assert_exact(root2 ** 3, BR(2), NamedConstant.SQRT2)
        assert_exact(root2 ** 4, BR(4), NamedConstant.ONE)
        assert_exact(root2 ** -1, BR(1, 2), NamedConstant.SQRT2)

    def test_powers_of_e(self):
        """Powers of e go through exp."""
        assert (E ** 2).double_value() == pytest.approx(math.exp(2.0), rel=1e-15)
        assert (E ** UnifiedReal(constants.LN2)).rat_factor == BR(2)

    def test_evaluated_powers(self):
        """Irrational exponents and large integer exponents are evaluated."""
        x = TWO ** PI
        assert x.double_value() == pytest.approx(2 ** math.pi, rel=1e-14)
        y = PI ** 2
        assert y.double_value() == pytest.approx(math.pi ** 2, rel=1e-14)
        z = (-PI) ** 3
        assert z.double_value() == pytest.approx(-math.pi ** 3, rel=1e-14)

    def test_negative_base_domain(self):
        """A negative base with a non-integral exponent is rejected."""
        with pytest.raises(ArithmeticDomainError):
            (-PI) ** PI

    def test_factorial(self):
        """Factorials of small integers."""
        assert u(0).fact().rat_factor == BR(1)
        assert u(5).fact().rat_factor == BR(120)
        assert u(20).fact().big_integer_value() == math.factorial(20)
        assert u(100).fact().big_integer_value() == math.factorial(100)

    @pytest.mark.parametrize("x", [u(-1), u(1, 2), PI])
    def test_factorial_domain(self, x):
        """Negative and non-integral arguments are rejected."""
        with pytest.raises(ArithmeticDomainError):
            x.fact()


class TestText:
    """Test text output."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (u(3, 4), "3/4"),
            (u(-7), "-7"),
            (PI, "π"),
            (PI / 2, "(1/2)π"),
            (u(12).sqrt(), "2√3"),
            (u(8).ln(), "3ln(2)"),
            (E, "e"),
        ],
    )
    def test_to_nice_string(self, value, expected):
        """Exact text for rationals and rational multiples of named constants."""
        assert value.to_nice_string() == expected
        assert value.exactly_displayable() or value.definitely_rational()

    def test_nice_string_of_unnamed_value(self):
        """Unnamed values print their digits."""
        x = UnifiedReal(CR.from_int(2).sqrt())
        assert not x.exactly_displayable()
        assert x.to_nice_string() == "1.4142135623"

    def test_to_string_truncated(self):
        """Truncated decimal text for each kind of value."""
        assert u(1, 3).to_string_truncated(5) == "0.33333"
        assert u(-2, 3).to_string_truncated(3) == "-0.666"
        assert PI.to_string_truncated(5) == "3.14159"
        assert (-PI).to_string_truncated(2) == "-3.14"
        assert UnifiedReal(CR.from_int(2).sqrt()).to_string_truncated(4) == "1.4142"
        assert PI.exactly_truncatable()
        assert not UnifiedReal(CR.from_int(2).sqrt()).exactly_truncatable()

    def test_digits_and_bits(self):
        """Digit and bit estimates used for display."""
        assert u(1, 8).digits_required() == 3
        assert u(1, 3).digits_required() == MAX_INT
        assert PI.digits_required() == MAX_INT
        assert TEN.leading_binary_zeroes() == 0
        assert ZERO.leading_binary_zeroes() == MAX_INT
        assert UnifiedReal(CR.from_int(2).sqrt()).leading_binary_zeroes() == MAX_INT
        assert (PI * 1000).approx_whole_number_bits_greater_than(5)
        assert not HALF.approx_whole_number_bits_greater_than(5)
        assert UnifiedReal(CR.from_int(1 << 20).sqrt()).approx_whole_number_bits_greater_than(5)

    def test_str_and_repr(self):
        """str shows both factors."""
        assert str(HALF).startswith("1/2*")
        assert repr(HALF).startswith("UnifiedReal(BoundedRational(1, 2)")
