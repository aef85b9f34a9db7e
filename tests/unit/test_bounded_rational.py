"""Unit tests for BoundedRational."""

from fractions import Fraction

import pytest

from exactreal import ArithmeticDomainError, BoundedRational, DivisionByZeroError, evaluation_context
from exactreal.core.bounded_rational import HALF, MAX_INT, MIN_INT, ONE, ZERO

BR = BoundedRational


class TestBasics:
    """Construction, queries and text."""

    def test_lowest_terms(self):
        """Fractions are reduced and the sign moves to the numerator."""
        r = BR(6, -4)
        assert (r.numerator, r.denominator) == (-3, 2)
        assert r.fraction == Fraction(-3, 2)
        assert str(r) == "-3/2"
        assert repr(r) == "BoundedRational(-3, 2)"

    def test_zero_denominator(self):
        """A zero denominator is a division by zero."""
        with pytest.raises(DivisionByZeroError):
            BR(1, 0)
        with pytest.raises(ZeroDivisionError):
            BR(1, 0)

    def test_value_semantics(self):
        """Equal values are equal, hash alike and order naturally."""
        assert BR(2, 4) == HALF
        assert len({BR(2, 4), HALF, BR(1, 2)}) == 1
        assert BR(1, 3) < HALF <= BR(1, 2) < ONE
        assert sorted([ONE, ZERO, HALF]) == [ZERO, HALF, ONE]
        assert BoundedRational.HALF is HALF

    def test_queries(self):
        """signum, compare_to and bit counts."""
        assert BR(-5, 3).signum() == -1
        assert ZERO.signum() == 0
        assert BR(1, 3).compare_to(HALF) == -1
        assert BR(8).whole_number_bits() == 3
        assert ZERO.whole_number_bits() == MIN_INT
        assert BR(3, 4).bit_size() == 5

    def test_conversions(self):
        """Float, integer and constructive-real conversions."""
        assert BR(1, 4).double_value() == 0.25
        assert BR(10 ** 400).double_value() == float("inf")
        assert BR(-(10 ** 400)).double_value() == float("-inf")
        assert BR(-7, 2).int_value() == -3
        assert BR(22, 7).cr_value().compare_to(BR(22, 7).cr_value().add(BR(1, 10 ** 9).cr_value())) == -1
        assert BR(5).cr_value().big_integer_value() == 5

    def test_value_of(self):
        """Exact conversion of ints, floats and fractions."""
        assert BR.value_of(0.75) == BR(3, 4)
        assert BR.value_of(Fraction(2, 6)) == BR(1, 3)
        assert BR.value_of(7) == BR(7)
        with pytest.raises(ArithmeticDomainError):
            BR.value_of(float("nan"))

    def test_text(self):
        """Nice and truncated decimal text."""
        assert BR(5).to_nice_string() == "5"
        assert BR(-2, 3).to_nice_string() == "-2/3"
        assert BR(-1, 3).to_string_truncated(4) == "-0.3333"
        assert BR(1, 8).to_string_truncated(2) == "0.12"
        assert BR(123, 10).to_string_truncated(3) == "12.300"


class TestArithmetic:
    """None-propagating static arithmetic."""

    def test_basic_operations(self):
        """Exact results for small operands."""
        assert BR.add(BR(1, 2), BR(1, 3)) == BR(5, 6)
        assert BR.subtract(BR(1, 2), BR(1, 3)) == BR(1, 6)
        assert BR.multiply(BR(2, 3), BR(3, 4)) == HALF
        assert BR.divide(BR(2, 3), BR(4, 9)) == BR(3, 2)
        assert BR.negate(HALF) == BR(-1, 2)
        assert BR.inverse(BR(-4)) == BR(-1, 4)

    def test_none_propagates(self):
        """None means unavailable and stays unavailable."""
        assert BR.add(None, ONE) is None
        assert BR.multiply(ONE, None) is None
        assert BR.negate(None) is None
        assert BR.inverse(None) is None
        assert BR.sqrt(None) is None
        assert BR.pow(None, 2) is None

    def test_size_bound(self):
        """Results above the size bound are reported as None."""
        with evaluation_context(rational_max_bits=64):
            big = BR(1 << 40)
            assert BR.multiply(big, big) is None
            assert BR.add(big, ONE) == BR((1 << 40) + 1)

    def test_inverse_of_zero(self):
        """Zero has no inverse."""
        with pytest.raises(DivisionByZeroError):
            BR.inverse(ZERO)
        with pytest.raises(DivisionByZeroError):
            BR.divide(ONE, ZERO)

    def test_sqrt(self):
        """Exact roots of perfect squares only."""
        assert BR.sqrt(BR(9, 4)) == BR(3, 2)
        assert BR.sqrt(ZERO) == ZERO
        assert BR.sqrt(BR(2)) is None
        assert BR.sqrt(BR(4, 3)) is None
        with pytest.raises(ArithmeticDomainError):
            BR.sqrt(BR(-1))

    def test_pow(self):
        """Integral exponents, with size and domain checks."""
        assert BR.pow(BR(2, 3), 3) == BR(8, 27)
        assert BR.pow(HALF, -2) == BR(4)
        assert BR.pow(BR(-1), 7) == BR(-1)
        assert BR.pow(BR(5), 0) == ONE
        assert BR.pow(BR(9), BR(2)) == BR(81)
        assert BR.pow(BR(2), HALF) is None
        assert BR.pow(BR(3), 100000) is None
        with pytest.raises(DivisionByZeroError):
            BR.pow(ZERO, -1)

    def test_integer_value(self):
        """as_big_integer only for integers."""
        assert BR.as_big_integer(BR(14, 2)) == 7
        assert BR.as_big_integer(HALF) is None
        assert BR.as_big_integer(None) is None

    @pytest.mark.parametrize(
        "value, expected",
        [(BR(5), 0), (BR(1, 8), 3), (BR(3, 20), 2), (BR(7, 625), 4), (BR(1, 3), MAX_INT), (None, MAX_INT)],
    )
    def test_digits_required(self, value, expected):
        """Digits needed for an exact decimal expansion."""
        assert BR.digits_required(value) == expected
