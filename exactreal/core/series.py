"""
Power-series approximations for arguments already reduced to a small range.

The builders on ``CR`` perform the range reduction; the functions here assume
it. Each series:

* derives the number of terms it may need from ``p``;
* works at ``calc_precision``, a few bits finer than ``p``, so that the
  per-term truncation errors stay below one unit after the final rescaling;
* stops when a term falls below ``max_trunc_error``;
* checks for cancellation once per term.
"""

from .cancellation import check_cancelled
from .dispatch import CRKind, approximator
from .scaling import bound_log2, div_trunc, scale


@approximator(CRKind.PRESCALED_EXP)
def _prescaled_exp(node, p):
    """exp(x) for |x| < 1/2."""
    if p >= 1:
        return 0
    op = node.operands[0]
    iterations_needed = div_trunc(-p, 2) + 2
    calc_precision = p - bound_log2(2 * iterations_needed) - 4
    op_prec = p - 3
    op_appr = op.approx_get(op_prec)
    scaled_1 = 1 << -calc_precision
    current_term = scaled_1
    current_sum = scaled_1
    n = 0
    max_trunc_error = 1 << (p - 4 - calc_precision)
    while abs(current_term) >= max_trunc_error:
        check_cancelled()
        n += 1
        current_term = scale(current_term * op_appr, op_prec)
        current_term = div_trunc(current_term, n)
        current_sum += current_term
    return scale(current_sum, calc_precision - p)


@approximator(CRKind.PRESCALED_COS)
def _prescaled_cos(node, p):
    """cos(x) for |x| < 1."""
    if p >= 1:
        return 0
    op = node.operands[0]
    iterations_needed = div_trunc(-p, 2) + 4
    calc_precision = p - bound_log2(2 * iterations_needed) - 4
    op_prec = p - 2
    op_appr = op.approx_get(op_prec)
    max_trunc_error = 1 << (p - 4 - calc_precision)
    n = 0
    current_term = 1 << -calc_precision
    current_sum = current_term
    while abs(current_term) >= max_trunc_error:
        check_cancelled()
        n += 2
        # current_term = -current_term * x^2 / (n * (n - 1))
        current_term = scale(current_term * op_appr, op_prec)
        current_term = scale(current_term * op_appr, op_prec)
        current_term = div_trunc(current_term, -n * (n - 1))
        current_sum += current_term
    return scale(current_sum, calc_precision - p)


@approximator(CRKind.INTEGRAL_ATAN)
def _integral_atan(node, p):
    """atan(1/n) for an integer n > 1."""
    if p >= 1:
        return 0
    op = node.param
    iterations_needed = div_trunc(-p, 2) + 2
    calc_precision = p - bound_log2(2 * iterations_needed) - 2
    scaled_1 = 1 << -calc_precision
    op_squared = op * op
    op_inverse = scaled_1 // op
    current_power = op_inverse
    current_term = op_inverse
    current_sum = op_inverse
    current_sign = 1
    n = 1
    max_trunc_error = 1 << (p - 2 - calc_precision)
    while abs(current_term) >= max_trunc_error:
        check_cancelled()
        n += 2
        current_power //= op_squared
        current_sign = -current_sign
        current_term = div_trunc(current_power, current_sign * n)
        current_sum += current_term
    return scale(current_sum, calc_precision - p)


@approximator(CRKind.PRESCALED_LN)
def _prescaled_ln(node, p):
    """ln(1 + x) for |x| < 1/2."""
    if p >= 0:
        return 0
    op = node.operands[0]
    iterations_needed = -p
    calc_precision = p - bound_log2(2 * iterations_needed) - 4
    op_prec = p - 3
    op_appr = op.approx_get(op_prec)
    x_nth = scale(op_appr, op_prec - calc_precision)
    current_term = x_nth
    current_sum = current_term
    n = 1
    current_sign = 1
    max_trunc_error = 1 << (p - 4 - calc_precision)
    while abs(current_term) >= max_trunc_error:
        check_cancelled()
        n += 1
        current_sign = -current_sign
        x_nth = scale(x_nth * op_appr, op_prec)
        current_term = div_trunc(x_nth, n * current_sign)
        current_sum += current_term
    return scale(current_sum, calc_precision - p)


@approximator(CRKind.PRESCALED_ASIN)
def _prescaled_asin(node, p):
    """
    asin(x) for |x| below about 0.73.

    Uses asin(x) = sum over n of (2n)! / (4**n (n!)**2 (2n+1)) x**(2n+1),
    keeping the running coefficient times the power of x as ``current_factor``.
    """
    if p >= 2:
        return 0
    op = node.operands[0]
    iterations_needed = div_trunc(-3 * p, 2) + 4
    calc_precision = p - bound_log2(2 * iterations_needed) - 4
    op_prec = p - 3
    op_appr = op.approx_get(op_prec)
    max_last_term = 1 << (p - 4 - calc_precision)
    exp = 1
    current_term = op_appr << (op_prec - calc_precision)
    current_sum = current_term
    current_factor = current_term
    while abs(current_term) >= max_last_term:
        check_cancelled()
        exp += 2
        current_factor *= exp - 2
        current_factor = scale(current_factor * op_appr, op_prec + 2)
        current_factor *= op_appr
        current_factor = div_trunc(current_factor, exp - 1)
        current_factor = scale(current_factor, op_prec - 2)
        current_term = div_trunc(current_factor, exp)
        current_sum += current_term
    return scale(current_sum, calc_precision - p)
