"""
Approximation functions for the arithmetic node kinds.

Each function receives the node and a precision ``p`` and returns an integer
within one unit of ``value / 2**p``. Operand precisions are chosen so that the
rounding errors of the operands and of the final rescaling add up to less than
one unit.
"""

import threading

from .dispatch import CRKind, approximator
from .scaling import MSD_UNKNOWN, scale


class SelectorMemo:
    """Sign of a SELECT node's selector, once known."""

    def __init__(self, rough_appr: int):
        self._lock = threading.Lock()
        self._sign = (rough_appr > 0) - (rough_appr < 0)

    @property
    def sign(self) -> int:
        with self._lock:
            return self._sign

    def decide(self, sign: int) -> None:
        with self._lock:
            self._sign = sign


@approximator(CRKind.INT_CONSTANT)
def _int_constant(node, p):
    return scale(node.param, -p)


@approximator(CRKind.ASSUMED_INT)
def _assumed_int(node, p):
    value = node.operands[0]
    if p >= 0:
        return value.approx_get(p)
    return scale(value.approx_get(0), -p)


@approximator(CRKind.ADD)
def _add(node, p):
    # 1/4 + 1/4 from the operands plus 1/2 from the final rounding.
    op1, op2 = node.operands
    return scale(op1.approx_get(p - 2) + op2.approx_get(p - 2), -2)


@approximator(CRKind.SHIFTED)
def _shifted(node, p):
    return node.operands[0].approx_get(p - node.param)


@approximator(CRKind.NEGATE)
def _negate(node, p):
    return -node.operands[0].approx_get(p)


@approximator(CRKind.SELECT)
def _select(node, p):
    selector, op1, op2 = node.operands
    memo = node.aux
    sign = memo.sign
    if sign < 0:
        return op1.approx_get(p)
    if sign > 0:
        return op2.approx_get(p)
    op1_appr = op1.approx_get(p - 1)
    op2_appr = op2.approx_get(p - 1)
    if abs(op1_appr - op2_appr) <= 1:
        # Close enough that either answer is within one unit.
        return scale(op1_appr, -1)
    if selector.signum() < 0:
        memo.decide(-1)
        return scale(op1_appr, -1)
    memo.decide(1)
    return scale(op2_appr, -1)


@approximator(CRKind.MULTIPLY)
def _multiply(node, p):
    op1, op2 = node.operands
    half_prec = (p >> 1) - 1
    msd_op1 = op1.msd(half_prec)
    if msd_op1 == MSD_UNKNOWN:
        msd_op2 = op2.msd(half_prec)
        if msd_op2 == MSD_UNKNOWN:
            # Both operands are below 2**half_prec; so is the product.
            return 0
        # Make op1 the operand whose magnitude is known.
        op1, op2 = op2, op1
        msd_op1 = msd_op2
    prec2 = p - msd_op1 - 3
    appr2 = op2.approx_get(prec2)
    if appr2 == 0:
        return 0
    msd_op2 = op2.known_msd()
    prec1 = p - msd_op2 - 3
    appr1 = op1.approx_get(prec1)
    scale_digits = prec1 + prec2 - p
    return scale(appr1 * appr2, scale_digits)


@approximator(CRKind.INVERSE)
def _inverse(node, p):
    op = node.operands[0]
    msd = op.msd()
    inv_msd = 1 - msd
    digits_needed = inv_msd - p + 3
    prec_needed = msd - digits_needed
    log_scale_factor = -p - prec_needed
    if log_scale_factor < 0:
        return 0
    dividend = 1 << log_scale_factor
    scaled_divisor = op.approx_get(prec_needed)
    abs_scaled_divisor = abs(scaled_divisor)
    result = (dividend + (abs_scaled_divisor >> 1)) // abs_scaled_divisor
    return -result if scaled_divisor < 0 else result
