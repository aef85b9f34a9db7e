"""
Square roots and the Gauss-Legendre computation of pi.
"""

import logging
import math
import threading
from typing import Optional, Tuple

from .cancellation import check_cancelled
from .cr import CR
from .dispatch import CRKind, approximator
from .errors import ArithmeticDomainError
from .scaling import div_trunc, scale, shift

logger = logging.getLogger(__name__)

# Below this many result bits the float square root is accurate enough.
_FP_PREC = 50
_FP_OP_PREC = 60


@approximator(CRKind.SQRT)
def _sqrt(node, p):
    op = node.operands[0]
    max_prec_needed = 2 * p - 1
    msd = op.iter_msd(max_prec_needed)
    if msd <= max_prec_needed:
        return 0
    result_msd = div_trunc(msd, 2)
    result_digits = result_msd - p
    if result_digits > _FP_PREC:
        # One Newton step from a half-precision approximation of ourselves:
        # (last**2 + op) / last / 2, with the halving folded into the rounding.
        check_cancelled()
        appr_digits = result_digits // 2 + 6
        appr_prec = result_msd - appr_digits
        prod_prec = 2 * appr_prec
        op_appr = op.approx_get(prod_prec)
        last_appr = node.approx_get(appr_prec)
        prod_prec_scaled_numerator = last_appr * last_appr + op_appr
        scaled_numerator = scale(prod_prec_scaled_numerator, appr_prec - p)
        shifted_result = div_trunc(scaled_numerator, last_appr)
        return (shifted_result + 1) >> 1
    op_prec = (msd - _FP_OP_PREC) & ~1
    working_prec = op_prec - _FP_OP_PREC
    scaled_bi_appr = op.approx_get(op_prec) << _FP_OP_PREC
    scaled_appr = float(scaled_bi_appr)
    if scaled_appr < 0.0:
        raise ArithmeticDomainError("sqrt(negative)")
    scaled_sqrt = int(math.sqrt(scaled_appr))
    shift_count = working_prec // 2 - p
    return shift(scaled_sqrt, shift_count)


class PiTermArena:
    """
    The geometric-mean terms ``b[n]`` of the last completed pi evaluation.

    Each entry is ``(precision, approximation)`` of ``sqrt(a[n-1] * b[n-1])``.
    A reevaluation at a finer precision seeds its square roots from these so
    that each one needs about one Newton step. Entries are replaced as a whole
    tuple once an evaluation completes, so readers never see a partial update.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._terms: Tuple[Tuple[int, int], ...] = ()
        self.version = 0

    def terms(self) -> Tuple[Tuple[int, int], ...]:
        with self._lock:
            return self._terms

    def publish(self, terms: Tuple[Tuple[int, int], ...], precision: int) -> None:
        with self._lock:
            self._terms = terms
            self.version += 1
            version = self.version
        logger.debug("published %d pi terms at precision %d (version %d)", len(terms), precision, version)

    def __len__(self) -> int:
        return len(self.terms())


_TOLERANCE = 4
_SQRT_HALF = CR.from_int(1).shift_right(1).sqrt()


def _seed_for(terms: Tuple[Tuple[int, int], ...], index: int) -> Optional[Tuple[int, int]]:
    return terms[index] if index < len(terms) else None


@approximator(CRKind.GL_PI)
def _gauss_legendre_pi(node, p):
    if p >= 0:
        return scale(3, -p)
    arena = node.aux
    previous = arena.terms()
    # About log2(-p) iterations, each adding at most 2 units of error to a
    # term, plus a few bits for the final division and rounding.
    extra_eval_prec = int(math.ceil(math.log(-p) / math.log(2))) + 10
    eval_prec = p - extra_eval_prec
    a = 1 << -eval_prec
    b = _SQRT_HALF.approx_get(eval_prec)
    t = 1 << (-eval_prec - 2)
    n = 0
    new_terms = []
    while a - b - _TOLERANCE > 0:
        check_cancelled()
        next_a = (a + b) >> 1
        a_diff = a - next_a
        b_prod = (a * b) >> -eval_prec
        b_prod_as_cr = CR.from_int(b_prod).shift_right(-eval_prec)
        seed = _seed_for(previous, n)
        if seed is None:
            next_b = b_prod_as_cr.sqrt().approx_get(eval_prec)
        else:
            next_b = CR.seeded_sqrt(b_prod_as_cr, seed[0], seed[1]).approx_get(eval_prec)
        new_terms.append((p, scale(next_b, -extra_eval_prec)))
        next_t = t - shift(a_diff * a_diff, n + eval_prec)
        a = next_a
        b = next_b
        t = next_t
        n += 1
    arena.publish(tuple(new_terms), p)
    total = a + b
    result = ((total * total) // t) >> 2
    return scale(result, -extra_eval_prec)
