"""
Scaled-integer helpers shared by every approximation routine.

An approximation at precision ``p`` is an integer ``m`` with
``|value - m * 2**p| < 2**p``. Precisions are plain Python ints, but they are
kept inside the range of a 32-bit signed integer with 28 bits of headroom so
that sums and small multiples of checked precisions never leave that range.
"""

import logging
import math

from .errors import PrecisionOverflowError

logger = logging.getLogger(__name__)

INT_MIN = -(1 << 31)
INT_MAX = (1 << 31) - 1

# MSD search result meaning "could be arbitrarily close to zero".
MSD_UNKNOWN = INT_MIN

_PREC_LIMIT = 1 << 28


def check_prec(n: int) -> None:
    """Raise PrecisionOverflowError unless ``n`` has 28 bits of headroom."""
    if not -_PREC_LIMIT <= n < _PREC_LIMIT:
        logger.debug("precision %d outside supported range", n)
        raise PrecisionOverflowError(f"precision {n} out of range")


def shift(k: int, n: int) -> int:
    """Multiply by ``2**n``, truncating toward minus infinity for negative ``n``."""
    if n == 0:
        return k
    if n < 0:
        return k >> -n
    return k << n


def scale(k: int, n: int) -> int:
    """Multiply by ``2**n``, rounding to nearest (ties up) for negative ``n``."""
    if n >= 0:
        return k << n
    return (shift(k, n + 1) + 1) >> 1


def div_trunc(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def bound_log2(n: int) -> int:
    """Upper bound on ``log2(|n| + 1)``."""
    return int(math.ceil(math.log(abs(n) + 1) / math.log(2.0)))


def bit_length(k: int) -> int:
    """Bit length of ``k`` excluding the sign, matching two's complement for negatives."""
    return k.bit_length() if k >= 0 else (~k).bit_length()
