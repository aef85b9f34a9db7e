"""
Global configuration for exactreal.

``EvaluationConfig`` holds the tunables of the approximation engine and the
unified-real layer. ``PrecisionConfig`` selects the numpy floating-point
format used when an exact value is exported as a float.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, Type, Union

import numpy as np


class EvaluationConfig:
    """
    Engine-wide evaluation parameters.

    slow_max_prec: coarsest precision an expensive node is ever evaluated at.
    slow_prec_incr: expensive nodes round requested precisions down to a
        multiple of this power of two, so repeated requests reuse the cache.
    compare_tolerance: absolute tolerance, in bits, used by the unified-real
        layer when it must decide comparability without risking divergence.
    rational_max_bits: size bound of a BoundedRational result (numerator plus
        denominator bits); larger results are reported as unavailable.
    recursive_pow_limit: largest |exponent| for which pow() uses repeated
        squaring rather than exp(n * ln(x)).
    display_guard_bits: extra bits used when producing truncated digit strings.
    """

    _slow_max_prec: int = -64
    _slow_prec_incr: int = 32
    _compare_tolerance: int = -1000
    _rational_max_bits: int = 10000
    _recursive_pow_limit: int = 1000
    _display_guard_bits: int = 10

    @classmethod
    def get_slow_max_prec(cls) -> int:
        return cls._slow_max_prec

    @classmethod
    def set_slow_max_prec(cls, value: int) -> None:
        if value > 0:
            raise ValueError(f"slow_max_prec must not be positive, got {value}")
        cls._slow_max_prec = int(value)

    @classmethod
    def get_slow_prec_incr(cls) -> int:
        return cls._slow_prec_incr

    @classmethod
    def set_slow_prec_incr(cls, value: int) -> None:
        if value < 1 or value & (value - 1):
            raise ValueError(f"slow_prec_incr must be a positive power of two, got {value}")
        cls._slow_prec_incr = int(value)

    @classmethod
    def get_compare_tolerance(cls) -> int:
        return cls._compare_tolerance

    @classmethod
    def set_compare_tolerance(cls, value: int) -> None:
        if value >= 0:
            raise ValueError(f"compare_tolerance must be negative, got {value}")
        cls._compare_tolerance = int(value)

    @classmethod
    def get_rational_max_bits(cls) -> int:
        return cls._rational_max_bits

    @classmethod
    def set_rational_max_bits(cls, value: int) -> None:
        if value < 64:
            raise ValueError(f"rational_max_bits must be at least 64, got {value}")
        cls._rational_max_bits = int(value)

    @classmethod
    def get_recursive_pow_limit(cls) -> int:
        return cls._recursive_pow_limit

    @classmethod
    def set_recursive_pow_limit(cls, value: int) -> None:
        if value < 1:
            raise ValueError(f"recursive_pow_limit must be positive, got {value}")
        cls._recursive_pow_limit = int(value)

    @classmethod
    def get_display_guard_bits(cls) -> int:
        return cls._display_guard_bits

    @classmethod
    def set_display_guard_bits(cls, value: int) -> None:
        if not 2 <= value <= 30:
            raise ValueError(f"display_guard_bits must be in [2, 30], got {value}")
        cls._display_guard_bits = int(value)

    @classmethod
    def snapshot(cls) -> Dict[str, Any]:
        return {name: getattr(cls, f"get_{name}")() for name in _EVALUATION_SETTINGS}

    @classmethod
    def apply(cls, **settings: Any) -> None:
        for name, value in settings.items():
            if name not in _EVALUATION_SETTINGS:
                raise ValueError(f"Unknown evaluation setting: {name}")
            getattr(cls, f"set_{name}")(value)


_EVALUATION_SETTINGS = (
    "slow_max_prec",
    "slow_prec_incr",
    "compare_tolerance",
    "rational_max_bits",
    "recursive_pow_limit",
    "display_guard_bits",
)


@contextmanager
def evaluation_context(**settings: Any) -> Iterator[None]:
    """
    Temporarily override evaluation settings.

    Example:
        with evaluation_context(compare_tolerance=-200):
            x.is_comparable(y)
    """
    saved = EvaluationConfig.snapshot()
    try:
        EvaluationConfig.apply(**settings)
        yield
    finally:
        EvaluationConfig.apply(**saved)


class PrecisionMode(Enum):
    """Floating-point formats an exact value can be exported to."""
    FLOAT16 = np.float16
    FLOAT32 = np.float32
    FLOAT64 = np.float64

    @property
    def numpy_dtype(self):
        """Get the numpy dtype for this precision."""
        return self.value

    @property
    def bits(self) -> int:
        """Get the number of bits for this precision."""
        return np.dtype(self.value).itemsize * 8


class PrecisionConfig:
    """
    Float export format.

    Exact values are converted to a Python float first (overflow gives a
    signed infinity) and then narrowed to the selected numpy format.
    """

    _default_mode: PrecisionMode = PrecisionMode.FLOAT64

    @classmethod
    def set_precision(cls, mode: Union[PrecisionMode, str]) -> None:
        """
        Set the default export format.

        Args:
            mode: PrecisionMode enum or string ('float16', 'float32', 'float64')

        Raises:
            ValueError: If mode is not supported
        """
        cls._default_mode = _resolve_mode(mode)

    @classmethod
    def get_precision(cls) -> PrecisionMode:
        return cls._default_mode

    @classmethod
    def get_dtype(cls) -> Type[np.floating]:
        return cls._default_mode.numpy_dtype

    @classmethod
    def narrow(cls, value: float, mode: Union[PrecisionMode, str, None] = None) -> np.floating:
        """Round a Python float to the requested (or default) format."""
        dtype = (cls._default_mode if mode is None else _resolve_mode(mode)).numpy_dtype
        with np.errstate(over="ignore"):
            return dtype(value)

    @classmethod
    def get_max(cls) -> float:
        return float(np.finfo(cls.get_dtype()).max)


def _resolve_mode(mode: Union[PrecisionMode, str]) -> PrecisionMode:
    if isinstance(mode, str):
        mode_map = {
            'float16': PrecisionMode.FLOAT16,
            'float32': PrecisionMode.FLOAT32,
            'float64': PrecisionMode.FLOAT64,
        }
        if mode not in mode_map:
            raise ValueError(f"Unsupported precision mode: {mode}")
        return mode_map[mode]
    if not isinstance(mode, PrecisionMode):
        raise ValueError(f"Invalid precision mode: {mode}")
    return mode


class precision_context:
    """
    Context manager for temporary export format changes.

    Example:
        with precision_context('float32'):
            x.to_float()
    """

    def __init__(self, mode: Union[PrecisionMode, str]):
        self.new_mode = mode
        self.old_mode = None

    def __enter__(self):
        self.old_mode = PrecisionConfig.get_precision()
        PrecisionConfig.set_precision(self.new_mode)
        return self

    def __exit__(self, _exc_type, _exc_val, _exc_tb):
        PrecisionConfig.set_precision(self.old_mode)
