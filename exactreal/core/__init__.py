"""Constructive reals, bounded rationals and the evaluation machinery behind them."""

from .errors import (
    ExactRealError,
    PrecisionOverflowError,
    AbortedComputationError,
    ArithmeticDomainError,
    DivisionByZeroError,
    FormatError,
)

from .precision_config import (
    EvaluationConfig,
    PrecisionConfig,
    PrecisionMode,
    evaluation_context,
    precision_context,
)

from .cancellation import (
    CancellationToken,
    cancellation_scope,
    check_cancelled,
    please_stop,
    reset_stop,
    stop_requested,
)

from .scaling import MSD_UNKNOWN, check_prec, scale, shift

from .cr import CR, ScientificRep
from .dispatch import CRKind
from .constants import NamedConstant
from .bounded_rational import BoundedRational

__all__ = [
    # Types
    "CR",
    "CRKind",
    "ScientificRep",
    "NamedConstant",
    "BoundedRational",

    # Errors
    "ExactRealError",
    "PrecisionOverflowError",
    "AbortedComputationError",
    "ArithmeticDomainError",
    "DivisionByZeroError",
    "FormatError",

    # Configuration
    "EvaluationConfig",
    "PrecisionConfig",
    "PrecisionMode",
    "evaluation_context",
    "precision_context",

    # Cancellation
    "CancellationToken",
    "cancellation_scope",
    "check_cancelled",
    "please_stop",
    "reset_stop",
    "stop_requested",

    # Scaled integers
    "MSD_UNKNOWN",
    "check_prec",
    "scale",
    "shift",
]
