# MIT License
# See LICENSE file in the project root for full license text.
"""
exactreal: exact, demand-driven real arithmetic.

A constructive real (``CR``) is evaluated to whatever precision is asked of
it, with an error below one unit in the last place and without accumulating
rounding error across chained operations. ``UnifiedReal`` pairs a CR with an
exact rational factor so that results stay exact, and comparable, whenever
the algebra allows.
"""

import logging

__version__ = "0.1.0"
__author__ = "exactreal developers"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Keep top-level import lightweight: the engine and the unified layer only.
# The background evaluation helper is available as `exactreal.utils`.

from .core import (
    CR,
    AbortedComputationError,
    ArithmeticDomainError,
    BoundedRational,
    CancellationToken,
    DivisionByZeroError,
    EvaluationConfig,
    ExactRealError,
    FormatError,
    NamedConstant,
    PrecisionConfig,
    PrecisionMode,
    PrecisionOverflowError,
    ScientificRep,
    cancellation_scope,
    evaluation_context,
    please_stop,
    precision_context,
    reset_stop,
)
from .unified import UnifiedReal

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Core types
    "CR",
    "ScientificRep",
    "NamedConstant",
    "BoundedRational",
    "UnifiedReal",
    # Errors
    "ExactRealError",
    "PrecisionOverflowError",
    "AbortedComputationError",
    "ArithmeticDomainError",
    "DivisionByZeroError",
    "FormatError",
    # Configuration
    "EvaluationConfig",
    "evaluation_context",
    "PrecisionConfig",
    "PrecisionMode",
    "precision_context",
    # Cancellation
    "CancellationToken",
    "cancellation_scope",
    "please_stop",
    "reset_stop",
    # Submodules (exposed lazily via __getattr__)
    "utils",
]


def __getattr__(name):  # Lazy import submodules on demand
    if name in {"utils"}:
        import importlib

        return importlib.import_module(f"{__name__}.{name}")
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
