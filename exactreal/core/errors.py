"""
Exception hierarchy for exact real arithmetic.

    ExactRealError
    ├── PrecisionOverflowError   runaway precision demand
    ├── AbortedComputationError  cooperative cancellation observed
    ├── ArithmeticDomainError    ln/sqrt/asin/pow/fact outside their domain
    │   └── DivisionByZeroError
    └── FormatError              malformed numeric text

None of these are retried internally. A PrecisionOverflowError usually means
a division by zero or a comparison of two equal values that could not be
recognised as equal.
"""


class ExactRealError(Exception):
    """Base class for all errors raised by exactreal."""


class PrecisionOverflowError(ExactRealError, ArithmeticError):
    """A requested or derived precision left the supported range."""

    def __init__(self, message: str = "precision overflow"):
        super().__init__(message)


class AbortedComputationError(ExactRealError, RuntimeError):
    """Evaluation was cancelled before it completed."""

    def __init__(self, message: str = "computation aborted"):
        super().__init__(message)


class ArithmeticDomainError(ExactRealError, ArithmeticError):
    """An operation was applied outside its mathematical domain."""


class DivisionByZeroError(ArithmeticDomainError, ZeroDivisionError):
    """Division by a value known to be exactly zero."""

    def __init__(self, message: str = "Division by zero"):
        super().__init__(message)


class FormatError(ExactRealError, ValueError):
    """Malformed textual number."""
