"""Utilities for running exact real computations."""

from .evaluation import (
    EvaluationTask,
    TaskStatus,
    default_executor,
    evaluate_async,
    shutdown,
)

__all__ = [
    "EvaluationTask",
    "TaskStatus",
    "default_executor",
    "evaluate_async",
    "shutdown",
]
