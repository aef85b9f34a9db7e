"""Global test configuration and shared fixtures.

Seeds RNGs for deterministic behaviour, clears the process-wide stop flag and
restores global configuration around every test, and provides an mpmath
oracle for checking approximations.
"""

import os
import random
from pathlib import Path

import mpmath
import numpy as np
import pytest

from exactreal import EvaluationConfig, PrecisionConfig, reset_stop


def pytest_sessionstart(session: pytest.Session) -> None:
    """Seed common RNGs to improve test determinism."""
    seed = int(os.environ.get("EXACTREAL_TEST_SEED", "12345"))
    random.seed(seed)
    np.random.seed(seed)


@pytest.fixture(autouse=True)
def _isolated_globals():
    """Every test starts without a pending stop request and with default settings."""
    reset_stop()
    saved = EvaluationConfig.snapshot()
    saved_mode = PrecisionConfig.get_precision()
    yield
    reset_stop()
    EvaluationConfig.apply(**saved)
    PrecisionConfig.set_precision(saved_mode)


class Oracle:
    """High-precision reference values for approximation checks."""

    def __init__(self, dps: int = 400):
        self.dps = dps

    def appr(self, value, precision: int) -> mpmath.mpf:
        """``value / 2**precision`` computed with mpmath."""
        with mpmath.workdps(self.dps):
            return mpmath.mpf(value) * mpmath.power(2, -precision)

    def within_one_ulp(self, appr: int, value_fn, precision: int) -> bool:
        """True if ``|value - appr * 2**precision| < 2**precision``."""
        with mpmath.workdps(self.dps):
            exact = value_fn() * mpmath.power(2, -precision)
            return abs(exact - appr) < 1


@pytest.fixture
def oracle() -> Oracle:
    return Oracle()


def pytest_collection_modifyitems(session: pytest.Session, config: pytest.Config, items: list) -> None:
    """Auto-mark tests under tests/property with the 'property' marker.

    CI selects property tests via `-m property`. Some tests in tests/property
    don't explicitly carry the marker, so ensure they are selectable.
    """
    for item in items:
        p = Path(str(item.fspath))
        if "property" in p.parts and "tests" in p.parts:
            item.add_marker(pytest.mark.property)
