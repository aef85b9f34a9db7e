"""Basic usage example of the exactreal library.

This example demonstrates demand-driven evaluation of constructive reals
and how the unified layer keeps results exact.
"""

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import exactreal as er
from exactreal.core.constants import E, PI
from exactreal.utils import EvaluationTask


def demonstrate_constructive_reals():
    """Show evaluation of CR expressions to any precision."""
    print("=== Constructive Reals ===\n")

    third = er.CR.from_int(1).divide(er.CR.from_int(3))
    print(f"1/3 to 20 digits = {third.to_decimal_string(20)}")

    root2 = er.CR.from_int(2).sqrt()
    print(f"√2 to 40 digits = {root2.to_decimal_string(40)}")

    # Chained operations do not accumulate rounding error
    x = root2.multiply(root2).subtract(er.CR.from_int(2))
    print(f"√2·√2 - 2 = {x.to_decimal_string(30)}")

    print(f"\nπ = {PI.to_decimal_string(60)}")
    print(f"e = {E.to_decimal_string(60)}")
    print(f"π in hex = {PI.to_decimal_string(20, radix=16)}")

    rep = PI.multiply(er.CR.from_int(10 ** 6)).to_scientific_string(12)
    print(f"π·10^6 = {rep}")


def demonstrate_comparison():
    """Show tolerant and exact comparison."""
    print("\n=== Comparison ===\n")

    a = PI
    b = er.CR.from_int(355).divide(er.CR.from_int(113))
    print(f"π compared to 355/113: {a.compare_to(b)}")

    # Equal values need a tolerance, otherwise the comparison never ends
    c = er.CR.from_int(2).divide(er.CR.from_int(4))
    d = er.CR.from_int(1).shift_right(1)
    print(f"2/4 compared to 1/2 within 2^-100: {c.compare_to(d, -100)}")


def demonstrate_unified_reals():
    """Show exact results from the unified layer."""
    print("\n=== Unified Reals ===\n")

    U = er.UnifiedReal
    root2 = U(2).sqrt()
    print(f"√2 = {root2.to_nice_string()}")
    print(f"√2·√2 = {root2.multiply(root2).to_nice_string()}")
    print(f"√12 = {U(12).sqrt().to_nice_string()}")
    print(f"sin(π/6) = {U.PI.divide(U(6)).sin().to_nice_string()}")
    print(f"cos(π/4) = {U.PI.divide(U(4)).cos().to_nice_string()}")
    print(f"ln(8) = {U(8).ln().to_nice_string()}")
    print(f"exp(ln(8)) = {U(8).ln().exp().to_nice_string()}")
    print(f"2^(1/2) = {U(2).pow(U.HALF).to_nice_string()}")
    print(f"10! = {U(10).fact().to_nice_string()}")

    # Values without an exact form fall back to truncated digits
    print(f"\nπ + √2 = {U.PI.add(root2).to_string_truncated(25)}")
    print(f"π + √2 is irrational: {U.PI.add(root2).definitely_irrational()}")

    try:
        U.PI.divide(U(2)).tan()
    except er.ArithmeticDomainError as e:
        print(f"tan(π/2): {e}")


def demonstrate_background_evaluation():
    """Show cancellable evaluation on a worker thread."""
    print("\n=== Background Evaluation ===\n")

    task = EvaluationTask(PI.to_decimal_string, 2000)
    digits = task.result(timeout=30.0)
    print(f"π to 2000 digits ends in ...{digits[-20:]}")

    slow = EvaluationTask(PI.to_decimal_string, 2_000_000)
    try:
        slow.result(timeout=0.5)
    except er.AbortedComputationError:
        print(f"Cancelled after timeout: {slow.status.name}")


if __name__ == "__main__":
    print("exactreal: Exact Real Arithmetic Demo")
    print("=====================================\n")

    demonstrate_constructive_reals()
    demonstrate_comparison()
    demonstrate_unified_reals()
    demonstrate_background_evaluation()

    print("\n=====================================")
    print("No rounding error accumulates, however long the chain.")
