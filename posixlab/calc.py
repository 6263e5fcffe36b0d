"""Four integer arithmetic helpers and a small demonstration command."""

from __future__ import annotations

import math
from collections.abc import Sequence


def add(a: int, b: int) -> int:
    """Return the sum of two integers."""
    return a + b


def subtract(a: int, b: int) -> int:
    """Return the difference of two integers."""
    return a - b


def multiply(a: int, b: int) -> int:
    """Return the product of two integers."""
    return a * b


def divide(a: int, b: int) -> float:
    """Return a / b as a float.

    Division by zero follows floating-point rules: a signed infinity,
    or NaN when both operands are zero.
    """
    if b == 0:
        if a == 0:
            return math.nan
        return math.copysign(math.inf, a)
    return a / b


def main(argv: Sequence[str] | None = None) -> int:
    """Print the results of the four operations on 20 and 12."""
    a, b = 20, 12
    print(f"a = {a}, b = {b}")
    print(f"a + b = {add(a, b)}")
    print(f"a - b = {subtract(a, b)}")
    print(f"a * b = {multiply(a, b)}")
    print(f"a / b = {divide(a, b):f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())