"""A small command that adds two numbers and prints running sums."""

from __future__ import annotations

import re
import sys
from collections.abc import Sequence

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def triangular(n: int) -> int:
    """Return the sum of all integers from 0 up to but not including n."""
    return sum(range(n))


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def report_lines(a: int, b: int, argc: int) -> list[str]:
    """Return the lines the command prints for the given operands."""
    lines = [f"argc = {argc}", f"a = {a}, b = {b}", f"a + b = {a + b}"]
    for i in range(a):
        lines.append(f"i = {i}")
        lines.append(f"res value: {triangular(i)}")
    lines.append("THE END !!!")
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    """Read two integers from the arguments (default 10 and 30) and report."""
    args = list(sys.argv if argv is None else argv)
    if len(args) < 3:
        a, b = 10, 30
    else:
        a, b = _atoi(args[1]), _atoi(args[2])
    for line in report_lines(a, b, len(args)):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())