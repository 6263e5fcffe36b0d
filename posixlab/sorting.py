"""Bubble sort and selection sort, with a demonstration command."""

from __future__ import annotations

import argparse
from collections.abc import Iterable, Sequence

BUBBLE_INPUT = (12, 27, 55, 22, 67)
SELECT_INPUT = (25, 47, 36, 80, 11)


def bubble_sort(values: Iterable[int]) -> list[int]:
    """Return a new list holding the values in ascending order (bubble sort)."""
    items = list(values)
    for end in range(len(items) - 1, 0, -1):
        for j in range(end):
            if items[j] > items[j + 1]:
                items[j], items[j + 1] = items[j + 1], items[j]
    return items


def select_sort(values: Iterable[int]) -> list[int]:
    """Return a new list holding the values in ascending order (selection sort)."""
    items = list(values)
    for j in range(len(items) - 1):
        for i in range(j + 1, len(items)):
            if items[j] > items[i]:
                items[j], items[i] = items[i], items[j]
    return items


def _format(label: str, values: Iterable[int]) -> str:
    return label + "".join(f"{v} " for v in values)


def main(argv: Sequence[str] | None = None) -> int:
    """Sort two fixed arrays and print them."""
    parser = argparse.ArgumentParser(prog="sorting", description="sorting demonstration")
    parser.parse_args(argv)
    bubbled = bubble_sort(BUBBLE_INPUT)
    selected = select_sort(SELECT_INPUT)
    print(_format("冒泡排序之后的数组: ", bubbled))
    print("===================================")
    print(_format("选择排序之后的数组: ", selected))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())