import pytest

from posixlab import sorting

CASES = [
    [],
    [1],
    [12, 27, 55, 22, 67],
    [25, 47, 36, 80, 11],
    [5, 4, 3, 2, 1],
    [3, -1, 3, 0, -1, 2],
]


@pytest.mark.parametrize("values", CASES)
def test_bubble_sort_orders_values(values):
    assert sorting.bubble_sort(values) == sorted(values)


@pytest.mark.parametrize("values", CASES)
def test_select_sort_orders_values(values):
    assert sorting.select_sort(values) == sorted(values)


@pytest.mark.parametrize("sort", [sorting.bubble_sort, sorting.select_sort])
def test_input_is_not_modified(sort):
    original = [9, 1, 8, 2]
    data = list(original)
    sort(data)
    assert data == original


@pytest.mark.parametrize("sort", [sorting.bubble_sort, sorting.select_sort])
def test_sort_accepts_iterables(sort):
    assert sort(iter([3, 1, 2])) == sorted([3, 1, 2])