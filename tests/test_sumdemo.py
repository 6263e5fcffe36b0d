import pytest

from posixlab import sumdemo


def test_triangular_of_small_values_is_zero():
    assert sumdemo.triangular(0) == 0
    assert sumdemo.triangular(1) == 0


@pytest.mark.parametrize("n", [1, 2, 5, 17, 100])
def test_triangular_step_adds_previous_index(n):
    assert sumdemo.triangular(n + 1) - sumdemo.triangular(n) == n


def test_report_lines_structure():
    lines = sumdemo.report_lines(3, 4, 1)
    assert lines[0] == "argc = 1"
    assert lines[1] == "a = 3, b = 4"
    assert lines[2] == "a + b = 7"
    assert lines[-1] == "THE END !!!"
    assert len(lines) == 4 + 2 * 3


def test_report_lines_res_values_match_triangular():
    lines = sumdemo.report_lines(6, 0, 3)
    body = lines[3:-1]
    indices = [int(line.split("= ")[1]) for line in body[0::2]]
    results = [int(line.split(": ")[1]) for line in body[1::2]]
    assert indices == list(range(6))
    assert results == [sumdemo.triangular(i) for i in indices]


def test_report_lines_negative_a_has_no_loop():
    lines = sumdemo.report_lines(-2, 5, 3)
    assert len(lines) == 4


def test_main_defaults_without_enough_arguments(capsys):
    assert sumdemo.main(["prog"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[1] == "a = 10, b = 30"
    assert lines == sumdemo.report_lines(10, 30, 1)


def test_main_parses_leading_integers(capsys):
    assert sumdemo.main(["prog", " 3x", "abc"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "argc = 3"
    assert lines[1] == "a = 3, b = 0"