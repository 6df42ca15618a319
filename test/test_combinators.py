"""
Tests de Combinadores de Señales
=================================
"""

from src.logic.combinators import combine_results, exclude, intersect, union
from src.logic.detectors import DetectorResult


def test_intersect_keeps_primary_order():
    assert intersect(["C", "A", "B"], ["A", "B", "X"]) == ["A", "B"]
    assert intersect([], ["A"]) == []


def test_exclude_removes_members():
    assert exclude(["A", "B", "C", "D"], ["B", "D"]) == ["A", "C"]
    assert exclude(["A"], []) == ["A"]


def test_union_appends_new_members():
    assert union(["A", "B"], ["B", "C", "A", "D"]) == ["A", "B", "C", "D"]


def test_combine_results_success():
    rise = DetectorResult.success("rise", ["A", "B", "C"])
    green = DetectorResult.success("green", ["C", "A"])

    combined = combine_results("rise_and_green", rise, green)

    assert combined.ok
    assert combined.name == "rise_and_green"
    assert combined.symbols == ["A", "C"]


def test_combine_results_exclusion():
    earlier = DetectorResult.success("gc10", ["A", "B", "C"])
    recent = DetectorResult.success("gc3", ["B"])

    assert combine_results("gc_earlier", earlier, recent, exclude).symbols == ["A", "C"]


def test_combine_results_propagates_failure():
    ok = DetectorResult.success("green", ["A"])
    broken = DetectorResult.failure("rise", "boom")

    combined = combine_results("rise_and_green", broken, ok)

    assert not combined.ok
    assert combined.symbols == []
    assert "rise: boom" in combined.error
