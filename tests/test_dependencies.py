"""Tests for (course, weight) extraction from requirement trees."""

import pytest

from prereq_graph.display.dependencies import Dependency, extract_dependencies
from tests.builders import course, group, tree


def test_all_of_with_nested_one_of():
    req = tree(group("ALL_OF", course("A"), group("ONE_OF", course("B"), course("C"))))
    assert extract_dependencies(req) == [("A", 1.0), ("B", 0.5), ("C", 0.5)]


def test_two_of_doubles_then_splits():
    req = tree(group("TWO_OF", course("A"), course("B"), course("C"), course("D")))
    assert [d.weight for d in extract_dependencies(req)] == [0.5, 0.5, 0.5, 0.5]


def test_single_course_uses_base_weight():
    assert extract_dependencies(tree(course("CPSC 110")), base_weight=3) == [Dependency("CPSC 110", 3)]


def test_non_course_leaves_emit_nothing():
    req = tree(group(
        "ONE_OF",
        {"type": "credit_count", "credits": 6},
        {"type": "standing", "standing": "3rd"},
        {"type": "program", "program": "BSc"},
        {"type": "other", "note": "Chemistry 12"},
        course("CHEM 121"),
    ))
    # the weight is still split across all five children
    assert extract_dependencies(req) == [("CHEM 121", pytest.approx(0.2))]


def test_document_order_and_duplicates_kept():
    req = tree(group(
        "ALL_OF",
        group("ONE_OF", course("MATH 100"), course("MATH 180")),
        course("CPSC 110"),
        group("TWO_OF", course("MATH 100"), course("STAT 200")),
    ))
    found = extract_dependencies(req)
    assert [d.course for d in found] == ["MATH 100", "MATH 180", "CPSC 110", "MATH 100", "STAT 200"]
    assert [d.weight for d in found] == [0.5, 0.5, 1.0, 1.0, 1.0]


def test_weight_follows_ancestor_chain():
    req = tree(group("ONE_OF", group("ONE_OF", course("A"), course("B")), group("TWO_OF", course("C"), course("D"), course("E"), course("F"))))
    weights = dict(extract_dependencies(req))
    assert weights["A"] == pytest.approx(0.25)
    assert weights["C"] == pytest.approx(0.25)
