"""
Tests for requirement schema validation.

Covers the top-level record checks, every requirement variant and the
path-qualified failure messages.
"""

import json

import pytest

from prereq_graph.processing.requirements import RequirementCourse, RequirementGroup
from prereq_graph.processing.validation import (
    StructuralError,
    ensure_valid,
    validate_parsed_requirements,
    validate_requirement,
)
from tests.builders import course, group


def record(**trees):
    return {"department": "CPSC", "code": "210", **trees}


def test_valid_record_returns_typed_model():
    result = validate_parsed_requirements(record(
        prerequisites=group("ALL_OF", course("CPSC 110", minGrade=64), group("ONE_OF", course("MATH 100"), course("MATH 180"))),
        corequisites=course("CPSC 121", canBeTakenConcurrently=True),
    ))

    assert result.is_valid
    assert result.error is None
    assert isinstance(result.record.prerequisites, RequirementGroup)
    assert isinstance(result.record.corequisites, RequirementCourse)
    assert result.record.prerequisites.children[0].minGrade == 64


def test_record_without_requirement_trees_is_valid():
    result = validate_parsed_requirements(record())
    assert result.is_valid
    assert not result.record.has_requirements()


def test_null_trees_are_skipped():
    assert validate_parsed_requirements(record(prerequisites=None, corequisites=None)).is_valid


@pytest.mark.parametrize("data", [None, [], "CPSC 210", 42])
def test_non_object_record_rejected(data):
    assert validate_parsed_requirements(data).error == "Data must be an object"


def test_missing_department_and_code():
    assert validate_parsed_requirements({"code": "210"}).error == "Missing or invalid department field"
    assert validate_parsed_requirements({"department": "", "code": "210"}).error == "Missing or invalid department field"
    assert validate_parsed_requirements({"department": "CPSC", "code": 210}).error == "Missing or invalid code field"


def test_empty_group_rejected():
    result = validate_parsed_requirements(record(prerequisites=group("ALL_OF")))
    assert not result.is_valid
    assert result.error == "Invalid prerequisites: Group must have at least one child"


def test_group_logic_and_children_shape():
    bad_logic = {"type": "group", "logic": "THREE_OF", "children": [course("A 1")]}
    assert validate_requirement(bad_logic).error == "Group must have logic field with value ALL_OF, ONE_OF, or TWO_OF"

    no_children = {"type": "group", "logic": "ONE_OF", "children": "A 1"}
    assert validate_requirement(no_children).error == "Group must have children array"


def test_failing_child_reports_index_path():
    tree = group("ALL_OF", course("CPSC 110"), group("ONE_OF", {"type": "course"}, course("MATH 100")))
    result = validate_parsed_requirements(record(prerequisites=tree))
    assert result.error == (
        "Invalid prerequisites: Invalid child at index 1: "
        "Invalid child at index 0: Course requirement must have a course field"
    )


def test_first_failing_child_wins():
    tree = group("ONE_OF", course("A 1"), {"type": "standing", "standing": "5th"}, {"type": "bogus"})
    assert validate_requirement(tree).error == (
        "Invalid child at index 1: Standing requirement must have a valid standing field"
    )


@pytest.mark.parametrize("field,label", [
    ("prerequisites", "prerequisites"),
    ("corequisites", "corequisites"),
    ("recommendedPrerequisites", "recommended prerequisites"),
    ("recommendedCorequisites", "recommended corequisites"),
])
def test_error_prefix_names_the_tree(field, label):
    result = validate_parsed_requirements(record(**{field: {"type": "wizardry"}}))
    assert result.error == f"Invalid {label}: Unknown requirement type: wizardry"


def test_requirement_must_be_object_with_type():
    assert validate_requirement("CPSC 110").error == "Requirement must be an object"
    assert validate_requirement({"course": "CPSC 110"}).error == "Requirement must have a valid type field"
    assert validate_requirement({"type": 3}).error == "Requirement must have a valid type field"


@pytest.mark.parametrize("grade", [0, 100, 64, 72.5])
def test_min_grade_in_range_accepted(grade):
    assert validate_requirement(course("CPSC 110", minGrade=grade)).is_valid


@pytest.mark.parametrize("grade", [-1, 101, "80", None, True, float("nan")])
def test_min_grade_out_of_range_rejected(grade):
    result = validate_requirement(course("CPSC 110", minGrade=grade))
    assert result.error == "minGrade must be a number between 0 and 100"


def test_concurrency_flags_must_be_booleans():
    assert validate_requirement(course("A 1", canBeTakenConcurrently="yes")).error == (
        "canBeTakenConcurrently must be a boolean"
    )
    assert validate_requirement(course("A 1", mustBeTakenConcurrently=1)).error == (
        "mustBeTakenConcurrently must be a boolean"
    )


def test_credit_count_rules():
    ok = {"type": "credit_count", "credits": 6, "department": ["CPSC", "MATH"], "level": ["300", "400"], "minGrade": 60}
    assert validate_requirement(ok).is_valid

    assert validate_requirement({"type": "credit_count", "credits": 0}).error == (
        "Credit count requirement must have a positive credits field"
    )
    assert validate_requirement({"type": "credit_count", "credits": True}).error == (
        "Credit count requirement must have a positive credits field"
    )
    assert validate_requirement({"type": "credit_count", "credits": 3, "department": 5}).error == (
        "department must be a string or array of strings"
    )
    assert validate_requirement({"type": "credit_count", "credits": 3, "department": ["CPSC", 5]}).error == (
        "department array must contain only strings"
    )
    assert validate_requirement({"type": "credit_count", "credits": 3, "department": []}).error == (
        "department array must not be empty"
    )


def test_course_count_level_rules():
    assert validate_requirement({"type": "course_count", "count": 2, "level": "300"}).is_valid
    assert validate_requirement({"type": "course_count", "count": -2}).error == (
        "Course count requirement must have a positive count field"
    )
    assert validate_requirement({"type": "course_count", "count": 2, "level": "500"}).error == (
        "level must be one of: 100, 200, 300, 400"
    )
    assert validate_requirement({"type": "course_count", "count": 2, "level": ["300", 400]}).error == (
        "level array must contain only valid levels: 100, 200, 300, 400"
    )
    assert validate_requirement({"type": "course_count", "count": 2, "level": []}).error == (
        "level array must not be empty"
    )
    assert validate_requirement({"type": "course_count", "count": 2, "level": 300}).error == (
        "level must be a string or array of strings"
    )


@pytest.mark.parametrize("standing", ["1st", "2nd", "3rd", "4th", "graduate"])
def test_standing_values(standing):
    assert validate_requirement({"type": "standing", "standing": standing}).is_valid


@pytest.mark.parametrize("req,message", [
    ({"type": "program", "program": ""}, "Program requirement must have a program field"),
    ({"type": "permission"}, "Permission requirement must have a note field"),
    ({"type": "other", "note": "   "}, "Other requirement must have a note field"),
])
def test_descriptive_variants_need_text(req, message):
    assert validate_requirement(req).error == message


def test_validity_is_compositional():
    leaves = [
        course("CPSC 110"),
        {"type": "credit_count", "credits": 3},
        {"type": "program", "program": "BSc Computer Science"},
        {"type": "permission", "note": "instructor"},
    ]
    valid_tree = group("ALL_OF", leaves[0], group("TWO_OF", *leaves[1:]))
    assert validate_requirement(valid_tree).is_valid
    for leaf in leaves:
        assert validate_requirement(leaf).is_valid

    broken = group("ALL_OF", leaves[0], group("TWO_OF", leaves[1], {"type": "other"}))
    assert not validate_requirement(broken).is_valid


def test_ensure_valid_raises_structural_error():
    with pytest.raises(StructuralError) as exc:
        ensure_valid(record(prerequisites=group("ONE_OF")))
    assert exc.value.reason == "Invalid prerequisites: Group must have at least one child"

    parsed = ensure_valid(record(prerequisites=course("CPSC 110")))
    assert parsed.prerequisites.course == "CPSC 110"


def test_numbers_beyond_float_range_are_rejected():
    assert validate_requirement(course("CPSC 110", minGrade=10 ** 400)).error == (
        "minGrade must be a number between 0 and 100"
    )

    data = json.loads('{"department": "CPSC", "code": "210", '
                      '"prerequisites": {"type": "credit_count", "credits": ' + "9" * 400 + '}}')
    result = validate_parsed_requirements(data)
    assert not result.is_valid
    assert result.error == "Invalid prerequisites: Credit count requirement must have a positive credits field"
