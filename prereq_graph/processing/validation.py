#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Schema validation for model-produced course requirements.

The candidate comes straight from a text-generation model, so it is checked
field by field before it is trusted. The first failure wins and its reason is
qualified with the path to the failing subtree, e.g.

    Invalid prerequisites: Invalid child at index 1: minGrade must be a number between 0 and 100

A candidate that passes is converted into the typed ``CourseParsedRequirements``
model.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional
import math

from pydantic import ValidationError

from prereq_graph.processing.requirements import (
    COURSE_LEVELS,
    GROUP_LOGICS,
    REQUIREMENT_FIELDS,
    STANDINGS,
    CourseParsedRequirements,
)

class StructuralError(ValueError):
    """A candidate does not conform to the requirement grammar."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None
    record: Optional[CourseParsedRequirements] = None

    @classmethod
    def ok(cls, record: Optional[CourseParsedRequirements] = None) -> "ValidationResult":
        return cls(is_valid=True, record=record)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult":
        return cls(is_valid=False, error=error)

_OK = ValidationResult.ok()

# -------------------------
# Value checks
# -------------------------

_MISSING = object()

def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid count or grade
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        # JSON integers are unbounded, floats are not
        return False

def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())

def _check_min_grade(req: Mapping[str, Any]) -> Optional[str]:
    grade = req.get("minGrade", _MISSING)
    if grade is _MISSING:
        return None
    if not _is_number(grade) or not 0 <= grade <= 100:
        return "minGrade must be a number between 0 and 100"
    return None

def _check_department(req: Mapping[str, Any]) -> Optional[str]:
    department = req.get("department", _MISSING)
    if department is _MISSING or isinstance(department, str):
        return None
    if isinstance(department, list):
        if not department:
            return "department array must not be empty"
        if not all(isinstance(d, str) for d in department):
            return "department array must contain only strings"
        return None
    return "department must be a string or array of strings"

def _check_level(req: Mapping[str, Any]) -> Optional[str]:
    level = req.get("level", _MISSING)
    if level is _MISSING:
        return None
    if isinstance(level, str):
        if level not in COURSE_LEVELS:
            return "level must be one of: 100, 200, 300, 400"
        return None
    if isinstance(level, list):
        if not level:
            return "level array must not be empty"
        if not all(isinstance(l, str) and l in COURSE_LEVELS for l in level):
            return "level array must contain only valid levels: 100, 200, 300, 400"
        return None
    return "level must be a string or array of strings"

def _check_boolean(req: Mapping[str, Any], field: str) -> Optional[str]:
    value = req.get(field, _MISSING)
    if value is not _MISSING and not isinstance(value, bool):
        return f"{field} must be a boolean"
    return None

def _first_error(*errors: Optional[str]) -> ValidationResult:
    for error in errors:
        if error:
            return ValidationResult.fail(error)
    return _OK

# -------------------------
# Variant validators
# -------------------------

def _validate_group(req: Mapping[str, Any]) -> ValidationResult:
    if req.get("logic") not in GROUP_LOGICS:
        return ValidationResult.fail("Group must have logic field with value ALL_OF, ONE_OF, or TWO_OF")

    children = req.get("children")
    if not isinstance(children, list):
        return ValidationResult.fail("Group must have children array")
    if not children:
        return ValidationResult.fail("Group must have at least one child")

    for i, child in enumerate(children):
        result = validate_requirement(child)
        if not result.is_valid:
            return ValidationResult.fail(f"Invalid child at index {i}: {result.error}")
    return _OK

def _validate_course(req: Mapping[str, Any]) -> ValidationResult:
    if not _is_text(req.get("course")):
        return ValidationResult.fail("Course requirement must have a course field")
    return _first_error(
        _check_min_grade(req),
        _check_boolean(req, "canBeTakenConcurrently"),
        _check_boolean(req, "mustBeTakenConcurrently"),
    )

def _counted(field: str, label: str) -> Callable[[Mapping[str, Any]], ValidationResult]:
    def validate(req: Mapping[str, Any]) -> ValidationResult:
        amount = req.get(field)
        if not _is_number(amount) or amount <= 0:
            return ValidationResult.fail(f"{label} requirement must have a positive {field} field")
        return _first_error(_check_department(req), _check_level(req), _check_min_grade(req))
    return validate

def _validate_standing(req: Mapping[str, Any]) -> ValidationResult:
    if req.get("standing") not in STANDINGS:
        return ValidationResult.fail("Standing requirement must have a valid standing field")
    return _OK

def _described(field: str, label: str) -> Callable[[Mapping[str, Any]], ValidationResult]:
    def validate(req: Mapping[str, Any]) -> ValidationResult:
        if not _is_text(req.get(field)):
            return ValidationResult.fail(f"{label} requirement must have a {field} field")
        return _OK
    return validate

_VALIDATORS: Dict[str, Callable[[Mapping[str, Any]], ValidationResult]] = {
    "group": _validate_group,
    "course": _validate_course,
    "credit_count": _counted("credits", "Credit count"),
    "course_count": _counted("count", "Course count"),
    "standing": _validate_standing,
    "program": _described("program", "Program"),
    "permission": _described("note", "Permission"),
    "other": _described("note", "Other"),
}

# -------------------------
# Public API
# -------------------------

def validate_requirement(req: Any) -> ValidationResult:
    """Recursively validate one requirement subtree."""
    if not isinstance(req, Mapping):
        return ValidationResult.fail("Requirement must be an object")

    kind = req.get("type")
    if not isinstance(kind, str) or not kind:
        return ValidationResult.fail("Requirement must have a valid type field")

    validator = _VALIDATORS.get(kind)
    if validator is None:
        return ValidationResult.fail(f"Unknown requirement type: {kind}")
    return validator(req)

def validate_parsed_requirements(data: Any) -> ValidationResult:
    """
    Validate a full candidate record (department, code and up to four
    requirement trees). On success the result carries the typed record.
    """
    if not isinstance(data, Mapping):
        return ValidationResult.fail("Data must be an object")
    if not _is_text(data.get("department")):
        return ValidationResult.fail("Missing or invalid department field")
    if not _is_text(data.get("code")):
        return ValidationResult.fail("Missing or invalid code field")

    for field, label in REQUIREMENT_FIELDS:
        tree = data.get(field)
        if tree is None:
            continue
        result = validate_requirement(tree)
        if not result.is_valid:
            return ValidationResult.fail(f"Invalid {label}: {result.error}")

    try:
        record = CourseParsedRequirements.model_validate(dict(data))
    except ValidationError as e:
        return ValidationResult.fail(f"Validation error: {e}")
    return ValidationResult.ok(record)

def ensure_valid(data: Any) -> CourseParsedRequirements:
    """Like ``validate_parsed_requirements`` but raises ``StructuralError``."""
    result = validate_parsed_requirements(data)
    if not result.is_valid:
        raise StructuralError(result.error)
    return result.record
