#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Human-readable rendering of requirement trees."""

from __future__ import annotations
from typing import List, Optional

from prereq_graph.processing.requirements import CourseParsedRequirements, Requirement

# (minimum percentage, letter)
GRADE_SCALE = [
    (85, "A"), (80, "A-"), (77, "B+"), (73, "B"), (70, "B-"), (67, "C+"),
    (64, "C"), (60, "C-"), (57, "D+"), (53, "D"), (50, "D-"),
]

SECTION_TITLES = [
    ("prerequisites", "Prerequisite"),
    ("corequisites", "Corequisite"),
    ("recommendedPrerequisites", "Recommended Prerequisite"),
    ("recommendedCorequisites", "Recommended Corequisite"),
]

def letter_grade(pct: float) -> str:
    for minimum, letter in GRADE_SCALE:
        if pct >= minimum:
            return letter
    return "F"

def _join(value) -> str:
    return ", ".join(value) if isinstance(value, list) else str(value)

def _amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)

def _qualifiers(node: Requirement) -> str:
    text = ""
    if node.department:
        text += f" in {_join(node.department)}"
    if node.level:
        text += f" (level {_join(node.level)})"
    if node.minGrade:
        text += f' (minimum "{letter_grade(node.minGrade)}")'
    return text

def format_requirement(node: Requirement, indent: int = 0) -> str:
    spaces = "  " * indent

    if node.type == "group":
        lines = [f"{spaces}Group ({node.logic}):"]
        lines += [format_requirement(child, indent + 1) for child in node.children]
        return "\n".join(lines)

    if node.type == "course":
        text = f"{spaces}{node.course}"
        if node.minGrade:
            text += f' (minimum "{letter_grade(node.minGrade)}")'
        if node.canBeTakenConcurrently:
            text += " (can be concurrent)"
        if node.mustBeTakenConcurrently:
            text += " (must be concurrent)"
        return text

    if node.type == "credit_count":
        return f"{spaces}{_amount(node.credits)} credits{_qualifiers(node)}"
    if node.type == "course_count":
        return f"{spaces}{_amount(node.count)} courses{_qualifiers(node)}"
    if node.type == "standing":
        return f"{spaces}Standing: {node.standing}"
    if node.type == "program":
        return f"{spaces}Program: {node.program}"
    if node.type == "permission":
        return f"{spaces}Permission: {node.note}"
    return f"{spaces}Other: {node.note}"

def format_parsed_requirements(parsed: CourseParsedRequirements, indent: int = 0) -> str:
    spaces = "  " * indent
    sections: List[str] = []
    for field, title in SECTION_TITLES:
        tree: Optional[Requirement] = getattr(parsed, field)
        if tree is not None:
            sections.append(f"{spaces}{title}:\n{format_requirement(tree, indent)}")
    return "\n".join(sections)
