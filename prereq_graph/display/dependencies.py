#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Extract (course, weight) pairs from a requirement tree.

Weight reflects how strongly a course is needed:
- ALL_OF: every child is mandatory, each gets the full weight
- ONE_OF: children are alternatives, the weight is split evenly
- TWO_OF: two picks are needed, the weight is doubled then split
"""

from __future__ import annotations
from typing import List, NamedTuple

from prereq_graph.processing.requirements import Requirement

class Dependency(NamedTuple):
    course: str
    weight: float

def child_weight(logic: str, weight: float, n_children: int) -> float:
    if logic == "ONE_OF":
        return weight / n_children
    if logic == "TWO_OF":
        return (weight * 2) / n_children
    return weight

def extract_dependencies(node: Requirement, base_weight: float = 1.0) -> List[Dependency]:
    """Course leaves of ``node`` in document order, each with its weight."""
    found: List[Dependency] = []
    _collect(node, base_weight, found)
    return found

def _collect(node: Requirement, weight: float, found: List[Dependency]) -> None:
    if node.type == "course":
        found.append(Dependency(node.course, weight))
    elif node.type == "group":
        weight = child_weight(node.logic, weight, len(node.children))
        for child in node.children:
            _collect(child, weight, found)
    # credit_count, course_count, standing, program, permission, other name no course
