#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Prerequisite depth: how many levels of courses stand between a student and a course.

Depths depend on each other across courses, so they are resolved by
relaxation over a shared table: every course starts at 0 and each pass
recomputes all courses from the current table. Values only grow. Resolution
stops after a pass with no change, or at ``max_passes`` when the data keeps
growing (usually a prerequisite cycle). In that case the best-effort table is
returned with ``converged=False``.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple
import logging

from prereq_graph.processing.requirements import (
    CourseParsedRequirements,
    CourseSaveFile,
    Requirement,
)

logger = logging.getLogger(__name__)

MAX_PASSES = 10

DepthTable = Dict[str, int]
ParsedCourse = Tuple[str, CourseParsedRequirements]

@dataclass
class DepthResolution:
    depths: DepthTable
    passes: int
    converged: bool
    unstable: Set[str] = field(default_factory=set)

def requirement_depth(node: Requirement, depths: DepthTable) -> int:
    if node.type == "course":
        return depths.get(node.course, 0) + 1

    if node.type == "group":
        child_depths = [requirement_depth(child, depths) for child in node.children]
        child_depths = sorted(d for d in child_depths if d > 0)
        if not child_depths:
            return 0
        if node.logic == "ONE_OF":
            return child_depths[0]
        if node.logic == "TWO_OF":
            return child_depths[1] if len(child_depths) >= 2 else child_depths[0]
        return child_depths[-1]

    return 0

def course_depth(parsed: CourseParsedRequirements, depths: DepthTable) -> int:
    """Depth implied by a course's prerequisites and corequisites."""
    depth = 0
    for tree in (parsed.prerequisites, parsed.corequisites):
        if tree is not None:
            depth = max(depth, requirement_depth(tree, depths))
    return depth

def parsed_courses(records: Iterable[CourseSaveFile]) -> List[ParsedCourse]:
    """(course id, parsed requirements) for every successfully parsed record, in order."""
    return [
        (r.course, r.parsedRequirements)
        for r in records
        if r.status == "parsed" and r.parsedRequirements is not None
    ]

def run_pass(courses: List[ParsedCourse], depths: DepthTable) -> Set[str]:
    """One relaxation pass over ``depths`` (updated in place). Returns the ids that grew."""
    grown: Set[str] = set()
    for course_id, parsed in courses:
        depth = course_depth(parsed, depths)
        if depth > depths.get(course_id, 0):
            depths[course_id] = depth
            grown.add(course_id)
    return grown

def relax_courses(courses: List[ParsedCourse], max_passes: int = MAX_PASSES,
                  depths: Optional[DepthTable] = None) -> DepthResolution:
    depths = dict(depths) if depths else {}
    for course_id, _ in courses:
        depths.setdefault(course_id, 0)

    passes = 0
    grown: Set[str] = {course_id for course_id, _ in courses}
    while grown and passes < max_passes:
        passes += 1
        grown = run_pass(courses, depths)

    converged = not grown
    if not converged:
        logger.warning(
            "Depth resolution did not converge after %d passes; %d courses still growing",
            passes, len(grown),
        )
    return DepthResolution(depths=depths, passes=passes, converged=converged,
                           unstable=set() if converged else grown)

def relax_depths(records: Iterable[CourseSaveFile], max_passes: int = MAX_PASSES) -> DepthResolution:
    return relax_courses(parsed_courses(records), max_passes=max_passes)

def resolve_depths(records: Iterable[CourseSaveFile], max_passes: int = MAX_PASSES) -> DepthTable:
    return relax_depths(records, max_passes=max_passes).depths
