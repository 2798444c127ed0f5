#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Build the course dependency graph (nodes + weighted edges) from parsed records.

Edges point FROM the required course TO the course that requires it, e.g. if
CPSC 210 has CPSC 110 as a prerequisite the edge is CPSC 110 -> CPSC 210.
Corequisites hold both ways, so they produce an edge in each direction.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from prereq_graph.display.dependencies import extract_dependencies
from prereq_graph.display.depth import MAX_PASSES, DepthResolution, DepthTable, parsed_courses, relax_courses
from prereq_graph.processing.requirements import CourseSaveFile, course_department

logger = logging.getLogger(__name__)

@dataclass
class Node:
    id: str
    department: str
    size: int = 0   # in-degree
    depth: int = 0

@dataclass
class Edge:
    source: str
    target: str
    value: float

@dataclass
class CourseGraph:
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    resolution: Optional[DepthResolution] = None

EdgeMap = Dict[Tuple[str, str], Edge]

def ensure_node(nodes: Dict[str, Node], course_id: str, department: str, depths: DepthTable) -> Node:
    node = nodes.get(course_id)
    if node is None:
        node = nodes[course_id] = Node(id=course_id, department=department, depth=depths.get(course_id, 0))
    return node

def upsert_edge(edges: EdgeMap, source: str, target: str, value: float) -> bool:
    """Register source -> target. An existing edge is only replaced by a strictly larger value."""
    key = (source, target)
    current = edges.get(key)
    if current is not None and current.value >= value:
        return False
    edges[key] = Edge(source=source, target=target, value=value)
    return True

def assemble_graph(records: Iterable[CourseSaveFile], max_passes: int = MAX_PASSES) -> CourseGraph:
    records = list(records)
    courses = parsed_courses(records)
    logger.info("Processing %d parsed courses out of %d total courses", len(courses), len(records))

    resolution = relax_courses(courses, max_passes=max_passes)
    depths = resolution.depths

    nodes: Dict[str, Node] = {}
    edges: EdgeMap = {}

    for target_id, req in courses:
        ensure_node(nodes, target_id, req.department, depths)

        if req.prerequisites is not None:
            for prereq_id, value in extract_dependencies(req.prerequisites):
                ensure_node(nodes, prereq_id, course_department(prereq_id), depths)
                upsert_edge(edges, prereq_id, target_id, value)

        if req.corequisites is not None:
            for coreq_id, value in extract_dependencies(req.corequisites):
                ensure_node(nodes, coreq_id, course_department(coreq_id), depths)
                upsert_edge(edges, coreq_id, target_id, value)
                upsert_edge(edges, target_id, coreq_id, value)

    edge_list = list(edges.values())
    incoming = Counter(e.target for e in edge_list)
    linked = {e.source for e in edge_list} | {e.target for e in edge_list}

    kept = []
    for node in nodes.values():
        if node.id not in linked:
            continue
        node.size = incoming.get(node.id, 0)
        kept.append(node)

    return CourseGraph(nodes=kept, edges=edge_list, resolution=resolution)
