"""Course prerequisite parsing, validation and dependency-graph building."""

from prereq_graph.display.dependencies import Dependency, extract_dependencies
from prereq_graph.display.depth import DepthResolution, relax_depths, resolve_depths
from prereq_graph.display.graph import CourseGraph, Edge, Node, assemble_graph
from prereq_graph.processing.requirements import CourseParsedRequirements, CourseSaveFile, Requirement
from prereq_graph.processing.validation import StructuralError, ValidationResult, ensure_valid, validate_parsed_requirements

__version__ = "0.1.0"
