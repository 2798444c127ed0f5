#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Aggregate parsing statistics over the course record files.

Usage:
  prereq-stats --data data
"""

from __future__ import annotations
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List
import argparse
import sys

from prereq_graph.config import Settings, configure_logging
from prereq_graph.processing.requirements import CourseSaveFile, Requirement
from prereq_graph.scraper.store import load_course_files

STATUSES = ("parsed", "unparsed", "blacklisted", "error")

# checked in order, first keyword found in the message wins
ERROR_TYPES = [
    ("validation", "Validation Error"),
    ("schema", "Schema Error"),
    ("JSON", "JSON Parse Error"),
    ("prerequisites", "Prerequisites Error"),
    ("corequisites", "Corequisites Error"),
]

@dataclass
class Stats:
    total: int = 0
    status_counts: Counter = field(default_factory=Counter)
    department_counts: Counter = field(default_factory=Counter)
    department_stats: Dict[str, Counter] = field(default_factory=lambda: defaultdict(Counter))

    courses_with_prerequisites: int = 0
    courses_with_corequisites: int = 0
    courses_with_recommended_prereq: int = 0
    courses_with_recommended_coreq: int = 0
    courses_with_no_requirements: int = 0

    requirement_types: Counter = field(default_factory=Counter)
    max_requirement_depth: int = 0
    average_requirement_depth: float = 0.0

    error_types: Counter = field(default_factory=Counter)
    blacklist_reasons: Counter = field(default_factory=Counter)

def error_type(message: str) -> str:
    for keyword, label in ERROR_TYPES:
        if keyword in message:
            return label
    return "Other Error"

def nesting_depth(node: Requirement) -> int:
    """Structural depth of a tree: a leaf is 1, a group is one more than its deepest child."""
    if node.type == "group":
        return 1 + max(nesting_depth(child) for child in node.children)
    return 1

def count_requirement_types(node: Requirement, counts: Counter) -> None:
    counts[node.type] += 1
    if node.type == "group":
        for child in node.children:
            count_requirement_types(child, counts)

def generate_stats(records: Iterable[CourseSaveFile]) -> Stats:
    stats = Stats()
    depths: List[int] = []

    for record in records:
        stats.total += 1
        dept = record.department
        stats.department_counts[dept] += 1
        stats.department_stats[dept]["total"] += 1
        stats.status_counts[record.status] += 1
        stats.department_stats[dept][record.status] += 1

        if record.status == "blacklisted" and record.blacklistReason:
            stats.blacklist_reasons[record.blacklistReason] += 1
        elif record.status == "error" and record.errorMessage:
            stats.error_types[error_type(record.errorMessage)] += 1

        req = record.parsedRequirements
        if record.status != "parsed" or req is None:
            continue

        for tree in (req.prerequisites, req.corequisites):
            if tree is not None:
                depths.append(nesting_depth(tree))
        for tree in (req.prerequisites, req.corequisites, req.recommendedPrerequisites, req.recommendedCorequisites):
            if tree is not None:
                count_requirement_types(tree, stats.requirement_types)

        stats.courses_with_prerequisites += req.prerequisites is not None
        stats.courses_with_corequisites += req.corequisites is not None
        stats.courses_with_recommended_prereq += req.recommendedPrerequisites is not None
        stats.courses_with_recommended_coreq += req.recommendedCorequisites is not None
        if not req.has_requirements():
            stats.courses_with_no_requirements += 1

    if depths:
        stats.max_requirement_depth = max(depths)
        stats.average_requirement_depth = sum(depths) / len(depths)
    return stats

def _pct(part: int, whole: int) -> str:
    return f"{(part / whole * 100):.1f}%" if whole else "0.0%"

def format_stats(stats: Stats) -> str:
    lines = ["COURSE PREREQUISITES PARSING STATISTICS", "=" * 50, "", "OVERALL STATUS:"]
    lines.append(f"Total courses: {stats.total}")
    for status in STATUSES:
        count = stats.status_counts[status]
        lines.append(f"{status.capitalize()}: {count} ({_pct(count, stats.total)})")

    lines += ["", "REQUIREMENTS ANALYSIS:"]
    lines.append(f"Courses with prerequisites: {stats.courses_with_prerequisites}")
    lines.append(f"Courses with corequisites: {stats.courses_with_corequisites}")
    lines.append(f"Courses with recommended prerequisites: {stats.courses_with_recommended_prereq}")
    lines.append(f"Courses with recommended corequisites: {stats.courses_with_recommended_coreq}")
    lines.append(f"Courses with no requirements: {stats.courses_with_no_requirements}")

    lines += ["", "COMPLEXITY ANALYSIS:"]
    lines.append(f"Maximum requirement depth: {stats.max_requirement_depth}")
    lines.append(f"Average requirement depth: {stats.average_requirement_depth:.2f}")

    lines += ["", "REQUIREMENT TYPES:"]
    lines += [f"{kind}: {count}" for kind, count in stats.requirement_types.most_common()]

    lines += ["", "TOP DEPARTMENTS:"]
    lines += [f"{dept}: {count}" for dept, count in stats.department_counts.most_common(10)]

    if stats.error_types:
        lines += ["", "ERROR TYPES:"]
        lines += [f"{kind}: {count}" for kind, count in stats.error_types.most_common()]

    if stats.blacklist_reasons:
        lines += ["", "BLACKLIST REASONS (top 5):"]
        for reason, count in stats.blacklist_reasons.most_common(5):
            short = reason[:80] + ("..." if len(reason) > 80 else "")
            lines.append(f"{count}x: {short}")

    lines += ["", "DEPARTMENT BREAKDOWN (top 10):"]
    by_total = sorted(stats.department_stats.items(), key=lambda kv: kv[1]["total"], reverse=True)
    for dept, counts in by_total[:10]:
        lines.append(
            f"{dept:<8}: {counts['total']:>3} total, {counts['parsed']:>3} parsed "
            f"({_pct(counts['parsed'], counts['total'])}), "
            f"{counts['blacklisted']} blacklisted, {counts['error']} errors"
        )
    return "\n".join(lines)

def main(argv=None):
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="Print parsing statistics for the course record files")
    parser.add_argument("--data", dest="data_dir", default=str(settings.data_dir), help="Data directory")
    args = parser.parse_args(argv)
    configure_logging()

    courses_dir = Path(args.data_dir) / "courses"
    if not courses_dir.exists():
        print(f"Error: courses directory not found: {courses_dir}", file=sys.stderr)
        return 1

    records = [record for _, record in load_course_files(courses_dir)]
    print(f"Analyzing {len(records)} course files...\n")
    print(format_stats(generate_stats(records)))
    return 0

if __name__ == "__main__":
    sys.exit(main())
