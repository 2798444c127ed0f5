#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Export the course dependency graph as nodes/edges files for the frontend.

Usage:
  prereq-export --data data --out data --format csv
  prereq-export --format json --max-passes 20
"""

from __future__ import annotations
from collections import Counter
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Sequence
import argparse
import csv
import json
import sys

from prereq_graph.config import Settings, configure_logging
from prereq_graph.display.graph import CourseGraph, Edge, Node, assemble_graph
from prereq_graph.scraper.store import load_course_files

VALUE_DECIMALS = 2

def node_rows(nodes: Sequence[Node]) -> List[Dict[str, Any]]:
    return [asdict(n) for n in nodes]

def edge_rows(edges: Sequence[Edge]) -> List[Dict[str, Any]]:
    return [{**asdict(e), "value": round(e.value, VALUE_DECIMALS)} for e in edges]

def write_csv(rows: List[Dict[str, Any]], path: Path, columns: Sequence[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(columns), lineterminator="\n")
        writer.writeheader()
        writer.writerows(rows)

def write_json(rows: List[Dict[str, Any]], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(rows, f, indent=2, ensure_ascii=False)

def export_graph(graph: CourseGraph, out_dir: Path, fmt: str = "csv") -> List[Path]:
    nodes, edges = node_rows(graph.nodes), edge_rows(graph.edges)
    if fmt == "json":
        paths = [out_dir / "nodes.json", out_dir / "links.json"]
        write_json(nodes, paths[0])
        write_json(edges, paths[1])
    else:
        paths = [out_dir / "nodes.csv", out_dir / "links.csv"]
        write_csv(nodes, paths[0], [f.name for f in fields(Node)])
        write_csv(edges, paths[1], [f.name for f in fields(Edge)])
    return paths

def format_summary(graph: CourseGraph, top: int = 10) -> str:
    lines: List[str] = []

    departments = Counter(n.department for n in graph.nodes).most_common()
    lines.append("Node Statistics by Department:")
    for dept, count in departments[:top]:
        lines.append(f"   {dept}: {count} courses")
    if len(departments) > top:
        lines.append(f"   ... and {len(departments) - top} more departments")

    outgoing = Counter(e.source for e in graph.edges).most_common(top)
    lines.append("")
    lines.append(f"Top {top} Courses (Prerequisites for most courses):")
    for i, (course_id, count) in enumerate(outgoing, 1):
        lines.append(f"   {i}. {course_id} (prerequisite for {count} courses)")

    by_size = sorted(graph.nodes, key=lambda n: n.size, reverse=True)[:top]
    lines.append("")
    lines.append(f"Top {top} Courses (Most prerequisites required):")
    for i, node in enumerate(by_size, 1):
        lines.append(f"   {i}. {node.id} ({node.size} prerequisites, depth {node.depth})")

    lines.append("")
    lines.append("Prerequisite Depth Distribution:")
    for depth, count in sorted(Counter(n.depth for n in graph.nodes).items()):
        lines.append(f"   Depth {depth}: {count} courses")

    deepest = sorted((n for n in graph.nodes if n.depth > 0), key=lambda n: n.depth, reverse=True)[:5]
    if deepest:
        lines.append("")
        lines.append("Top 5 Deepest Courses:")
        for i, node in enumerate(deepest, 1):
            lines.append(f"   {i}. {node.id} (depth {node.depth}, {node.size} prerequisites)")

    resolution = graph.resolution
    if resolution is not None and not resolution.converged:
        lines.append("")
        lines.append(f"WARNING: depths did not settle after {resolution.passes} passes; "
                     f"still growing: {', '.join(sorted(resolution.unstable))}")

    return "\n".join(lines)

# -------------------------
# CLI
# -------------------------

def parse_args(argv=None):
    settings = Settings.from_env()
    ap = argparse.ArgumentParser(description="Export the prerequisite graph as nodes/links files.")
    ap.add_argument("--data", dest="data_dir", default=str(settings.data_dir), help="Data directory holding courses/")
    ap.add_argument("--out", dest="out_dir", default=None, help="Output directory (default: the data directory)")
    ap.add_argument("--format", dest="fmt", choices=["csv", "json"], default="csv")
    ap.add_argument("--max-passes", dest="max_passes", type=int, default=settings.max_depth_passes,
                    help="Ceiling on depth relaxation passes")
    return ap.parse_args(argv)

def main(argv=None):
    args = parse_args(argv)
    configure_logging()
    data_dir = Path(args.data_dir)
    courses_dir = data_dir / "courses"

    if not courses_dir.exists():
        print(f"Error: courses directory not found: {courses_dir}", file=sys.stderr)
        return 1

    print("Loading course data...")
    records = [record for _, record in load_course_files(courses_dir)]
    print(f"Loaded {len(records)} courses")

    print("Generating nodes and links...")
    graph = assemble_graph(records, max_passes=args.max_passes)
    print(f"Generated {len(graph.nodes)} nodes and {len(graph.edges)} links")

    for path in export_graph(graph, Path(args.out_dir or data_dir), args.fmt):
        print(f"Saved {path}")

    print()
    print(format_summary(graph))
    return 0

if __name__ == "__main__":
    sys.exit(main())
