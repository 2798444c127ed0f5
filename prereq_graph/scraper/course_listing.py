#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Course listing client.
Downloads the course/prerequisite listing and seeds one record file per course.

Usage:
  prereq-fetch
  prereq-fetch --url https://example.org/course-prereqs.json --data data
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional
import argparse
import json
import logging
import sys

import requests

from prereq_graph.config import Settings, configure_logging
from prereq_graph.processing.requirements import CourseSaveFile
from prereq_graph.scraper.store import course_file_name, now_iso, save_course_file

logger = logging.getLogger(__name__)

def fetch_listing(url: str, session: Optional[requests.Session] = None, timeout: int = 30) -> List[Dict[str, Any]]:
    http = session or requests
    response = http.get(url, timeout=timeout)
    response.raise_for_status()
    data = response.json()
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array from {url}, got {type(data).__name__}")
    return data

def listing_code(entry: Dict[str, Any]) -> Optional[str]:
    return entry.get("course") or entry.get("code") or entry.get("id")

def record_from_listing(entry: Dict[str, Any]) -> Optional[CourseSaveFile]:
    code = listing_code(entry)
    if not code:
        return None
    prereq = entry.get("prer") or None
    coreq = entry.get("crer") or None
    return CourseSaveFile(
        course=code,
        originalPrerequisite=prereq,
        originalCorequisite=coreq,
        # nothing to parse when the catalog lists no requirement text
        status="parsed" if not prereq and not coreq else "unparsed",
        lastUpdated=now_iso(),
    )

def seed_course_files(listing: List[Dict[str, Any]], courses_dir: Path) -> int:
    """Write one record per listed course. Returns the number of files written."""
    count = 0
    for entry in listing:
        record = record_from_listing(entry)
        if record is None:
            logger.debug("Skipping listing entry without a course code: %s", entry)
            continue
        save_course_file(Path(courses_dir) / course_file_name(record.course), record)
        count += 1
    return count

def main(argv=None):
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="Fetch the course listing and create per-course record files")
    parser.add_argument("--url", default=settings.listing_url, help="Course listing URL")
    parser.add_argument("--data", dest="data_dir", default=str(settings.data_dir), help="Data directory")
    args = parser.parse_args(argv)
    configure_logging()

    data_dir = Path(args.data_dir)
    try:
        listing = fetch_listing(args.url)
    except (requests.RequestException, ValueError) as e:
        print(f"Error fetching {args.url}: {e}", file=sys.stderr)
        return 1

    raw_path = data_dir / "fetch" / "courses.json"
    raw_path.parent.mkdir(parents=True, exist_ok=True)
    with open(raw_path, "w", encoding="utf-8") as f:
        json.dump(listing, f, indent=2, ensure_ascii=False)
    print(f"Listing stored in {raw_path}")

    courses_dir = data_dir / "courses"
    count = seed_course_files(listing, courses_dir)
    print(f"Created {count} course files in {courses_dir}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
