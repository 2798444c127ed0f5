#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
One JSON file per course under ``<data>/courses``.

Files are the unit of work for the parser: each records the raw catalog text,
the parse status and, once parsed, the validated requirement trees.
"""

from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Tuple
import json
import logging
import re

from pydantic import ValidationError

from prereq_graph.processing.requirements import CourseSaveFile

logger = logging.getLogger(__name__)

_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9]")

def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

def course_file_name(code: str) -> str:
    """'CPSC 110' -> 'CPSC_110.json'"""
    return _UNSAFE_RE.sub("_", code) + ".json"

def load_course_file(path: Path) -> CourseSaveFile:
    with open(path, "r", encoding="utf-8") as f:
        return CourseSaveFile.model_validate_json(f.read())

def load_course_files(courses_dir: Path) -> List[Tuple[Path, CourseSaveFile]]:
    """Every readable record in ``courses_dir``, sorted by file name. Bad files are logged and skipped."""
    loaded = []
    for path in sorted(Path(courses_dir).glob("*.json")):
        try:
            loaded.append((path, load_course_file(path)))
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.error("Error reading %s: %s", path.name, e)
    return loaded

def dump_course_file(record: CourseSaveFile) -> dict:
    data = record.model_dump(mode="json", exclude_none=True)
    # raw text fields stay explicit so "no text" reads as null, not absent
    data.setdefault("originalPrerequisite", None)
    data.setdefault("originalCorequisite", None)
    return data

def save_course_file(path: Path, record: CourseSaveFile) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(dump_course_file(record), f, indent=2, ensure_ascii=False)
