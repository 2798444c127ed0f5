#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Parse raw prerequisite/corequisite text into requirement trees with an Ollama model.

Each record file moves through:
  unparsed -> parsed        (model answered and the answer passed validation)
  unparsed -> blacklisted   (model says the text cannot be represented)
  unparsed -> error         (model answered but the answer failed validation)
Records in ``error`` are retried on the next run; everything else is skipped.

Usage:
  prereq-parse
  prereq-parse --data data --model qwen2.5:14b-instruct --workers 3

Requires:
  pip install ollama pydantic
"""

from __future__ import annotations
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional
import argparse
import json
import logging
import re
import sys
import threading

import ollama
from pydantic import BaseModel, Field, ValidationError

from prereq_graph.config import Settings, configure_logging
from prereq_graph.display.pretty import format_parsed_requirements
from prereq_graph.processing.requirements import CourseParsedRequirements, CourseSaveFile
from prereq_graph.processing.validation import StructuralError, ensure_valid
from prereq_graph.scraper.store import load_course_files, now_iso, save_course_file

logger = logging.getLogger(__name__)

ChatFn = Callable[..., Any]

class LLMResponseError(RuntimeError):
    """The model reply could not be read as a JSON object."""

class ParseResponse(BaseModel):
    """Envelope the model must answer with."""
    success: bool
    parsedRequirements: Optional[Any] = None
    error: Optional[str] = Field(default=None, description="Why the text cannot be represented")

@dataclass
class LLMResult:
    is_error: bool
    error_message: Optional[str] = None
    parsed_requirements: Any = None

# -------------------------
# Prompt
# -------------------------

INSTRUCTIONS = """Important notes:
- Be very careful about logical grouping (ALL_OF vs ONE_OF vs TWO_OF)
- For "two of" requirements, use TWO_OF logic with all courses as children
- Use type "other" for high school courses, external requirements, AP credits, etc. - DO NOT reject these
- Pay attention to grade requirements (minGrade is a percentage 0-100), concurrent enrollment, etc.
- If something is unclear or ambiguous, return an error
- Only include corequisites in the response if there are actual corequisites
- If a requirement text says "recommended" or "suggested", put it in recommendedPrerequisites or recommendedCorequisites
- PREFER type "other" over rejecting - only reject if truly impossible to represent
- You MUST follow the JSON schema exactly."""

def build_prompt(record: CourseSaveFile) -> str:
    schema = json.dumps(CourseParsedRequirements.model_json_schema(), indent=2)
    return (
        "You are a system that parses university course prerequisites and corequisites "
        "into a structured JSON format.\n\n"
        f"COURSE: {record.course}\n"
        f"PREREQUISITES: {record.originalPrerequisite or 'None'}\n"
        f"COREQUISITES: {record.originalCorequisite or 'None'}\n\n"
        f"TYPE SYSTEM (JSON Schema of parsedRequirements):\n{schema}\n\n"
        "TASK: Can the requirements above be represented unambiguously using the type system?\n"
        'If YES: return {"success": true, "parsedRequirements": <object following the schema>}\n'
        'If NO: return {"success": false, "error": "<detailed explanation>"}\n\n'
        + INSTRUCTIONS
    )

# -------------------------
# Ollama structured call
# -------------------------

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

def read_reply(content: str) -> ParseResponse:
    match = _JSON_OBJECT_RE.search(content or "")
    if not match:
        raise LLMResponseError(f"No JSON found in model response: {content!r}")
    try:
        return ParseResponse.model_validate_json(match.group(0))
    except ValidationError as e:
        raise LLMResponseError(f"Unreadable model response: {e}") from e

def call_model(record: CourseSaveFile, model: str, chat: ChatFn = ollama.chat) -> LLMResult:
    resp = chat(
        model=model,
        messages=[{"role": "user", "content": build_prompt(record)}],
        options={"temperature": 0},
        format=ParseResponse.model_json_schema(),
    )
    reply = read_reply(resp["message"]["content"])
    if reply.success:
        return LLMResult(is_error=False, parsed_requirements=reply.parsedRequirements)
    return LLMResult(is_error=True, error_message=reply.error)

# -------------------------
# Record processing
# -------------------------

def process_course(path: Path, record: CourseSaveFile, model: str, chat: ChatFn = ollama.chat) -> str:
    """Run one record through the model and save the outcome. Returns the outcome name."""
    if record.status == "error":
        logger.info("%s: retrying, previously errored", path.name)
    elif record.status != "unparsed":
        logger.debug("%s: skipping, status is %s", path.name, record.status)
        return "skipped"

    if not record.originalPrerequisite and not record.originalCorequisite:
        record.status = "parsed"
        outcome = "parsed"
    else:
        logger.info("%s: asking %s to parse requirements", path.name, model)
        result = call_model(record, model, chat)

        if result.is_error:
            record.status = "blacklisted"
            record.blacklistReason = result.error_message
            outcome = "blacklisted"
        else:
            try:
                parsed = ensure_valid(result.parsed_requirements)
            except StructuralError as e:
                logger.warning("%s: schema validation failed: %s", path.name, e.reason)
                record.status = "error"
                record.errorMessage = e.reason
                outcome = "errored"
            else:
                logger.info("%s: parsed requirements\n%s", path.name, format_parsed_requirements(parsed, 1))
                record.status = "parsed"
                record.parsedRequirements = parsed
                record.errorMessage = None
                outcome = "parsed"

    record.lastUpdated = now_iso()
    save_course_file(path, record)
    return outcome

def parse_all(courses_dir: Path, model: str, workers: int = 3, chat: ChatFn = ollama.chat) -> Counter:
    """Process every record file concurrently. Returns outcome counts.

    The first failure stops the run: queued records are cancelled and any
    worker that has not reached the model yet returns without calling it.
    """
    entries = load_course_files(courses_dir)
    logger.info("Found %d course files to process", len(entries))

    stop = threading.Event()

    def run(path: Path, record: CourseSaveFile) -> Optional[str]:
        if stop.is_set():
            return None
        try:
            return process_course(path, record, model, chat)
        except Exception:
            stop.set()
            raise

    counts: Counter = Counter()
    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        futures = {executor.submit(run, path, record): path for path, record in entries}
        try:
            for future in as_completed(futures):
                outcome = future.result()
                if outcome is None:
                    continue
                counts[outcome] += 1
                if outcome != "skipped":
                    counts["processed"] += 1
        except Exception:
            stop.set()
            executor.shutdown(wait=True, cancel_futures=True)
            raise
    return counts

# -------------------------
# CLI
# -------------------------

def parse_args(argv=None):
    settings = Settings.from_env()
    ap = argparse.ArgumentParser(description="Parse course requirement text with an Ollama model.")
    ap.add_argument("--data", dest="data_dir", default=str(settings.data_dir), help="Data directory holding courses/")
    ap.add_argument("--model", dest="model", default=settings.ollama_model, help="Ollama model")
    ap.add_argument("--workers", dest="workers", type=int, default=settings.workers,
                    help="Number of concurrent workers (default: 3)")
    return ap.parse_args(argv)

def main(argv=None):
    args = parse_args(argv)
    configure_logging()
    courses_dir = Path(args.data_dir) / "courses"

    if not courses_dir.exists():
        print(f"Error: courses directory not found: {courses_dir}", file=sys.stderr)
        return 1

    try:
        counts = parse_all(courses_dir, args.model, args.workers)
    except (LLMResponseError, ollama.ResponseError, ConnectionError) as e:
        print(f"Error calling model: {e}", file=sys.stderr)
        return 1

    print("\nProcessing complete:")
    print(f"  Processed: {counts['processed']}")
    print(f"  Parsed: {counts['parsed']}")
    print(f"  Blacklisted: {counts['blacklisted']}")
    print(f"  Errored: {counts['errored']}")
    print(f"  Skipped: {counts['skipped']}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
