#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Requirement grammar shared by the parser, the validator and the graph builder.

A requirement is a tagged union keyed on ``type``. Field names follow the JSON
the model produces (camelCase), so records round-trip without aliases.
"""

from __future__ import annotations
from typing import Annotated, List, Optional, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

SCHEMA_VERSION = "UBCv0.1"

GroupLogic = Literal["ALL_OF", "ONE_OF", "TWO_OF"]
CourseLevel = Literal["100", "200", "300", "400"]
Standing = Literal["1st", "2nd", "3rd", "4th", "graduate"]
RecordStatus = Literal["parsed", "unparsed", "blacklisted", "error"]

GROUP_LOGICS = ("ALL_OF", "ONE_OF", "TWO_OF")
COURSE_LEVELS = ("100", "200", "300", "400")
STANDINGS = ("1st", "2nd", "3rd", "4th", "graduate")

# Optional requirement trees on a parsed course, with their labels in messages
REQUIREMENT_FIELDS = (
    ("prerequisites", "prerequisites"),
    ("corequisites", "corequisites"),
    ("recommendedPrerequisites", "recommended prerequisites"),
    ("recommendedCorequisites", "recommended corequisites"),
)

# -------------------------
# Requirement variants
# -------------------------

class _Requirement(BaseModel):
    model_config = ConfigDict(frozen=True)

class RequirementGroup(_Requirement):
    type: Literal["group"]
    logic: GroupLogic
    children: List[Requirement] = Field(min_length=1)

class RequirementCourse(_Requirement):
    type: Literal["course"]
    course: str = Field(min_length=1)  # e.g. "CPSC 110"
    minGrade: Optional[float] = Field(default=None, ge=0, le=100)
    canBeTakenConcurrently: Optional[bool] = None
    mustBeTakenConcurrently: Optional[bool] = None

class RequirementCreditCount(_Requirement):
    type: Literal["credit_count"]
    credits: float = Field(gt=0)
    department: Optional[Union[str, List[str]]] = None
    level: Optional[Union[CourseLevel, List[CourseLevel]]] = None
    minGrade: Optional[float] = Field(default=None, ge=0, le=100)

class RequirementCourseCount(_Requirement):
    type: Literal["course_count"]
    count: float = Field(gt=0)
    department: Optional[Union[str, List[str]]] = None
    level: Optional[Union[CourseLevel, List[CourseLevel]]] = None
    minGrade: Optional[float] = Field(default=None, ge=0, le=100)

class RequirementStanding(_Requirement):
    type: Literal["standing"]
    standing: Standing

class RequirementProgram(_Requirement):
    type: Literal["program"]
    program: str = Field(min_length=1)

class RequirementPermission(_Requirement):
    type: Literal["permission"]
    note: str = Field(min_length=1)

class RequirementOther(_Requirement):
    type: Literal["other"]
    note: str = Field(min_length=1)

Requirement = Annotated[
    Union[
        RequirementGroup,
        RequirementCourse,
        RequirementCreditCount,
        RequirementCourseCount,
        RequirementStanding,
        RequirementProgram,
        RequirementPermission,
        RequirementOther,
    ],
    Field(discriminator="type"),
]

RequirementGroup.model_rebuild()

requirement_adapter = TypeAdapter(Requirement)

# -------------------------
# Course records
# -------------------------

class CourseParsedRequirements(BaseModel):
    model_config = ConfigDict(frozen=True)

    department: str
    code: str
    prerequisites: Optional[Requirement] = None
    corequisites: Optional[Requirement] = None
    recommendedPrerequisites: Optional[Requirement] = None
    recommendedCorequisites: Optional[Requirement] = None

    def has_requirements(self) -> bool:
        return any(getattr(self, name) is not None for name, _ in REQUIREMENT_FIELDS)

class CourseSaveFile(BaseModel):
    """One persisted course: the raw catalog text plus whatever the parser made of it."""
    schemaVersion: str = SCHEMA_VERSION
    course: str
    originalPrerequisite: Optional[str] = None
    originalCorequisite: Optional[str] = None
    status: RecordStatus
    parsedRequirements: Optional[CourseParsedRequirements] = None
    blacklistReason: Optional[str] = None
    errorMessage: Optional[str] = None
    lastUpdated: str

    @property
    def department(self) -> str:
        return course_department(self.course)

def course_department(course_id: str) -> str:
    """Leading token of a course id ("CPSC 110" -> "CPSC")."""
    parts = (course_id or "").split()
    return parts[0] if parts else "UNKNOWN"

def parse_requirement(data) -> Requirement:
    """Build a typed requirement tree from plain data (raises pydantic.ValidationError)."""
    return requirement_adapter.validate_python(data)
