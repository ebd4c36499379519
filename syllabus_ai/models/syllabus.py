"""Pydantic models for extracted syllabus data and resolved due dates."""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AssignmentType(str, Enum):
    """Categories of graded or scheduled course events."""

    HOMEWORK = "homework"
    EXAM = "exam"
    PROJECT = "project"
    QUIZ = "quiz"
    READING = "reading"
    LAB = "lab"
    DISCUSSION = "discussion"
    DEADLINE = "deadline"


ASSIGNMENT_TYPES = tuple(t.value for t in AssignmentType)


class CourseInfo(BaseModel):
    """Course-level details read from the syllabus header."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., min_length=1)
    code: Optional[str] = None
    instructor: Optional[str] = None
    semester: Optional[str] = None
    year: Optional[int] = None
    description: Optional[str] = None


class ParsedAssignment(BaseModel):
    """One graded event as the model read it.

    At least one of ``week`` and ``specific_date`` is expected; the response
    validator enforces that for model output, while the week resolver copes
    with records that carry neither.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", use_enum_values=True)

    title: str = Field(..., min_length=1)
    week: Optional[int] = None
    specific_date: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    type: AssignmentType = AssignmentType.HOMEWORK
    description: Optional[str] = None
    points: Optional[float] = None
    percentage: Optional[float] = None


class ScheduleEntry(BaseModel):
    """A recurring class meeting."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    day: str
    start_time: str
    end_time: str
    location: Optional[str] = None
    type: Optional[str] = Field(default=None, description="lecture|lab|discussion|office_hours")


class ParsingMetadata(BaseModel):
    """Quality signals attached to every extraction result."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    parsing_confidence: float = Field(..., ge=0.0, le=1.0)
    weeks_detected: int = Field(..., ge=0)
    original_format: Literal["text", "image"]
    warnings: List[str] = Field(default_factory=list)
    processing_time: Optional[int] = Field(default=None, description="Milliseconds")


class ParsedSyllabus(BaseModel):
    """Validated extraction result for one document."""

    model_config = ConfigDict(frozen=True)

    course_info: CourseInfo
    assignments: List[ParsedAssignment] = Field(default_factory=list)
    schedule: Optional[List[ScheduleEntry]] = None
    metadata: ParsingMetadata

    @property
    def needs_review(self) -> bool:
        """True when the result carries any quality warning."""
        return bool(self.metadata.warnings)


class AssignmentWithDate(BaseModel):
    """An assignment with its due date resolved to a calendar date."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    title: str
    due_date: str
    original_week: Optional[int] = None
    original_specific_date: Optional[str] = None
    type: AssignmentType
    description: Optional[str] = None
    points: Optional[float] = None


class WeekConversionResult(BaseModel):
    """Detailed week conversion output with per-assignment warnings."""

    assignments: List[AssignmentWithDate] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    total_converted: int = 0


class SemesterBoundsCheck(BaseModel):
    """Result of checking one assignment's week against semester dates."""

    is_valid: bool
    week: Optional[int] = None
    max_week: int
    adjusted_week: Optional[int] = None
    message: Optional[str] = None


class WeekValidationReport(BaseModel):
    """Split of assignments by whether their week fits the semester."""

    valid_assignments: List[ParsedAssignment] = Field(default_factory=list)
    invalid_assignments: List[ParsedAssignment] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
