"""Data models for documents, extraction requests and syllabus results."""

from syllabus_ai.models.document import (
    DocumentMetadata,
    ImageContent,
    NormalizedContent,
    ProcessingStats,
    RawDocument,
    TextContent,
)
from syllabus_ai.models.extraction import ExtractionOptions, ExtractionRequest, ExtractionRoute
from syllabus_ai.models.syllabus import (
    AssignmentType,
    AssignmentWithDate,
    CourseInfo,
    ParsedAssignment,
    ParsedSyllabus,
    ParsingMetadata,
    ScheduleEntry,
    SemesterBoundsCheck,
    WeekConversionResult,
    WeekValidationReport,
)

__all__ = [
    "AssignmentType",
    "AssignmentWithDate",
    "CourseInfo",
    "DocumentMetadata",
    "ExtractionOptions",
    "ExtractionRequest",
    "ExtractionRoute",
    "ImageContent",
    "NormalizedContent",
    "ParsedAssignment",
    "ParsedSyllabus",
    "ParsingMetadata",
    "ProcessingStats",
    "RawDocument",
    "ScheduleEntry",
    "SemesterBoundsCheck",
    "TextContent",
    "WeekConversionResult",
    "WeekValidationReport",
]
