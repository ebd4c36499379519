"""Alias normalization for raw model output.

Models drift from the requested field names ("course_name" instead of
"name", "due_date" instead of "specific_date"). The alias table below is the
single place those variants are mapped back; it is applied once, before
validation, and never mutates the caller's object.
"""

import copy
import re
from typing import Any, Dict, Optional

COURSE_INFO_ALIASES: Dict[str, str] = {
    "course_name": "name",
    "course_title": "name",
    "instructor_name": "instructor",
    "professor": "instructor",
    "course_code": "code",
    "term": "semester",
}

ASSIGNMENT_ALIASES: Dict[str, str] = {
    "name": "title",
    "week_number": "week",
    "due_date": "specific_date",
    "date": "specific_date",
    "assignment_type": "type",
    "category": "type",
}

METADATA_ALIASES: Dict[str, str] = {
    "confidence": "parsing_confidence",
}

_WEEK_STRING = re.compile(r"^\s*(?:week\s*)?([+-]?\d+(?:\.0+)?)\s*$", re.IGNORECASE)
_NUMBER_STRING = re.compile(r"^\s*([+-]?\d+(?:\.\d+)?)\s*$")


def _apply_aliases(record: Dict[str, Any], aliases: Dict[str, str]) -> None:
    for alias, canonical in aliases.items():
        if alias not in record:
            continue
        value = record.pop(alias)
        # An explicit canonical field always wins over its alias
        if record.get(canonical) in (None, "") and value not in (None, ""):
            record[canonical] = value


def _coerce_week(value: Any) -> Any:
    if isinstance(value, str):
        match = _WEEK_STRING.match(value)
        if match:
            return int(float(match.group(1)))
    elif isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _coerce_number(value: Any) -> Any:
    if isinstance(value, str):
        match = _NUMBER_STRING.match(value)
        if match:
            return float(match.group(1))
    return value


def _normalize_assignment(assignment: Any) -> Any:
    if not isinstance(assignment, dict):
        return assignment

    _apply_aliases(assignment, ASSIGNMENT_ALIASES)

    if "week" in assignment:
        assignment["week"] = _coerce_week(assignment["week"])
    for key in ("points", "percentage"):
        if key in assignment:
            assignment[key] = _coerce_number(assignment[key])
    if isinstance(assignment.get("type"), str):
        assignment["type"] = assignment["type"].strip().lower()
    if assignment.get("specific_date") == "":
        assignment["specific_date"] = None
    return assignment


def normalize_response(data: Any) -> Any:
    """Return a copy of the model output with field aliases resolved.

    Non-dict input is returned unchanged so that validation can report it.

    Args:
        data: Parsed JSON from the model

    Returns:
        Normalized copy of ``data``
    """
    if not isinstance(data, dict):
        return data

    normalized: Dict[str, Any] = copy.deepcopy(data)

    course_info: Optional[Dict[str, Any]] = normalized.get("course_info")
    if isinstance(course_info, dict):
        _apply_aliases(course_info, COURSE_INFO_ALIASES)

    assignments = normalized.get("assignments")
    if isinstance(assignments, list):
        normalized["assignments"] = [_normalize_assignment(a) for a in assignments]

    metadata = normalized.get("metadata")
    if isinstance(metadata, dict):
        _apply_aliases(metadata, METADATA_ALIASES)

    return normalized
