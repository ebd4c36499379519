"""Structural validation of normalized model output.

Collects every violation instead of stopping at the first, so a rejected
response can be reported (and logged before a retry) in full.
"""

import re
from datetime import date
from typing import Any, List

from syllabus_ai.models.syllabus import ASSIGNMENT_TYPES

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

SCHEDULE_REQUIRED_FIELDS = ("day", "start_time", "end_time")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_iso_date(value: Any) -> bool:
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _has_value(value: Any) -> bool:
    return value is not None and value != ""


def _validate_assignment(index: int, assignment: Any) -> List[str]:
    if not isinstance(assignment, dict):
        return [f"Assignment {index}: must be an object"]

    violations: List[str] = []

    title = assignment.get("title")
    if not isinstance(title, str) or not title.strip():
        violations.append(f"Assignment {index}: missing title")

    assignment_type = assignment.get("type")
    if not _has_value(assignment_type):
        violations.append(f"Assignment {index}: missing type")
    elif assignment_type not in ASSIGNMENT_TYPES:
        violations.append(f"Assignment {index}: invalid type '{assignment_type}'")

    week = assignment.get("week")
    specific_date = assignment.get("specific_date")
    if not _has_value(week) and not _has_value(specific_date):
        violations.append(f"Assignment {index}: missing week or specific_date")
    if _has_value(week) and (not isinstance(week, int) or isinstance(week, bool)):
        violations.append(f"Assignment {index}: week must be an integer")
    if _has_value(specific_date) and not _is_iso_date(specific_date):
        violations.append(f"Assignment {index}: specific_date must be YYYY-MM-DD")

    return violations


def validate_response(data: Any, include_schedule: bool = False) -> List[str]:
    """Check normalized model output against the extraction schema.

    Args:
        data: Output of ``normalize_response``
        include_schedule: Whether the schedule section was requested (and
            so is validated when present)

    Returns:
        List of violation messages; empty when the response is valid
    """
    if not isinstance(data, dict):
        return ["Response must be a JSON object"]

    violations: List[str] = []

    course_info = data.get("course_info")
    assignments = data.get("assignments")
    metadata = data.get("metadata")

    if not isinstance(course_info, dict):
        violations.append("Missing course_info")
    if assignments is None:
        violations.append("Missing assignments")
    if not isinstance(metadata, dict):
        violations.append("Missing metadata")

    if isinstance(course_info, dict):
        name = course_info.get("name")
        if not isinstance(name, str) or not name.strip():
            violations.append("Missing course name")

    if assignments is not None:
        if isinstance(assignments, list):
            for index, assignment in enumerate(assignments):
                violations.extend(_validate_assignment(index, assignment))
        else:
            violations.append("Assignments must be an array")

    if isinstance(metadata, dict):
        confidence = metadata.get("parsing_confidence")
        if not _is_number(confidence):
            violations.append("parsing_confidence must be a number")
        elif not 0.0 <= confidence <= 1.0:
            violations.append("parsing_confidence must be between 0 and 1")
        if not _is_number(metadata.get("weeks_detected")):
            violations.append("weeks_detected must be a number")

    schedule = data.get("schedule")
    if include_schedule and schedule is not None:
        if not isinstance(schedule, list):
            violations.append("Schedule must be an array")
        else:
            for index, entry in enumerate(schedule):
                if not isinstance(entry, dict):
                    violations.append(f"Schedule entry {index}: must be an object")
                    continue
                for key in SCHEDULE_REQUIRED_FIELDS:
                    if not _has_value(entry.get(key)):
                        violations.append(f"Schedule entry {index}: missing {key}")

    return violations
