"""Week-number to calendar-date resolution.

Week ``n`` of a semester starts ``(n - 1) * 7`` days after the semester start
date. Arithmetic is on calendar dates only, so daylight-saving changes and
time zones never shift a due date. A specific date always wins over a week
number.

All functions are pure and never modify the assignments they are given.
"""

from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Union

from syllabus_ai.models.syllabus import (
    AssignmentWithDate,
    ParsedAssignment,
    SemesterBoundsCheck,
    WeekConversionResult,
    WeekValidationReport,
)
from syllabus_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)

# Weeks outside this range are still resolved but flagged
MIN_USUAL_WEEK = 1
MAX_USUAL_WEEK = 20

INVALID_START_WARNING = "Invalid semester start date provided"

AssignmentLike = Union[ParsedAssignment, Dict[str, Any]]
DateLike = Union[date, datetime, str]


def parse_semester_start(value: Optional[DateLike]) -> Optional[date]:
    """Parse a semester boundary date.

    Accepts a ``date``, a ``datetime`` (date part used), ``YYYY-MM-DD`` or an
    ISO-8601 datetime string.

    Returns:
        The parsed date, or None when the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
    except ValueError:
        return None


def week_to_date(semester_start: date, week: int) -> date:
    """Return the first day of ``week`` (1-based) of a semester.

    Raises:
        OverflowError: If the week lands outside the representable date range
    """
    return semester_start + timedelta(days=(week - 1) * 7)


def _as_assignment(assignment: AssignmentLike) -> ParsedAssignment:
    if isinstance(assignment, ParsedAssignment):
        return assignment
    return ParsedAssignment.model_validate(assignment)


def _with_due_date(assignment: ParsedAssignment, due_date: str) -> AssignmentWithDate:
    return AssignmentWithDate(
        title=assignment.title,
        due_date=due_date,
        original_week=assignment.week,
        original_specific_date=assignment.specific_date,
        type=assignment.type,
        description=assignment.description,
        points=assignment.points,
    )


def convert_weeks_to_dates(
    assignments: Sequence[AssignmentLike],
    semester_start: Optional[DateLike],
) -> List[AssignmentWithDate]:
    """Resolve every assignment to a due date.

    Assignments with neither a week nor a specific date are dropped, as are
    weeks too far out to land on a representable date. Use
    ``convert_weeks_to_dates_with_details`` to keep them with a warning.

    Args:
        assignments: Parsed assignments, in syllabus order
        semester_start: Semester start date

    Returns:
        Resolved assignments in input order; empty if the start is invalid
    """
    start = parse_semester_start(semester_start)
    if start is None:
        LOGGER.warning(INVALID_START_WARNING)
        return []

    converted: List[AssignmentWithDate] = []
    for item in assignments:
        assignment = _as_assignment(item)
        if assignment.specific_date:
            converted.append(_with_due_date(assignment, assignment.specific_date))
        elif assignment.week is not None:
            try:
                due_date = week_to_date(start, assignment.week)
            except OverflowError:
                LOGGER.warning(f"Dropping assignment with unresolvable week {assignment.week}: {assignment.title}")
                continue
            converted.append(_with_due_date(assignment, due_date.isoformat()))
        else:
            LOGGER.debug(f"Dropping assignment without date information: {assignment.title}")

    return converted


def convert_weeks_to_dates_with_details(
    assignments: Sequence[AssignmentLike],
    semester_start: Optional[DateLike],
) -> WeekConversionResult:
    """Resolve every assignment to a due date, reporting anything suspicious.

    Output has one entry per input assignment. Assignments with no date
    information fall back to the semester start; weeks outside 1-20 are
    resolved as given, unless they fall outside the representable date range,
    in which case they also fall back to the semester start. Each of these
    cases adds a warning.

    Args:
        assignments: Parsed assignments, in syllabus order
        semester_start: Semester start date

    Returns:
        WeekConversionResult
    """
    start = parse_semester_start(semester_start)
    if start is None:
        return WeekConversionResult(warnings=[INVALID_START_WARNING])

    converted: List[AssignmentWithDate] = []
    warnings: List[str] = []
    total_converted = 0

    for item in assignments:
        assignment = _as_assignment(item)

        if assignment.specific_date:
            due_date = assignment.specific_date
        elif assignment.week is not None:
            if not MIN_USUAL_WEEK <= assignment.week <= MAX_USUAL_WEEK:
                warnings.append(f'Assignment "{assignment.title}": Week {assignment.week} seems unusual')
            try:
                due_date = week_to_date(start, assignment.week).isoformat()
                total_converted += 1
            except OverflowError:
                warnings.append(
                    f'Assignment "{assignment.title}": Week {assignment.week} cannot be resolved to a calendar date'
                )
                due_date = start.isoformat()
        else:
            warnings.append(f'Assignment "{assignment.title}": No date information available')
            due_date = start.isoformat()

        converted.append(_with_due_date(assignment, due_date))

    return WeekConversionResult(
        assignments=converted,
        warnings=warnings,
        total_converted=total_converted,
    )


def validate_week_against_semester(
    assignment: AssignmentLike,
    semester_start: DateLike,
    semester_end: DateLike,
) -> SemesterBoundsCheck:
    """Check an assignment's week against the semester's actual length.

    The semester has ``days // 7 + 1`` weeks. The returned ``adjusted_week``
    is the week clamped into range; the assignment itself is left alone.

    Raises:
        ValueError: If either date is unparseable or the end precedes the start
    """
    start = parse_semester_start(semester_start)
    end = parse_semester_start(semester_end)
    if start is None or end is None:
        raise ValueError("Semester start and end must be valid dates")
    if end < start:
        raise ValueError("Semester end must not be before semester start")

    max_week = (end - start).days // 7 + 1
    week = _as_assignment(assignment).week

    if week is None:
        return SemesterBoundsCheck(is_valid=True, max_week=max_week)

    if week < 1:
        return SemesterBoundsCheck(
            is_valid=False,
            week=week,
            max_week=max_week,
            adjusted_week=1,
            message=f"Week {week} is before the start of the semester",
        )
    if week > max_week:
        return SemesterBoundsCheck(
            is_valid=False,
            week=week,
            max_week=max_week,
            adjusted_week=max_week,
            message=f"Week {week} is beyond the semester end (week {max_week})",
        )
    return SemesterBoundsCheck(is_valid=True, week=week, max_week=max_week, adjusted_week=week)


def validate_week_numbers(
    assignments: Sequence[AssignmentLike],
    semester_weeks: int,
) -> WeekValidationReport:
    """Split assignments by whether their week fits a semester of ``semester_weeks``.

    Assignments without a week are valid.
    """
    report = WeekValidationReport()
    for item in assignments:
        assignment = _as_assignment(item)
        week = assignment.week
        if week is not None and week < 1:
            report.invalid_assignments.append(assignment)
            report.errors.append(f"Week {week} is invalid")
        elif week is not None and week > semester_weeks:
            report.invalid_assignments.append(assignment)
            report.errors.append(f"Week {week} exceeds semester length")
        else:
            report.valid_assignments.append(assignment)
    return report
