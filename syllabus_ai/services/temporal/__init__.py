from syllabus_ai.services.temporal.week_resolver import (
    convert_weeks_to_dates,
    convert_weeks_to_dates_with_details,
    parse_semester_start,
    validate_week_against_semester,
    validate_week_numbers,
    week_to_date,
)

__all__ = [
    "convert_weeks_to_dates",
    "convert_weeks_to_dates_with_details",
    "parse_semester_start",
    "validate_week_against_semester",
    "validate_week_numbers",
    "week_to_date",
]
