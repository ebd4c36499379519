"""Cost estimates and quality scoring for extraction results."""

import math
from typing import Any, Dict, List, Union

from syllabus_ai.models.document import ImageContent, TextContent
from syllabus_ai.models.syllabus import ParsedSyllabus

PROMPT_BASE_TOKENS = 1000
CHARS_PER_TOKEN = 4
TEXT_COST_PER_1K_TOKENS = 0.03
IMAGE_COST = 0.01


def estimate_processing_cost(content: Union[TextContent, ImageContent]) -> float:
    """Rough USD cost of one extraction call.

    Images are priced flat; text is priced by an estimated token count
    (prompt overhead plus four characters per token).
    """
    if content.kind == "image":
        return IMAGE_COST

    total_tokens = PROMPT_BASE_TOKENS + math.ceil(len(content.text) / CHARS_PER_TOKEN)
    return (total_tokens / 1000) * TEXT_COST_PER_1K_TOKENS


def analyze_parsing_quality(syllabus: ParsedSyllabus) -> Dict[str, Any]:
    """Score a parsed syllabus out of 100 and explain the score.

    Course details are worth 25 points, assignments 50 and the model's own
    confidence 25.

    Args:
        syllabus: Validated extraction result

    Returns:
        Dict with ``score``, ``suggestions`` and ``strengths``
    """
    suggestions: List[str] = []
    strengths: List[str] = []
    score = 0

    course = syllabus.course_info
    if course.name:
        score += 10
    if course.code:
        score += 5
    if course.instructor:
        score += 5
    if course.semester:
        score += 5

    if score >= 20:
        strengths.append("Complete course information")
    else:
        suggestions.append("Consider extracting more course details")

    assignments = syllabus.assignments
    if assignments:
        score += 20
        strengths.append(f"Found {len(assignments)} assignments")

        if all(a.week is not None or a.specific_date for a in assignments):
            score += 15
            strengths.append("All assignments have date information")
        else:
            suggestions.append("Some assignments missing date information")

        if all(a.type for a in assignments):
            score += 15
            strengths.append("All assignments properly categorized")
        else:
            suggestions.append("Some assignments missing type classification")
    else:
        suggestions.append("No assignments found - check syllabus format")

    confidence = syllabus.metadata.parsing_confidence
    if confidence >= 0.8:
        score += 25
        strengths.append("High parsing confidence")
    elif confidence >= 0.6:
        score += 15
        suggestions.append("Moderate parsing confidence - consider manual review")
    else:
        suggestions.append("Low parsing confidence - manual review recommended")

    return {"score": score, "suggestions": suggestions, "strengths": strengths}
