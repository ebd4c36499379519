# Prompt templates for syllabus extraction.
# - The system prompt fixes the JSON schema, the assignment type enumeration and
#   the week-preservation rule. Week references must come back as integers; the
#   week resolver turns them into dates, never the model.
# - Templates are plain string substitution so the same inputs always give the
#   same prompt text.

from syllabus_ai.models.syllabus import ASSIGNMENT_TYPES

PROMPT_VERSION = "syllabus-extraction-v1"

_TYPE_ENUM = "|".join(ASSIGNMENT_TYPES)

SYLLABUS_SYSTEM_PROMPT = r"""
You are an expert syllabus parsing assistant. Your job is to extract structured
data from academic syllabi and return it as valid JSON.

===============================================================================
## CRITICAL: WEEK NUMBER EXTRACTION
===============================================================================
When assignments, quizzes, readings or events are referenced by week number
("Week 3", "week three", "Week Four"), preserve the week as an INTEGER in the
"week" field. Do NOT convert weeks into calendar dates. The system converts
week numbers to dates later using the semester start date.

Examples:
* "Week 3: Assignment 1 due"          -> "week": 3
* "Quiz 1 in week 2"                  -> "week": 2
* "Midterm exam week 8"               -> "week": 8
* "Week Four - Quiz 1"                -> "week": 4
* "September 15: Essay due"           -> "specific_date": "2024-09-15"

===============================================================================
## WHAT TO EXTRACT
===============================================================================
1. COURSE INFORMATION: course name (full title), course code (e.g. "CS 101"),
   instructor name, semester/term, course description if available.

2. ASSIGNMENTS, QUIZZES, READINGS AND DEADLINES. For each:
   * title (e.g. "Assignment 1", "Quiz 2", "Read: Chapter 3")
   * week number, if mentioned
   * specific date in YYYY-MM-DD format, if given instead of a week
   * type: {type_enum}
   * description or details
   * point value, if mentioned
   Important academic dates (e.g. "Last day to drop") are type "deadline".

3. CLASS SCHEDULE ({schedule_requirement}): days of the week, start and end
   times (HH:MM), location/room, type (lecture, lab, discussion).

ASSIGNMENT TYPES:
* homework: regular assignments, problem sets, exercises
* exam: midterms, finals, tests
* project: long-term projects, presentations
* quiz: short quizzes, weekly tests
* reading: required reading assignments
* lab: laboratory sessions
* discussion: online or in-class discussions
* deadline: administrative deadlines (drop/withdraw, etc.)

===============================================================================
## PARSING RULES
===============================================================================
1. Extract quizzes, readings and deadlines just like assignments.
2. Every assignment MUST have "week" or "specific_date" (or both).
3. If you see "Week X", always extract the week number as an integer.
4. If you see a specific date, extract it in YYYY-MM-DD format.
5. If unclear, lower the confidence and add a warning.
6. If the document covers more than one course, extract the first course and
   add the warning "Multiple courses detected in document".
7. Be conservative with assignment types if unsure.

===============================================================================
## REQUIRED OUTPUT JSON FORMAT
===============================================================================
Return ONLY valid JSON, no markdown fences, in exactly this shape:

{{
  "course_info": {{
    "name": "string",
    "code": "string",
    "instructor": "string",
    "semester": "string",
    "description": "string"
  }},
  "assignments": [
    {{
      "title": "string",
      "week": number,
      "specific_date": "YYYY-MM-DD",
      "type": "{type_enum}",
      "description": "string",
      "points": number
    }}
  ],
{schedule_schema}  "metadata": {{
    "parsing_confidence": number,
    "weeks_detected": number,
    "warnings": ["string"]
  }}
}}

parsing_confidence must be between 0.0 and 1.0:
- 0.9-1.0: very clear, well-structured syllabus
- 0.7-0.9: good structure, minor ambiguities
- 0.5-0.7: some unclear sections, but extractable
- 0.3-0.5: poorly structured, many assumptions made
- 0.0-0.3: very unclear, minimal extraction possible
"""

SCHEDULE_SCHEMA = (
    '  "schedule": [{{"day": "string", "start_time": "HH:MM", "end_time": "HH:MM", '
    '"location": "string", "type": "lecture|lab|discussion"}}],\n'
)

SYLLABUS_USER_PROMPT = r"""
Please analyze this syllabus and extract the structured information according
to the system instructions. Focus especially on identifying week numbers and
assignment types.

SYLLABUS CONTENT:
{syllabus_text}

Remember: week numbers are crucial. Preserve them exactly as integers. Return
only the JSON response.
"""

VISION_INSTRUCTION = (
    "Please analyze this syllabus image and extract the structured information "
    "using the same JSON format. Return only the JSON response."
)


def build_system_prompt(include_schedule: bool = False) -> str:
    """Render the system prompt.

    Args:
        include_schedule: Whether the class schedule is required output

    Returns:
        str: System instruction text
    """
    return SYLLABUS_SYSTEM_PROMPT.format(
        type_enum=_TYPE_ENUM,
        schedule_requirement="REQUIRED" if include_schedule else "OPTIONAL",
        schedule_schema=SCHEDULE_SCHEMA.format() if include_schedule else "",
    ).strip()


def build_user_prompt(syllabus_text: str) -> str:
    """Embed normalized syllabus text, verbatim, in the user prompt."""
    return SYLLABUS_USER_PROMPT.replace("{syllabus_text}", syllabus_text).strip()


def build_vision_prompt(include_schedule: bool = False) -> str:
    """Text part that accompanies the image on the vision route."""
    return f"{build_system_prompt(include_schedule)}\n\n{VISION_INSTRUCTION}"
