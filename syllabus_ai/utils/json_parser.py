import json
import re
from typing import Any, Dict, List, Optional, Union

from syllabus_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)

_FENCE_PATTERN = re.compile(r"^```(?:json|JSON)?\s*(?P<body>.*?)\s*```$", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block (```json ... ```) if present."""
    cleaned_text = text.strip()
    match = _FENCE_PATTERN.match(cleaned_text)
    if match:
        return match.group("body").strip()
    return cleaned_text


def parse_json_safely(text: Optional[str]) -> Union[Dict[str, Any], List[Any], None]:
    """Parse JSON from text, handling common LLM formatting issues.

    Handles:
    - Markdown code blocks (```json ... ```)
    - Leading/trailing whitespace
    - Prose before or after a single top-level JSON object

    Args:
        text: The text containing JSON

    Returns:
        Parsed JSON value or None if parsing fails
    """
    if not text or not text.strip():
        return None

    cleaned_text = strip_code_fences(text)

    try:
        return json.loads(cleaned_text)
    except json.JSONDecodeError as e:
        LOGGER.warning(f"Initial JSON parse failed: {e}, looking for an embedded object")

    # Fallback: outermost { ... } span
    start = cleaned_text.find("{")
    end = cleaned_text.rfind("}")
    if start == -1 or end <= start:
        LOGGER.error("Failed to parse JSON: no object boundaries found")
        return None

    try:
        return json.loads(cleaned_text[start:end + 1])
    except json.JSONDecodeError as e:
        LOGGER.error(f"Failed to parse JSON: {e}")
        return None
