from syllabus_ai.utils.json_parser import parse_json_safely
from syllabus_ai.utils.logging import get_logger

__all__ = ["get_logger", "parse_json_safely"]
