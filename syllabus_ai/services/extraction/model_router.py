"""Route normalized content to a model."""

from typing import Tuple, Union

from syllabus_ai.config import Settings
from syllabus_ai.models.document import ImageContent, TextContent
from syllabus_ai.models.extraction import ExtractionRoute

# Above this many characters (plus line breaks) a text syllabus goes to the stronger model
COMPLEXITY_THRESHOLD = 200


def text_complexity(text: str) -> int:
    return len(text) + text.count("\n")


def choose_optimal_model(text: str, settings: Settings) -> str:
    """Pick the text model for a syllabus by rough structural complexity.

    Args:
        text: Normalized syllabus text
        settings: Application settings

    Returns:
        str: ``text_model`` for complex input, ``simple_text_model`` otherwise
    """
    if not settings.enable_model_routing:
        return settings.text_model
    if text_complexity(text) > COMPLEXITY_THRESHOLD:
        return settings.text_model
    return settings.simple_text_model


def choose_route(
    content: Union[TextContent, ImageContent],
    settings: Settings,
) -> Tuple[ExtractionRoute, str]:
    """Return the extraction route and model for normalized content."""
    if content.kind == "image":
        return ExtractionRoute.IMAGE, settings.vision_model
    return ExtractionRoute.TEXT, choose_optimal_model(content.text, settings)
