from syllabus_ai.services.extraction.model_router import choose_optimal_model, choose_route
from syllabus_ai.services.extraction.quality import analyze_parsing_quality, estimate_processing_cost
from syllabus_ai.services.extraction.response_normalizer import normalize_response
from syllabus_ai.services.extraction.response_validator import validate_response
from syllabus_ai.services.extraction.retry_policy import RetryPolicy
from syllabus_ai.services.extraction.syllabus_extractor import SyllabusExtractor

__all__ = [
    "RetryPolicy",
    "SyllabusExtractor",
    "analyze_parsing_quality",
    "choose_optimal_model",
    "choose_route",
    "estimate_processing_cost",
    "normalize_response",
    "validate_response",
]
