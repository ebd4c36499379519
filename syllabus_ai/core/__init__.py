from syllabus_ai.core.exceptions import (
    APIClientError,
    APITimeoutError,
    AuthenticationError,
    ConfigurationError,
    ExtractionError,
    ExtractionErrorType,
    NormalizationError,
    NormalizationErrorType,
    RateLimitError,
    SyllabusAIException,
)
from syllabus_ai.core.unified_llm import LLMProvider, UnifiedLLMClient, create_llm_client_from_settings

__all__ = [
    "APIClientError",
    "APITimeoutError",
    "AuthenticationError",
    "ConfigurationError",
    "ExtractionError",
    "ExtractionErrorType",
    "LLMProvider",
    "NormalizationError",
    "NormalizationErrorType",
    "RateLimitError",
    "SyllabusAIException",
    "UnifiedLLMClient",
    "create_llm_client_from_settings",
]
