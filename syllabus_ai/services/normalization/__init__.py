from syllabus_ai.services.normalization.document_normalizer import (
    BatchValidationResult,
    DocumentNormalizer,
    NormalizationBatchResult,
    get_processing_method,
)
from syllabus_ai.services.normalization.text_cleaner import clean_extracted_text, count_words

__all__ = [
    "BatchValidationResult",
    "DocumentNormalizer",
    "NormalizationBatchResult",
    "clean_extracted_text",
    "count_words",
    "get_processing_method",
]
