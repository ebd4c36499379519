"""Document normalization: validate an upload and turn it into model input.

Text-bearing formats (PDF, Word, plain text) become cleaned ``TextContent``;
images become ``ImageContent`` carrying a base64 data URL for a vision model.
Every failure is raised as a typed ``NormalizationError``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from syllabus_ai.config import Settings
from syllabus_ai.core.exceptions import NormalizationError, NormalizationErrorType
from syllabus_ai.models.document import (
    DOCX,
    IMAGE_MEDIA_TYPES,
    MS_WORD,
    PDF,
    PLAIN_TEXT,
    SUPPORTED_MEDIA_TYPES,
    DocumentMetadata,
    ImageContent,
    ProcessingStats,
    RawDocument,
    TextContent,
)
from syllabus_ai.services.normalization.extractors import (
    decode_plain_text,
    encode_image,
    extract_pdf_text,
    extract_word_text,
)
from syllabus_ai.services.normalization.text_cleaner import clean_extracted_text, count_words
from syllabus_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_MAX_FILES = 5

_BYTES_PER_MB = 1024 * 1024


def get_processing_method(media_type: str) -> str:
    """Return ``vision_api`` for images and ``text_extraction`` otherwise."""
    return "vision_api" if media_type in IMAGE_MEDIA_TYPES else "text_extraction"


@dataclass
class BatchValidationResult:
    """Outcome of validating a batch of uploads before normalization."""

    valid_documents: List[RawDocument] = field(default_factory=list)
    invalid_documents: List[RawDocument] = field(default_factory=list)
    errors: List[NormalizationError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    total_size: int = 0

    @property
    def valid_count(self) -> int:
        return len(self.valid_documents)

    @property
    def invalid_count(self) -> int:
        return len(self.invalid_documents)


@dataclass
class NormalizationBatchResult:
    """Per-document outcomes of ``DocumentNormalizer.normalize_many``."""

    successful: List[Union[TextContent, ImageContent]] = field(default_factory=list)
    failed: List[NormalizationError] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return len(self.successful) + len(self.failed)


class DocumentNormalizer:
    """Validates raw uploads and extracts model-ready content.

    Stateless apart from its limits, so a single instance can be shared by
    concurrent pipeline runs. Parsing is synchronous; async callers run
    ``normalize`` in a worker thread.
    """

    def __init__(
        self,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        max_files: int = DEFAULT_MAX_FILES,
    ):
        """Initialize document normalizer.

        Args:
            max_file_size: Largest accepted declared size, in bytes
            max_files: Largest batch accepted by ``validate_documents``
        """
        self.max_file_size = max_file_size
        self.max_files = max_files

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentNormalizer":
        return cls(max_file_size=settings.max_file_size, max_files=settings.max_batch_files)

    def validate_document(self, doc: RawDocument) -> None:
        """Run the precondition checks without reading the content.

        Checks run in a fixed order: empty, too large, unsupported type.

        Raises:
            NormalizationError: On the first failed check
        """
        if doc.size <= 0:
            raise NormalizationError(
                NormalizationErrorType.EMPTY_FILE,
                "File appears to be empty",
                doc.file_name,
            )

        if doc.size > self.max_file_size:
            size_mb = doc.size / _BYTES_PER_MB
            limit_mb = self.max_file_size / _BYTES_PER_MB
            raise NormalizationError(
                NormalizationErrorType.FILE_TOO_LARGE,
                f"File is too large ({size_mb:.1f}MB). Maximum size is {limit_mb:g}MB.",
                doc.file_name,
            )

        if doc.media_type not in SUPPORTED_MEDIA_TYPES:
            raise NormalizationError(
                NormalizationErrorType.UNSUPPORTED_FILE,
                f"File type {doc.media_type} is not supported. "
                "Please use PDF, Word documents, text files, or images.",
                doc.file_name,
            )

    def normalize(self, doc: RawDocument) -> Union[TextContent, ImageContent]:
        """Validate a document and extract its content.

        Args:
            doc: Uploaded document

        Returns:
            TextContent or ImageContent

        Raises:
            NormalizationError: For any validation or extraction failure
        """
        self.validate_document(doc)

        LOGGER.info(
            f"Normalizing {doc.file_name}",
            extra={
                "file_name": doc.file_name,
                "media_type": doc.media_type,
                "size": doc.size,
                "processing_method": get_processing_method(doc.media_type),
            },
        )

        try:
            if doc.media_type in IMAGE_MEDIA_TYPES:
                return self._normalize_image(doc)
            return self._normalize_text(doc)
        except NormalizationError as e:
            LOGGER.warning(f"Normalization failed for {doc.file_name}: {e.error_type.value}")
            raise
        except Exception as e:
            LOGGER.error(
                f"Unexpected error normalizing {doc.file_name}: {e}",
                exc_info=True,
            )
            raise NormalizationError(
                NormalizationErrorType.PROCESSING_ERROR,
                str(e) or "Unknown processing error",
                doc.file_name,
                e,
            ) from e

    def _normalize_text(self, doc: RawDocument) -> TextContent:
        page_count: Optional[int] = None

        if doc.media_type == PDF:
            raw_text, page_count = extract_pdf_text(doc)
        elif doc.media_type in (DOCX, MS_WORD):
            raw_text = extract_word_text(doc)
        elif doc.media_type == PLAIN_TEXT:
            raw_text = decode_plain_text(doc)
        else:
            raise NormalizationError(
                NormalizationErrorType.PROCESSING_ERROR,
                f"Text extraction not implemented for {doc.media_type}",
                doc.file_name,
            )

        text = clean_extracted_text(raw_text)
        word_count = count_words(text)

        if not text:
            LOGGER.warning(f"No text could be extracted from {doc.file_name}")

        return TextContent(
            text=text,
            word_count=word_count,
            page_count=page_count,
            metadata=DocumentMetadata(
                original_name=doc.file_name,
                media_type=doc.media_type,
                size=doc.size,
                word_count=word_count,
                page_count=page_count,
            ),
        )

    def _normalize_image(self, doc: RawDocument) -> ImageContent:
        return ImageContent(
            encoded_payload=encode_image(doc),
            metadata=DocumentMetadata(
                original_name=doc.file_name,
                media_type=doc.media_type,
                size=doc.size,
            ),
        )

    def validate_documents(
        self,
        docs: Sequence[RawDocument],
        max_files: Optional[int] = None,
    ) -> BatchValidationResult:
        """Validate a batch of uploads independently.

        Documents beyond ``max_files`` are dropped with a single aggregate
        warning; they are neither valid nor invalid.

        Args:
            docs: Uploaded documents, in submission order
            max_files: Override for the configured batch limit

        Returns:
            BatchValidationResult
        """
        limit = self.max_files if max_files is None else max_files
        result = BatchValidationResult()

        if len(docs) > limit:
            result.warnings.append(
                f"Maximum {limit} files allowed. Only the first {limit} files will be processed."
            )
            LOGGER.warning(f"Batch of {len(docs)} documents truncated to {limit}")

        for doc in docs[:limit]:
            try:
                self.validate_document(doc)
            except NormalizationError as e:
                result.invalid_documents.append(doc)
                result.errors.append(e)
                continue
            result.valid_documents.append(doc)
            result.total_size += doc.size

        return result

    def normalize_many(self, docs: Sequence[RawDocument]) -> NormalizationBatchResult:
        """Normalize each document independently; one failure never aborts the rest."""
        result = NormalizationBatchResult()
        for doc in docs:
            try:
                result.successful.append(self.normalize(doc))
            except NormalizationError as e:
                result.failed.append(e)

        LOGGER.info(
            f"Normalized {len(result.successful)}/{result.total_processed} documents",
            extra={"failed": len(result.failed)},
        )
        return result

    @staticmethod
    def get_processing_stats(results: Sequence[Any]) -> ProcessingStats:
        """Aggregate counts over normalized documents.

        Args:
            results: TextContent / ImageContent items

        Returns:
            ProcessingStats
        """
        total_words = 0
        total_size = 0
        processing_methods: Dict[str, int] = {}
        file_types: Dict[str, int] = {}

        for content in results:
            total_size += content.metadata.size
            total_words += content.metadata.word_count
            method = content.processing_method
            processing_methods[method] = processing_methods.get(method, 0) + 1
            media_type = content.metadata.media_type
            file_types[media_type] = file_types.get(media_type, 0) + 1

        return ProcessingStats(
            total_files=len(results),
            total_size=total_size,
            total_words=total_words,
            average_words_per_file=round(total_words / len(results)) if results else 0,
            processing_methods=processing_methods,
            file_types=file_types,
        )
