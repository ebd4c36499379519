"""End-to-end syllabus pipeline: normalize, extract, resolve due dates.

The pipeline is the only layer that converts typed pipeline errors into
result values, so collaborators get one ``PipelineResult`` per document and
never need to catch anything for an expected failure.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from syllabus_ai.config import Settings, get_settings
from syllabus_ai.core.exceptions import ExtractionError, NormalizationError
from syllabus_ai.core.unified_llm import create_llm_client_from_settings
from syllabus_ai.models.document import RawDocument
from syllabus_ai.models.extraction import ExtractionOptions
from syllabus_ai.models.syllabus import AssignmentWithDate, ParsedSyllabus
from syllabus_ai.services.extraction.syllabus_extractor import SyllabusExtractor
from syllabus_ai.services.normalization.document_normalizer import DocumentNormalizer
from syllabus_ai.services.temporal.week_resolver import DateLike, convert_weeks_to_dates_with_details
from syllabus_ai.utils.logging import get_logger, set_log_level

LOGGER = get_logger(__name__)

PipelineError = Union[NormalizationError, ExtractionError]


@dataclass
class PipelineResult:
    """Outcome of running one document through the pipeline."""

    file_name: str
    success: bool
    syllabus: Optional[ParsedSyllabus] = None
    assignments: List[AssignmentWithDate] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    error: Optional[PipelineError] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileName": self.file_name,
            "success": self.success,
            "syllabus": self.syllabus.model_dump() if self.syllabus else None,
            "assignments": [a.model_dump() for a in self.assignments],
            "warnings": list(self.warnings),
            "error": self.error.to_dict() if self.error else None,
        }


@dataclass
class PipelineBatchResult:
    """Per-document results of a batch run, in input order."""

    results: List[PipelineResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def successful(self) -> List[PipelineResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[PipelineResult]:
        return [r for r in self.results if not r.success]


class SyllabusPipeline:
    """Runs documents through normalization, extraction and week resolution.

    Attributes:
        normalizer: Document normalizer
        extractor: Extraction orchestrator (holds the injected LLM client)
        settings: Application settings
    """

    def __init__(
        self,
        normalizer: DocumentNormalizer,
        extractor: SyllabusExtractor,
        settings: Optional[Settings] = None,
    ):
        self.normalizer = normalizer
        self.extractor = extractor
        self.settings = settings or extractor.settings

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        client: Any = None,
    ) -> "SyllabusPipeline":
        """Build a pipeline, creating the LLM client from settings if none is given.

        Also applies ``settings.log_level`` to the package loggers.
        """
        settings = settings or get_settings()
        set_log_level(settings.log_level)
        client = client or create_llm_client_from_settings(settings)
        return cls(
            normalizer=DocumentNormalizer.from_settings(settings),
            extractor=SyllabusExtractor(client, settings),
            settings=settings,
        )

    async def process(
        self,
        doc: RawDocument,
        semester_start: Optional[DateLike],
        options: Optional[ExtractionOptions] = None,
    ) -> PipelineResult:
        """Run one document end to end.

        Args:
            doc: Uploaded document
            semester_start: First day of week 1
            options: Extraction options; defaults come from settings

        Returns:
            PipelineResult; ``success`` is False when ``error`` is set
        """
        try:
            # pdfplumber / python-docx parsing is blocking
            content = await asyncio.to_thread(self.normalizer.normalize, doc)
            syllabus = await self.extractor.extract(content, options)
        except (NormalizationError, ExtractionError) as e:
            LOGGER.error(
                f"Pipeline failed for {doc.file_name}: {e.error_type.value}",
                extra={"file_name": doc.file_name, "error_type": e.error_type.value},
            )
            return PipelineResult(file_name=doc.file_name, success=False, error=e)

        conversion = convert_weeks_to_dates_with_details(syllabus.assignments, semester_start)
        warnings = list(syllabus.metadata.warnings) + conversion.warnings

        LOGGER.info(
            f"Processed {doc.file_name}: {len(conversion.assignments)} dated assignments",
            extra={"week_converted": conversion.total_converted, "warnings": len(warnings)},
        )

        return PipelineResult(
            file_name=doc.file_name,
            success=True,
            syllabus=syllabus,
            assignments=conversion.assignments,
            warnings=warnings,
        )

    async def process_batch(
        self,
        docs: Sequence[RawDocument],
        semester_start: Optional[DateLike],
        options: Optional[ExtractionOptions] = None,
    ) -> PipelineBatchResult:
        """Run several documents concurrently.

        At most ``max_batch_files`` documents are accepted and at most
        ``max_concurrent_documents`` run at once. Each run is independent;
        one document's failure does not affect the others.

        Args:
            docs: Uploaded documents
            semester_start: First day of week 1, shared by the batch
            options: Extraction options shared by the batch

        Returns:
            PipelineBatchResult with results in input order
        """
        batch = PipelineBatchResult()
        limit = self.settings.max_batch_files

        if len(docs) > limit:
            batch.warnings.append(
                f"Maximum {limit} files allowed. Only the first {limit} files will be processed."
            )
            LOGGER.warning(f"Batch of {len(docs)} documents truncated to {limit}")

        semaphore = asyncio.Semaphore(max(1, self.settings.max_concurrent_documents))

        async def run_one(doc: RawDocument) -> PipelineResult:
            async with semaphore:
                return await self.process(doc, semester_start, options)

        batch.results = list(await asyncio.gather(*(run_one(doc) for doc in docs[:limit])))

        LOGGER.info(
            f"Batch complete: {len(batch.successful)} succeeded, {len(batch.failed)} failed",
        )
        return batch
