"""Structured syllabus extraction orchestrator.

Drives a language model through the prompt/response contract:

- build the prompt for the content's route (text or image)
- call the injected LLM client
- parse, alias-normalize and validate the JSON response
- retry transient failures under ``RetryPolicy``
- apply the post-processing rules and return a typed ``ParsedSyllabus``
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from syllabus_ai.config import Settings, get_settings
from syllabus_ai.core.exceptions import ExtractionError, ExtractionErrorType
from syllabus_ai.models.document import ImageContent, TextContent
from syllabus_ai.models.extraction import ExtractionOptions, ExtractionRequest, ExtractionRoute
from syllabus_ai.models.syllabus import (
    CourseInfo,
    ParsedAssignment,
    ParsedSyllabus,
    ParsingMetadata,
    ScheduleEntry,
)
from syllabus_ai.prompts.syllabus_prompts import (
    PROMPT_VERSION,
    build_system_prompt,
    build_user_prompt,
    build_vision_prompt,
)
from syllabus_ai.services.extraction.model_router import choose_route
from syllabus_ai.services.extraction.response_normalizer import normalize_response
from syllabus_ai.services.extraction.response_validator import validate_response
from syllabus_ai.services.extraction.retry_policy import ClockFunc, RetryPolicy, SleepFunc
from syllabus_ai.utils.json_parser import parse_json_safely
from syllabus_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)

IMAGE_WARNING = "Parsed from image - accuracy may vary"
MISSING_KEY_MESSAGE = "Extraction service API key is not configured"


class SyllabusExtractor:
    """Turns normalized content into a validated ``ParsedSyllabus``.

    The LLM client is supplied by the caller (usually a ``UnifiedLLMClient``)
    and must expose ``async generate_content(contents, system_instruction,
    generation_config, model) -> str``.

    Attributes:
        client: LLM client used for every attempt
        settings: Application settings (models, retry and generation knobs)
    """

    def __init__(
        self,
        client: Any,
        settings: Optional[Settings] = None,
        sleep: Optional[SleepFunc] = None,
        clock: Optional[ClockFunc] = None,
    ):
        """Initialize syllabus extractor.

        Args:
            client: LLM client
            settings: Application settings; loaded from the environment when omitted
            sleep: Awaitable used for retry backoff (defaults to asyncio.sleep)
            clock: Monotonic clock used for deadlines and timings
        """
        self.client = client
        self.settings = settings or get_settings()
        self.sleep = sleep
        self.clock = clock

        LOGGER.info(f"Initialized {self.__class__.__name__} (prompt {PROMPT_VERSION})")

    def default_options(self) -> ExtractionOptions:
        return ExtractionOptions(
            confidence_threshold=self.settings.confidence_threshold,
            max_retries=self.settings.max_retries,
        )

    async def extract(
        self,
        content: Union[TextContent, ImageContent],
        options: Optional[ExtractionOptions] = None,
    ) -> ParsedSyllabus:
        """Extract structured syllabus data from normalized content.

        Args:
            content: Output of the document normalizer
            options: Per-run options; defaults come from settings

        Returns:
            ParsedSyllabus with confidence and warnings filled in

        Raises:
            ExtractionError: Terminal failure after the retry policy gave up
        """
        options = options or self.default_options()

        if not self._has_credentials():
            LOGGER.error(MISSING_KEY_MESSAGE)
            raise ExtractionError(ExtractionErrorType.AUTH_ERROR, MISSING_KEY_MESSAGE)

        policy = RetryPolicy(
            max_attempts=options.max_attempts,
            base_delay=self.settings.retry_base_delay,
            retry_invalid_responses=self.settings.retry_invalid_responses,
            sleep=self.sleep,
            clock=self.clock,
        )

        route, model = choose_route(content, self.settings)
        request = ExtractionRequest(
            content=content,
            options=options,
            route=route,
            model=model,
            system_prompt=build_system_prompt(options.include_schedule),
            started_at=policy.clock(),
        )

        LOGGER.info(
            f"Extracting syllabus from {content.metadata.original_name}",
            extra={
                "route": route.value,
                "model": model,
                "max_attempts": options.max_attempts,
            },
        )

        async def attempt(attempt_number: int) -> ParsedSyllabus:
            LOGGER.debug(f"Extraction attempt {attempt_number} via {route.value} route with {model}")
            return await self._attempt(request, policy)

        syllabus = await policy.run(attempt, deadline=options.deadline)

        LOGGER.info(
            f"Extracted {len(syllabus.assignments)} assignments from "
            f"{content.metadata.original_name}",
            extra={
                "parsing_confidence": syllabus.metadata.parsing_confidence,
                "weeks_detected": syllabus.metadata.weeks_detected,
                "warnings": len(syllabus.metadata.warnings),
                "processing_time_ms": syllabus.metadata.processing_time,
            },
        )
        return syllabus

    def _has_credentials(self) -> bool:
        has_credentials = getattr(self.client, "has_credentials", True)
        return bool(has_credentials)

    def _build_call(self, request: ExtractionRequest) -> Dict[str, Any]:
        generation_config = {
            "temperature": self.settings.temperature,
            "max_output_tokens": self.settings.max_output_tokens,
            "response_mime_type": "application/json",
        }

        if request.route == ExtractionRoute.IMAGE:
            contents: Union[str, List[Dict[str, Any]]] = [
                {"type": "text", "text": build_vision_prompt(request.options.include_schedule)},
                {
                    "type": "image_url",
                    "image_url": {"url": request.content.encoded_payload, "detail": "high"},
                },
            ]
            system_instruction = None
        else:
            contents = build_user_prompt(request.content.text)
            system_instruction = request.system_prompt

        return {
            "contents": contents,
            "system_instruction": system_instruction,
            "generation_config": generation_config,
            "model": request.model,
        }

    async def _attempt(self, request: ExtractionRequest, policy: RetryPolicy) -> ParsedSyllabus:
        raw = await self.client.generate_content(**self._build_call(request))

        if not raw or not raw.strip():
            raise ExtractionError(
                ExtractionErrorType.PARSING_ERROR,
                "No content received from extraction service",
            )

        data = parse_json_safely(raw)
        if data is None:
            raise ExtractionError(ExtractionErrorType.PARSING_ERROR, "Malformed JSON response")

        normalized = normalize_response(data)
        violations = validate_response(normalized, request.options.include_schedule)
        if violations:
            raise ExtractionError(
                ExtractionErrorType.INVALID_RESPONSE,
                f"Invalid response structure: {'; '.join(violations)}",
                violations=violations,
            )

        processing_time = request.elapsed_ms(policy.clock())
        try:
            return self._finalize(normalized, request, processing_time)
        except ValidationError as e:
            field_errors = [
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            ]
            raise ExtractionError(
                ExtractionErrorType.INVALID_RESPONSE,
                "Response fields have unexpected types",
                e,
                violations=field_errors,
            ) from e

    def _finalize(
        self,
        data: Dict[str, Any],
        request: ExtractionRequest,
        processing_time: int,
    ) -> ParsedSyllabus:
        """Apply the post-processing rules to a validated response."""
        metadata = data["metadata"]
        options = request.options

        warnings = [w for w in (metadata.get("warnings") or []) if isinstance(w, str)]

        assignments = [ParsedAssignment(**a) for a in data["assignments"]]

        weeks_detected = sum(1 for a in assignments if a.week is not None and not a.specific_date)
        reported_weeks = metadata["weeks_detected"]
        if reported_weeks != weeks_detected:
            LOGGER.debug(f"Model reported weeks_detected={reported_weeks}, counted {weeks_detected}")
            warnings.append(f"weeks_detected corrected from {reported_weeks} to {weeks_detected}")

        if request.route == ExtractionRoute.IMAGE:
            warnings.append(IMAGE_WARNING)

        schedule = None
        if options.include_schedule and isinstance(data.get("schedule"), list):
            schedule = [ScheduleEntry(**entry) for entry in data["schedule"]]

        confidence = float(metadata["parsing_confidence"])
        if confidence < options.confidence_threshold:
            warnings.append(f"Low parsing confidence: {confidence:.2f}")

        return ParsedSyllabus(
            course_info=CourseInfo(**data["course_info"]),
            assignments=assignments,
            schedule=schedule,
            metadata=ParsingMetadata(
                parsing_confidence=confidence,
                weeks_detected=weeks_detected,
                original_format=request.route.value,
                warnings=warnings,
                processing_time=processing_time,
            ),
        )
