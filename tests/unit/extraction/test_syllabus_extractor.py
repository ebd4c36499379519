"""Tests for the extraction orchestrator."""

import json
import time

import pytest

from syllabus_ai.core.exceptions import (
    APIClientError,
    AuthenticationError,
    ExtractionError,
    ExtractionErrorType,
    RateLimitError,
)
from syllabus_ai.models.extraction import ExtractionOptions
from syllabus_ai.services.extraction.syllabus_extractor import IMAGE_WARNING, SyllabusExtractor


@pytest.fixture
def extractor(llm_client, settings, fake_sleep) -> SyllabusExtractor:
    return SyllabusExtractor(llm_client, settings, sleep=fake_sleep)


class TestSuccessfulExtraction:

    @pytest.mark.asyncio
    async def test_text_route(self, extractor, llm_client, text_content, valid_response_json, settings):
        llm_client.generate_content.return_value = valid_response_json

        syllabus = await extractor.extract(text_content)

        assert syllabus.course_info.name == "Introduction to Computer Science"
        assert [a.title for a in syllabus.assignments] == ["Assignment 1", "Quiz 1", "Midterm"]
        assert syllabus.metadata.parsing_confidence == 0.92
        assert syllabus.metadata.weeks_detected == 2
        assert syllabus.metadata.original_format == "text"
        assert syllabus.metadata.warnings == []
        assert syllabus.metadata.processing_time >= 0
        assert syllabus.schedule is None

        call_kwargs = llm_client.generate_content.await_args.kwargs
        assert call_kwargs["model"] == settings.simple_text_model
        assert text_content.text in call_kwargs["contents"]
        assert "WEEK NUMBER EXTRACTION" in call_kwargs["system_instruction"]
        assert call_kwargs["generation_config"]["response_mime_type"] == "application/json"

    @pytest.mark.asyncio
    async def test_processing_time_uses_injected_clock(
        self, llm_client, settings, fake_sleep, text_content, valid_response_json
    ):
        llm_client.generate_content.return_value = valid_response_json
        ticks = iter([100.0, 101.25])
        extractor = SyllabusExtractor(llm_client, settings, sleep=fake_sleep, clock=lambda: next(ticks))

        syllabus = await extractor.extract(text_content)

        assert syllabus.metadata.processing_time == 1250

    @pytest.mark.asyncio
    async def test_long_text_uses_stronger_model(
        self, extractor, llm_client, text_content_factory, valid_response_json, settings
    ):
        llm_client.generate_content.return_value = valid_response_json
        content = text_content_factory("Week 1: reading\n" * 30)

        await extractor.extract(content)

        assert llm_client.generate_content.await_args.kwargs["model"] == settings.text_model

    @pytest.mark.asyncio
    async def test_image_route(self, extractor, llm_client, image_content, valid_response_json, settings):
        llm_client.generate_content.return_value = valid_response_json

        syllabus = await extractor.extract(image_content)

        assert syllabus.metadata.original_format == "image"
        assert IMAGE_WARNING in syllabus.metadata.warnings

        call_kwargs = llm_client.generate_content.await_args.kwargs
        text_part, image_part = call_kwargs["contents"]
        assert call_kwargs["model"] == settings.vision_model
        assert call_kwargs["system_instruction"] is None
        assert "Please analyze this syllabus image" in text_part["text"]
        assert image_part["image_url"]["url"] == image_content.encoded_payload
        assert image_part["image_url"]["detail"] == "high"

    @pytest.mark.asyncio
    async def test_fenced_json_and_aliases(self, extractor, llm_client, text_content):
        payload = {
            "course_info": {"course_name": "Biology 110", "professor": "Dr. Okafor"},
            "assignments": [{"name": "Lab Report", "week_number": "4", "assignment_type": "Lab"}],
            "metadata": {"confidence": 0.85, "weeks_detected": 1},
        }
        llm_client.generate_content.return_value = f"```json\n{json.dumps(payload)}\n```"

        syllabus = await extractor.extract(text_content)

        assert syllabus.course_info.name == "Biology 110"
        assert syllabus.course_info.instructor == "Dr. Okafor"
        assert syllabus.assignments[0].week == 4
        assert syllabus.assignments[0].type == "lab"
        assert syllabus.metadata.parsing_confidence == 0.85

    @pytest.mark.asyncio
    async def test_low_confidence_warning(self, extractor, llm_client, text_content, valid_response):
        valid_response["metadata"]["parsing_confidence"] = 0.55
        llm_client.generate_content.return_value = json.dumps(valid_response)

        syllabus = await extractor.extract(text_content)

        assert "Low parsing confidence: 0.55" in syllabus.metadata.warnings
        assert syllabus.needs_review is True

    @pytest.mark.asyncio
    async def test_weeks_detected_is_corrected(self, extractor, llm_client, text_content, valid_response):
        valid_response["metadata"]["weeks_detected"] = 5
        llm_client.generate_content.return_value = json.dumps(valid_response)

        syllabus = await extractor.extract(text_content)

        assert syllabus.metadata.weeks_detected == 2
        assert "weeks_detected corrected from 5 to 2" in syllabus.metadata.warnings

    @pytest.mark.asyncio
    async def test_model_warnings_are_kept(self, extractor, llm_client, text_content, valid_response):
        valid_response["metadata"]["warnings"] = ["Multiple courses detected in document"]
        llm_client.generate_content.return_value = json.dumps(valid_response)

        syllabus = await extractor.extract(text_content)

        assert syllabus.metadata.warnings == ["Multiple courses detected in document"]

    @pytest.mark.asyncio
    async def test_schedule_only_when_requested(self, extractor, llm_client, text_content, valid_response):
        valid_response["schedule"] = [
            {"day": "Monday", "start_time": "10:00", "end_time": "11:15", "location": "Hall 2", "type": "lecture"}
        ]
        llm_client.generate_content.return_value = json.dumps(valid_response)

        without = await extractor.extract(text_content)
        with_schedule = await extractor.extract(text_content, ExtractionOptions(include_schedule=True))

        assert without.schedule is None
        assert with_schedule.schedule[0].day == "Monday"
        assert "CLASS SCHEDULE (REQUIRED)" in llm_client.generate_content.await_args.kwargs["system_instruction"]


class TestExtractionFailures:

    @pytest.mark.asyncio
    async def test_missing_metadata_is_invalid_response(self, extractor, llm_client, text_content, valid_response):
        del valid_response["metadata"]
        llm_client.generate_content.return_value = json.dumps(valid_response)

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(text_content)

        assert exc_info.value.error_type == ExtractionErrorType.INVALID_RESPONSE
        assert "Missing metadata" in exc_info.value.violations
        assert llm_client.generate_content.await_count == 3

    @pytest.mark.asyncio
    async def test_two_rate_limits_then_success(
        self, extractor, llm_client, text_content, valid_response_json, fake_sleep
    ):
        llm_client.generate_content.side_effect = [
            RateLimitError("Rate limit exceeded"),
            RateLimitError("Rate limit exceeded"),
            valid_response_json,
        ]

        syllabus = await extractor.extract(text_content, ExtractionOptions(max_retries=3))

        assert syllabus.course_info.code == "CS 101"
        assert llm_client.generate_content.await_count == 3
        assert [c.args[0] for c in fake_sleep.await_args_list] == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_auth_error_is_not_retried(self, extractor, llm_client, text_content):
        llm_client.generate_content.side_effect = AuthenticationError("Invalid API key", status_code=401)

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(text_content)

        assert exc_info.value.error_type == ExtractionErrorType.AUTH_ERROR
        assert exc_info.value.is_retryable is False
        assert llm_client.generate_content.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_before_any_call(self, extractor, llm_client, text_content):
        llm_client.has_credentials = False

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(text_content)

        assert exc_info.value.error_type == ExtractionErrorType.AUTH_ERROR
        assert exc_info.value.message == "Extraction service API key is not configured"
        llm_client.generate_content.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self, extractor, llm_client, text_content):
        llm_client.generate_content.side_effect = RateLimitError("Rate limit exceeded", retry_after=30.0)

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(text_content)

        assert exc_info.value.error_type == ExtractionErrorType.RATE_LIMIT
        assert exc_info.value.retry_after == 30.0

    @pytest.mark.asyncio
    async def test_server_errors_become_api_error(self, extractor, llm_client, text_content):
        llm_client.generate_content.side_effect = APIClientError("Extraction service error (502)", status_code=502)

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(text_content)

        assert exc_info.value.error_type == ExtractionErrorType.API_ERROR
        assert exc_info.value.attempts == 3

    @pytest.mark.asyncio
    async def test_empty_payload_is_parsing_error(self, extractor, llm_client, text_content):
        llm_client.generate_content.return_value = "   "

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(text_content, ExtractionOptions(max_retries=1))

        assert exc_info.value.error_type == ExtractionErrorType.PARSING_ERROR
        assert exc_info.value.message == "No content received from extraction service"

    @pytest.mark.asyncio
    async def test_malformed_json_then_recovery(
        self, extractor, llm_client, text_content, valid_response_json, fake_sleep
    ):
        llm_client.generate_content.side_effect = ["{not json", valid_response_json]

        syllabus = await extractor.extract(text_content)

        assert syllabus.course_info.name == "Introduction to Computer Science"
        fake_sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_invalid_responses_not_retried_when_disabled(
        self, llm_client, settings, fake_sleep, text_content
    ):
        settings.retry_invalid_responses = False
        extractor = SyllabusExtractor(llm_client, settings, sleep=fake_sleep)
        llm_client.generate_content.return_value = "{not json"

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(text_content)

        assert exc_info.value.error_type == ExtractionErrorType.PARSING_ERROR
        assert exc_info.value.message == "Malformed JSON response"
        assert llm_client.generate_content.await_count == 1

    @pytest.mark.asyncio
    async def test_out_of_range_confidence_is_rejected(self, extractor, llm_client, text_content, valid_response):
        valid_response["metadata"]["parsing_confidence"] = 1.5
        llm_client.generate_content.return_value = json.dumps(valid_response)

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(text_content, ExtractionOptions(max_retries=1))

        assert exc_info.value.violations == ["parsing_confidence must be between 0 and 1"]

    @pytest.mark.asyncio
    async def test_wrongly_typed_fields_are_invalid_response(
        self, extractor, llm_client, text_content, valid_response
    ):
        valid_response["assignments"][0]["points"] = "ten"
        llm_client.generate_content.return_value = json.dumps(valid_response)

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(text_content, ExtractionOptions(max_retries=1))

        assert exc_info.value.error_type == ExtractionErrorType.INVALID_RESPONSE
        assert exc_info.value.violations

    @pytest.mark.asyncio
    async def test_expired_deadline(self, extractor, llm_client, text_content):
        options = ExtractionOptions(deadline=time.monotonic() - 1)

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(text_content, options)

        assert exc_info.value.error_type == ExtractionErrorType.API_ERROR
        assert exc_info.value.message == "Extraction deadline exceeded"
        llm_client.generate_content.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_max_retries_zero_makes_one_attempt(self, extractor, llm_client, text_content):
        llm_client.generate_content.side_effect = APIClientError("down", status_code=503)

        with pytest.raises(ExtractionError):
            await extractor.extract(text_content, ExtractionOptions(max_retries=0))

        assert llm_client.generate_content.await_count == 1
