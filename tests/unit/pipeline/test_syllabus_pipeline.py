"""Tests for the end-to-end pipeline facade and batch runner."""

import asyncio
import json
import logging

import pytest
from unittest.mock import patch

from syllabus_ai.core.exceptions import (
    AuthenticationError,
    ExtractionErrorType,
    NormalizationErrorType,
)
from syllabus_ai.core.unified_llm import UnifiedLLMClient
from syllabus_ai.models.document import PLAIN_TEXT, RawDocument
from syllabus_ai.services.extraction.syllabus_extractor import SyllabusExtractor
from syllabus_ai.services.normalization.document_normalizer import DocumentNormalizer
from syllabus_ai.services.pipeline.syllabus_pipeline import SyllabusPipeline
from syllabus_ai.utils.logging import set_log_level


def text_doc(name: str, text: str = "CS 101\nWeek 1: Assignment 1\nWeek 3: Quiz 1") -> RawDocument:
    return RawDocument.from_bytes(text.encode("utf-8"), PLAIN_TEXT, name)


@pytest.fixture
def pipeline(llm_client, settings, fake_sleep) -> SyllabusPipeline:
    return SyllabusPipeline(
        normalizer=DocumentNormalizer.from_settings(settings),
        extractor=SyllabusExtractor(llm_client, settings, sleep=fake_sleep),
        settings=settings,
    )


class TestProcess:

    @pytest.mark.asyncio
    async def test_success_resolves_due_dates(self, pipeline, llm_client, valid_response_json):
        llm_client.generate_content.return_value = valid_response_json

        result = await pipeline.process(text_doc("cs101.txt"), "2024-09-01")

        assert result.success is True
        assert result.error is None
        assert result.file_name == "cs101.txt"
        assert [a.due_date for a in result.assignments] == ["2024-09-01", "2024-09-15", "2024-10-15"]
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_conversion_warnings_are_merged(self, pipeline, llm_client, valid_response):
        valid_response["assignments"].append({"title": "Capstone", "week": 30, "type": "project"})
        valid_response["metadata"]["weeks_detected"] = 3
        llm_client.generate_content.return_value = json.dumps(valid_response)

        result = await pipeline.process(text_doc("cs101.txt"), "2024-09-01")

        assert result.success is True
        assert 'Assignment "Capstone": Week 30 seems unusual' in result.warnings

    @pytest.mark.asyncio
    async def test_invalid_semester_start_keeps_syllabus(self, pipeline, llm_client, valid_response_json):
        llm_client.generate_content.return_value = valid_response_json

        result = await pipeline.process(text_doc("cs101.txt"), "first monday of fall")

        assert result.success is True
        assert result.syllabus is not None
        assert result.assignments == []
        assert "Invalid semester start date provided" in result.warnings

    @pytest.mark.asyncio
    async def test_normalization_error_becomes_result(self, pipeline, llm_client):
        doc = RawDocument(content=b"", media_type=PLAIN_TEXT, size=0, file_name="empty.txt")

        result = await pipeline.process(doc, "2024-09-01")

        assert result.success is False
        assert result.error.error_type == NormalizationErrorType.EMPTY_FILE
        assert result.to_dict()["error"] == {
            "type": "EMPTY_FILE",
            "message": "File appears to be empty",
            "fileName": "empty.txt",
        }
        llm_client.generate_content.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_extraction_error_becomes_result(self, pipeline, llm_client):
        llm_client.generate_content.side_effect = AuthenticationError("bad key", status_code=401)

        result = await pipeline.process(text_doc("cs101.txt"), "2024-09-01")

        assert result.success is False
        assert result.error.error_type == ExtractionErrorType.AUTH_ERROR
        assert result.syllabus is None

    @pytest.mark.asyncio
    async def test_unexpected_client_failure_becomes_api_error(self, pipeline, llm_client):
        llm_client.generate_content.side_effect = RuntimeError("boom")

        result = await pipeline.process(text_doc("cs101.txt"), "2024-09-01")

        assert result.success is False
        assert result.error.error_type == ExtractionErrorType.API_ERROR
        assert result.error.message == "Unexpected extraction service failure"
        assert result.to_dict()["error"]["type"] == "API_ERROR"
        assert llm_client.generate_content.await_count == 1

    @pytest.mark.asyncio
    async def test_unrepresentable_week_is_flagged(self, pipeline, llm_client, valid_response):
        valid_response["assignments"][0]["week"] = 1_000_000
        llm_client.generate_content.return_value = json.dumps(valid_response)

        result = await pipeline.process(text_doc("cs101.txt"), "2024-09-01")

        assert result.success is True
        assert result.assignments[0].due_date == "2024-09-01"
        assert (
            'Assignment "Assignment 1": Week 1000000 cannot be resolved to a calendar date' in result.warnings
        )

    @pytest.mark.asyncio
    async def test_to_dict_on_success(self, pipeline, llm_client, valid_response_json):
        llm_client.generate_content.return_value = valid_response_json

        payload = (await pipeline.process(text_doc("cs101.txt"), "2024-09-01")).to_dict()

        assert payload["success"] is True
        assert payload["error"] is None
        assert payload["syllabus"]["metadata"]["parsing_confidence"] == 0.92
        assert payload["assignments"][0]["due_date"] == "2024-09-01"


class TestProcessBatch:

    @pytest.mark.asyncio
    async def test_results_in_input_order_with_isolated_failures(self, pipeline, llm_client, valid_response_json):
        llm_client.generate_content.return_value = valid_response_json
        docs = [
            text_doc("a.txt"),
            RawDocument(content=b"MZ", media_type="application/x-msdownload", size=2, file_name="b.exe"),
            text_doc("c.txt"),
        ]

        batch = await pipeline.process_batch(docs, "2024-09-01")

        assert [r.file_name for r in batch.results] == ["a.txt", "b.exe", "c.txt"]
        assert [r.success for r in batch.results] == [True, False, True]
        assert batch.failed[0].error.error_type == NormalizationErrorType.UNSUPPORTED_FILE
        assert batch.warnings == []

    @pytest.mark.asyncio
    async def test_batch_limit(self, pipeline, llm_client, valid_response_json):
        llm_client.generate_content.return_value = valid_response_json

        batch = await pipeline.process_batch([text_doc(f"{i}.txt") for i in range(7)], "2024-09-01")

        assert len(batch.results) == 5
        assert batch.warnings == ["Maximum 5 files allowed. Only the first 5 files will be processed."]

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, pipeline, llm_client, valid_response_json, settings):
        active = 0
        peak = 0

        async def slow_generate(**kwargs):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return valid_response_json

        llm_client.generate_content.side_effect = slow_generate

        batch = await pipeline.process_batch([text_doc(f"{i}.txt") for i in range(5)], "2024-09-01")

        assert all(r.success for r in batch.results)
        assert peak <= settings.max_concurrent_documents


def test_from_settings_builds_unified_client(settings):
    with patch("syllabus_ai.core.unified_llm.OpenAIClient"):
        pipeline = SyllabusPipeline.from_settings(settings)

    assert isinstance(pipeline.extractor.client, UnifiedLLMClient)
    assert pipeline.normalizer.max_file_size == settings.max_file_size


def test_from_settings_applies_log_level(settings):
    pipeline_logger = logging.getLogger("syllabus_ai.services.pipeline.syllabus_pipeline")

    try:
        with patch("syllabus_ai.core.unified_llm.OpenAIClient"):
            SyllabusPipeline.from_settings(settings.model_copy(update={"log_level": "WARNING"}))

        assert pipeline_logger.level == logging.WARNING
    finally:
        set_log_level("INFO")
