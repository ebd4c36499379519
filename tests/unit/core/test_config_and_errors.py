"""Tests for settings loading, logging setup and the error taxonomy."""

import logging

import pytest

from syllabus_ai.config import Settings
from syllabus_ai.core.exceptions import (
    ExtractionError,
    ExtractionErrorType,
    NormalizationError,
    NormalizationErrorType,
)
from syllabus_ai.utils.logging import get_logger, set_log_level


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.max_retries == 3
        assert settings.retry_base_delay == 1.0
        assert settings.confidence_threshold == 0.7
        assert settings.max_file_size == 10 * 1024 * 1024
        assert settings.max_batch_files == 5
        assert settings.max_concurrent_documents == 3
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "gemini")
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        monkeypatch.setenv("MAX_RETRIES", "5")
        monkeypatch.setenv("RETRY_INVALID_RESPONSES", "false")

        settings = Settings(_env_file=None)

        assert settings.llm_provider == "gemini"
        assert settings.gemini_api_key == "env-key"
        assert settings.max_retries == 5
        assert settings.retry_invalid_responses is False

    def test_confidence_threshold_is_bounded(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, confidence_threshold=1.5)


class TestPipelineErrors:

    def test_normalization_error_to_dict(self):
        error = NormalizationError(NormalizationErrorType.EMPTY_FILE, "File appears to be empty", "a.pdf")

        assert error.to_dict() == {
            "type": "EMPTY_FILE",
            "message": "File appears to be empty",
            "fileName": "a.pdf",
        }

    def test_extraction_error_to_dict_includes_optional_fields(self):
        error = ExtractionError(
            ExtractionErrorType.INVALID_RESPONSE,
            "Invalid response structure",
            violations=["Missing metadata"],
        )
        rate_limited = ExtractionError(ExtractionErrorType.RATE_LIMIT, "slow down", retry_after=4.0)

        assert error.to_dict() == {
            "type": "INVALID_RESPONSE",
            "message": "Invalid response structure",
            "violations": ["Missing metadata"],
        }
        assert rate_limited.to_dict()["retryAfter"] == 4.0

    def test_only_auth_errors_are_not_retryable(self):
        assert ExtractionError(ExtractionErrorType.AUTH_ERROR, "bad key").is_retryable is False
        assert ExtractionError(ExtractionErrorType.API_ERROR, "down").is_retryable is True


class TestLogLevel:

    def test_set_log_level_retunes_package_loggers(self):
        logger = get_logger("syllabus_ai.tests.level_check", level="INFO")
        outside = logging.getLogger("thirdparty.level_check")
        outside.setLevel(logging.WARNING)

        try:
            set_log_level("DEBUG")

            assert logger.level == logging.DEBUG
            assert all(handler.level == logging.DEBUG for handler in logger.handlers)
            assert outside.level == logging.WARNING
        finally:
            set_log_level("INFO")

    def test_unknown_level_falls_back_to_info(self):
        logger = get_logger("syllabus_ai.tests.unknown_level", level="LOUD")

        assert logger.level == logging.INFO
