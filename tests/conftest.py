"""Pytest configuration and shared fixtures."""

import json
from typing import Any, Dict

import pytest
from unittest.mock import AsyncMock, MagicMock

from syllabus_ai.config import Settings
from syllabus_ai.models.document import DocumentMetadata, ImageContent, PLAIN_TEXT, PNG, TextContent


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's environment and .env file.

    Returns:
        Settings: Test settings with a dummy API key
    """
    return Settings(
        _env_file=None,
        llm_provider="openai",
        openai_api_key="test-key",
        gemini_api_key="",
        max_retries=3,
        retry_base_delay=1.0,
        retry_invalid_responses=True,
        confidence_threshold=0.7,
        max_batch_files=5,
        max_concurrent_documents=3,
    )


@pytest.fixture
def fake_sleep() -> AsyncMock:
    """Replacement for asyncio.sleep that records delays without waiting."""
    return AsyncMock(return_value=None)


@pytest.fixture
def llm_client() -> MagicMock:
    """LLM client double exposing the generate_content contract.

    Returns:
        MagicMock: Client whose generate_content is an AsyncMock
    """
    client = MagicMock()
    client.has_credentials = True
    client.generate_content = AsyncMock()
    return client


@pytest.fixture
def valid_response() -> Dict[str, Any]:
    """A well-formed model response for a small syllabus."""
    return {
        "course_info": {
            "name": "Introduction to Computer Science",
            "code": "CS 101",
            "instructor": "Dr. Rivera",
            "semester": "Fall 2024",
        },
        "assignments": [
            {"title": "Assignment 1", "week": 1, "type": "homework", "points": 10},
            {"title": "Quiz 1", "week": 3, "type": "quiz"},
            {"title": "Midterm", "week": 8, "type": "exam", "specific_date": "2024-10-15"},
        ],
        "metadata": {
            "parsing_confidence": 0.92,
            "weeks_detected": 2,
            "warnings": [],
        },
    }


@pytest.fixture
def valid_response_json(valid_response: Dict[str, Any]) -> str:
    return json.dumps(valid_response)


def make_text_content(text: str = "Week 1: Assignment 1 due", file_name: str = "syllabus.txt") -> TextContent:
    word_count = len(text.split())
    return TextContent(
        text=text,
        word_count=word_count,
        metadata=DocumentMetadata(
            original_name=file_name,
            media_type=PLAIN_TEXT,
            size=len(text.encode("utf-8")),
            word_count=word_count,
        ),
    )


@pytest.fixture
def text_content_factory():
    """Factory for TextContent with a given body."""
    return make_text_content


@pytest.fixture
def text_content() -> TextContent:
    return make_text_content()


@pytest.fixture
def image_content() -> ImageContent:
    return ImageContent(
        encoded_payload="data:image/png;base64,iVBORw0KGgo=",
        metadata=DocumentMetadata(original_name="syllabus.png", media_type=PNG, size=8),
    )
