"""Unified LLM client factory.

Provides one interface over the supported providers (an OpenAI-compatible
chat completions endpoint, or Gemini) with provider selection driven by
configuration. Clients are built by the caller and passed into the
extraction orchestrator; nothing here keeps a module-level instance.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

import httpx

from syllabus_ai.config import Settings
from syllabus_ai.core.exceptions import ConfigurationError
from syllabus_ai.core.gemini_client import GeminiClient
from syllabus_ai.core.openai_client import OpenAIClient
from syllabus_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    GEMINI = "gemini"


class UnifiedLLMClient:
    """Unified LLM client that wraps different providers.

    Provides a consistent ``generate_content`` regardless of the underlying
    provider, so the orchestrator never branches on provider.
    """

    def __init__(
        self,
        provider: Union[str, LLMProvider],
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        timeout: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize unified LLM client.

        Args:
            provider: LLM provider to use ("openai" or "gemini")
            api_key: API key for the provider
            model: Default model name
            base_url: Optional endpoint URL (OpenAI-compatible provider only)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (OpenAI-compatible provider only)
        """
        self.provider = LLMProvider(provider)
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

        if self.provider == LLMProvider.GEMINI:
            self.client = GeminiClient(api_key=api_key, model=model, timeout=timeout)
        else:
            self.client = OpenAIClient(
                api_key=api_key,
                model=model,
                base_url=base_url or "https://api.openai.com/v1/chat/completions",
                timeout=timeout,
                transport=transport,
            )

        LOGGER.info(f"Initialized unified LLM with {self.provider.value} provider (model: {model})")

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    async def generate_content(
        self,
        contents: Union[str, List[Union[str, Dict[str, Any]]]],
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
        model: Optional[str] = None,
    ) -> str:
        """Generate content using the configured LLM provider.

        Args:
            contents: Input content (string or list of parts)
            system_instruction: Optional system instruction
            generation_config: Optional generation config (temperature, etc.)
            model: Optional per-call model override

        Returns:
            Generated text response

        Raises:
            APIClientError: If generation fails (or one of its subclasses)
        """
        return await self.client.generate_content(
            contents=contents,
            system_instruction=system_instruction,
            generation_config=generation_config,
            model=model,
        )


def create_llm_client_from_settings(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> UnifiedLLMClient:
    """Create a unified LLM client from configuration settings.

    Selects the API key and endpoint that belong to ``settings.llm_provider``.

    Args:
        settings: Loaded application settings
        transport: Optional httpx transport (used by tests)

    Returns:
        UnifiedLLMClient instance configured with the specified provider

    Raises:
        ConfigurationError: If the provider name is unknown
    """
    try:
        provider = LLMProvider(settings.llm_provider.lower())
    except ValueError as e:
        raise ConfigurationError(f"Unsupported LLM provider: {settings.llm_provider}", e) from e

    if provider == LLMProvider.GEMINI:
        api_key = settings.gemini_api_key.strip()
        base_url = None
    else:
        api_key = settings.openai_api_key.strip()
        base_url = settings.openai_api_url

    if not api_key:
        # Still build the client; the orchestrator reports AUTH_ERROR before any call
        LOGGER.warning(f"No API key configured for provider '{provider.value}'")

    return UnifiedLLMClient(
        provider=provider,
        api_key=api_key,
        model=settings.text_model,
        base_url=base_url,
        timeout=settings.http_timeout,
        transport=transport,
    )
