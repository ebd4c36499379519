"""OpenAI-compatible chat completions client."""

from typing import Any, Dict, List, Optional, Union

import httpx

from syllabus_ai.core.base_llm_client import BaseLLMClient
from syllabus_ai.core.exceptions import APIClientError
from syllabus_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)

ContentPart = Union[str, Dict[str, Any]]


class OpenAIClient:
    """Client for OpenAI-style ``/chat/completions`` endpoints.

    Works against OpenAI itself or any gateway that speaks the same wire
    format. Image parts are passed through as ``image_url`` content parts.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str = "https://api.openai.com/v1/chat/completions",
        timeout: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize OpenAI-compatible client.

        Args:
            api_key: API key
            model: Default model name
            base_url: Chat completions endpoint URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout

        self.client = BaseLLMClient(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

        LOGGER.info(f"Initialized OpenAI-compatible client with model {self.model}")

    @staticmethod
    def _build_user_content(contents: Union[str, List[ContentPart]]) -> Union[str, List[Dict[str, Any]]]:
        if isinstance(contents, str):
            return contents

        parts: List[Dict[str, Any]] = []
        for part in contents:
            if isinstance(part, str):
                parts.append({"type": "text", "text": part})
            elif isinstance(part, dict) and part.get("type") in ("text", "image_url"):
                parts.append(part)
            else:
                raise ValueError(f"Unsupported content part: {part!r}")
        return parts

    async def generate_content(
        self,
        contents: Union[str, List[ContentPart]],
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
        model: Optional[str] = None,
    ) -> str:
        """Generate content using a chat completions model.

        Args:
            contents: Prompt text, or a list of text / ``image_url`` parts
            system_instruction: Optional system message
            generation_config: Optional config (temperature, max_output_tokens,
                response_mime_type)
            model: Override for the default model

        Returns:
            Generated text (empty string when the model returned nothing)

        Raises:
            APIClientError: If the call fails or the body has no choices
        """
        messages: List[Dict[str, Any]] = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": self._build_user_content(contents)})

        payload: Dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
            "temperature": 0.0,
        }

        if generation_config:
            if "temperature" in generation_config:
                payload["temperature"] = generation_config["temperature"]
            if "max_output_tokens" in generation_config:
                payload["max_tokens"] = generation_config["max_output_tokens"]
            if generation_config.get("response_mime_type") == "application/json":
                payload["response_format"] = {"type": "json_object"}

        response = await self.client.call_api(payload=payload)

        choices = response.get("choices") if isinstance(response, dict) else None
        if not choices:
            LOGGER.error("Unexpected chat completions response format")
            raise APIClientError("Invalid response format from extraction service", retryable=True)

        message = choices[0].get("message") or {}
        content = message.get("content") or ""
        if not content:
            LOGGER.warning("Empty response from chat completions endpoint")
        return content
