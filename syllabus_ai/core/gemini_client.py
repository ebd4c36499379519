import base64
import re
from typing import Any, Dict, List, Optional, Union

import httpx
from google import genai
from google.genai import errors, types

from syllabus_ai.core.exceptions import (
    APIClientError,
    APITimeoutError,
    AuthenticationError,
    ConfigurationError,
    RateLimitError,
)
from syllabus_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


def data_url_to_part(data_url: str) -> types.Part:
    """Decode a ``data:<mime>;base64,...`` URL into an inline bytes part."""
    match = DATA_URL_PATTERN.match(data_url)
    if not match:
        raise ValueError("Image payload is not a base64 data URL")
    return types.Part.from_bytes(
        data=base64.b64decode(match.group("data")),
        mime_type=match.group("mime"),
    )


class GeminiClient:
    """Wrapper for Google Gemini API client."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        timeout: int = 60,
    ):
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model: Default model name
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

        try:
            self.client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=timeout * 1000),
            )
            LOGGER.info(f"Initialized Gemini client with model {self.model}")
        except ValueError as e:
            LOGGER.error(f"Failed to initialize Gemini client: {e}")
            raise ConfigurationError(f"Failed to initialize Gemini client: {e}", e) from e

    @staticmethod
    def _build_contents(contents: Union[str, List[Union[str, Dict[str, Any]]]]) -> Union[str, List[types.Part]]:
        if isinstance(contents, str):
            return contents

        parts: List[types.Part] = []
        for part in contents:
            if isinstance(part, str):
                parts.append(types.Part.from_text(text=part))
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(types.Part.from_text(text=part["text"]))
            elif isinstance(part, dict) and part.get("type") == "image_url":
                parts.append(data_url_to_part(part["image_url"]["url"]))
            else:
                raise ValueError(f"Unsupported content part: {part!r}")
        return parts

    async def generate_content(
        self,
        contents: Union[str, List[Union[str, Dict[str, Any]]]],
        system_instruction: Optional[str] = None,
        generation_config: Optional[Dict[str, Any]] = None,
        model: Optional[str] = None,
    ) -> str:
        """Generate content using a Gemini model.

        Args:
            contents: Prompt text, or a list of text / ``image_url`` parts
            system_instruction: Optional system instruction
            generation_config: Optional generation config (temperature, etc.)
            model: Override for the default model

        Returns:
            Generated text (empty string when the model returned nothing)

        Raises:
            AuthenticationError: On 401/403
            RateLimitError: On 429
            APIClientError: On any other API failure
        """
        config = types.GenerateContentConfig(temperature=0.0)

        if generation_config:
            if "temperature" in generation_config:
                config.temperature = generation_config["temperature"]
            if "max_output_tokens" in generation_config:
                config.max_output_tokens = generation_config["max_output_tokens"]
            if "response_mime_type" in generation_config:
                config.response_mime_type = generation_config["response_mime_type"]

        if system_instruction:
            config.system_instruction = system_instruction

        try:
            response = await self.client.aio.models.generate_content(
                model=model or self.model,
                contents=self._build_contents(contents),
                config=config,
            )
        except errors.APIError as e:
            raise self._classify_api_error(e) from e
        except httpx.TimeoutException as e:
            LOGGER.warning("Gemini request timed out")
            raise APITimeoutError(f"Request to Gemini timed out after {self.timeout}s", e) from e
        except httpx.TransportError as e:
            LOGGER.warning(f"Gemini transport error: {e}")
            raise APIClientError("Could not reach Gemini", e, retryable=True) from e

        if not response.text:
            LOGGER.warning("Empty response from Gemini")
            return ""

        return response.text

    @staticmethod
    def _classify_api_error(error: errors.APIError) -> APIClientError:
        code = getattr(error, "code", None)
        LOGGER.warning(f"Gemini API error {code}")

        # Gemini reports a bad key as 400 INVALID_ARGUMENT
        invalid_key = code == 400 and "api key" in str(getattr(error, "message", "") or "").lower()
        if code in (401, 403) or invalid_key:
            return AuthenticationError("Gemini rejected the API key", error, status_code=code)
        if code == 429:
            return RateLimitError("Gemini rate limit exceeded", error)
        if isinstance(error, errors.ClientError):
            return APIClientError(f"Gemini rejected the request ({code})", error, retryable=False, status_code=code)
        return APIClientError(f"Gemini service error ({code})", error, retryable=True, status_code=code)
