import json
from typing import Any, Dict, Optional

import httpx
from httpx import HTTPStatusError, TimeoutException

from syllabus_ai.core.exceptions import (
    APIClientError,
    APITimeoutError,
    AuthenticationError,
    RateLimitError,
)
from syllabus_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Read a Retry-After header given in seconds. HTTP-date values are ignored."""
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class BaseLLMClient:
    """Base client for LLM HTTP API interactions.

    Issues exactly one request per call and translates failures into the
    typed client exceptions. Retrying is the caller's decision, so nothing
    here sleeps.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the LLM client.

        Args:
            api_key: API key for authentication
            base_url: Base URL for the API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport
        self.logger = LOGGER

    async def call_api(
        self,
        endpoint: str = "",
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """POST a JSON payload and return the decoded JSON body.

        Args:
            endpoint: API endpoint (appended to base_url)
            payload: JSON payload
            headers: Additional headers

        Returns:
            Parsed JSON response

        Raises:
            AuthenticationError: On 401/403
            RateLimitError: On 429
            APITimeoutError: If the request times out
            APIClientError: On any other failure; ``retryable`` tells 5xx and
                network errors apart from other 4xx responses
        """
        url = f"{self.base_url}{endpoint}" if endpoint else self.base_url

        request_headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if headers:
            request_headers.update(headers)

        self.logger.debug(f"Calling LLM API: {url}", extra={"timeout": self.timeout})

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, headers=request_headers, json=payload)
                response.raise_for_status()
                return response.json()

        except HTTPStatusError as e:
            raise self._classify_http_error(e, url) from e

        except TimeoutException as e:
            self.logger.warning("API timeout", extra={"url": url})
            raise APITimeoutError(f"Request to extraction service timed out after {self.timeout}s", e) from e

        except httpx.TransportError as e:
            self.logger.warning("API transport error", extra={"url": url, "error": str(e)})
            raise APIClientError("Could not reach extraction service", e, retryable=True) from e

        except json.JSONDecodeError as e:
            raise APIClientError("Extraction service returned a non-JSON body", e, retryable=True) from e

    def _classify_http_error(self, error: HTTPStatusError, url: str) -> APIClientError:
        """Map an HTTP status error to the matching client exception."""
        status_code = error.response.status_code

        self.logger.warning(
            f"API HTTP error {status_code}",
            extra={"url": url, "status_code": status_code},
        )

        if status_code in (401, 403):
            return AuthenticationError("Extraction service rejected the API key", error, status_code=status_code)

        if status_code == 429:
            retry_after = _parse_retry_after(error.response.headers.get("retry-after"))
            return RateLimitError("Extraction service rate limit exceeded", error, retry_after=retry_after)

        # Don't retry on client errors (4xx); server errors are transient
        if 400 <= status_code < 500:
            return APIClientError(
                f"Extraction service rejected the request ({status_code})",
                error,
                retryable=False,
                status_code=status_code,
            )

        return APIClientError(
            f"Extraction service error ({status_code})",
            error,
            retryable=True,
            status_code=status_code,
        )
