"""Exception hierarchy for the syllabus extraction pipeline.

Two layers live here:

- Service-level errors raised by the LLM provider clients (``APIClientError``
  and friends). These describe what went wrong talking to the model.
- Pipeline-level errors (``NormalizationError``, ``ExtractionError``) that are
  the typed terminal values handed back to callers. Each carries a stable
  ``error_type`` so callers can branch on it without parsing messages.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class SyllabusAIException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ConfigurationError(SyllabusAIException):
    """Raised when configuration is invalid or missing."""


class APIClientError(SyllabusAIException):
    """Raised when an external API call fails.

    Attributes:
        retryable: Whether the failure is transient (network, 5xx)
        status_code: HTTP status code when one was received
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        retryable: bool = True,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, original_error)
        self.retryable = retryable
        self.status_code = status_code


class APITimeoutError(APIClientError):
    """Raised when an external API call times out."""


class AuthenticationError(APIClientError):
    """Raised when the provider rejects the credential. Never retried."""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, original_error, retryable=False, status_code=status_code)


class RateLimitError(APIClientError):
    """Raised when the provider throttles the request.

    Attributes:
        retry_after: Seconds the provider asked us to wait, if it said
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message, original_error, retryable=True, status_code=429)
        self.retry_after = retry_after


class NormalizationErrorType(str, Enum):
    """Failure categories for document normalization."""

    EMPTY_FILE = "EMPTY_FILE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UNSUPPORTED_FILE = "UNSUPPORTED_FILE"
    CORRUPTED_FILE = "CORRUPTED_FILE"
    PROCESSING_ERROR = "PROCESSING_ERROR"


class NormalizationError(SyllabusAIException):
    """Terminal failure for a single input document."""

    def __init__(
        self,
        error_type: NormalizationErrorType,
        message: str,
        file_name: str,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error)
        self.error_type = NormalizationErrorType(error_type)
        self.file_name = file_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.error_type.value,
            "message": self.message,
            "fileName": self.file_name,
        }

    def __repr__(self) -> str:
        return f"NormalizationError({self.error_type.value}, {self.file_name!r}, {self.message!r})"


class ExtractionErrorType(str, Enum):
    """Failure categories for structured extraction."""

    AUTH_ERROR = "AUTH_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    PARSING_ERROR = "PARSING_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    API_ERROR = "API_ERROR"


class ExtractionError(SyllabusAIException):
    """Terminal failure of the extraction orchestrator.

    Attributes:
        error_type: Category the caller branches on
        retry_after: Suggested wait in seconds (RATE_LIMIT only)
        violations: Every structural rule the last response broke
        attempts: Number of service calls made before giving up
    """

    def __init__(
        self,
        error_type: ExtractionErrorType,
        message: str,
        original_error: Optional[Exception] = None,
        retry_after: Optional[float] = None,
        violations: Optional[List[str]] = None,
        attempts: int = 0,
    ):
        super().__init__(message, original_error)
        self.error_type = ExtractionErrorType(error_type)
        self.retry_after = retry_after
        self.violations = list(violations or [])
        self.attempts = attempts

    @property
    def is_retryable(self) -> bool:
        """Whether a later, separate request could plausibly succeed."""
        return self.error_type != ExtractionErrorType.AUTH_ERROR

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": self.error_type.value,
            "message": self.message,
        }
        if self.retry_after is not None:
            payload["retryAfter"] = self.retry_after
        if self.violations:
            payload["violations"] = list(self.violations)
        return payload

    def __repr__(self) -> str:
        return f"ExtractionError({self.error_type.value}, {self.message!r})"
