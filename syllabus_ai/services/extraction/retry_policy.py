"""Retry state machine for extraction attempts.

One run moves through ``CALLING -> (SUCCEEDED | BACKING_OFF -> CALLING | FAILED)``.
Every failure is first classified into an ``ExtractionError``; the
classification alone decides whether the machine backs off or stops.
Sleeping and the clock are injected so tests run without real delays.
"""

import asyncio
import time
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

from syllabus_ai.core.exceptions import (
    APIClientError,
    AuthenticationError,
    ExtractionError,
    ExtractionErrorType,
    RateLimitError,
)
from syllabus_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]
ClockFunc = Callable[[], float]

DEADLINE_MESSAGE = "Extraction deadline exceeded"


class RetryState(str, Enum):
    CALLING = "calling"
    BACKING_OFF = "backing_off"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RetryPolicy:
    """Bounded exponential-backoff retry over one extraction run.

    Attributes:
        max_attempts: Total calls allowed (at least 1)
        base_delay: Backoff base; the wait after attempt ``n`` is
            ``base_delay * 2**n`` seconds
        retry_invalid_responses: Whether malformed or structurally invalid
            responses are retried
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        retry_invalid_responses: bool = True,
        sleep: Optional[SleepFunc] = None,
        clock: Optional[ClockFunc] = None,
    ):
        self.max_attempts = max(1, max_attempts)
        self.base_delay = base_delay
        self.retry_invalid_responses = retry_invalid_responses
        self.sleep = sleep or asyncio.sleep
        self.clock = clock or time.monotonic

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after the given 1-based attempt."""
        return self.base_delay * (2 ** attempt)

    def classify(self, error: Exception, attempt: int) -> ExtractionError:
        """Translate a failed attempt into a terminal-shaped extraction error.

        Args:
            error: Exception raised by the attempt
            attempt: 1-based attempt number (used for the backoff hint)

        Returns:
            ExtractionError describing the failure; anything unrecognized
            becomes a non-transient ``API_ERROR``
        """
        if isinstance(error, ExtractionError):
            return error

        if isinstance(error, AuthenticationError):
            return ExtractionError(
                ExtractionErrorType.AUTH_ERROR,
                "Invalid extraction service API key",
                error,
            )

        if isinstance(error, RateLimitError):
            retry_after = error.retry_after if error.retry_after is not None else self.backoff_delay(attempt)
            return ExtractionError(
                ExtractionErrorType.RATE_LIMIT,
                "Extraction service rate limit exceeded",
                error,
                retry_after=retry_after,
            )

        if isinstance(error, APIClientError):
            return ExtractionError(ExtractionErrorType.API_ERROR, error.message, error)

        LOGGER.error(f"Unexpected extraction failure: {type(error).__name__}: {error}")
        return ExtractionError(
            ExtractionErrorType.API_ERROR,
            "Unexpected extraction service failure",
            error,
        )

    def is_transient(self, error: ExtractionError) -> bool:
        """Whether another attempt could succeed where this one failed."""
        if error.error_type in (ExtractionErrorType.PARSING_ERROR, ExtractionErrorType.INVALID_RESPONSE):
            return self.retry_invalid_responses

        if error.error_type == ExtractionErrorType.RATE_LIMIT:
            return True

        if error.error_type == ExtractionErrorType.API_ERROR:
            cause = error.original_error
            return isinstance(cause, APIClientError) and cause.retryable

        return False

    def _check_deadline(self, deadline: Optional[float], attempt: int) -> None:
        if deadline is not None and self.clock() >= deadline:
            LOGGER.error(f"Extraction deadline reached after {attempt} attempt(s)")
            raise ExtractionError(ExtractionErrorType.API_ERROR, DEADLINE_MESSAGE, attempts=attempt)

    async def run(
        self,
        operation: Callable[[int], Awaitable[T]],
        deadline: Optional[float] = None,
    ) -> T:
        """Run ``operation`` until it succeeds or the policy gives up.

        Args:
            operation: Coroutine function taking the 1-based attempt number
            deadline: Optional absolute clock value; no call or sleep starts
                after it

        Returns:
            The operation's result

        Raises:
            ExtractionError: Terminal failure, with ``attempts`` set
        """
        state = RetryState.CALLING
        attempt = 0
        delay = 0.0
        last_error: Optional[ExtractionError] = None

        while True:
            if state == RetryState.CALLING:
                self._check_deadline(deadline, attempt)
                attempt += 1
                try:
                    result = await operation(attempt)
                except Exception as e:
                    last_error = self.classify(e, attempt)
                    last_error.attempts = attempt
                    if attempt < self.max_attempts and self.is_transient(last_error):
                        delay = self._delay_for(last_error, attempt)
                        LOGGER.warning(
                            f"Extraction attempt {attempt}/{self.max_attempts} failed with "
                            f"{last_error.error_type.value}: {last_error.message}; "
                            f"retrying in {delay:.1f}s",
                            extra={"violations": last_error.violations},
                        )
                        state = RetryState.BACKING_OFF
                    else:
                        state = RetryState.FAILED
                else:
                    state = RetryState.SUCCEEDED

            elif state == RetryState.BACKING_OFF:
                self._check_deadline(deadline, attempt)
                await self.sleep(delay)
                state = RetryState.CALLING

            elif state == RetryState.SUCCEEDED:
                if attempt > 1:
                    LOGGER.info(f"Extraction succeeded on attempt {attempt}")
                return result

            else:
                LOGGER.error(
                    f"Extraction failed after {attempt} attempt(s): "
                    f"{last_error.error_type.value}: {last_error.message}"
                )
                raise last_error

    def _delay_for(self, error: ExtractionError, attempt: int) -> float:
        if error.error_type == ExtractionErrorType.RATE_LIMIT and error.retry_after is not None:
            return error.retry_after
        return self.backoff_delay(attempt)
