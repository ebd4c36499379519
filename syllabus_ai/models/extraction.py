"""Request-side models for the extraction orchestrator."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from syllabus_ai.models.document import ImageContent, TextContent


class ExtractionRoute(str, Enum):
    """Which model family handles a document."""

    TEXT = "text"
    IMAGE = "image"


class ExtractionOptions(BaseModel):
    """Caller-tunable knobs for one extraction run.

    Attributes:
        include_schedule: Ask the model for the weekly class schedule
        confidence_threshold: Below this, a low-confidence warning is added
        max_retries: Total attempts against the service (0 is treated as 1)
        deadline: Absolute ``time.monotonic()`` value after which no new
            call or retry sleep is started
    """

    model_config = ConfigDict(frozen=True)

    include_schedule: bool = False
    confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    max_retries: int = Field(default=3, ge=0)
    deadline: Optional[float] = None

    @property
    def max_attempts(self) -> int:
        return max(1, self.max_retries)


@dataclass
class ExtractionRequest:
    """Everything one pipeline run needs to talk to the model. Ephemeral."""

    content: Union[TextContent, ImageContent]
    options: ExtractionOptions
    route: ExtractionRoute
    model: str
    system_prompt: str
    started_at: float = field(default_factory=time.monotonic)

    def elapsed_ms(self, now: float) -> int:
        """Milliseconds between ``started_at`` and ``now`` on the same clock."""
        return max(0, int((now - self.started_at) * 1000))
