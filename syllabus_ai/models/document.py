"""Document models for the normalization stage."""

from pathlib import Path
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

PDF = "application/pdf"
MS_WORD = "application/msword"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
JPEG = "image/jpeg"
PNG = "image/png"
GIF = "image/gif"
PLAIN_TEXT = "text/plain"

SUPPORTED_MEDIA_TYPES = (PDF, MS_WORD, DOCX, JPEG, PNG, GIF, PLAIN_TEXT)
IMAGE_MEDIA_TYPES = (JPEG, PNG, GIF)

_EXTENSION_MEDIA_TYPES = {
    ".pdf": PDF,
    ".doc": MS_WORD,
    ".docx": DOCX,
    ".jpg": JPEG,
    ".jpeg": JPEG,
    ".png": PNG,
    ".gif": GIF,
    ".txt": PLAIN_TEXT,
    ".text": PLAIN_TEXT,
}


class RawDocument(BaseModel):
    """An uploaded document exactly as the caller handed it over.

    ``size`` is the declared size and is trusted for the precondition checks,
    so an empty or oversized upload is rejected without touching ``content``.
    """

    model_config = ConfigDict(frozen=True)

    content: bytes = Field(default=b"", repr=False)
    media_type: str
    size: int
    file_name: str

    @classmethod
    def from_bytes(cls, content: bytes, media_type: str, file_name: str) -> "RawDocument":
        return cls(content=content, media_type=media_type, size=len(content), file_name=file_name)

    @classmethod
    def from_path(cls, path: Union[str, Path], media_type: Optional[str] = None) -> "RawDocument":
        """Read a document from disk, guessing the media type from its extension.

        Unknown extensions map to ``application/octet-stream`` and are
        rejected later as unsupported.
        """
        path = Path(path)
        content = path.read_bytes()
        resolved_type = media_type or _EXTENSION_MEDIA_TYPES.get(
            path.suffix.lower(), "application/octet-stream"
        )
        return cls(content=content, media_type=resolved_type, size=len(content), file_name=path.name)


class DocumentMetadata(BaseModel):
    """Descriptive metadata recorded while normalizing a document."""

    model_config = ConfigDict(frozen=True)

    original_name: str
    media_type: str
    size: int
    word_count: int = 0
    page_count: Optional[int] = None


class TextContent(BaseModel):
    """Cleaned text extracted from a PDF, Word or plain-text document."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str
    word_count: int
    page_count: Optional[int] = None
    metadata: DocumentMetadata

    @property
    def processing_method(self) -> str:
        return "text_extraction"


class ImageContent(BaseModel):
    """An image document encoded as a base64 data URL for a vision model."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    encoded_payload: str = Field(repr=False)
    metadata: DocumentMetadata

    @property
    def processing_method(self) -> str:
        return "vision_api"


NormalizedContent = Annotated[Union[TextContent, ImageContent], Field(discriminator="kind")]


class ProcessingStats(BaseModel):
    """Aggregate statistics over a set of normalized documents."""

    total_files: int = 0
    total_size: int = 0
    total_words: int = 0
    average_words_per_file: int = 0
    processing_methods: Dict[str, int] = Field(default_factory=dict)
    file_types: Dict[str, int] = Field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
