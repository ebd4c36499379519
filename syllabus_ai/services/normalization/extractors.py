"""Format-specific extractors used by the document normalizer.

Each extractor takes a ``RawDocument`` and returns raw (uncleaned) text, or a
data URL for images. Recognizable corruption is raised as a typed
``NormalizationError``; anything else propagates and the normalizer turns it
into ``PROCESSING_ERROR``.
"""

import base64
import zipfile
from io import BytesIO
from typing import Optional, Tuple

import docx
import pdfplumber
from docx.opc.exceptions import PackageNotFoundError
from pdfminer.psparser import PSException
from pdfplumber.utils.exceptions import PdfminerException

from syllabus_ai.core.exceptions import NormalizationError, NormalizationErrorType
from syllabus_ai.models.document import GIF, JPEG, PNG, RawDocument
from syllabus_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)

PDF_MAGIC = b"%PDF-"
OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

IMAGE_SIGNATURES = {
    JPEG: (b"\xff\xd8\xff",),
    PNG: (b"\x89PNG\r\n\x1a\n",),
    GIF: (b"GIF87a", b"GIF89a"),
}


def _corrupted(doc: RawDocument, message: str, error: Optional[Exception] = None) -> NormalizationError:
    return NormalizationError(NormalizationErrorType.CORRUPTED_FILE, message, doc.file_name, error)


def extract_pdf_text(doc: RawDocument) -> Tuple[str, int]:
    """Extract text from every PDF page.

    Pages are joined with a single newline; image-only pages contribute an
    empty string.

    Returns:
        Tuple of (text, page_count)

    Raises:
        NormalizationError: CORRUPTED_FILE when the bytes are not a readable PDF
    """
    # The header may legally follow a short preamble
    if PDF_MAGIC not in doc.content[:1024]:
        raise _corrupted(doc, "File is not a valid PDF document")

    try:
        with pdfplumber.open(BytesIO(doc.content)) as pdf:
            page_texts = [page.extract_text() or "" for page in pdf.pages]
    except (PdfminerException, PSException) as e:
        LOGGER.warning(
            "PDF could not be parsed",
            extra={"file_name": doc.file_name, "error": str(e)},
        )
        raise _corrupted(doc, f"Failed to extract text from PDF: {e}", e) from e

    LOGGER.debug(f"Extracted {len(page_texts)} PDF pages from {doc.file_name}")
    return "\n".join(page_texts), len(page_texts)


def extract_word_text(doc: RawDocument) -> str:
    """Extract paragraph and table text from a Word document.

    Raises:
        NormalizationError: PROCESSING_ERROR for legacy binary ``.doc`` files,
            CORRUPTED_FILE when the package cannot be opened
    """
    if doc.content.startswith(OLE_MAGIC):
        raise NormalizationError(
            NormalizationErrorType.PROCESSING_ERROR,
            "Legacy .doc files are not supported. Please save the document as .docx and upload it again.",
            doc.file_name,
        )

    try:
        document = docx.Document(BytesIO(doc.content))
    except (zipfile.BadZipFile, PackageNotFoundError, KeyError, ValueError) as e:
        raise _corrupted(doc, f"Failed to extract text from Word document: {e}", e) from e

    lines = [paragraph.text for paragraph in document.paragraphs if paragraph.text.strip()]

    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append(" | ".join(cells))

    return "\n".join(lines)


def decode_plain_text(doc: RawDocument) -> str:
    """Decode a text file as UTF-8 (BOM tolerated), falling back to Latin-1."""
    try:
        return doc.content.decode("utf-8-sig")
    except UnicodeDecodeError:
        LOGGER.debug(f"{doc.file_name} is not UTF-8, decoding as Latin-1")
        return doc.content.decode("latin-1")


def encode_image(doc: RawDocument) -> str:
    """Check the image signature and encode the bytes as a base64 data URL.

    Raises:
        NormalizationError: CORRUPTED_FILE when the bytes do not match the
            declared image type
    """
    signatures = IMAGE_SIGNATURES.get(doc.media_type, ())
    if not any(doc.content.startswith(signature) for signature in signatures):
        raise _corrupted(doc, f"File content does not match declared type {doc.media_type}")

    payload = base64.b64encode(doc.content).decode("ascii")
    return f"data:{doc.media_type};base64,{payload}"
