"""Whitespace and character cleanup for extracted syllabus text."""

import re

_LINE_BREAKS = re.compile(r"\r\n?")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_HORIZONTAL_WS = re.compile(r"[^\S\n]+")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")

_CHAR_REPLACEMENTS = str.maketrans({
    "\u00a0": " ",  # no-break space
    "\u202f": " ",  # narrow no-break space
    "\u201c": '"',
    "\u201d": '"',
    "\u201e": '"',
    "\u2018": "'",
    "\u2019": "'",
    "\u201a": "'",
})


def clean_extracted_text(text: str) -> str:
    """Normalize text pulled out of a document.

    Line breaks are kept (week headings and lists are line oriented), but
    runs of spaces and tabs collapse to one space and blank-line runs
    collapse to a single empty line.

    Note:
        This is not a full whitespace flatten. Callers expecting every
        whitespace run (newlines included) to become one space should
        apply ``" ".join(text.split())`` themselves. Word counts are the
        same either way.

    Args:
        text: Raw extracted text

    Returns:
        str: Cleaned text
    """
    if not text:
        return ""

    cleaned = _LINE_BREAKS.sub("\n", text)
    cleaned = cleaned.translate(_CHAR_REPLACEMENTS)
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    cleaned = _HORIZONTAL_WS.sub(" ", cleaned)
    cleaned = _EXCESS_NEWLINES.sub("\n\n", cleaned)
    return cleaned.strip()


def count_words(text: str) -> int:
    """Count whitespace-delimited tokens."""
    return len(text.split()) if text else 0
