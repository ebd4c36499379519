"""Syllabus extraction pipeline: documents in, dated assignments out."""

__version__ = "0.1.0"
