"""Text extraction from PDFs and images."""

from .service import UNSUPPORTED_TYPE_PLACEHOLDER, TextExtractor, get_text_extractor, normalize_mime_type

__all__ = ["UNSUPPORTED_TYPE_PLACEHOLDER", "TextExtractor", "get_text_extractor", "normalize_mime_type"]
