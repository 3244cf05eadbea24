"""Language-model backed document analysis."""

from .parsing import DEFAULT_SUMMARY, extract_json_object, parse_analysis
from .service import DocumentAnalyzer, get_document_analyzer

__all__ = ["DEFAULT_SUMMARY", "DocumentAnalyzer", "extract_json_object", "get_document_analyzer", "parse_analysis"]
