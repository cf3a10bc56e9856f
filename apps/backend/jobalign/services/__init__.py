from .analysis_service import AnalysisService
from .response_parser import parse_analysis_response
from .share_store import InMemoryShareStore, JsonFileShareStore, ShareStore, build_share_store
from .text_extractor import PdfTextExtractor
from .exceptions import (
    SharedAnalysisNotFoundError,
    ShareStoreError,
)

__all__ = [
    "AnalysisService",
    "InMemoryShareStore",
    "JsonFileShareStore",
    "PdfTextExtractor",
    "ShareStore",
    "ShareStoreError",
    "SharedAnalysisNotFoundError",
    "build_share_store",
    "parse_analysis_response",
]
