"""FastAPI dependencies for use in API endpoints."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.analysis import DocumentAnalyzer, get_document_analyzer
from ...infrastructure.database import async_session
from ...infrastructure.extraction import TextExtractor, get_text_extractor
from ...infrastructure.storage import ObjectStore, get_object_store
from ...modules.ingestion.services import IngestionService

DbSession = Annotated[AsyncSession, Depends(async_session)]


def get_storage() -> ObjectStore:
    """Dependency for the process-wide object store."""
    return get_object_store()


def get_extractor() -> TextExtractor:
    """Dependency for the process-wide text extractor."""
    return get_text_extractor()


def get_analyzer() -> DocumentAnalyzer:
    """Dependency for the process-wide document analyzer."""
    return get_document_analyzer()


def get_ingestion_service(
    object_store: ObjectStore = Depends(get_storage),
    extractor: TextExtractor = Depends(get_extractor),
    analyzer: DocumentAnalyzer = Depends(get_analyzer),
) -> IngestionService:
    """Dependency for providing an IngestionService instance."""
    return IngestionService(object_store=object_store, extractor=extractor, analyzer=analyzer)


IngestionServiceDep = Annotated[IngestionService, Depends(get_ingestion_service)]
