"""
Session-scoped document indexing and search endpoints.
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from .deps import get_extractor, get_upload_settings, get_vector_search
from .errors import http_error
from .extract import extract_upload
from .schemas import (
    DocumentRequest,
    DocumentSummary,
    DocumentAddedResponse,
    DocumentListResponse,
    SearchRequest,
    SearchResult,
    SearchResponse
)
from ..core.errors import ExtractionError, Failure
from ..extraction.extractor import ExtractorEngine
from ..util.logging import logger
from ..vector.search import VectorSearch
from ..vector.types import XDoc, XPage

router = APIRouter()


def _summary(document: XDoc) -> DocumentSummary:
    return DocumentSummary(
        document_id=document.id,
        doc_title=document.doc_title,
        filename=document.filename,
        total_pages=document.total_pages,
        indexed_pages=len(document.indexed_pages),
    )


def _add(engine: VectorSearch, session_id: str, document: XDoc) -> DocumentAddedResponse:
    result = engine.add_document(session_id, document)
    if not result.ok:
        raise http_error(result.error)

    listed = engine.list_documents(session_id)
    document_count = len(listed.value) if listed.ok else 0
    return DocumentAddedResponse(
        session_id=session_id,
        document=_summary(result.value),
        document_count=document_count,
    )


@router.post("/{session_id}/documents", status_code=201, response_model=DocumentAddedResponse)
def add_document(session_id: str, request: DocumentRequest, engine: VectorSearch = Depends(get_vector_search)):
    """Index an already extracted document into the session."""
    document = XDoc(
        doc_title=request.doc_title,
        filename=request.filename,
        total_pages=len(request.pages),
        pages=[
            XPage(page_number=page.page_number, text=page.page_text, vector=page.vector)
            for page in request.pages
        ],
        metadata=dict(request.metadata),
    )
    return _add(engine, session_id, document)


@router.post("/{session_id}/upload", status_code=201, response_model=DocumentAddedResponse)
def upload_document(
    session_id: str,
    file: UploadFile = File(...),
    engine: VectorSearch = Depends(get_vector_search),
    extractor: ExtractorEngine = Depends(get_extractor),
    settings: dict = Depends(get_upload_settings),
):
    """Extract an uploaded PDF and index it into the session."""
    if not engine.session_store.session_exists(session_id):
        raise HTTPException(status_code=404, detail="Session not found")

    try:
        document = extract_upload(file, extractor, settings)
    except ExtractionError as e:
        logger.error(f"Extraction failed for upload {file.filename}: {e}")
        raise http_error(Failure.from_error(e))

    return _add(engine, session_id, document)


@router.get("/{session_id}/documents", response_model=DocumentListResponse)
def list_documents(session_id: str, engine: VectorSearch = Depends(get_vector_search)):
    """List the documents held by the session."""
    result = engine.list_documents(session_id)
    if not result.ok:
        raise http_error(result.error)

    return DocumentListResponse(
        session_id=session_id,
        documents=[_summary(document) for document in result.value],
    )


@router.post("/{session_id}/search", response_model=SearchResponse)
def search(session_id: str, request: SearchRequest, engine: VectorSearch = Depends(get_vector_search)):
    """Rank the session's pages against a natural-language query."""
    result = engine.search(session_id, request.query, request.top_k)
    if not result.ok:
        raise http_error(result.error)

    return SearchResponse(
        session_id=session_id,
        query=request.query,
        similarity_function=engine.similarity_function.name,
        results=[
            SearchResult(
                document_id=hit.document_id,
                document_title=hit.document_title,
                page_number=hit.page_number,
                page_text=hit.page_text,
                snippet=hit.snippet,
                score=hit.score,
            )
            for hit in result.value
        ],
    )
