"""
Request and response models for the HTTP API.
"""

import math

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any


class PageModel(BaseModel):
    page_number: int
    page_text: str


class XDocResponse(BaseModel):
    id: str
    doc_title: str
    filename: str
    total_pages: int
    pages: List[PageModel]
    metadata: Dict[str, Any]


class PageRequest(BaseModel):
    page_number: int = Field(..., ge=1)
    page_text: str
    vector: Optional[List[float]] = None

    @field_validator('vector')
    @classmethod
    def vector_must_be_finite(cls, v):
        if v is not None and len(v) == 0:
            raise ValueError('vector cannot be empty')
        if v is not None and not all(math.isfinite(x) for x in v):
            raise ValueError('vector cannot contain NaN or infinite values')
        return v


class DocumentRequest(BaseModel):
    doc_title: str
    filename: str = ""
    pages: List[PageRequest]
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('doc_title')
    @classmethod
    def title_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('doc_title cannot be empty')
        return v

    @field_validator('pages')
    @classmethod
    def pages_must_be_unique(cls, v):
        numbers = [page.page_number for page in v]
        if len(numbers) != len(set(numbers)):
            raise ValueError('page numbers must be unique')
        return v


class DocumentSummary(BaseModel):
    document_id: str
    doc_title: str
    filename: str
    total_pages: int
    indexed_pages: int


class DocumentAddedResponse(BaseModel):
    session_id: str
    document: DocumentSummary
    document_count: int


class DocumentListResponse(BaseModel):
    session_id: str
    documents: List[DocumentSummary]


class SearchRequest(BaseModel):
    query: str
    top_k: Optional[int] = Field(None, ge=0)

    @field_validator('query')
    @classmethod
    def query_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('query cannot be empty')
        return v


class SearchResult(BaseModel):
    document_id: str
    document_title: str
    page_number: int
    page_text: str
    snippet: str
    score: float


class SearchResponse(BaseModel):
    session_id: str
    query: str
    similarity_function: str
    results: List[SearchResult]


class HealthResponse(BaseModel):
    status: str
    version: str
    similarity_function: str
    embed_provider: str
    session_count: int
    extraction: Dict[str, float]
