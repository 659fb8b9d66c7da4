"""
Request-scoped access to the services owned by the application.
"""

from fastapi import Request

from ..core.session import SessionStore
from ..extraction.extractor import ExtractorEngine
from ..vector.search import VectorSearch


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_vector_search(request: Request) -> VectorSearch:
    return request.app.state.vector_search


def get_extractor(request: Request) -> ExtractorEngine:
    return request.app.state.extractor


def get_upload_settings(request: Request) -> dict:
    """In-memory vs temp-file processing and the temp folder."""
    return request.app.state.upload_settings
