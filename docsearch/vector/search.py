"""
Vector search engine: per-session indexing and brute-force similarity search.

Every query scores all indexed pages of one session. Sessions are small and
short-lived, so there is no index structure beyond the session's document list.
"""

import time
from typing import List, Optional

import numpy as np

from .embeddings import IEmbeddingProvider
from .similarity import DimensionMismatchError, SimilarityFunction
from .types import SearchHit, XDoc, XPage
from ..core.errors import EmbeddingError, ErrorKind, Failure, Result
from ..core.session import SessionStore
from ..core.workers import CallTimeout, WorkerPool
from ..util.logging import logger, truncate


class VectorSearch:
    """
    Adds documents to sessions and answers similarity queries against them.

    Embedding calls are made without holding any session lock; only the final
    commit of a fully vectorized document takes the session's lock.
    """

    def __init__(
        self,
        session_store: SessionStore,
        embedding_provider: IEmbeddingProvider,
        similarity_function: SimilarityFunction = SimilarityFunction.COSINE,
        worker_pool: Optional[WorkerPool] = None,
        embed_timeout: Optional[float] = None,
        default_top_k: int = 0,
        snippet_length: int = 200,
    ):
        self.session_store = session_store
        self.embedding_provider = embedding_provider
        self.similarity_function = similarity_function
        self.worker_pool = worker_pool
        self.embed_timeout = embed_timeout
        self.default_top_k = default_top_k
        self.snippet_length = snippet_length

    def add_document(self, session_id: str, document: XDoc) -> Result[XDoc]:
        """
        Vectorize every page of document that lacks a vector and append the
        result to the session.

        All or nothing: on any failure the session is left untouched and the
        caller's document is not modified. Vectors already set on pages must be
        finite and match the embedder's dimension, else INVALID_INPUT.
        """
        found = self.session_store.get_session(session_id)
        if not found.ok:
            return Result(error=found.error)
        session = found.value

        if document is None:
            return Result.fail(ErrorKind.INVALID_INPUT, "Document is required")

        seen_numbers = set()
        for page in document.pages:
            if page.page_number < 1 or page.page_number in seen_numbers:
                return Result.fail(ErrorKind.INVALID_INPUT, f"Invalid or duplicate page number: {page.page_number}")
            seen_numbers.add(page.page_number)

        # Supplied vectors must be usable alongside the embedder's own
        supplied = [page for page in document.pages if page.vector is not None]
        if supplied:
            try:
                expected = self._call_provider(self.embedding_provider.get_dimension)
            except EmbeddingError as e:
                return Result(error=Failure.from_error(e))
            for page in supplied:
                problem = _vector_problem(page.vector, expected)
                if problem:
                    logger.log_vector_operation("add_document", session_id, {
                        "document_id": document.id,
                        "page_number": page.page_number,
                        "error": problem,
                    }, status="rejected")
                    return Result.fail(ErrorKind.INVALID_INPUT, f"Page {page.page_number}: {problem}")

        start_time = time.time()
        indexed_pages: List[XPage] = []
        embedded = 0
        for page in document.pages:
            if page.vector is None:
                try:
                    vector = self._embed(page.text)
                except EmbeddingError as e:
                    logger.log_vector_operation("add_document", session_id, {
                        "document_id": document.id,
                        "page_number": page.page_number,
                        "error": str(e),
                    }, status="failed")
                    return Result(error=Failure.from_error(e))
                embedded += 1
            else:
                vector = np.asarray(page.vector, dtype=np.float32)
            indexed_pages.append(XPage(page_number=page.page_number, text=page.text, vector=vector))

        dimensions = {page.vector.shape[0] for page in indexed_pages}
        if len(dimensions) > 1:
            logger.log_vector_operation("add_document", session_id, {
                "document_id": document.id,
                "dimensions": sorted(dimensions),
            }, status="fatal")
            return Result.fail(ErrorKind.DIMENSION_MISMATCH, "Document pages have mixed vector dimensions")
        dimension = dimensions.pop() if dimensions else None

        indexed = XDoc(
            doc_title=document.doc_title,
            filename=document.filename,
            total_pages=document.total_pages or len(indexed_pages),
            pages=indexed_pages,
            metadata=dict(document.metadata),
            id=document.id,
        )

        if not session.commit(indexed, dimension):
            logger.log_vector_operation("add_document", session_id, {
                "document_id": document.id,
                "document_dimension": dimension,
                "session_dimension": session.dimension,
            }, status="fatal")
            return Result.fail(
                ErrorKind.DIMENSION_MISMATCH,
                f"Document vector dimension {dimension} does not match session dimension {session.dimension}"
            )

        logger.log_vector_operation("add_document", session_id, {
            "document_id": indexed.id,
            "pages": len(indexed_pages),
            "embedded": embedded,
            "duration_ms": round((time.time() - start_time) * 1000, 2),
        })
        return Result.success(indexed)

    def search(self, session_id: str, query_text: str, top_k: Optional[int] = None) -> Result[List[SearchHit]]:
        """
        Rank every indexed page in the session against query_text.

        Args:
            session_id: Session to search
            query_text: Natural-language query
            top_k: Maximum number of hits; None uses the engine default, 0 means all

        Returns:
            Result holding hits best first. An empty session yields an empty list.
        """
        found = self.session_store.get_session(session_id)
        if not found.ok:
            return Result(error=found.error)
        session = found.value

        if query_text is None or not query_text.strip():
            return Result.fail(ErrorKind.INVALID_INPUT, "Query text is required")

        limit = self.default_top_k if top_k is None else top_k
        if limit < 0:
            return Result.fail(ErrorKind.INVALID_INPUT, "top_k must be >= 0")

        try:
            query_vector = self._embed(query_text)
        except EmbeddingError as e:
            logger.log_vector_operation("search", session_id, {
                "query": truncate(query_text),
                "error": str(e),
            }, status="failed")
            return Result(error=Failure.from_error(e))

        candidates = [
            (document, page)
            for document in session.snapshot()
            for page in document.indexed_pages
        ]
        if not candidates:
            return Result.success([])

        for document, page in candidates:
            if page.vector.shape[0] != query_vector.shape[0]:
                return self._dimension_failure(session_id, query_vector.shape[0], page.vector.shape[0])

        matrix = np.vstack([page.vector for _, page in candidates])
        try:
            scores = self.similarity_function.score(query_vector, matrix)
        except DimensionMismatchError:
            return self._dimension_failure(session_id, query_vector.shape[0], matrix.shape[1])

        order = self.similarity_function.rank(scores)
        if limit:
            order = order[:limit]

        hits = []
        for index in order:
            document, page = candidates[index]
            hits.append(SearchHit(
                document_id=document.id,
                document_title=document.doc_title,
                page_number=page.page_number,
                page_text=page.text,
                snippet=self._snippet(page.text),
                score=float(scores[index]),
            ))

        logger.log_vector_operation("search", session_id, {
            "query": truncate(query_text),
            "candidates": len(candidates),
            "returned": len(hits),
            "similarity": self.similarity_function.name,
        })
        return Result.success(hits)

    def list_documents(self, session_id: str) -> Result[List[XDoc]]:
        """Documents currently held by the session, in insertion order."""
        found = self.session_store.get_session(session_id)
        if not found.ok:
            return Result(error=found.error)
        return Result.success(list(found.value.snapshot()))

    def _call_provider(self, fn, *args):
        """Run a provider call on the pool (when configured) under the embed timeout."""
        try:
            if self.worker_pool is not None:
                return self.worker_pool.call(fn, *args, timeout=self.embed_timeout)
            return fn(*args)
        except EmbeddingError:
            raise
        except CallTimeout as e:
            raise EmbeddingError(f"Embedding timed out: {e}") from e
        except Exception as e:
            raise EmbeddingError(f"Embedding provider failed: {e}") from e

    def _embed(self, text: str) -> np.ndarray:
        """Embed text through the provider, enforcing the timeout and vector shape."""
        raw = self._call_provider(self.embedding_provider.embed_text, text)

        try:
            vector = np.asarray(raw, dtype=np.float32)
        except (TypeError, ValueError) as e:
            raise EmbeddingError("Embedding provider returned a malformed vector") from e

        if vector.ndim != 1 or vector.shape[0] == 0 or not np.all(np.isfinite(vector)):
            raise EmbeddingError("Embedding provider returned a malformed vector")
        return vector

    def _snippet(self, text: str) -> str:
        text = " ".join((text or "").split())
        if len(text) <= self.snippet_length:
            return text
        return text[:self.snippet_length] + "..."

    def _dimension_failure(self, session_id: str, query_dim: int, candidate_dim: int) -> Result:
        logger.log_vector_operation("search", session_id, {
            "query_dimension": query_dim,
            "candidate_dimension": candidate_dim,
        }, status="fatal")
        return Result.fail(
            ErrorKind.DIMENSION_MISMATCH,
            f"Query dimension {query_dim} does not match indexed dimension {candidate_dim}"
        )


def _vector_problem(raw, expected_dimension: int) -> Optional[str]:
    """Describe why a caller-supplied vector cannot be indexed, or None if it can."""
    try:
        vector = np.asarray(raw, dtype=np.float32)
    except (TypeError, ValueError):
        return "vector is not numeric"

    if vector.ndim != 1 or vector.shape[0] == 0:
        return "vector must be a non-empty list of numbers"
    if vector.shape[0] != expected_dimension:
        return f"vector has dimension {vector.shape[0]}, expected {expected_dimension}"
    if not np.all(np.isfinite(vector)):
        return "vector contains NaN or infinite values"
    return None
