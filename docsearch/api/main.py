"""
FastAPI application for session-scoped document search.

The session store, search engine and extractor are built once per application
by create_app() and handed to routes through dependencies.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .documents import router as documents_router
from .extract import router as extract_router
from .schemas import HealthResponse
from .session import router as session_router
from ..core import config
from ..core.session import SessionStore
from ..core.workers import WorkerPool
from ..extraction.extractor import ExtractorEngine
from ..util.logging import logger
from ..vector.search import VectorSearch


def create_app(
    session_store: Optional[SessionStore] = None,
    vector_search: Optional[VectorSearch] = None,
    extractor: Optional[ExtractorEngine] = None,
    in_memory: Optional[bool] = None,
    temp_folder: Optional[str] = None,
) -> FastAPI:
    """
    Build the application and the services it owns.

    Any service passed in is used as is; the rest are built from config.
    Everything built here is torn down when the application shuts down.
    Configuration issues are logged before any service is built, so an
    invalid setting is reported even when building that service fails.
    """
    for issue in config.validate_config():
        logger.warning(f"Configuration issue: {issue}")

    worker_pool = WorkerPool(max_workers=config.WORKER_POOL_SIZE)
    session_store = session_store or (vector_search.session_store if vector_search else SessionStore())
    if vector_search is None:
        vector_search = VectorSearch(
            session_store=session_store,
            embedding_provider=config.get_embedding_provider(),
            similarity_function=config.get_similarity_function(),
            worker_pool=worker_pool,
            embed_timeout=config.EMBED_TIMEOUT_SEC,
            default_top_k=config.SEARCH_TOP_K,
            snippet_length=config.SNIPPET_LENGTH,
        )
    if extractor is None:
        extractor = ExtractorEngine(worker_pool=worker_pool, timeout=config.EXTRACT_TIMEOUT_SEC)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Document search API starting (similarity={vector_search.similarity_function.name})")

        yield

        logger.info("Shutting down document search API...")
        session_store.clear()
        worker_pool.shutdown()

    app = FastAPI(
        title="Document Search API",
        version=config.VERSION,
        description="Session-scoped semantic search over uploaded documents",
        docs_url="/docs" if config.debug_enabled() else None,
        redoc_url="/redoc" if config.debug_enabled() else None,
        lifespan=lifespan,
    )

    app.state.session_store = session_store
    app.state.vector_search = vector_search
    app.state.extractor = extractor
    app.state.upload_settings = {
        "in_memory": config.FILE_INMEM_PROCESSING if in_memory is None else in_memory,
        "temp_folder": temp_folder or config.TEMP_FOLDER,
    }

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(session_router, prefix="/session", tags=["session"])
    app.include_router(documents_router, prefix="/session", tags=["documents"])
    app.include_router(extract_router, prefix="/extract", tags=["extract"])

    @app.get("/health", response_model=HealthResponse)
    def health_check_endpoint():
        """Check service health."""
        return HealthResponse(
            status="healthy" if not config.validate_config() else "degraded",
            version=config.VERSION,
            similarity_function=vector_search.similarity_function.name,
            embed_provider=type(vector_search.embedding_provider).__name__,
            session_count=session_store.session_count(),
            extraction=extractor.get_stats(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        """Missing or empty required fields are a 400, not a 422."""
        messages = [f"{'.'.join(str(p) for p in err.get('loc', ())[1:])}: {err.get('msg')}" for err in exc.errors()]
        return JSONResponse(status_code=400, content={"detail": "; ".join(messages) or "Invalid request"})

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """Handle all unhandled exceptions."""
        logger.error(f"Unhandled exception: {exc}")
        content = {"detail": "Internal server error"}
        if config.debug_enabled():
            content["debug"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    return app


app = create_app()
