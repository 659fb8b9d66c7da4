"""
Process-wide configuration for the document search service.
Values are read once from the environment (and an optional .env file) at startup.
"""

import os
import tempfile

from dotenv import load_dotenv

load_dotenv()

# Debug flag controls API docs and debug detail in 500 responses
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Similarity function shared by every session: COSINE|DOT|EUCLIDEAN
SIMILARITY_FUNCTION = os.getenv("SIMILARITY_FUNCTION", "COSINE").upper()

# Upload handling
TEMP_FOLDER = os.getenv("TEMP_FOLDER", tempfile.gettempdir())
FILE_INMEM_PROCESSING = os.getenv("FILE_INMEM_PROCESSING", "true").lower() == "true"

# Embedding provider configuration
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "hash")  # hash|sentence_transformer|openai
EMBED_DIM = int(os.getenv("EMBED_DIM", "384"))
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "all-MiniLM-L6-v2")
OPENAI_API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/embeddings")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_API_MODEL = os.getenv("OPENAI_API_MODEL", "text-embedding-3-small")

# Adapter call limits
EMBED_TIMEOUT_SEC = float(os.getenv("EMBED_TIMEOUT_SEC", "30"))
EXTRACT_TIMEOUT_SEC = float(os.getenv("EXTRACT_TIMEOUT_SEC", "60"))
WORKER_POOL_SIZE = int(os.getenv("WORKER_POOL_SIZE", "4"))

# Search output
SEARCH_TOP_K = int(os.getenv("SEARCH_TOP_K", "10"))  # 0 means unbounded
SNIPPET_LENGTH = int(os.getenv("SNIPPET_LENGTH", "200"))

VALID_SIMILARITY_FUNCTIONS = ["COSINE", "DOT", "EUCLIDEAN"]
VALID_EMBED_PROVIDERS = ["hash", "sentence_transformer", "openai"]

# Version string
VERSION = "1.0.0"


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_similarity_function():
    """Get the configured similarity function."""
    from ..vector.similarity import SimilarityFunction
    return SimilarityFunction.from_name(SIMILARITY_FUNCTION)


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    if EMBED_PROVIDER == "sentence_transformer":
        from ..vector.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(EMBED_MODEL_NAME)
    elif EMBED_PROVIDER == "openai":
        from ..vector.embeddings import OpenAIEmbedding
        return OpenAIEmbedding(
            api_url=OPENAI_API_URL,
            api_key=OPENAI_API_KEY,
            model=OPENAI_API_MODEL,
            timeout=EMBED_TIMEOUT_SEC,
        )
    else:
        from ..vector.embeddings import DeterministicHashEmbedding
        return DeterministicHashEmbedding(EMBED_DIM)


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if SIMILARITY_FUNCTION not in VALID_SIMILARITY_FUNCTIONS:
        issues.append(f"Invalid SIMILARITY_FUNCTION: {SIMILARITY_FUNCTION}")

    if EMBED_PROVIDER not in VALID_EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {EMBED_PROVIDER}")

    if EMBED_PROVIDER == "openai" and not OPENAI_API_KEY:
        issues.append("EMBED_PROVIDER=openai requires OPENAI_API_KEY")

    if EMBED_DIM < 1:
        issues.append("EMBED_DIM must be >= 1")

    if EMBED_TIMEOUT_SEC <= 0 or EXTRACT_TIMEOUT_SEC <= 0:
        issues.append("EMBED_TIMEOUT_SEC and EXTRACT_TIMEOUT_SEC must be > 0")

    if WORKER_POOL_SIZE < 1:
        issues.append("WORKER_POOL_SIZE must be >= 1")

    if SEARCH_TOP_K < 0:
        issues.append("SEARCH_TOP_K must be >= 0")

    if not FILE_INMEM_PROCESSING and not os.path.isdir(TEMP_FOLDER):
        issues.append(f"TEMP_FOLDER does not exist: {TEMP_FOLDER}")

    return issues
