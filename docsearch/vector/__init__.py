"""
Session-scoped vector search: records, similarity functions, embedding providers
and the search engine.
"""

# Package initialization for vector module
from .types import XPage, XDoc, SearchHit
from .similarity import SimilarityFunction, DimensionMismatchError
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding, SentenceTransformerEmbedding, OpenAIEmbedding
from .search import VectorSearch

__all__ = [
    'XPage',
    'XDoc',
    'SearchHit',
    'SimilarityFunction',
    'DimensionMismatchError',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding',
    'OpenAIEmbedding',
    'VectorSearch'
]
