"""
Typed failures shared by the session store, the search engine and the API layer.

Adapters (embedding providers, the PDF extractor) raise; the session store and
the search engine hand back a Result whose Failure names the kind of error.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    SESSION_NOT_FOUND = "session_not_found"
    DIMENSION_MISMATCH = "dimension_mismatch"
    EMBEDDING_FAILURE = "embedding_failure"
    EXTRACTION_FAILURE = "extraction_failure"
    INVALID_INPUT = "invalid_input"


class DocSearchError(Exception):
    """Base class for errors raised by external adapters."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT
    retryable: bool = False


class EmbeddingError(DocSearchError):
    """Embedding provider failed, timed out or returned a malformed vector."""

    kind = ErrorKind.EMBEDDING_FAILURE
    retryable = True


class ExtractionError(DocSearchError):
    """Input document could not be read or parsed."""

    kind = ErrorKind.EXTRACTION_FAILURE

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    retryable: bool = False

    @classmethod
    def from_error(cls, error: DocSearchError) -> "Failure":
        return cls(kind=error.kind, message=str(error), retryable=error.retryable)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a core operation: either a value or a Failure."""

    value: Optional[T] = None
    error: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str, retryable: bool = False) -> "Result[T]":
        return cls(error=Failure(kind=kind, message=message, retryable=retryable))

    @classmethod
    def not_found(cls, session_id: str) -> "Result[T]":
        return cls.fail(ErrorKind.SESSION_NOT_FOUND, f"Session not found: {session_id}")
