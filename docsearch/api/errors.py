"""
Translation of core failures into HTTP errors.

Messages are fixed per error kind so that session ids, provider URLs and
stack traces never reach a response body.
"""

from fastapi import HTTPException

from ..core.errors import ErrorKind, Failure

STATUS_BY_KIND = {
    ErrorKind.SESSION_NOT_FOUND: 404,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.EXTRACTION_FAILURE: 417,
    ErrorKind.EMBEDDING_FAILURE: 502,
    ErrorKind.DIMENSION_MISMATCH: 500,
}

MESSAGE_BY_KIND = {
    ErrorKind.SESSION_NOT_FOUND: "Session not found",
    ErrorKind.INVALID_INPUT: "Invalid request",
    ErrorKind.EXTRACTION_FAILURE: "Could not extract text from the document",
    ErrorKind.EMBEDDING_FAILURE: "Embedding provider unavailable, please retry",
    ErrorKind.DIMENSION_MISMATCH: "Internal server error",
}


def http_error(failure: Failure) -> HTTPException:
    """Build the HTTPException for a core failure."""
    status_code = STATUS_BY_KIND[failure.kind]
    detail = MESSAGE_BY_KIND[failure.kind]
    if failure.kind is ErrorKind.INVALID_INPUT:
        # Input errors describe the caller's own request
        detail = failure.message

    headers = {"Retry-After": "1"} if failure.retryable else None
    return HTTPException(status_code=status_code, detail=detail, headers=headers)
