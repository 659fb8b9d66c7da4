"""
Session lifecycle endpoints: start, check and end a search session.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response

from .deps import get_session_store
from .errors import http_error
from ..core.session import SessionStore

router = APIRouter()


@router.post("/start", status_code=201, response_class=PlainTextResponse)
def create_session(request: Request, store: SessionStore = Depends(get_session_store)):
    """Create a new session. The body is the session id."""
    session_id = store.create_session()
    location = str(request.url_for("check_session", session_id=session_id))
    return PlainTextResponse(session_id, status_code=201, headers={"Location": location})


@router.get("/{session_id}", name="check_session", response_class=PlainTextResponse)
def check_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Check that a session exists."""
    if store.session_exists(session_id):
        return PlainTextResponse(session_id)
    raise HTTPException(status_code=404, detail="Session not found")


@router.put("/end")
@router.put("/end/")
def end_session_missing_id():
    raise HTTPException(status_code=400, detail="Session id is required")


@router.put("/end/{session_id}")
def end_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """End a session. All of its documents and vectors are discarded."""
    if not session_id.strip():
        raise HTTPException(status_code=400, detail="Session id is required")

    result = store.end_session(session_id)
    if not result.ok:
        raise http_error(result.error)
    return Response(status_code=200)
