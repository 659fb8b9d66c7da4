"""
Upload endpoint: extract text from a PDF without storing it in a session.
"""

import os
import uuid

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from .deps import get_extractor, get_upload_settings
from .schemas import XDocResponse
from ..core.errors import ExtractionError
from ..extraction.extractor import ExtractorEngine
from ..util.logging import logger
from ..vector.types import XDoc

router = APIRouter()


def extract_upload(file: UploadFile, extractor: ExtractorEngine, settings: dict) -> XDoc:
    """
    Read an uploaded file and extract it, in memory or via a temp file
    depending on configuration.

    Raises:
        HTTPException(400): the upload is empty
        ExtractionError: the document could not be extracted
    """
    filename = file.filename or "file.pdf"
    data = file.file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Please upload a file!")

    if settings.get("in_memory", True):
        return extractor.extract_text_from_pdf(data, filename=filename)

    temp_path = os.path.join(settings["temp_folder"], f"{uuid.uuid4()}.pdf")
    with open(temp_path, "wb") as handle:
        handle.write(data)
    try:
        return extractor.extract_text_from(temp_path, filename=filename)
    finally:
        try:
            os.remove(temp_path)
        except OSError as e:
            logger.warning(f"Could not remove temp upload {temp_path}: {e}")


def to_xdoc_response(xdoc: XDoc) -> XDocResponse:
    return XDocResponse(**xdoc.to_dict())


@router.post("/upload", response_model=XDocResponse)
def upload_file(
    file: UploadFile = File(...),
    extractor: ExtractorEngine = Depends(get_extractor),
    settings: dict = Depends(get_upload_settings),
):
    """Extract text from an uploaded PDF and return it page by page."""
    try:
        xdoc = extract_upload(file, extractor, settings)
    except HTTPException:
        raise
    except ExtractionError as e:
        logger.error(f"Extraction failed for upload {file.filename}: {e}")
        headers = {"Retry-After": "1"} if e.retryable else None
        raise HTTPException(status_code=417, detail=f"Could not upload the file: {file.filename}!", headers=headers)
    except Exception as e:
        logger.error(f"Unexpected error processing upload {file.filename}: {e}")
        raise HTTPException(status_code=500, detail=f"An error occurred while processing the file: {file.filename}!")

    return to_xdoc_response(xdoc)
