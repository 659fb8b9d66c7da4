"""
PDF text extraction: binary document -> XDoc with one XPage per page.
"""

import os
import threading
import time
from typing import Dict, Optional

import fitz  # PyMuPDF

from ..core.errors import ExtractionError
from ..core.workers import CallTimeout, WorkerPool
from ..util.logging import logger
from ..vector.types import XDoc, XPage


class ExtractorEngine:
    """
    Extracts per-page text and a title from PDF documents.

    The title is the document's metadata title when present, otherwise the
    text of the first page. Newlines in either become spaces.
    """

    def __init__(self, worker_pool: Optional[WorkerPool] = None, timeout: Optional[float] = None):
        self.worker_pool = worker_pool
        self.timeout = timeout
        self._stats_lock = threading.Lock()
        self._stats = {
            "successful_extracts": 0,
            "failed_extracts": 0,
            "total_extract_ms": 0.0
        }

    def extract_text_from_pdf(self, file_bytes: bytes, filename: str = "file.pdf") -> XDoc:
        """
        Extract text from PDF bytes.

        Raises:
            ExtractionError: if the input is missing, empty, not a PDF, or the
                extraction exceeds the configured timeout.
        """
        if file_bytes is None:
            raise ExtractionError("File is null")
        if len(file_bytes) == 0:
            raise ExtractionError("File is empty")

        return self._timed(filename, lambda: fitz.open(stream=file_bytes, filetype="pdf"))

    def extract_text_from(self, input_file: str, filename: str = None) -> XDoc:
        """Extract text from a PDF on disk; the filename defaults to the path's basename."""
        if not input_file or not os.path.isfile(input_file):
            raise ExtractionError(f"File not found: {os.path.basename(input_file or '')}")

        filename = filename or os.path.basename(input_file)
        return self._timed(filename, lambda: fitz.open(input_file, filetype="pdf"))

    def get_stats(self) -> Dict[str, float]:
        with self._stats_lock:
            return dict(self._stats)

    def _timed(self, filename: str, opener) -> XDoc:
        start_time = time.time()
        try:
            if self.worker_pool is not None:
                xdoc = self.worker_pool.call(self._extract, filename, opener, timeout=self.timeout)
            else:
                xdoc = self._extract(filename, opener)
        except CallTimeout as e:
            self._record(filename, start_time, "failed", {"error": str(e)})
            raise ExtractionError(f"Extraction timed out: {filename}", retryable=True) from e
        except ExtractionError as e:
            self._record(filename, start_time, "failed", {"error": str(e)})
            raise

        self._record(filename, start_time, "success", {"pages": xdoc.total_pages})
        return xdoc

    def _extract(self, filename: str, opener) -> XDoc:
        try:
            pdf = opener()
        except Exception as e:
            raise ExtractionError(f"Error extracting text from PDF: {e}") from e

        try:
            if not pdf.is_pdf or pdf.page_count == 0:
                raise ExtractionError("Document is not a readable PDF")

            pages = []
            for index, page in enumerate(pdf):
                pages.append(XPage(page_number=index + 1, text=_page_text(page)))

            title = _title(pdf.metadata or {}, pages[0].text)
            return XDoc(
                doc_title=title,
                filename=filename,
                total_pages=pdf.page_count,
                pages=pages,
                metadata={
                    "pages": pdf.page_count,
                    "filename": filename,
                    "doc_title": title,
                },
            )
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(f"Error extracting text from PDF: {e}") from e
        finally:
            pdf.close()

    def _record(self, filename: str, start_time: float, status: str, details: Dict) -> None:
        end_time = time.time()
        with self._stats_lock:
            if status == "success":
                self._stats["successful_extracts"] += 1
            else:
                self._stats["failed_extracts"] += 1
            self._stats["total_extract_ms"] += round((end_time - start_time) * 1000, 2)
        logger.log_extraction(filename, start_time, end_time, status, details)


def _page_text(page) -> str:
    # Page text is newline-terminated, including empty pages
    text = page.get_text("text")
    return text if text.endswith("\n") else text + "\n"


def _title(metadata: Dict[str, str], first_page_text: str) -> str:
    title = metadata.get("title") or ""
    if title:
        return title.replace("\n", " ")
    return first_page_text.replace("\n", " ")
