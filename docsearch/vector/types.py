"""
Document, page and search hit records held by sessions.
"""

import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np


@dataclass
class XPage:
    """A single extracted page."""

    page_number: int
    """1-based, unique within its document"""

    text: str
    """Extracted page text"""

    vector: Optional[np.ndarray] = None
    """Embedding of the page text; the page is searchable only once set"""

    @property
    def is_indexed(self) -> bool:
        return self.vector is not None

    def to_dict(self) -> Dict[str, object]:
        return {"page_number": self.page_number, "page_text": self.text}


@dataclass
class XDoc:
    """An extracted document and its ordered pages."""

    doc_title: str = ""
    filename: str = ""
    total_pages: int = 0
    pages: List[XPage] = field(default_factory=list)
    metadata: Dict[str, object] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        if not self.total_pages and self.pages:
            self.total_pages = len(self.pages)
        self.metadata.setdefault("filename", self.filename)
        self.metadata.setdefault("doc_title", self.doc_title)
        self.metadata.setdefault("pages", self.total_pages)

    @property
    def indexed_pages(self) -> List[XPage]:
        """Pages with a vector, in page-number order."""
        return sorted((p for p in self.pages if p.is_indexed), key=lambda p: p.page_number)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "doc_title": self.doc_title,
            "filename": self.filename,
            "total_pages": self.total_pages,
            "pages": [page.to_dict() for page in self.pages],
            "metadata": dict(self.metadata),
        }


@dataclass
class SearchHit:
    """One ranked page returned from a session search."""

    document_id: str
    document_title: str
    page_number: int
    page_text: str
    snippet: str
    score: float
