"""
Shared fixtures: PDF builders and a scripted embedding provider.
"""

import threading

import fitz
import pytest

from docsearch.vector.embeddings import IEmbeddingProvider


class ScriptedEmbedding(IEmbeddingProvider):
    """Returns fixed vectors per text; unknown text gets the default vector."""

    def __init__(self, vectors=None, default=None, fail_on=None, block_on=None):
        self.vectors = dict(vectors or {})
        self.default = default if default is not None else [0.0, 0.0, 1.0]
        self.fail_on = set(fail_on or [])
        self.block_on = block_on or {}  # text -> threading.Event
        self.calls = []
        self._lock = threading.Lock()

    def embed_text(self, text):
        with self._lock:
            self.calls.append(text)
        if text in self.block_on:
            self.block_on[text].wait(5)
        if text in self.fail_on:
            raise RuntimeError(f"provider exploded on {text!r}")
        return list(self.vectors.get(text, self.default))

    def get_dimension(self):
        return len(self.default)


@pytest.fixture
def make_pdf():
    """Build PDF bytes with one page per text (empty string = blank page)."""
    def _make(*texts, title=None):
        doc = fitz.open()
        for text in texts or ("",):
            page = doc.new_page()
            if text:
                page.insert_text((72, 72), text)
        if title is not None:
            doc.set_metadata({"title": title})
        data = doc.tobytes()
        doc.close()
        return data
    return _make


@pytest.fixture
def scripted_embedding():
    return ScriptedEmbedding
