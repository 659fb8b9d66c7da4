"""
HTTP API tests: session lifecycle, upload extraction, indexing and search.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from docsearch.api.main import create_app
from docsearch.core.errors import ExtractionError
from docsearch.core.session import SessionStore
from docsearch.vector.search import VectorSearch
from docsearch.vector.similarity import SimilarityFunction


VECTORS = {
    "alpha page": [1.0, 0.0, 0.0],
    "beta page": [0.0, 1.0, 0.0],
    "gamma page": [2.0, 0.0, 0.0],
    "find alpha": [1.0, 0.0, 0.0],
}


@pytest.fixture
def embedding(scripted_embedding):
    return scripted_embedding(vectors=VECTORS, fail_on={"explode"})


@pytest.fixture
def engine(embedding):
    return VectorSearch(SessionStore(), embedding, SimilarityFunction.DOT)


@pytest.fixture
def client(engine):
    return TestClient(create_app(vector_search=engine))


@pytest.fixture
def session_id(client):
    return client.post("/session/start").text


def _document(title="Doc", *texts):
    return {
        "doc_title": title,
        "filename": f"{title.lower()}.pdf",
        "pages": [{"page_number": i + 1, "page_text": text} for i, text in enumerate(texts)],
    }


class TestSessionEndpoints:

    def test_start_session(self, client):
        response = client.post("/session/start")

        assert response.status_code == 201
        assert response.text
        assert response.headers["location"].endswith(f"/session/{response.text}")

    def test_check_session(self, client, session_id):
        response = client.get(f"/session/{session_id}")
        assert response.status_code == 200
        assert response.text == session_id

    def test_check_unknown_session(self, client):
        assert client.get("/session/does-not-exist").status_code == 404

    def test_end_session(self, client, session_id):
        assert client.put(f"/session/end/{session_id}").status_code == 200
        assert client.get(f"/session/{session_id}").status_code == 404

    def test_end_unknown_session(self, client):
        assert client.put("/session/end/does-not-exist").status_code == 404

    def test_end_twice(self, client, session_id):
        assert client.put(f"/session/end/{session_id}").status_code == 200
        assert client.put(f"/session/end/{session_id}").status_code == 404

    def test_end_without_id(self, client):
        assert client.put("/session/end").status_code == 400

    def test_end_blank_id(self, client):
        assert client.put("/session/end/%20").status_code == 400


class TestExtractEndpoint:

    def test_upload_pdf(self, client, make_pdf):
        response = client.post(
            "/extract/upload",
            files={"file": ("report.pdf", make_pdf("test data", "second page"), "application/pdf")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["id"]
        assert body["filename"] == "report.pdf"
        assert body["doc_title"].strip() == "test data"
        assert body["total_pages"] == 2
        assert [p["page_number"] for p in body["pages"]] == [1, 2]
        assert "second page" in body["pages"][1]["page_text"]

    def test_upload_empty_file(self, client):
        response = client.post("/extract/upload", files={"file": ("empty.pdf", b"", "application/pdf")})
        assert response.status_code == 400
        assert response.json()["detail"] == "Please upload a file!"

    def test_upload_invalid_pdf(self, client):
        response = client.post("/extract/upload", files={"file": ("bad.pdf", b"not a pdf", "application/pdf")})
        assert response.status_code == 417
        assert response.json()["detail"] == "Could not upload the file: bad.pdf!"
        assert "retry-after" not in response.headers

    @pytest.mark.parametrize("path", ["/extract/upload", "/session/{sid}/upload"])
    def test_extraction_timeout_is_retryable(self, engine, path):
        extractor = MagicMock()
        extractor.extract_text_from_pdf.side_effect = ExtractionError("Extraction timed out: slow.pdf", retryable=True)
        client = TestClient(create_app(vector_search=engine, extractor=extractor))
        sid = client.post("/session/start").text

        response = client.post(path.format(sid=sid), files={"file": ("slow.pdf", b"%PDF-1.7", "application/pdf")})

        assert response.status_code == 417
        assert response.headers["retry-after"] == "1"

    def test_upload_missing_file(self, client):
        assert client.post("/extract/upload").status_code == 400

    def test_upload_via_temp_file(self, engine, make_pdf, tmp_path):
        client = TestClient(create_app(vector_search=engine, in_memory=False, temp_folder=str(tmp_path)))

        response = client.post("/extract/upload", files={"file": ("disk.pdf", make_pdf("on disk"), "application/pdf")})

        assert response.status_code == 200
        assert response.json()["filename"] == "disk.pdf"
        assert list(tmp_path.iterdir()) == []


class TestDocumentEndpoints:

    def test_add_document(self, client, session_id):
        response = client.post(f"/session/{session_id}/documents", json=_document("Doc", "alpha page", "beta page"))

        assert response.status_code == 201
        body = response.json()
        assert body["session_id"] == session_id
        assert body["document"]["indexed_pages"] == 2
        assert body["document"]["total_pages"] == 2
        assert body["document_count"] == 1

    def test_add_document_with_vectors(self, client, session_id, embedding):
        document = {
            "doc_title": "Prevectorized",
            "pages": [{"page_number": 1, "page_text": "no provider call", "vector": [0.5, 0.5, 0.0]}],
        }
        response = client.post(f"/session/{session_id}/documents", json=document)

        assert response.status_code == 201
        assert "no provider call" not in embedding.calls

    def test_add_document_unknown_session(self, client):
        response = client.post("/session/does-not-exist/documents", json=_document("Doc", "alpha page"))
        assert response.status_code == 404

    def test_add_document_blank_title(self, client, session_id):
        response = client.post(f"/session/{session_id}/documents", json=_document("   ", "alpha page"))
        assert response.status_code == 400

    def test_add_document_duplicate_pages(self, client, session_id):
        document = _document("Doc", "alpha page")
        document["pages"].append({"page_number": 1, "page_text": "beta page"})
        assert client.post(f"/session/{session_id}/documents", json=document).status_code == 400

    def test_add_document_embedding_failure(self, client, session_id):
        response = client.post(f"/session/{session_id}/documents", json=_document("Doc", "alpha page", "explode"))

        assert response.status_code == 502
        assert response.headers["retry-after"]
        assert client.get(f"/session/{session_id}/documents").json()["documents"] == []

    def test_add_document_foreign_dimension(self, client, session_id):
        foreign = {"doc_title": "Two", "pages": [{"page_number": 1, "page_text": "y", "vector": [1.0, 0.0]}]}

        response = client.post(f"/session/{session_id}/documents", json=foreign)

        assert response.status_code == 400
        assert "dimension" in response.json()["detail"]
        # The session is unaffected and keeps working
        assert client.post(f"/session/{session_id}/documents", json=_document("Doc", "alpha page")).status_code == 201
        search = client.post(f"/session/{session_id}/search", json={"query": "find alpha"})
        assert search.status_code == 200
        assert len(search.json()["results"]) == 1

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_add_document_non_finite_vector(self, client, session_id, literal):
        body = (
            '{"doc_title": "T", "pages": [{"page_number": 1, "page_text": "x", '
            f'"vector": [{literal}, 1.0, 0.0]}}]}}'
        )
        response = client.post(
            f"/session/{session_id}/documents",
            content=body,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert client.get(f"/session/{session_id}/documents").json()["documents"] == []

    def test_list_documents(self, client, session_id):
        client.post(f"/session/{session_id}/documents", json=_document("First", "alpha page"))
        client.post(f"/session/{session_id}/documents", json=_document("Second", "beta page"))

        response = client.get(f"/session/{session_id}/documents")

        assert response.status_code == 200
        assert [d["doc_title"] for d in response.json()["documents"]] == ["First", "Second"]

    def test_list_documents_unknown_session(self, client):
        assert client.get("/session/does-not-exist/documents").status_code == 404

    def test_upload_into_session(self, client, session_id, make_pdf):
        response = client.post(
            f"/session/{session_id}/upload",
            files={"file": ("upload.pdf", make_pdf("first", "second"), "application/pdf")},
        )

        assert response.status_code == 201
        assert response.json()["document"]["filename"] == "upload.pdf"
        assert response.json()["document"]["indexed_pages"] == 2

    def test_upload_into_unknown_session(self, client, make_pdf):
        response = client.post(
            "/session/does-not-exist/upload",
            files={"file": ("upload.pdf", make_pdf("first"), "application/pdf")},
        )
        assert response.status_code == 404

    def test_upload_invalid_pdf_into_session(self, client, session_id):
        response = client.post(
            f"/session/{session_id}/upload",
            files={"file": ("bad.pdf", b"not a pdf", "application/pdf")},
        )
        assert response.status_code == 417


class TestSearchEndpoint:

    @pytest.fixture
    def populated(self, client, session_id):
        client.post(f"/session/{session_id}/documents", json=_document("Doc A", "alpha page", "beta page"))
        client.post(f"/session/{session_id}/documents", json=_document("Doc B", "gamma page"))
        return session_id

    def test_search_ranks_pages(self, client, populated):
        response = client.post(f"/session/{populated}/search", json={"query": "find alpha"})

        assert response.status_code == 200
        body = response.json()
        assert body["similarity_function"] == "DOT"
        assert [(r["document_title"], r["page_number"]) for r in body["results"]] == [
            ("Doc B", 1), ("Doc A", 1), ("Doc A", 2)
        ]
        assert [r["score"] for r in body["results"]] == pytest.approx([2.0, 1.0, 0.0])
        assert body["results"][0]["snippet"] == "gamma page"

    def test_search_top_k(self, client, populated):
        response = client.post(f"/session/{populated}/search", json={"query": "find alpha", "top_k": 1})
        assert len(response.json()["results"]) == 1

    def test_search_empty_session(self, client, session_id):
        response = client.post(f"/session/{session_id}/search", json={"query": "anything"})
        assert response.status_code == 200
        assert response.json()["results"] == []

    def test_search_blank_query(self, client, populated):
        assert client.post(f"/session/{populated}/search", json={"query": "  "}).status_code == 400

    def test_search_negative_top_k(self, client, populated):
        assert client.post(f"/session/{populated}/search", json={"query": "x", "top_k": -1}).status_code == 400

    def test_search_unknown_session(self, client):
        assert client.post("/session/does-not-exist/search", json={"query": "x"}).status_code == 404

    def test_search_embedding_failure(self, client, populated):
        response = client.post(f"/session/{populated}/search", json={"query": "explode"})
        assert response.status_code == 502
        assert "explode" not in response.json()["detail"]

    def test_search_after_end(self, client, populated):
        client.put(f"/session/end/{populated}")
        assert client.post(f"/session/{populated}/search", json={"query": "find alpha"}).status_code == 404

    def test_sessions_are_isolated(self, client, populated):
        other = client.post("/session/start").text
        response = client.post(f"/session/{other}/search", json={"query": "find alpha"})
        assert response.json()["results"] == []


def test_health(client, session_id):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] in ("healthy", "degraded")
    assert body["similarity_function"] == "DOT"
    assert body["embed_provider"] == "ScriptedEmbedding"
    assert body["session_count"] == 1
    assert "successful_extracts" in body["extraction"]
