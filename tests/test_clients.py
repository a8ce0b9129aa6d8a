"""
Tests for the Paperless API client.

These tests use responses library to mock HTTP requests,
validating client behavior without making real API calls.
"""

import json
import re
from urllib.parse import parse_qs, urlparse

import pytest
import requests
import responses

from paperless_cli.paperless_client import (
    CORRESPONDENTS,
    DOCUMENTS,
    NAMED_KINDS,
    TAGS,
    APIError,
    Document,
    NotFound,
    PaperlessClient,
    PaperlessError,
    Tag,
    TransportError,
    ValidationError,
    parse_content_disposition,
)

BASE_URL = "http://paperless.test:8000"
TOKEN = "test-token-12345"


def query_of(call) -> dict[str, list[str]]:
    return parse_qs(urlparse(call.request.url).query)


class TestTransport:
    """Headers, URL joining, timeouts and transport failures."""

    @responses.activate
    def test_auth_and_version_headers_sent(self, client, sample_document):
        """Every request carries the token and the API version Accept header."""
        responses.add(responses.GET, f"{BASE_URL}/api/documents/123/", json=sample_document)

        client.get_document(123)

        headers = responses.calls[0].request.headers
        assert headers["Authorization"] == f"Token {TOKEN}"
        assert headers["Accept"] == "application/json; version=5"

    @responses.activate
    def test_trailing_slash_on_base_url_not_duplicated(self, sample_document):
        """Base URL with trailing slash joins without a double slash."""
        responses.add(responses.GET, f"{BASE_URL}/api/documents/123/", json=sample_document)

        client = PaperlessClient(f"{BASE_URL}/", TOKEN)
        client.get_document(123)

        assert responses.calls[0].request.url == f"{BASE_URL}/api/documents/123/"

    def test_url_joining(self, client):
        assert client._url("/api/tags/") == f"{BASE_URL}/api/tags/"
        assert client._url("api/tags/") == f"{BASE_URL}/api/tags/"
        assert client._url("https://other.test/api/") == "https://other.test/api/"

    def test_default_timeout(self, client):
        assert client.timeout == 30

    @responses.activate
    def test_connection_error_becomes_transport_error(self, client):
        """Connection failures surface as TransportError with the cause attached."""
        cause = requests.exceptions.ConnectionError("connection refused")
        responses.add(responses.GET, f"{BASE_URL}/api/documents/1/", body=cause)

        with pytest.raises(TransportError) as exc_info:
            client.get_document(1)

        assert exc_info.value.__cause__ is cause
        assert isinstance(exc_info.value, PaperlessError)

    @responses.activate
    def test_timeout_becomes_transport_error(self, client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/tags/",
            body=requests.exceptions.ReadTimeout("read timed out"),
        )

        with pytest.raises(TransportError, match="timed out"):
            client.list_tags()

    @responses.activate
    def test_no_retry_on_server_error(self, client):
        """A 503 fails immediately after one request."""
        responses.add(responses.GET, f"{BASE_URL}/api/tags/", body="unavailable", status=503)

        with pytest.raises(APIError) as exc_info:
            client.list_tags()

        assert exc_info.value.status_code == 503
        assert exc_info.value.response_body == "unavailable"
        assert len(responses.calls) == 1

    @responses.activate
    def test_test_connection_success(self, client):
        responses.add(responses.GET, f"{BASE_URL}/api/", json={"documents": "..."})
        assert client.test_connection() is True

    @responses.activate
    def test_test_connection_failure(self, client):
        responses.add(responses.GET, f"{BASE_URL}/api/", json={"detail": "Invalid token."}, status=401)
        assert client.test_connection() is False

    @responses.activate
    def test_invalid_json_is_api_error(self, client):
        responses.add(responses.GET, f"{BASE_URL}/api/tags/1/", body="<html>proxy</html>", status=200)

        with pytest.raises(APIError, match="invalid JSON"):
            client.get_tag(1)


class TestPagination:
    """List endpoints return exactly one page in the generic envelope."""

    @responses.activate
    def test_list_documents_page(self, client, sample_document, make_page):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/documents/",
            json=make_page([sample_document], count=57, next_url=f"{BASE_URL}/api/documents/?page=2"),
        )

        page = client.list_documents(page=1, page_size=1)

        assert page.count == 57
        assert len(page.results) == 1
        assert isinstance(page.results[0], Document)
        assert page.next.endswith("page=2")
        assert page.previous is None
        # Never follows next
        assert len(responses.calls) == 1

    @pytest.mark.parametrize("kind", [DOCUMENTS, *NAMED_KINDS], ids=lambda k: k.name)
    @responses.activate
    def test_count_at_least_page_length(self, client, make_page, kind):
        """count is the total across pages and never smaller than the page."""
        records = [{"id": i, "name": f"r{i}", "title": f"r{i}"} for i in range(1, 4)]
        responses.add(responses.GET, f"{BASE_URL}{kind.endpoint}", json=make_page(records, count=10))

        page = client.list_resources(kind, page_size=3)

        assert page.count >= len(page.results)
        assert len(page.results) <= 3
        assert page.count == 10

    @responses.activate
    def test_auxiliary_lists_fetch_everything(self, client, sample_tags, make_page):
        """Tags and friends are listed with one large page."""
        responses.add(responses.GET, f"{BASE_URL}/api/tags/", json=make_page(sample_tags))

        page = client.list_tags()

        assert [t.name for t in page.results] == ["Inbox", "Bills", "Important"]
        assert query_of(responses.calls[0]) == {"page_size": ["1000"]}

    @responses.activate
    def test_document_filters_in_query(self, client, make_page):
        """Filters map to server parameters; tags repeat."""
        responses.add(responses.GET, f"{BASE_URL}/api/documents/", json=make_page([]))

        client.list_documents(
            query="invoice",
            tags=["bills", "2024"],
            correspondent="ACME Corp",
            document_type="Invoice",
            created_after="2024-01-01",
            created_before="2024-12-31",
            page=2,
            page_size=25,
            ordering="-created",
        )

        assert query_of(responses.calls[0]) == {
            "query": ["invoice"],
            "tags__name__iexact": ["bills", "2024"],
            "correspondent__name__iexact": ["ACME Corp"],
            "document_type__name__iexact": ["Invoice"],
            "created__date__gt": ["2024-01-01"],
            "created__date__lt": ["2024-12-31"],
            "page": ["2"],
            "page_size": ["25"],
            "ordering": ["-created"],
        }

    @responses.activate
    def test_absent_filters_omitted(self, client, make_page):
        """Unset filters are not sent, not even as empty strings."""
        responses.add(responses.GET, f"{BASE_URL}/api/documents/", json=make_page([]))

        client.list_documents(query="", tags=[], correspondent=None)

        assert responses.calls[0].request.url == f"{BASE_URL}/api/documents/"

    @responses.activate
    def test_similar_documents(self, client, sample_document, make_page):
        responses.add(responses.GET, f"{BASE_URL}/api/documents/", json=make_page([sample_document]))

        page = client.similar_documents(99, page_size=5)

        assert page.results[0].id == 123
        assert query_of(responses.calls[0]) == {"more_like_id": ["99"], "page_size": ["5"]}


class TestGet:
    """Single-record fetches."""

    @responses.activate
    def test_get_document(self, client, sample_document):
        responses.add(responses.GET, f"{BASE_URL}/api/documents/123/", json=sample_document)

        doc = client.get_document(123)

        assert doc.id == 123
        assert doc.title == "ACME Invoice November"
        assert doc.tags == [1, 3]
        assert doc.correspondent == 5
        assert doc.created_date == "2024-11-18"
        assert doc.original_file_name == "invoice.pdf"
        assert doc.content.startswith("Invoice INV-2024-001234")

    @responses.activate
    def test_get_not_found(self, client):
        responses.add(
            responses.GET, f"{BASE_URL}/api/documents/99999/", json={"detail": "Not found."}, status=404
        )

        with pytest.raises(NotFound) as exc_info:
            client.get_document(99999)

        assert exc_info.value.kind == "document"
        assert exc_info.value.reference == 99999

    @responses.activate
    def test_get_other_error_is_api_error(self, client):
        responses.add(responses.GET, f"{BASE_URL}/api/tags/5/", body="boom", status=500)

        with pytest.raises(APIError) as exc_info:
            client.get_tag(5)

        assert exc_info.value.status_code == 500
        assert "boom" in str(exc_info.value)

    @responses.activate
    def test_get_tag(self, client, sample_tags):
        responses.add(responses.GET, f"{BASE_URL}/api/tags/1/", json=sample_tags[0])

        tag = client.get_tag(1)

        assert isinstance(tag, Tag)
        assert tag.is_inbox_tag is True
        assert tag.document_count == 12


class TestMutations:
    """Create, partial update and delete."""

    @pytest.mark.parametrize("status", [200, 201])
    @responses.activate
    def test_create_tag(self, client, status):
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/tags/",
            json={"id": 9, "name": "receipts", "slug": "receipts", "color": "#ff0000"},
            status=status,
        )

        tag = client.create_tag("receipts", color="#ff0000")

        assert tag.id == 9
        assert json.loads(responses.calls[0].request.body) == {"name": "receipts", "color": "#ff0000"}

    @responses.activate
    def test_create_without_color_omits_it(self, client):
        responses.add(responses.POST, f"{BASE_URL}/api/tags/", json={"id": 9, "name": "x"}, status=201)

        client.create_tag("x")

        assert json.loads(responses.calls[0].request.body) == {"name": "x"}

    @responses.activate
    def test_create_validation_error(self, client):
        """Field-level 400 bodies raise ValidationError, an APIError."""
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/correspondents/",
            json={"name": ["correspondent with this name already exists."]},
            status=400,
        )

        with pytest.raises(ValidationError) as exc_info:
            client.create_correspondent("ACME Corp")

        err = exc_info.value
        assert isinstance(err, APIError)
        assert err.status_code == 400
        assert err.errors == {"name": ["correspondent with this name already exists."]}
        assert "name: correspondent with this name already exists." in str(err)

    @responses.activate
    def test_detail_only_4xx_is_plain_api_error(self, client):
        responses.add(
            responses.POST, f"{BASE_URL}/api/tags/", json={"detail": "Invalid token."}, status=401
        )

        with pytest.raises(APIError) as exc_info:
            client.create_tag("x")

        assert not isinstance(exc_info.value, ValidationError)
        assert exc_info.value.status_code == 401

    @responses.activate
    def test_create_storage_path(self, client):
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/storage_paths/",
            json={"id": 2, "name": "Archive", "path": "archive/{{ created_year }}"},
            status=201,
        )

        sp = client.create_storage_path("Archive", "archive/{{ created_year }}")

        assert sp.path == "archive/{{ created_year }}"
        assert json.loads(responses.calls[0].request.body) == {
            "name": "Archive",
            "path": "archive/{{ created_year }}",
        }

    @responses.activate
    def test_update_storage_path(self, client):
        responses.add(
            responses.PATCH,
            f"{BASE_URL}/api/storage_paths/2/",
            json={"id": 2, "name": "Archive", "slug": "archive", "path": "archive/{{ title }}"},
        )

        sp = client.update_storage_path(2, {"path": "archive/{{ title }}", "slug": "archive"})

        assert sp.path == "archive/{{ title }}"
        assert responses.calls[0].request.method == "PATCH"
        assert json.loads(responses.calls[0].request.body) == {"path": "archive/{{ title }}"}

    @responses.activate
    def test_update_sends_only_given_fields(self, client, sample_document):
        responses.add(
            responses.PATCH,
            f"{BASE_URL}/api/documents/123/",
            json={**sample_document, "title": "X"},
        )

        doc = client.update_document(123, {"title": "X"})

        assert doc.title == "X"
        assert responses.calls[0].request.method == "PATCH"
        assert json.loads(responses.calls[0].request.body) == {"title": "X"}

    @responses.activate
    def test_update_strips_server_derived_fields(self, client, sample_tags):
        """Slugs, counts and timestamps never go into a payload."""
        responses.add(responses.PATCH, f"{BASE_URL}/api/tags/3/", json=sample_tags[1])

        client.update_tag(3, {"name": "Bills", "slug": "bills", "document_count": 40, "modified": "x"})

        assert json.loads(responses.calls[0].request.body) == {"name": "Bills"}

    @responses.activate
    def test_update_serializes_tag_set_as_list(self, client, sample_document):
        responses.add(responses.PATCH, f"{BASE_URL}/api/documents/123/", json=sample_document)

        client.update_document(123, {"tags": {4, 1, 3}})

        assert json.loads(responses.calls[0].request.body) == {"tags": [1, 3, 4]}

    @responses.activate
    def test_update_failure(self, client):
        responses.add(responses.PATCH, f"{BASE_URL}/api/document_types/2/", body="nope", status=403)

        with pytest.raises(APIError) as exc_info:
            client.update_document_type(2, {"name": "Bill"})

        assert exc_info.value.status_code == 403

    @pytest.mark.parametrize("status", [200, 204])
    @responses.activate
    def test_delete_success(self, client, status):
        responses.add(responses.DELETE, f"{BASE_URL}/api/tags/5/", status=status)

        client.delete_tag(5)

        assert responses.calls[0].request.method == "DELETE"

    @responses.activate
    def test_delete_other_status_is_api_error(self, client):
        responses.add(responses.DELETE, f"{BASE_URL}/api/documents/5/", json={"detail": "Not found."}, status=404)

        with pytest.raises(APIError) as exc_info:
            client.delete_document(5)

        assert exc_info.value.status_code == 404


class FakeDocumentServer:
    """Minimal stateful stand-in for the documents endpoint."""

    def __init__(self, documents: list[dict]):
        self.documents = {doc["id"]: dict(doc) for doc in documents}

    def _doc_id(self, request) -> int:
        return int(request.url.rstrip("/").rsplit("/", 1)[-1])

    def get(self, request):
        doc = self.documents.get(self._doc_id(request))
        if doc is None:
            return (404, {}, json.dumps({"detail": "Not found."}))
        return (200, {}, json.dumps(doc))

    def patch(self, request):
        doc = self.documents[self._doc_id(request)]
        doc.update(json.loads(request.body))
        doc["modified"] = "2024-12-01T00:00:00Z"
        return (200, {}, json.dumps(doc))

    def register(self) -> None:
        pattern = re.compile(rf"{re.escape(BASE_URL)}/api/documents/\d+/$")
        responses.add_callback(responses.GET, pattern, callback=self.get, content_type="application/json")
        responses.add_callback(responses.PATCH, pattern, callback=self.patch, content_type="application/json")


class TestPartialUpdateRoundTrip:
    """Partial update leaves unrelated fields unchanged on the server."""

    @responses.activate
    def test_title_update_preserves_other_fields(self, client, sample_document):
        FakeDocumentServer([sample_document]).register()

        before = client.get_document(123)
        client.update_document(123, {"title": "X"})
        after = client.get_document(123)

        assert after.title == "X"
        assert after.tags == before.tags
        assert after.correspondent == before.correspondent
        assert after.document_type == before.document_type
        assert after.archive_serial_number == before.archive_serial_number
        assert after.content == before.content

    @responses.activate
    def test_clearing_a_relation_sends_null(self, client, sample_document):
        server = FakeDocumentServer([sample_document])
        server.register()

        doc = client.update_document(123, {"correspondent": None})

        assert doc.correspondent is None
        assert server.documents[123]["document_type"] == 2


class TestUploadDownload:
    """Multipart upload, file download and task lookup."""

    @pytest.mark.parametrize("status", [200, 201, 202])
    @responses.activate
    def test_upload_returns_task_id(self, client, tmp_path, status):
        source = tmp_path / "invoice.pdf"
        source.write_bytes(b"%PDF-1.4 fake")
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/documents/post_document/",
            body='"7c6b2f5e-3a0d-4d8e-9e0b-1f2a3b4c5d6e"\n',
            status=status,
        )

        task_id = client.upload_document(source)

        assert task_id == "7c6b2f5e-3a0d-4d8e-9e0b-1f2a3b4c5d6e"

    @responses.activate
    def test_upload_multipart_fields(self, client, tmp_path):
        source = tmp_path / "scan 01.pdf"
        source.write_bytes(b"%PDF-1.4 payload-bytes")
        responses.add(responses.POST, f"{BASE_URL}/api/documents/post_document/", body="abc")

        client.upload_document(source, title="January", correspondent=5, document_type=2, tags=[1, 3])

        request = responses.calls[0].request
        body = request.body
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="document"; filename="scan 01.pdf"' in body
        assert b"%PDF-1.4 payload-bytes" in body
        assert b'name="title"\r\n\r\nJanuary' in body
        assert b'name="correspondent"\r\n\r\n5' in body
        assert b'name="document_type"\r\n\r\n2' in body
        assert body.count(b'name="tags"') == 2

    @responses.activate
    def test_upload_optional_fields_omitted(self, client, tmp_path):
        source = tmp_path / "a.pdf"
        source.write_bytes(b"x")
        responses.add(responses.POST, f"{BASE_URL}/api/documents/post_document/", body="abc")

        client.upload_document(source)

        body = responses.calls[0].request.body
        assert b'name="title"' not in body
        assert b'name="tags"' not in body
        assert b'name="correspondent"' not in body

    @responses.activate
    def test_upload_failure_carries_body(self, client, tmp_path):
        source = tmp_path / "a.pdf"
        source.write_bytes(b"x")
        responses.add(
            responses.POST,
            f"{BASE_URL}/api/documents/post_document/",
            json={"document": ["Unsupported file type"]},
            status=400,
        )

        with pytest.raises(APIError) as exc_info:
            client.upload_document(source)

        assert "Unsupported file type" in exc_info.value.response_body

    def test_upload_missing_file_raises_os_error(self, client, tmp_path):
        with pytest.raises(OSError):
            client.upload_document(tmp_path / "missing.pdf")

    @responses.activate
    def test_download_archived(self, client):
        content = b"%PDF-1.7 archived"
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/documents/123/download/",
            body=content,
            content_type="application/pdf",
            headers={"Content-Disposition": 'attachment; filename="invoice.pdf"'},
        )

        downloaded = client.download_document(123)

        assert downloaded.content == content
        assert downloaded.filename == "invoice.pdf"
        assert query_of(responses.calls[0]) == {}

    @responses.activate
    def test_download_original_flag(self, client):
        responses.add(responses.GET, f"{BASE_URL}/api/documents/123/download/", body=b"orig")

        downloaded = client.download_document(123, original=True)

        assert query_of(responses.calls[0]) == {"original": ["true"]}
        # No Content-Disposition: caller must pick a fallback
        assert downloaded.filename == ""

    @responses.activate
    def test_download_requires_200(self, client):
        responses.add(responses.GET, f"{BASE_URL}/api/documents/123/download/", body="gone", status=410)

        with pytest.raises(APIError):
            client.download_document(123)

    @responses.activate
    def test_thumbnail(self, client):
        responses.add(responses.GET, f"{BASE_URL}/api/documents/5/thumb/", body=b"RIFFwebp")
        assert client.get_thumbnail(5) == b"RIFFwebp"

    @responses.activate
    def test_preview(self, client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/documents/3/preview/",
            body=b"%PDF-1.7 preview",
            content_type="application/pdf",
        )

        assert client.get_preview(3) == b"%PDF-1.7 preview"
        assert responses.calls[0].request.url == f"{BASE_URL}/api/documents/3/preview/"

    @responses.activate
    def test_preview_requires_200(self, client):
        responses.add(responses.GET, f"{BASE_URL}/api/documents/3/preview/", body="missing", status=404)

        with pytest.raises(APIError) as exc_info:
            client.get_preview(3)

        assert exc_info.value.status_code == 404
        assert not isinstance(exc_info.value, NotFound)

    @responses.activate
    def test_get_task(self, client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/tasks/",
            json=[
                {
                    "id": 77,
                    "task_id": "abc-123",
                    "task_file_name": "invoice.pdf",
                    "date_created": "2024-11-19T08:14:22Z",
                    "date_done": "2024-11-19T08:14:40Z",
                    "type": "file",
                    "status": "SUCCESS",
                    "result": "Success. New document id 124 created",
                    "acknowledged": False,
                    "related_document": "124",
                }
            ],
        )

        task = client.get_task("abc-123")

        assert task.task_id == "abc-123"
        assert task.status == "SUCCESS"
        assert task.related_document == 124
        assert task.is_done is True
        assert query_of(responses.calls[0]) == {"task_id": ["abc-123"]}

    @responses.activate
    def test_pending_task_has_no_document(self, client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/tasks/",
            json=[{"task_id": "abc-123", "status": "PENDING", "related_document": None}],
        )

        task = client.get_task("abc-123")

        assert task.is_done is False
        assert task.related_document is None

    @responses.activate
    def test_get_task_not_indexed_yet(self, client):
        responses.add(responses.GET, f"{BASE_URL}/api/tasks/", json=[])

        with pytest.raises(NotFound) as exc_info:
            client.get_task("abc-123")

        assert exc_info.value.kind == "task"
        assert exc_info.value.reference == "abc-123"


class TestContentDisposition:
    """Filename recovery from Content-Disposition."""

    def test_quoted_filename(self):
        assert parse_content_disposition('attachment; filename="invoice.pdf"') == "invoice.pdf"

    def test_unquoted_filename(self):
        assert parse_content_disposition("attachment; filename=invoice.pdf") == "invoice.pdf"

    def test_filename_followed_by_extended_parameter(self):
        header = "attachment; filename=\"Rechnung.pdf\"; filename*=utf-8''Rechnung.pdf"
        assert parse_content_disposition(header) == "Rechnung.pdf"

    def test_extended_filename_only(self):
        """Non-ASCII names arrive only in the RFC 5987 form."""
        header = "attachment; filename*=utf-8''Rechnung%20M%C3%A4rz.pdf"
        assert parse_content_disposition(header) == "Rechnung März.pdf"

    def test_extended_filename_with_other_charset(self):
        header = "attachment; filename*=iso-8859-1''Gr%FC%DFe.pdf; size=10"
        assert parse_content_disposition(header) == "Grüße.pdf"

    def test_extended_filename_unknown_charset(self):
        header = "attachment; filename*=x-bogus''report%20final.pdf"
        assert parse_content_disposition(header) == "report final.pdf"

    def test_missing(self):
        assert parse_content_disposition(None) == ""
        assert parse_content_disposition("inline") == ""


class TestSearchAndStatistics:

    @responses.activate
    def test_global_search(self, client, sample_document, sample_tags):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/search/",
            json={
                "total": 2,
                "documents": [sample_document],
                "saved_views": [],
                "correspondents": [],
                "document_types": [],
                "storage_paths": [],
                "tags": [sample_tags[1]],
            },
        )

        result = client.global_search("bills")

        assert result.documents[0].id == 123
        assert result.tags[0].name == "Bills"
        assert result.total == 2
        assert query_of(responses.calls[0]) == {"query": ["bills"]}

    @responses.activate
    def test_statistics(self, client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/api/statistics/",
            json={"documents_total": 812, "documents_inbox": 4},
        )

        assert client.get_statistics()["documents_total"] == 812


class TestNameListing:

    @responses.activate
    def test_list_names(self, client, sample_correspondents, make_page):
        responses.add(responses.GET, f"{BASE_URL}/api/correspondents/", json=make_page(sample_correspondents))

        assert client.list_names(CORRESPONDENTS) == [(5, "ACME Corp"), (6, "Stadtwerke")]

    def test_document_record_dedupes_tags(self, sample_document):
        doc = Document.from_api_response({**sample_document, "tags": [1, 3, 1]})
        assert doc.tags == [1, 3]

    def test_kinds_have_trailing_slash_endpoints(self):
        for kind in (DOCUMENTS, TAGS, *NAMED_KINDS):
            assert kind.endpoint.startswith("/api/") and kind.endpoint.endswith("/")
