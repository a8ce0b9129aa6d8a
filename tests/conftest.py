"""Test fixtures and utilities."""

from pathlib import Path

import pytest

from paperless_cli.paperless_client import PaperlessClient

BASE_URL = "http://paperless.test:8000"
TOKEN = "test-token-12345"


def _page_of(results: list[dict], count: int | None = None, next_url: str | None = None) -> dict:
    return {
        "count": len(results) if count is None else count,
        "next": next_url,
        "previous": None,
        "results": results,
    }


@pytest.fixture
def make_page():
    """Factory for paginated list response bodies."""
    return _page_of


@pytest.fixture
def client() -> PaperlessClient:
    """Client pointed at the stubbed test server."""
    return PaperlessClient(BASE_URL, TOKEN)


@pytest.fixture
def sample_document() -> dict:
    """Sample Paperless document API response."""
    return {
        "id": 123,
        "title": "ACME Invoice November",
        "content": "Invoice INV-2024-001234\nTotal: 2.023,00 EUR",
        "tags": [1, 3],
        "correspondent": 5,
        "document_type": 2,
        "storage_path": None,
        "created": "2024-11-18T00:00:00+01:00",
        "created_date": "2024-11-18",
        "added": "2024-11-19T08:14:22Z",
        "modified": "2024-11-19T08:15:01Z",
        "archive_serial_number": 7421,
        "original_file_name": "invoice.pdf",
        "archived_file_name": "2024-11-18 ACME Invoice November.pdf",
        "notes": [],
        "owner": 1,
    }


@pytest.fixture
def sample_tags() -> list[dict]:
    """Tag list results."""
    return [
        {"id": 1, "slug": "inbox", "name": "Inbox", "color": "#a6cee3", "is_inbox_tag": True, "document_count": 12},
        {"id": 3, "slug": "bills", "name": "Bills", "color": "#ff0000", "is_inbox_tag": False, "document_count": 40},
        {"id": 7, "slug": "important", "name": "Important", "color": "#00ff00", "is_inbox_tag": False, "document_count": 2},
    ]


@pytest.fixture
def sample_correspondents() -> list[dict]:
    return [
        {"id": 5, "slug": "acme-corp", "name": "ACME Corp", "document_count": 9},
        {"id": 6, "slug": "stadtwerke", "name": "Stadtwerke", "document_count": 3},
    ]


@pytest.fixture
def sample_document_types() -> list[dict]:
    return [
        {"id": 2, "slug": "invoice", "name": "Invoice", "document_count": 30},
        {"id": 4, "slug": "receipt", "name": "Receipt", "document_count": 11},
    ]


@pytest.fixture
def config_path(tmp_path) -> Path:
    """Config file location inside a temp dir (not created)."""
    return tmp_path / "paperless-cli" / "config.yaml"
