"""
Paperless-ngx API Client.

Provides:
- List/get/create/update/delete for documents, tags, correspondents,
  document types, storage paths; list/get for saved views
- Upload (returns an ingestion task ID), download, task status
- Name-or-ID reference resolution and tag-set reconciliation

Token auth, one synchronous request per operation, no retries.
"""

from .batch import BatchResult, run_batch
from .client import (
    APIError,
    NotFound,
    PaperlessClient,
    PaperlessError,
    TransportError,
    ValidationError,
    parse_content_disposition,
)
from .models import (
    CORRESPONDENTS,
    DOCUMENT_TYPES,
    DOCUMENTS,
    NAMED_KINDS,
    SAVED_VIEWS,
    STORAGE_PATHS,
    TAGS,
    TASKS,
    Correspondent,
    Document,
    DocumentType,
    DownloadedFile,
    GlobalSearchResult,
    Page,
    ResourceKind,
    SavedView,
    StoragePath,
    Tag,
    Task,
)
from .resolver import parse_id, reconcile_tags, resolve_optional, resolve_reference

__all__ = [
    "APIError",
    "BatchResult",
    "CORRESPONDENTS",
    "Correspondent",
    "DOCUMENTS",
    "DOCUMENT_TYPES",
    "Document",
    "DocumentType",
    "DownloadedFile",
    "GlobalSearchResult",
    "NAMED_KINDS",
    "NotFound",
    "Page",
    "PaperlessClient",
    "PaperlessError",
    "ResourceKind",
    "SAVED_VIEWS",
    "STORAGE_PATHS",
    "SavedView",
    "StoragePath",
    "TAGS",
    "TASKS",
    "Tag",
    "Task",
    "TransportError",
    "ValidationError",
    "parse_content_disposition",
    "parse_id",
    "reconcile_tags",
    "resolve_optional",
    "resolve_reference",
    "run_batch",
]
