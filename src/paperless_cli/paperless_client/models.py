"""
Typed records for Paperless-ngx API resources.

Every record is built from the decoded JSON of an API response via
``from_api_response``. Records are plain dataclasses; the client never keeps
them around between calls, so each read is a fresh fetch.

The generic ``Page`` envelope wraps every list endpoint:

    {"count": 42, "next": "...", "previous": null, "results": [...]}

``count`` is the total across all pages, never the page length.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of a paginated list response."""

    count: int
    next: str | None = None
    previous: str | None = None
    results: list[T] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict, parse: Callable[[dict], T]) -> "Page[T]":
        """Decode a list envelope, parsing each result with ``parse``."""
        results = [parse(item) for item in data.get("results") or []]
        return cls(
            count=data.get("count", len(results)),
            next=data.get("next"),
            previous=data.get("previous"),
            results=results,
        )


@dataclass
class Document:
    """Paperless document."""

    id: int
    title: str
    content: str = ""
    tags: list[int] = field(default_factory=list)
    correspondent: int | None = None
    document_type: int | None = None
    storage_path: int | None = None
    created: str | None = None
    created_date: str | None = None
    added: str | None = None
    modified: str | None = None
    archive_serial_number: int | None = None
    original_file_name: str | None = None
    archived_file_name: str | None = None

    @classmethod
    def from_api_response(cls, data: dict) -> "Document":
        tags = data.get("tags") if isinstance(data.get("tags"), list) else []
        created = data.get("created")
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            content=data.get("content") or "",
            # Duplicate IDs from the server collapse, order preserved
            tags=list(dict.fromkeys(tags)),
            correspondent=data.get("correspondent"),
            document_type=data.get("document_type"),
            storage_path=data.get("storage_path"),
            created=created,
            created_date=data.get("created_date") or (created[:10] if created else None),
            added=data.get("added"),
            modified=data.get("modified"),
            archive_serial_number=data.get("archive_serial_number"),
            original_file_name=data.get("original_file_name"),
            archived_file_name=data.get("archived_file_name"),
        )


@dataclass
class Tag:
    """Paperless tag."""

    id: int
    name: str
    slug: str = ""
    color: str = ""
    text_color: str = ""
    match: str = ""
    matching_algorithm: int = 0
    is_insensitive: bool = False
    is_inbox_tag: bool = False
    document_count: int = 0

    @classmethod
    def from_api_response(cls, data: dict) -> "Tag":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            slug=data.get("slug", ""),
            color=data.get("color") or "",
            text_color=data.get("text_color") or "",
            match=data.get("match") or "",
            matching_algorithm=data.get("matching_algorithm", 0),
            is_insensitive=bool(data.get("is_insensitive", False)),
            is_inbox_tag=bool(data.get("is_inbox_tag", False)),
            document_count=data.get("document_count", 0),
        )


@dataclass
class Correspondent:
    """Paperless correspondent."""

    id: int
    name: str
    slug: str = ""
    match: str = ""
    matching_algorithm: int = 0
    is_insensitive: bool = False
    document_count: int = 0
    last_correspondence: str | None = None

    @classmethod
    def from_api_response(cls, data: dict) -> "Correspondent":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            slug=data.get("slug", ""),
            match=data.get("match") or "",
            matching_algorithm=data.get("matching_algorithm", 0),
            is_insensitive=bool(data.get("is_insensitive", False)),
            document_count=data.get("document_count", 0),
            last_correspondence=data.get("last_correspondence"),
        )


@dataclass
class DocumentType:
    """Paperless document type."""

    id: int
    name: str
    slug: str = ""
    match: str = ""
    matching_algorithm: int = 0
    is_insensitive: bool = False
    document_count: int = 0

    @classmethod
    def from_api_response(cls, data: dict) -> "DocumentType":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            slug=data.get("slug", ""),
            match=data.get("match") or "",
            matching_algorithm=data.get("matching_algorithm", 0),
            is_insensitive=bool(data.get("is_insensitive", False)),
            document_count=data.get("document_count", 0),
        )


@dataclass
class StoragePath:
    """Paperless storage path (``path`` is a filename template)."""

    id: int
    name: str
    path: str = ""
    slug: str = ""
    match: str = ""
    matching_algorithm: int = 0
    is_insensitive: bool = False
    document_count: int = 0

    @classmethod
    def from_api_response(cls, data: dict) -> "StoragePath":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            path=data.get("path", ""),
            slug=data.get("slug", ""),
            match=data.get("match") or "",
            matching_algorithm=data.get("matching_algorithm", 0),
            is_insensitive=bool(data.get("is_insensitive", False)),
            document_count=data.get("document_count", 0),
        )


@dataclass
class SavedView:
    """Paperless saved view (read-only in this client)."""

    id: int
    name: str
    show_on_dashboard: bool = False
    show_in_sidebar: bool = False
    sort_field: str | None = None
    sort_reverse: bool = False
    filter_rules: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict) -> "SavedView":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            show_on_dashboard=bool(data.get("show_on_dashboard", False)),
            show_in_sidebar=bool(data.get("show_in_sidebar", False)),
            sort_field=data.get("sort_field"),
            sort_reverse=bool(data.get("sort_reverse", False)),
            filter_rules=list(data.get("filter_rules") or []),
        )


TERMINAL_TASK_STATUSES = frozenset({"SUCCESS", "FAILURE", "REVOKED"})


@dataclass
class Task:
    """
    Server-side ingestion task.

    ``task_id`` is the handle returned by an upload. ``related_document`` stays
    None until the task reaches a terminal state and produced a document.
    """

    task_id: str
    status: str
    id: int | None = None
    task_file_name: str | None = None
    date_created: str | None = None
    date_done: str | None = None
    type: str | None = None
    result: str | None = None
    acknowledged: bool = False
    related_document: int | None = None

    @property
    def is_done(self) -> bool:
        return self.status.upper() in TERMINAL_TASK_STATUSES

    @classmethod
    def from_api_response(cls, data: dict) -> "Task":
        related = data.get("related_document")
        try:
            related_id = int(related) if related not in (None, "") else None
        except (TypeError, ValueError):
            related_id = None
        return cls(
            task_id=data.get("task_id", ""),
            status=data.get("status", ""),
            id=data.get("id"),
            task_file_name=data.get("task_file_name"),
            date_created=data.get("date_created"),
            date_done=data.get("date_done"),
            type=data.get("type"),
            result=data.get("result"),
            acknowledged=bool(data.get("acknowledged", False)),
            related_document=related_id,
        )


@dataclass
class GlobalSearchResult:
    """Results of ``/api/search/`` across all object kinds."""

    documents: list[Document] = field(default_factory=list)
    saved_views: list[SavedView] = field(default_factory=list)
    correspondents: list[Correspondent] = field(default_factory=list)
    document_types: list[DocumentType] = field(default_factory=list)
    storage_paths: list[StoragePath] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict) -> "GlobalSearchResult":
        def parse(key: str, record_type: Any) -> list:
            return [record_type.from_api_response(item) for item in data.get(key) or []]

        return cls(
            documents=parse("documents", Document),
            saved_views=parse("saved_views", SavedView),
            correspondents=parse("correspondents", Correspondent),
            document_types=parse("document_types", DocumentType),
            storage_paths=parse("storage_paths", StoragePath),
            tags=parse("tags", Tag),
        )

    @property
    def total(self) -> int:
        return (
            len(self.documents)
            + len(self.saved_views)
            + len(self.correspondents)
            + len(self.document_types)
            + len(self.storage_paths)
            + len(self.tags)
        )


@dataclass
class DownloadedFile:
    """File body plus the filename asserted by ``Content-Disposition``."""

    content: bytes
    # Empty when the server sent no filename
    filename: str = ""


@dataclass(frozen=True)
class ResourceKind:
    """Describes one resource kind: its endpoint, record type and label."""

    name: str
    endpoint: str
    record_type: Any
    label: str


# Fields the server derives; never sent in create/update payloads
READ_ONLY_FIELDS = frozenset(
    {
        "id",
        "slug",
        "document_count",
        "created",
        "created_date",
        "added",
        "modified",
        "last_correspondence",
        "original_file_name",
        "archived_file_name",
        "owner",
        "user_can_change",
        "permissions",
        "notes",
    }
)

DOCUMENTS = ResourceKind("documents", "/api/documents/", Document, "document")
TAGS = ResourceKind("tags", "/api/tags/", Tag, "tag")
CORRESPONDENTS = ResourceKind(
    "correspondents", "/api/correspondents/", Correspondent, "correspondent"
)
DOCUMENT_TYPES = ResourceKind(
    "document_types", "/api/document_types/", DocumentType, "document type"
)
STORAGE_PATHS = ResourceKind("storage_paths", "/api/storage_paths/", StoragePath, "storage path")
SAVED_VIEWS = ResourceKind("saved_views", "/api/saved_views/", SavedView, "saved view")
TASKS = ResourceKind("tasks", "/api/tasks/", Task, "task")

# Kinds that can be referenced by name (have a ``name`` field and a list endpoint)
NAMED_KINDS = (TAGS, CORRESPONDENTS, DOCUMENT_TYPES, STORAGE_PATHS, SAVED_VIEWS)
