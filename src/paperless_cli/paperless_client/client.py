"""
Paperless-ngx API client implementation.
"""

import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote

import requests

from .models import (
    CORRESPONDENTS,
    DOCUMENT_TYPES,
    DOCUMENTS,
    READ_ONLY_FIELDS,
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

logger = logging.getLogger(__name__)


class PaperlessError(Exception):
    """Base exception for Paperless client errors."""
    pass


class TransportError(PaperlessError):
    """The request never produced an HTTP response (connection failure, timeout)."""
    pass


class APIError(PaperlessError):
    """API returned an unexpected status."""
    def __init__(self, status_code: int, response_body: Optional[str] = None, message: str = ""):
        self.status_code = status_code
        self.response_body = response_body
        detail = message or (response_body or "").strip() or "no response body"
        super().__init__(f"Paperless API error {status_code}: {detail}")


class ValidationError(APIError):
    """API rejected the payload with field-level messages."""
    def __init__(self, status_code: int, errors: dict[str, list[str]], response_body: Optional[str] = None):
        self.errors = errors
        detail = "; ".join(
            f"{field}: {msg}" for field, msgs in errors.items() for msg in msgs
        )
        super().__init__(status_code, response_body, message=detail)


class NotFound(PaperlessError):
    """A record could not be found by ID or by name."""
    def __init__(self, kind: str, reference: Any):
        self.kind = kind
        self.reference = reference
        super().__init__(f"{kind} not found: {reference}")


def parse_content_disposition(header: Optional[str]) -> str:
    """
    Recover the filename from a ``Content-Disposition`` header.

    Plain ``filename=`` wins; the RFC 5987 ``filename*=charset''value`` form
    is decoded when it is the only one. Returns an empty string when the
    header carries neither.
    """
    if not header:
        return ""
    if "filename=" not in header:
        if "filename*=" not in header:
            return ""
        value = header.split("filename*=", 1)[1].split(";", 1)[0].strip().strip('"')
        charset, _, encoded = value.partition("''")
        if not encoded:
            return unquote(value)
        try:
            return unquote(encoded, encoding=charset or "utf-8", errors="replace")
        except LookupError:
            # Unknown charset label
            return unquote(encoded)
    value = header.split("filename=", 1)[1].strip()
    if value.startswith('"'):
        end = value.find('"', 1)
        return value[1:end] if end != -1 else value[1:]
    return value.split(";", 1)[0].strip().strip("'\"")


def _parse_field_errors(body: Any) -> Optional[dict[str, list[str]]]:
    """Return ``{field: [messages]}`` if body looks like a DRF validation error."""
    if not isinstance(body, dict) or not body or set(body) == {"detail"}:
        return None
    errors: dict[str, list[str]] = {}
    for field_name, msgs in body.items():
        if isinstance(msgs, list) and all(isinstance(m, str) for m in msgs):
            errors[field_name] = list(msgs)
        elif isinstance(msgs, str):
            errors[field_name] = [msgs]
        else:
            return None
    return errors


class PaperlessClient:
    """
    Client for the Paperless-ngx REST API.

    Every public method performs exactly one HTTP exchange and either returns
    decoded records or raises a ``PaperlessError``. There are no retries.
    """

    DEFAULT_TIMEOUT = 30
    API_VERSION = 5
    # Auxiliary resources are small; one large page fetches them all
    ALL_PAGE_SIZE = 1000

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        """
        Initialize Paperless client.

        Args:
            base_url: Paperless instance URL (e.g., "https://paperless.example.com")
            token: API token for authentication
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Token {token}",
            "Accept": f"application/json; version={self.API_VERSION}",
        })

    # --- transport ---

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json_data: Optional[dict] = None,
        data: Any = None,
        files: Optional[dict] = None,
        stream: bool = False,
    ) -> requests.Response:
        """Execute one authenticated request. Status codes are not checked here."""
        url = self._url(path)

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                data=data,
                files=files,
                timeout=self.timeout,
                stream=stream,
            )
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"Failed to connect to Paperless at {self.base_url}: {e}") from e
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request to Paperless timed out after {self.timeout}s: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request failed: {e}") from e

        logger.debug("%s %s -> %s", method, response.url, response.status_code)
        return response

    def _check(
        self,
        response: requests.Response,
        ok: tuple[int, ...] = (200,),
        kind: Optional[ResourceKind] = None,
        reference: Any = None,
    ) -> None:
        """Raise the matching error unless the response status is in ``ok``."""
        if response.status_code in ok:
            return

        body = response.text
        if response.status_code == 404 and kind is not None:
            raise NotFound(kind.label, reference)
        if 400 <= response.status_code < 500:
            try:
                errors = _parse_field_errors(response.json())
            except ValueError:
                errors = None
            if errors:
                raise ValidationError(response.status_code, errors, body)
        raise APIError(response.status_code, body)

    def _json(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise APIError(response.status_code, response.text, message="invalid JSON in response") from e

    def _get_bytes(self, path: str, params: Optional[dict] = None) -> tuple[bytes, Any]:
        """GET a binary body; success is exactly 200. Returns (content, headers)."""
        with self._request("GET", path, params=params, stream=True) as response:
            self._check(response)
            return response.content, response.headers

    @staticmethod
    def _writable(fields: dict[str, Any]) -> dict[str, Any]:
        """Drop server-derived fields; sets become sorted lists."""
        payload: dict[str, Any] = {}
        for key, value in fields.items():
            if key in READ_ONLY_FIELDS:
                logger.debug("Dropping read-only field %r from payload", key)
                continue
            if isinstance(value, (set, frozenset)):
                value = sorted(value)
            payload[key] = value
        return payload

    def test_connection(self) -> bool:
        """Test connection to Paperless API."""
        try:
            with self._request("GET", "/api/") as response:
                return response.status_code == 200
        except PaperlessError:
            return False

    # --- generic resource operations ---

    def list_resources(
        self,
        kind: ResourceKind,
        page: Optional[int] = None,
        page_size: Optional[int] = ALL_PAGE_SIZE,
        ordering: Optional[str] = None,
        **filters: Any,
    ) -> Page:
        """
        List one page of records of ``kind``.

        Filters whose value is None or empty are omitted from the query string.
        List values become repeated query parameters.
        """
        params: dict[str, Any] = {}
        for key, value in filters.items():
            if value is None or value == "" or value == []:
                continue
            params[key] = value
        if page:
            params["page"] = page
        if page_size:
            params["page_size"] = page_size
        if ordering:
            params["ordering"] = ordering

        with self._request("GET", kind.endpoint, params=params or None) as response:
            self._check(response)
            data = self._json(response)
        return Page.from_api_response(data, kind.record_type.from_api_response)

    def get_resource(self, kind: ResourceKind, resource_id: int) -> Any:
        with self._request("GET", f"{kind.endpoint}{resource_id}/") as response:
            self._check(response, kind=kind, reference=resource_id)
            data = self._json(response)
        return kind.record_type.from_api_response(data)

    def create_resource(self, kind: ResourceKind, payload: dict[str, Any]) -> Any:
        with self._request("POST", kind.endpoint, json_data=self._writable(payload)) as response:
            self._check(response, ok=(200, 201))
            data = self._json(response)
        return kind.record_type.from_api_response(data)

    def update_resource(self, kind: ResourceKind, resource_id: int, fields: dict[str, Any]) -> Any:
        """Partial update: only the supplied fields are sent (PATCH)."""
        with self._request(
            "PATCH", f"{kind.endpoint}{resource_id}/", json_data=self._writable(fields)
        ) as response:
            self._check(response)
            data = self._json(response)
        return kind.record_type.from_api_response(data)

    def delete_resource(self, kind: ResourceKind, resource_id: int) -> None:
        with self._request("DELETE", f"{kind.endpoint}{resource_id}/") as response:
            self._check(response, ok=(200, 204))

    # --- documents ---

    def list_documents(
        self,
        query: Optional[str] = None,
        tags: Optional[list[str]] = None,
        correspondent: Optional[str] = None,
        document_type: Optional[str] = None,
        created_after: Optional[str] = None,
        created_before: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        ordering: Optional[str] = None,
        more_like_id: Optional[int] = None,
    ) -> Page[Document]:
        """
        List one page of documents.

        Args:
            query: Full-text search query
            tags: Tag names, all must match (case-insensitive exact)
            correspondent: Correspondent name (case-insensitive exact)
            document_type: Document type name (case-insensitive exact)
            created_after: Only documents created after this date (YYYY-MM-DD)
            created_before: Only documents created before this date (YYYY-MM-DD)
            page: 1-based page number
            page_size: Results per page
            ordering: Sort order (prefix with - for descending)
            more_like_id: Only documents similar to this document ID

        Returns:
            Page of Document records
        """
        return self.list_resources(
            DOCUMENTS,
            page=page,
            page_size=page_size,
            ordering=ordering,
            query=query,
            tags__name__iexact=list(tags or []),
            correspondent__name__iexact=correspondent,
            document_type__name__iexact=document_type,
            created__date__gt=created_after,
            created__date__lt=created_before,
            more_like_id=more_like_id,
        )

    def similar_documents(self, document_id: int, page_size: Optional[int] = None) -> Page[Document]:
        """Documents the server considers similar to ``document_id``."""
        return self.list_documents(more_like_id=document_id, page_size=page_size)

    def get_document(self, document_id: int) -> Document:
        return self.get_resource(DOCUMENTS, document_id)

    def update_document(self, document_id: int, fields: dict[str, Any]) -> Document:
        return self.update_resource(DOCUMENTS, document_id, fields)

    def delete_document(self, document_id: int) -> None:
        self.delete_resource(DOCUMENTS, document_id)

    def upload_document(
        self,
        path: str | Path,
        title: Optional[str] = None,
        correspondent: Optional[int] = None,
        document_type: Optional[int] = None,
        tags: Optional[list[int]] = None,
    ) -> str:
        """
        Upload a file for asynchronous ingestion.

        Args:
            path: Local file to upload (existence is the caller's concern)
            title: Document title
            correspondent: Correspondent ID
            document_type: Document type ID
            tags: Tag IDs

        Returns:
            Task ID of the ingestion job (not a document ID)
        """
        path = Path(path)
        form: list[tuple[str, str]] = []
        if title:
            form.append(("title", title))
        if correspondent is not None:
            form.append(("correspondent", str(correspondent)))
        if document_type is not None:
            form.append(("document_type", str(document_type)))
        for tag_id in tags or []:
            form.append(("tags", str(tag_id)))

        with open(path, "rb") as fh:
            with self._request(
                "POST",
                "/api/documents/post_document/",
                data=form,
                files={"document": (path.name, fh)},
            ) as response:
                self._check(response, ok=(200, 201, 202))
                task_id = response.text.strip().strip('"').strip()

        logger.debug("Uploaded %s as task %s", path.name, task_id)
        return task_id

    def download_document(self, document_id: int, original: bool = False) -> DownloadedFile:
        """
        Download the archived (default) or original rendition of a document.

        The filename is empty when the server does not assert one.
        """
        params = {"original": "true"} if original else None
        content, headers = self._get_bytes(f"/api/documents/{document_id}/download/", params=params)
        filename = parse_content_disposition(headers.get("Content-Disposition"))
        return DownloadedFile(content=content, filename=filename)

    def get_thumbnail(self, document_id: int) -> bytes:
        content, _ = self._get_bytes(f"/api/documents/{document_id}/thumb/")
        return content

    def get_preview(self, document_id: int) -> bytes:
        content, _ = self._get_bytes(f"/api/documents/{document_id}/preview/")
        return content

    # --- tags ---

    def list_tags(self) -> Page[Tag]:
        return self.list_resources(TAGS)

    def get_tag(self, tag_id: int) -> Tag:
        return self.get_resource(TAGS, tag_id)

    def create_tag(self, name: str, color: Optional[str] = None) -> Tag:
        payload: dict[str, Any] = {"name": name}
        if color:
            payload["color"] = color
        return self.create_resource(TAGS, payload)

    def update_tag(self, tag_id: int, fields: dict[str, Any]) -> Tag:
        return self.update_resource(TAGS, tag_id, fields)

    def delete_tag(self, tag_id: int) -> None:
        self.delete_resource(TAGS, tag_id)

    # --- correspondents ---

    def list_correspondents(self) -> Page[Correspondent]:
        return self.list_resources(CORRESPONDENTS)

    def get_correspondent(self, correspondent_id: int) -> Correspondent:
        return self.get_resource(CORRESPONDENTS, correspondent_id)

    def create_correspondent(self, name: str) -> Correspondent:
        return self.create_resource(CORRESPONDENTS, {"name": name})

    def update_correspondent(self, correspondent_id: int, fields: dict[str, Any]) -> Correspondent:
        return self.update_resource(CORRESPONDENTS, correspondent_id, fields)

    def delete_correspondent(self, correspondent_id: int) -> None:
        self.delete_resource(CORRESPONDENTS, correspondent_id)

    # --- document types ---

    def list_document_types(self) -> Page[DocumentType]:
        return self.list_resources(DOCUMENT_TYPES)

    def get_document_type(self, type_id: int) -> DocumentType:
        return self.get_resource(DOCUMENT_TYPES, type_id)

    def create_document_type(self, name: str) -> DocumentType:
        return self.create_resource(DOCUMENT_TYPES, {"name": name})

    def update_document_type(self, type_id: int, fields: dict[str, Any]) -> DocumentType:
        return self.update_resource(DOCUMENT_TYPES, type_id, fields)

    def delete_document_type(self, type_id: int) -> None:
        self.delete_resource(DOCUMENT_TYPES, type_id)

    # --- storage paths ---

    def list_storage_paths(self) -> Page[StoragePath]:
        return self.list_resources(STORAGE_PATHS)

    def get_storage_path(self, path_id: int) -> StoragePath:
        return self.get_resource(STORAGE_PATHS, path_id)

    def create_storage_path(self, name: str, path: str) -> StoragePath:
        return self.create_resource(STORAGE_PATHS, {"name": name, "path": path})

    def update_storage_path(self, path_id: int, fields: dict[str, Any]) -> StoragePath:
        return self.update_resource(STORAGE_PATHS, path_id, fields)

    def delete_storage_path(self, path_id: int) -> None:
        self.delete_resource(STORAGE_PATHS, path_id)

    # --- saved views (read-only) ---

    def list_saved_views(self) -> Page[SavedView]:
        return self.list_resources(SAVED_VIEWS)

    def get_saved_view(self, view_id: int) -> SavedView:
        return self.get_resource(SAVED_VIEWS, view_id)

    # --- tasks ---

    def get_task(self, task_id: str) -> Task:
        """
        Look up an ingestion task by its task ID.

        The tasks endpoint has no fetch-by-task-id route, so this filters the
        list. Right after upload the task may not be indexed yet; that surfaces
        as NotFound and is left to the caller.
        """
        with self._request("GET", TASKS.endpoint, params={"task_id": task_id}) as response:
            self._check(response)
            data = self._json(response)

        items = data.get("results", []) if isinstance(data, dict) else data
        if not items:
            raise NotFound(TASKS.label, task_id)
        return Task.from_api_response(items[0])

    # --- misc ---

    def global_search(self, query: str) -> GlobalSearchResult:
        with self._request("GET", "/api/search/", params={"query": query}) as response:
            self._check(response)
            data = self._json(response)
        return GlobalSearchResult.from_api_response(data)

    def get_statistics(self) -> dict[str, Any]:
        with self._request("GET", "/api/statistics/") as response:
            self._check(response)
            return self._json(response)

    def list_names(self, kind: ResourceKind) -> list[tuple[int, str]]:
        """(id, name) pairs for every record of a named kind."""
        return [(record.id, record.name) for record in self.list_resources(kind).results]
