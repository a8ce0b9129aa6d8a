"""
CLI main entry point.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .. import __version__
from ..config import (
    TOKEN_ENV,
    URL_ENV,
    ConfigError,
    default_config_path,
    load_config,
    mask_token,
    resolve_config,
    set_token,
    set_url,
)
from ..paperless_client import (
    CORRESPONDENTS,
    DOCUMENT_TYPES,
    SAVED_VIEWS,
    STORAGE_PATHS,
    TAGS,
    PaperlessClient,
    PaperlessError,
    ResourceKind,
    reconcile_tags,
    resolve_optional,
    resolve_reference,
    run_batch,
)
from ..pdf import PdfError, extract_text, pdf_info
from .output import (
    confirm,
    error,
    print_details,
    print_json,
    print_table,
    status,
    truncate,
)

logger = logging.getLogger(__name__)

# Values of --correspondent / --type that clear the relation
CLEAR_VALUES = ("-", "none")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@dataclass
class Context:
    """Global options shared by every command."""

    config_path: Path
    url: str | None = None
    json: bool = False
    quiet: bool = False

    def client(self) -> PaperlessClient:
        config = resolve_config(self.config_path, self.url)
        if not config.url:
            raise ConfigError(
                f"no server URL configured. Set {URL_ENV} or run 'paperless config set-url <url>'"
            )
        if not config.token:
            raise ConfigError(
                f"no API token configured. Set {TOKEN_ENV} or run 'paperless config set-token <token>'"
            )
        return PaperlessClient(base_url=config.url, token=config.token)


# --- per-kind presentation ---

LIST_COLUMNS: dict[str, list] = {
    TAGS.name: [
        ("ID", lambda r: r.id),
        ("NAME", lambda r: r.name),
        ("COLOR", lambda r: r.color),
        ("DOCS", lambda r: r.document_count),
    ],
    CORRESPONDENTS.name: [
        ("ID", lambda r: r.id),
        ("NAME", lambda r: r.name),
        ("DOCS", lambda r: r.document_count),
    ],
    DOCUMENT_TYPES.name: [
        ("ID", lambda r: r.id),
        ("NAME", lambda r: r.name),
        ("DOCS", lambda r: r.document_count),
    ],
    STORAGE_PATHS.name: [
        ("ID", lambda r: r.id),
        ("NAME", lambda r: r.name),
        ("PATH", lambda r: truncate(r.path, 40)),
        ("DOCS", lambda r: r.document_count),
    ],
    SAVED_VIEWS.name: [
        ("ID", lambda r: r.id),
        ("NAME", lambda r: r.name),
        ("DASHBOARD", lambda r: r.show_on_dashboard),
        ("SIDEBAR", lambda r: r.show_in_sidebar),
    ],
}

DETAIL_FIELDS: dict[str, list] = {
    TAGS.name: [
        ("ID", lambda r: r.id),
        ("Name", lambda r: r.name),
        ("Slug", lambda r: r.slug),
        ("Color", lambda r: r.color),
        ("Inbox", lambda r: r.is_inbox_tag),
        ("Documents", lambda r: r.document_count),
    ],
    CORRESPONDENTS.name: [
        ("ID", lambda r: r.id),
        ("Name", lambda r: r.name),
        ("Slug", lambda r: r.slug),
        ("Documents", lambda r: r.document_count),
        ("Last", lambda r: r.last_correspondence),
    ],
    DOCUMENT_TYPES.name: [
        ("ID", lambda r: r.id),
        ("Name", lambda r: r.name),
        ("Slug", lambda r: r.slug),
        ("Documents", lambda r: r.document_count),
    ],
    STORAGE_PATHS.name: [
        ("ID", lambda r: r.id),
        ("Name", lambda r: r.name),
        ("Path", lambda r: r.path),
        ("Slug", lambda r: r.slug),
        ("Documents", lambda r: r.document_count),
    ],
    SAVED_VIEWS.name: [
        ("ID", lambda r: r.id),
        ("Name", lambda r: r.name),
        ("Dashboard", lambda r: r.show_on_dashboard),
        ("Sidebar", lambda r: r.show_in_sidebar),
        ("Sort", lambda r: f"{r.sort_field} (reverse: {'yes' if r.sort_reverse else 'no'})"),
    ],
}

DOCUMENT_FIELDS = [
    ("ID", lambda d: d.id),
    ("Title", lambda d: d.title),
    ("Created", lambda d: d.created_date),
    ("Added", lambda d: d.added),
    ("Modified", lambda d: d.modified),
    ("Original", lambda d: d.original_file_name),
    ("ASN", lambda d: d.archive_serial_number),
    ("Correspondent", lambda d: d.correspondent),
    ("Type", lambda d: d.document_type),
    ("Storage path", lambda d: d.storage_path),
    ("Tags", lambda d: ", ".join(str(t) for t in d.tags)),
]

TASK_FIELDS = [
    ("Task ID", lambda t: t.task_id),
    ("Status", lambda t: t.status),
    ("Type", lambda t: t.type),
    ("File", lambda t: t.task_file_name),
    ("Created", lambda t: t.date_created),
    ("Completed", lambda t: t.date_done),
    ("Result", lambda t: t.result),
    ("Document", lambda t: t.related_document),
]

STATISTICS_LABELS = [
    ("documents_total", "Documents"),
    ("documents_inbox", "In Inbox"),
    ("character_count", "Characters"),
    ("tag_count", "Tags"),
    ("correspondent_count", "Correspondents"),
    ("document_type_count", "Document Types"),
    ("storage_path_count", "Storage Paths"),
]


def _print_document_page(ctx: Context, page: Any, columns: list, noun: str = "documents") -> None:
    if ctx.json:
        print_json(page)
        return
    if not page.results:
        print(f"No {noun} found")
        return
    print_table(page.results, columns)
    status(f"\nShowing {len(page.results)} of {page.count} {noun}", ctx.quiet)


# --- documents ---

def cmd_docs_list(ctx: Context, args: argparse.Namespace) -> int:
    """List documents with filters."""
    page = ctx.client().list_documents(
        query=args.query,
        tags=args.tag,
        correspondent=args.correspondent,
        document_type=args.type,
        created_after=args.created_after,
        created_before=args.created_before,
        page=args.page,
        page_size=args.limit,
        ordering="-created",
    )
    _print_document_page(ctx, page, [
        ("ID", lambda d: d.id),
        ("TITLE", lambda d: truncate(d.title, 40)),
        ("CREATED", lambda d: d.created_date),
        ("TAGS", lambda d: f"{len(d.tags)} tags"),
    ])
    return 0


def cmd_docs_search(ctx: Context, args: argparse.Namespace) -> int:
    """Full-text document search."""
    page = ctx.client().list_documents(query=args.query, page_size=args.limit, ordering="-created")
    _print_document_page(ctx, page, [
        ("ID", lambda d: d.id),
        ("TITLE", lambda d: truncate(d.title, 50)),
        ("CREATED", lambda d: d.created_date),
    ])
    return 0


def cmd_docs_similar(ctx: Context, args: argparse.Namespace) -> int:
    page = ctx.client().similar_documents(args.id, page_size=args.limit)
    _print_document_page(ctx, page, [
        ("ID", lambda d: d.id),
        ("TITLE", lambda d: truncate(d.title, 50)),
        ("CREATED", lambda d: d.created_date),
    ], noun="similar documents")
    return 0


def cmd_docs_get(ctx: Context, args: argparse.Namespace) -> int:
    doc = ctx.client().get_document(args.id)
    if ctx.json:
        print_json(doc)
    else:
        print_details(doc, DOCUMENT_FIELDS)
    return 0


def cmd_docs_content(ctx: Context, args: argparse.Namespace) -> int:
    doc = ctx.client().get_document(args.id)
    if ctx.json:
        print_json({"id": doc.id, "content": doc.content})
    else:
        print(doc.content)
    return 0


def cmd_docs_upload(ctx: Context, args: argparse.Namespace) -> int:
    """
    Upload files one by one.

    References are resolved once up front. Each file gets its own ingestion
    task; the first failing file stops the run.
    """
    client = ctx.client()
    correspondent_id = resolve_optional(client, args.correspondent, CORRESPONDENTS)
    type_id = resolve_optional(client, args.type, DOCUMENT_TYPES)
    tag_ids = [resolve_reference(client, token, TAGS) for token in args.tag]

    def upload(path: Path) -> str:
        if not path.is_file():
            raise FileNotFoundError(f"file not found: {path}")
        status(f"Uploading {path.name}...", ctx.quiet)
        return client.upload_document(
            path,
            title=args.title or path.stem,
            correspondent=correspondent_id,
            document_type=type_id,
            tags=tag_ids,
        )

    def report(path: Path, task_id: str) -> None:
        if ctx.json:
            print_json({"file": str(path), "task_id": task_id})
        elif not ctx.quiet:
            print(f"Uploaded {path.name} (task: {task_id})")

    result = run_batch([Path(f) for f in args.files], upload, on_success=report)
    if result.failed:
        path, exc = result.failed
        error(f"upload failed for {path}: {exc}")
        if result.skipped:
            status(f"Not attempted: {', '.join(str(p) for p in result.skipped)}", ctx.quiet)
        return 1
    return 0


def cmd_docs_download(ctx: Context, args: argparse.Namespace) -> int:
    downloaded = ctx.client().download_document(args.id, original=args.original)
    # Only the base name of a server-asserted filename is trusted
    fallback = Path(downloaded.filename).name if downloaded.filename else f"document_{args.id}.pdf"
    output = Path(args.output or fallback)
    output.write_bytes(downloaded.content)
    if ctx.json:
        print_json({"id": args.id, "file": str(output), "bytes": len(downloaded.content)})
    elif not ctx.quiet:
        print(f"Downloaded to {output} ({len(downloaded.content)} bytes)")
    return 0


def cmd_docs_thumbnail(ctx: Context, args: argparse.Namespace) -> int:
    content = ctx.client().get_thumbnail(args.id)
    output = Path(args.output or f"document_{args.id}_thumb.webp")
    output.write_bytes(content)
    status(f"Saved thumbnail to {output} ({len(content)} bytes)", ctx.quiet)
    return 0


def _relation_update(client: PaperlessClient, token: str, kind: ResourceKind) -> int | None:
    if token.strip().lower() in CLEAR_VALUES:
        return None
    return resolve_reference(client, token, kind)


def cmd_docs_edit(ctx: Context, args: argparse.Namespace) -> int:
    """
    Edit document metadata with a partial update.

    The document is only fetched when tags change, since the new tag set is
    computed from the current one.
    """
    client = ctx.client()
    updates: dict[str, Any] = {}

    if args.title:
        updates["title"] = args.title
    if args.correspondent:
        updates["correspondent"] = _relation_update(client, args.correspondent, CORRESPONDENTS)
    if args.type:
        updates["document_type"] = _relation_update(client, args.type, DOCUMENT_TYPES)
    if args.asn is not None:
        updates["archive_serial_number"] = args.asn

    if args.add_tag or args.remove_tag:
        current = client.get_document(args.id)
        updates["tags"] = reconcile_tags(client, current.tags, args.add_tag, args.remove_tag)

    if not updates:
        error("no changes specified")
        return 1

    doc = client.update_document(args.id, updates)
    if ctx.json:
        print_json(doc)
    elif not ctx.quiet:
        print(f"Updated document {doc.id}")
    return 0


def cmd_docs_delete(ctx: Context, args: argparse.Namespace) -> int:
    if not args.force and not confirm(f"Delete {len(args.ids)} document(s)?", ctx.quiet):
        print("Cancelled")
        return 0

    client = ctx.client()

    def report(doc_id: int, _: None) -> None:
        status(f"Deleted document {doc_id}", ctx.quiet)

    result = run_batch(args.ids, client.delete_document, on_success=report)
    if result.failed:
        doc_id, exc = result.failed
        error(f"failed to delete document {doc_id}: {exc}")
        if result.skipped:
            status(f"Not attempted: {', '.join(str(i) for i in result.skipped)}", ctx.quiet)
        return 1
    return 0


# --- named resources (tags, correspondents, types, storage paths, views) ---

def cmd_resource_list(ctx: Context, args: argparse.Namespace) -> int:
    kind: ResourceKind = args.kind
    page = ctx.client().list_resources(kind)
    if ctx.json:
        print_json(page)
        return 0
    if not page.results:
        print(f"No {kind.label}s found")
        return 0
    print_table(page.results, LIST_COLUMNS[kind.name])
    status(f"\nShowing {len(page.results)} of {page.count} {kind.label}s", ctx.quiet)
    return 0


def cmd_resource_get(ctx: Context, args: argparse.Namespace) -> int:
    kind: ResourceKind = args.kind
    client = ctx.client()
    record = client.get_resource(kind, resolve_reference(client, args.ref, kind))
    if ctx.json:
        print_json(record)
    else:
        print_details(record, DETAIL_FIELDS[kind.name])
    return 0


def cmd_resource_create(ctx: Context, args: argparse.Namespace) -> int:
    kind: ResourceKind = args.kind
    payload: dict[str, Any] = {"name": args.name}
    if getattr(args, "color", None):
        payload["color"] = args.color
    if getattr(args, "path", None):
        payload["path"] = args.path

    record = ctx.client().create_resource(kind, payload)
    if ctx.json:
        print_json(record)
    elif not ctx.quiet:
        print(f"Created {kind.label} '{record.name}' (ID: {record.id})")
    return 0


def cmd_resource_edit(ctx: Context, args: argparse.Namespace) -> int:
    kind: ResourceKind = args.kind
    updates: dict[str, Any] = {}
    if args.new_name:
        updates["name"] = args.new_name
    if getattr(args, "color", None):
        updates["color"] = args.color
    if not updates:
        error("no changes specified")
        return 1

    client = ctx.client()
    record = client.update_resource(kind, resolve_reference(client, args.ref, kind), updates)
    if ctx.json:
        print_json(record)
    elif not ctx.quiet:
        print(f"Updated {kind.label} {record.id}")
    return 0


def cmd_resource_delete(ctx: Context, args: argparse.Namespace) -> int:
    kind: ResourceKind = args.kind
    client = ctx.client()
    resource_id = resolve_reference(client, args.ref, kind)
    if not args.force and not confirm(f"Delete {kind.label} {resource_id}?", ctx.quiet):
        print("Cancelled")
        return 0
    client.delete_resource(kind, resource_id)
    status(f"Deleted {kind.label} {resource_id}", ctx.quiet)
    return 0


# --- tasks, search, stats ---

def cmd_tasks_status(ctx: Context, args: argparse.Namespace) -> int:
    task = ctx.client().get_task(args.task_id)
    if ctx.json:
        print_json(task)
    else:
        print_details(task, TASK_FIELDS)
    return 0


def cmd_search(ctx: Context, args: argparse.Namespace) -> int:
    """Global search across every object kind."""
    result = ctx.client().global_search(args.query)
    if ctx.json:
        print_json(result)
        return 0
    if not result.total:
        print("Nothing found")
        return 0

    sections = [
        ("Documents", result.documents, lambda d: d.title),
        ("Tags", result.tags, lambda r: r.name),
        ("Correspondents", result.correspondents, lambda r: r.name),
        ("Document types", result.document_types, lambda r: r.name),
        ("Storage paths", result.storage_paths, lambda r: r.name),
        ("Saved views", result.saved_views, lambda r: r.name),
    ]
    for title, records, name in sections:
        if not records:
            continue
        print(f"{title}:")
        for record in records:
            print(f"  [{record.id}] {name(record)}")
    return 0


def cmd_stats(ctx: Context, args: argparse.Namespace) -> int:
    stats = ctx.client().get_statistics()
    if ctx.json:
        print_json(stats)
        return 0
    for key, label in STATISTICS_LABELS:
        if key in stats:
            print(f"{label + ':':<18}{stats[key]}")
    return 0


# --- config ---

def cmd_config_set_url(ctx: Context, args: argparse.Namespace) -> int:
    set_url(args.url, ctx.config_path)
    status(f"URL set to: {args.url}", ctx.quiet)
    return 0


def cmd_config_set_token(ctx: Context, args: argparse.Namespace) -> int:
    set_token(args.token, ctx.config_path)
    status("Token saved", ctx.quiet)
    return 0


def cmd_config_show(ctx: Context, args: argparse.Namespace) -> int:
    stored = load_config(ctx.config_path)
    effective = resolve_config(ctx.config_path, ctx.url)

    if ctx.json:
        print_json({"url": effective.url, "token": mask_token(effective.token)})
        return 0

    print(f"URL:   {stored.url or '(not set)'}")
    print(f"Token: {mask_token(stored.token)}")
    if effective.url != stored.url and effective.url:
        print(f"\n(URL overridden: {effective.url})")
    if effective.token != stored.token and effective.token:
        print(f"(Token overridden by {TOKEN_ENV})")
    return 0


# --- pdf ---

def cmd_pdf_read(ctx: Context, args: argparse.Namespace) -> int:
    content = extract_text(args.file)
    if ctx.json:
        print_json({"file": args.file, "content": content})
    else:
        print(content)
    return 0


def cmd_pdf_info(ctx: Context, args: argparse.Namespace) -> int:
    info = pdf_info(args.file)
    if ctx.json:
        print_json(info)
    else:
        print(f"File:   {info.file}")
        print(f"Size:   {info.size_bytes} bytes")
        print(f"Pages:  {info.pages}")
    return 0


# --- parser ---

def _add_named_resource_parser(
    subparsers: Any,
    kind: ResourceKind,
    command: str,
    help_text: str,
    aliases: list[str] | None = None,
    writable: bool = True,
    editable: bool = True,
    with_color: bool = False,
    with_path: bool = False,
) -> None:
    """Register list/get[/create/edit/delete] for one named resource kind."""
    parser = subparsers.add_parser(command, aliases=aliases or [], help=help_text)
    parser.set_defaults(kind=kind, group_parser=parser)
    actions = parser.add_subparsers(dest="action")

    list_parser = actions.add_parser("list", help=f"List all {kind.label}s")
    list_parser.set_defaults(handler=cmd_resource_list)

    get_parser = actions.add_parser("get", help=f"Show {kind.label} details")
    get_parser.add_argument("ref", help=f"{kind.label} ID or name")
    get_parser.set_defaults(handler=cmd_resource_get)

    if not writable:
        return

    create_parser = actions.add_parser("create", help=f"Create a {kind.label}")
    create_parser.add_argument("name", help=f"{kind.label} name")
    if with_path:
        create_parser.add_argument("path", help="path template, e.g. 'archive/{{ created_year }}'")
    if with_color:
        create_parser.add_argument("--color", help="color (hex, e.g. #ff0000)")
    create_parser.set_defaults(handler=cmd_resource_create)

    if editable:
        edit_parser = actions.add_parser("edit", help=f"Edit a {kind.label}")
        edit_parser.add_argument("ref", help=f"{kind.label} ID or name")
        edit_parser.add_argument("--name", dest="new_name", help="new name")
        if with_color:
            edit_parser.add_argument("--color", help="new color (hex)")
        edit_parser.set_defaults(handler=cmd_resource_edit)

    delete_parser = actions.add_parser("delete", help=f"Delete a {kind.label}")
    delete_parser.add_argument("ref", help=f"{kind.label} ID or name")
    delete_parser.add_argument("-f", "--force", action="store_true", help="skip confirmation")
    delete_parser.set_defaults(handler=cmd_resource_delete)


def _add_documents_parser(subparsers: Any) -> None:
    parser = subparsers.add_parser(
        "documents", aliases=["docs", "doc"], help="List, search, upload, download and edit documents"
    )
    parser.set_defaults(group_parser=parser)
    actions = parser.add_subparsers(dest="action")

    p = actions.add_parser("list", help="List documents")
    p.add_argument("--query", help="full-text search query")
    p.add_argument("--tag", action="append", default=[], help="filter by tag name (repeatable)")
    p.add_argument("--correspondent", help="filter by correspondent name")
    p.add_argument("--type", help="filter by document type name")
    p.add_argument("--created-after", help="created after date (YYYY-MM-DD)")
    p.add_argument("--created-before", help="created before date (YYYY-MM-DD)")
    p.add_argument("--limit", type=int, default=25, help="page size (default: 25)")
    p.add_argument("--page", type=int, default=1, help="page number (default: 1)")
    p.set_defaults(handler=cmd_docs_list)

    p = actions.add_parser("search", help="Full-text search documents")
    p.add_argument("query")
    p.add_argument("--limit", type=int, default=25, help="max results (default: 25)")
    p.set_defaults(handler=cmd_docs_search)

    p = actions.add_parser("get", help="Show document details")
    p.add_argument("id", type=int)
    p.set_defaults(handler=cmd_docs_get)

    p = actions.add_parser("content", help="Print the document's extracted text")
    p.add_argument("id", type=int)
    p.set_defaults(handler=cmd_docs_content)

    p = actions.add_parser("similar", help="Find documents similar to a document")
    p.add_argument("id", type=int)
    p.add_argument("--limit", type=int, default=10, help="max results (default: 10)")
    p.set_defaults(handler=cmd_docs_similar)

    p = actions.add_parser("upload", help="Upload one or more files")
    p.add_argument("files", nargs="+")
    p.add_argument("--title", help="document title (default: file name)")
    p.add_argument("--correspondent", help="correspondent name or ID")
    p.add_argument("--type", help="document type name or ID")
    p.add_argument("--tag", action="append", default=[], help="tag name or ID (repeatable)")
    p.set_defaults(handler=cmd_docs_upload)

    p = actions.add_parser("download", help="Download a document file")
    p.add_argument("id", type=int)
    p.add_argument("-o", "--output", help="output path")
    p.add_argument("--original", action="store_true", help="download the original file")
    p.set_defaults(handler=cmd_docs_download)

    p = actions.add_parser("thumbnail", help="Download a document thumbnail")
    p.add_argument("id", type=int)
    p.add_argument("-o", "--output", help="output path")
    p.set_defaults(handler=cmd_docs_thumbnail)

    p = actions.add_parser("edit", help="Edit document metadata")
    p.add_argument("id", type=int)
    p.add_argument("--title", help="new title")
    p.add_argument("--correspondent", help="correspondent name or ID ('none' clears)")
    p.add_argument("--type", help="document type name or ID ('none' clears)")
    p.add_argument("--add-tag", action="append", default=[], help="add tag (repeatable)")
    p.add_argument("--remove-tag", action="append", default=[], help="remove tag (repeatable)")
    p.add_argument("--asn", type=int, help="archive serial number")
    p.set_defaults(handler=cmd_docs_edit)

    p = actions.add_parser("delete", help="Delete one or more documents")
    p.add_argument("ids", type=int, nargs="+")
    p.add_argument("-f", "--force", action="store_true", help="skip confirmation")
    p.set_defaults(handler=cmd_docs_delete)


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="paperless",
        description=(
            "Command-line client for Paperless-ngx. "
            f"Set {URL_ENV} and {TOKEN_ENV}, or save them with 'paperless config'."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help=f"Path to config file (default: {default_config_path()})",
    )
    parser.add_argument("-u", "--url", help=f"Paperless server URL (overrides {URL_ENV} and config)")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress non-essential output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    _add_documents_parser(subparsers)
    _add_named_resource_parser(subparsers, TAGS, "tags", "Manage tags", with_color=True)
    _add_named_resource_parser(subparsers, CORRESPONDENTS, "correspondents", "Manage correspondents")
    _add_named_resource_parser(subparsers, DOCUMENT_TYPES, "types", "Manage document types")
    _add_named_resource_parser(
        subparsers,
        STORAGE_PATHS,
        "storage",
        "Manage storage paths",
        aliases=["paths", "storage-paths"],
        editable=False,
        with_path=True,
    )
    _add_named_resource_parser(
        subparsers, SAVED_VIEWS, "views", "Show saved views", aliases=["saved-views"], writable=False
    )

    tasks_parser = subparsers.add_parser("tasks", help="Check background task status")
    tasks_parser.set_defaults(group_parser=tasks_parser)
    task_actions = tasks_parser.add_subparsers(dest="action")
    p = task_actions.add_parser("status", help="Show the status of an ingestion task")
    p.add_argument("task_id")
    p.set_defaults(handler=cmd_tasks_status)

    p = subparsers.add_parser("search", help="Search across all object kinds")
    p.add_argument("query")
    p.set_defaults(handler=cmd_search)

    p = subparsers.add_parser("stats", help="Show server statistics")
    p.set_defaults(handler=cmd_stats)

    config_parser = subparsers.add_parser("config", help="Manage CLI configuration")
    config_parser.set_defaults(group_parser=config_parser)
    config_actions = config_parser.add_subparsers(dest="action")
    p = config_actions.add_parser("set-url", help="Save the server URL")
    p.add_argument("url")
    p.set_defaults(handler=cmd_config_set_url)
    p = config_actions.add_parser("set-token", help="Save the API token")
    p.add_argument("token")
    p.set_defaults(handler=cmd_config_set_token)
    p = config_actions.add_parser("show", help="Show the current configuration")
    p.set_defaults(handler=cmd_config_show)

    pdf_parser = subparsers.add_parser("pdf", help="Local PDF utilities")
    pdf_parser.set_defaults(group_parser=pdf_parser)
    pdf_actions = pdf_parser.add_subparsers(dest="action")
    p = pdf_actions.add_parser("read", help="Extract text from a PDF")
    p.add_argument("file")
    p.set_defaults(handler=cmd_pdf_read)
    p = pdf_actions.add_parser("info", help="Show PDF size and page count")
    p.add_argument("file")
    p.set_defaults(handler=cmd_pdf_info)

    return parser


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    handler = getattr(parsed, "handler", None)
    if handler is None:
        parsed.group_parser.print_help()
        return 1

    ctx = Context(
        config_path=parsed.config or default_config_path(),
        url=parsed.url,
        json=parsed.json,
        quiet=parsed.quiet,
    )

    try:
        return handler(ctx, parsed)
    except (PaperlessError, ConfigError, PdfError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
