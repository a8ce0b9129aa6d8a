"""
CLI runner module.

Provides command groups:
- documents: list, search, get, content, similar, upload, download, thumbnail, edit, delete
- tags, correspondents, types, storage, views: per-resource management
- tasks: ingestion task status
- search, stats: global search and server statistics
- config: stored URL and token
- pdf: local PDF text extraction
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
