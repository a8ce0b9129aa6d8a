"""
Command-line client for the Paperless-ngx document management REST API.

Lists, fetches, creates, edits and deletes documents, tags, correspondents,
document types and storage paths; uploads files for ingestion and tracks
the resulting tasks; resolves human-friendly names to server IDs.
"""

__version__ = "0.1.0"
