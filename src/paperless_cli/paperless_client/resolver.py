"""
Name-or-ID reference resolution and tag-set reconciliation.

Users refer to tags, correspondents, document types and storage paths either
by numeric ID or by name. Numeric tokens are trusted as-is (the server rejects
bad IDs later); names cost one list call each and match case-insensitively.
Nothing is cached: every token is resolved independently.
"""

import logging
import re
from typing import Iterable, Protocol

from .client import NotFound
from .models import TAGS, ResourceKind

logger = logging.getLogger(__name__)

_INT_TOKEN = re.compile(r"[+-]?[0-9]+")


class NameLister(Protocol):
    """Anything that can list ``(id, name)`` pairs for a resource kind."""

    def list_names(self, kind: ResourceKind) -> list[tuple[int, str]]:
        ...


def parse_id(token: str) -> int | None:
    """Return the integer value of a base-10 token, or None for a name."""
    token = token.strip()
    if _INT_TOKEN.fullmatch(token):
        return int(token)
    return None


def resolve_reference(client: NameLister, token: str, kind: ResourceKind) -> int:
    """
    Resolve a user-supplied token to a resource ID.

    Args:
        client: Source of (id, name) pairs, normally a PaperlessClient
        token: Numeric ID or free-text name
        kind: Resource kind the token refers to

    Returns:
        The resource ID

    Raises:
        NotFound: no record of ``kind`` has that name
    """
    numeric = parse_id(token)
    if numeric is not None:
        return numeric

    wanted = token.strip().casefold()
    for record_id, name in client.list_names(kind):
        if name.casefold() == wanted:
            logger.debug("Resolved %s %r -> %s", kind.label, token, record_id)
            return record_id

    raise NotFound(kind.label, token)


def resolve_optional(client: NameLister, token: str | None, kind: ResourceKind) -> int | None:
    """Like ``resolve_reference`` but passes None through."""
    if token is None or token == "":
        return None
    return resolve_reference(client, token, kind)


def reconcile_tags(
    client: NameLister,
    current: Iterable[int],
    add: Iterable[str] = (),
    remove: Iterable[str] = (),
) -> set[int]:
    """
    Compute a document's new tag set.

    All adds are applied before any remove, so a tag that is both added and
    removed ends up absent. Adding a present tag or removing an absent one is a
    no-op. A remove token naming a tag that does not exist is skipped; an add
    token that does not resolve raises NotFound.

    Returns:
        New set of tag IDs (order is not meaningful)
    """
    tags = set(current)

    for token in add:
        tags.add(resolve_reference(client, token, TAGS))

    for token in remove:
        try:
            tag_id = resolve_reference(client, token, TAGS)
        except NotFound:
            logger.debug("Tag %r does not exist, nothing to remove", token)
            continue
        tags.discard(tag_id)

    return tags
