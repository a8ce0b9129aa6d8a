"""
Output helpers for CLI commands: tables, JSON, record details, prompts.
"""

import dataclasses
import json
import sys
from typing import Any, Callable, Sequence

Column = tuple[str, Callable[[Any], Any]]


def _json_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def print_json(value: Any) -> None:
    """Pretty-print a record, page or plain value as JSON on stdout."""
    print(json.dumps(value, indent=2, default=_json_default, ensure_ascii=False))


def truncate(text: str | None, width: int) -> str:
    text = text or ""
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if value is True:
        return "yes"
    if value is False:
        return ""
    return str(value)


def print_table(records: Sequence[Any], columns: Sequence[Column]) -> None:
    """Print records as left-aligned columns separated by two spaces."""
    headers = [header for header, _ in columns]
    rows = [[_cell(getter(record)) for _, getter in columns] for record in records]
    widths = [
        max(len(headers[i]), *(len(row[i]) for row in rows)) if rows else len(headers[i])
        for i in range(len(headers))
    ]
    for row in [headers, *rows]:
        line = "  ".join(value.ljust(widths[i]) for i, value in enumerate(row))
        print(line.rstrip())


def print_details(record: Any, fields: Sequence[Column]) -> None:
    """Print ``Label: value`` lines, skipping empty values."""
    width = max(len(label) for label, _ in fields) + 2
    for label, getter in fields:
        value = getter(record)
        if value is None or value == "" or value == []:
            continue
        text = ("yes" if value else "no") if isinstance(value, bool) else str(value)
        print(f"{label + ':':<{width}}{text}")


def status(message: str, quiet: bool = False) -> None:
    """Non-essential progress/summary line on stderr."""
    if not quiet:
        print(message, file=sys.stderr)


def error(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def confirm(message: str, quiet: bool = False) -> bool:
    """Ask a yes/no question on stderr. Quiet mode always declines."""
    if quiet:
        return False
    print(f"{message} [y/N]: ", end="", file=sys.stderr, flush=True)
    try:
        answer = input()
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")
