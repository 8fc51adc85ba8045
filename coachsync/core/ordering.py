"""In-memory ordering of store documents.

Query watches are opened without server-side ordering (no index requirement),
so result sets arrive unordered and are sorted here. Sorting is stable.
Documents whose field is missing or holds a value that cannot be ordered
(None, bool, dicts) go last in their original order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, Literal

SortDirection = Literal["asc", "desc"]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compare_values(left: Any, right: Any) -> int:
    """Three-way comparison of timestamps, strings or numbers.

    Returns 0 for mismatched or unsupported types.
    """
    if isinstance(left, datetime) and isinstance(right, datetime):
        left_ts = ensure_utc(left).timestamp()
        right_ts = ensure_utc(right).timestamp()
        return (left_ts > right_ts) - (left_ts < right_ts)

    if isinstance(left, str) and isinstance(right, str):
        left_key, right_key = left.casefold(), right.casefold()
        if left_key == right_key:
            left_key, right_key = left, right
        return (left_key > right_key) - (left_key < right_key)

    if _is_number(left) and _is_number(right):
        return (left > right) - (left < right)

    return 0


def sort_documents(
    documents: Iterable[Mapping[str, Any]],
    field: str,
    direction: SortDirection = "desc",
) -> list[Any]:
    """Stable-sort documents by a field.

    Args:
        documents: Documents to sort (not mutated)
        field: Field name to order by
        direction: "desc" (default) or "asc"

    Returns:
        New list in the requested order
    """
    ordered: list[tuple[tuple[int, Any, Any], Mapping[str, Any]]] = []
    unordered: list[Mapping[str, Any]] = []
    for document in documents:
        key = sort_key(document.get(field))
        if key is None:
            unordered.append(document)
        else:
            ordered.append((key, document))

    # reverse=True keeps equal keys in input order
    ordered.sort(key=lambda item: item[0], reverse=direction == "desc")
    return [document for _, document in ordered] + unordered


def sort_key(value: Any) -> tuple[int, Any, Any] | None:
    """Total-order key for a field value, or None when it cannot be ordered.

    Values of different families never compare against each other: numbers
    sort before strings, strings before timestamps.
    """
    if isinstance(value, datetime):
        return (2, ensure_utc(value).timestamp(), 0)
    if isinstance(value, str):
        return (1, value.casefold(), value)
    if _is_number(value):
        return (0, value, 0)
    return None
