"""
Search, sort and pagination over an in-memory record list.

Collection endpoints fetch every record from the store and run them
through :func:`query_records`.  Search and sort expressions use the
public field names of the API (``ownerName``, ``email`` ...); each
service passes a mapping from those names to record keys.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from ..core.errors import ValidationFailedError


@dataclass
class Page:
    """One page of records plus pagination metadata."""

    items: List[dict]
    page_number: int
    page_size: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool
    total_count: int = 0

    @property
    def count(self) -> int:
        return len(self.items)


@dataclass
class FieldMap:
    """Public field names allowed for searching and sorting."""

    search: Mapping[str, str]
    sort: Mapping[str, str] = field(default_factory=dict)


def parse_expression(expression: Optional[str], default: str = "") -> Tuple[str, str]:
    """Split ``field:value`` into its two halves.

    A missing value yields ``default``; an empty expression yields two
    empty strings.
    """
    if not expression:
        return "", ""
    name, _, value = expression.partition(":")
    return name.strip(), value.strip() if value else default


def filter_records(records: List[dict], search: Optional[str], fields: Mapping[str, str]) -> List[dict]:
    """Keep records whose searched field contains the substring, case-insensitively.

    An unrecognised field disables filtering.
    """
    name, needle = parse_expression(search)
    key = fields.get(name)
    if key is None:
        return list(records)
    needle = needle.lower()
    return [r for r in records if needle in str(r.get(key) or "").lower()]


def sort_records(records: List[dict], sort: Optional[str], fields: Mapping[str, str]) -> List[dict]:
    """Order records by ``field:asc`` or ``field:desc`` (``asc`` by default).

    The sort is stable, so ties keep store order.  An unrecognised
    field leaves the order unchanged.
    """
    name, direction = parse_expression(sort, default="asc")
    key = fields.get(name)
    if key is None:
        return list(records)
    # Records missing the field sort first in ascending order.
    return sorted(
        records,
        key=lambda r: (r.get(key) is not None, r.get(key) if r.get(key) is not None else 0),
        reverse=direction.lower() == "desc",
    )


def paginate(records: List[dict], page_number: int, page_size: int) -> Page:
    """Slice ``records`` to the 1-based page and compute the metadata."""
    if page_number < 1 or page_size < 1:
        raise ValidationFailedError("page_number and page_size must be positive")
    total_pages = math.ceil(len(records) / page_size)
    start = (page_number - 1) * page_size
    return Page(
        items=records[start:start + page_size],
        page_number=page_number,
        page_size=page_size,
        total_pages=total_pages,
        has_previous_page=page_number > 1,
        has_next_page=page_number < total_pages,
        total_count=len(records),
    )


def query_records(
    records: List[dict],
    page_number: int,
    page_size: int,
    search: Optional[str],
    sort: Optional[str],
    fields: FieldMap,
) -> Page:
    """Filter, then sort, then paginate."""
    filtered = filter_records(records, search, fields.search)
    ordered = sort_records(filtered, sort, fields.sort or fields.search)
    return paginate(ordered, page_number, page_size)


def with_snake_case(names: Dict[str, str]) -> Dict[str, str]:
    """Accept the column names themselves alongside the public names."""
    mapping = dict(names)
    for column in names.values():
        mapping.setdefault(column, column)
    return mapping
