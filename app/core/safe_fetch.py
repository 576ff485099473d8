"""
Single-row query discipline for scoped reads and writes.

Every update/delete is filtered by id plus organization_id and executed with
the row representation returned. The number of returned rows decides the
outcome:

- 0 rows  -> NotFoundOrForbidden (absent and cross-organization look the same)
- 1 row   -> the row
- 2+ rows -> IntegrityFault, never pick one

Errors raised by the store or the network become TransportFault.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from app.core.errors import IntegrityFault, NotFoundOrForbidden, TransportFault

logger = logging.getLogger(__name__)


def execute(query: Any, context: str) -> List[Dict[str, Any]]:
    """Run a query builder and return its rows, mapping store errors to TransportFault."""
    try:
        result = query.execute()
    except (APIError, httpx.HTTPError) as e:
        logger.error(f"{context}: {e}")
        raise TransportFault(f"{context}: {e}") from e
    if result is None or result.data is None:
        return []
    if isinstance(result.data, dict):
        return [result.data]
    return list(result.data)


def expect_single_row(rows: List[Dict[str, Any]], resource: str) -> Dict[str, Any]:
    """Zero rows is a client-facing 404, more than one is a data-integrity fault."""
    if not rows:
        raise NotFoundOrForbidden(resource)
    if len(rows) > 1:
        logger.error(f"{resource}: expected at most one row, got {len(rows)}")
        raise IntegrityFault(f"{resource}: expected at most one row, got {len(rows)}")
    return rows[0]


def _apply_filters(query: Any, filters: Dict[str, Any]) -> Any:
    for column, value in filters.items():
        query = query.eq(column, value)
    return query


def fetch_one(
    supabase: Client,
    table: str,
    filters: Dict[str, Any],
    resource: str,
    columns: str = "*",
) -> Dict[str, Any]:
    query = _apply_filters(supabase.table(table).select(columns), filters)
    # Two rows are enough to detect a uniqueness violation
    rows = execute(query.limit(2), f"Failed to get {resource}")
    return expect_single_row(rows, resource)


def fetch_optional(
    supabase: Client,
    table: str,
    filters: Dict[str, Any],
    resource: str,
    columns: str = "*",
) -> Optional[Dict[str, Any]]:
    """Like fetch_one but zero rows returns None."""
    query = _apply_filters(supabase.table(table).select(columns), filters)
    rows = execute(query.limit(2), f"Failed to get {resource}")
    if not rows:
        return None
    return expect_single_row(rows, resource)


def update_one(
    supabase: Client,
    table: str,
    values: Dict[str, Any],
    filters: Dict[str, Any],
    resource: str,
) -> Dict[str, Any]:
    query = _apply_filters(supabase.table(table).update(values), filters)
    rows = execute(query, f"Failed to update {resource}")
    return expect_single_row(rows, resource)


def delete_one(
    supabase: Client,
    table: str,
    filters: Dict[str, Any],
    resource: str,
) -> Dict[str, Any]:
    query = _apply_filters(supabase.table(table).delete(), filters)
    rows = execute(query, f"Failed to delete {resource}")
    return expect_single_row(rows, resource)


def insert_one(
    supabase: Client,
    table: str,
    values: Dict[str, Any],
    resource: str,
) -> Dict[str, Any]:
    """The store generates the id, so anything but exactly one returned row is a fault."""
    rows = execute(supabase.table(table).insert(values), f"Failed to create {resource}")
    if len(rows) != 1:
        logger.error(f"{resource}: insert returned {len(rows)} rows")
        raise IntegrityFault(f"{resource}: insert returned {len(rows)} rows")
    return rows[0]

