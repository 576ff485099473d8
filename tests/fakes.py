"""In-memory stand-in for the supabase query builder used by services and tests.

Supports the subset of the PostgREST builder the app calls: select (with
"*", column lists and one-level embeds such as "permissions(key)"), insert,
update, delete, eq, in_, order, limit, offset and execute.
"""

import itertools
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError


def _split_columns(columns: str) -> List[str]:
    parts, depth, current = [], 0, ""
    for ch in columns:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
        else:
            current += ch
    if current.strip():
        parts.append(current.strip())
    return parts


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.operation = "select"
        self.columns = "*"
        self.values: Any = None
        self.filters: List[tuple] = []
        self.orders: List[tuple] = []
        self._limit: Optional[int] = None
        self._offset = 0

    def select(self, columns: str = "*", count: Optional[str] = None):
        self.operation = "select"
        self.columns = columns
        return self

    def insert(self, values):
        self.operation = "insert"
        self.values = values
        return self

    def update(self, values):
        self.operation = "update"
        self.values = values
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, lambda v, value=value: v == value))
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append((column, lambda v, values=values: v in values))
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, size):
        self._limit = size
        return self

    def offset(self, start):
        self._offset = start
        return self

    def _matches(self, row):
        return all(test(row.get(column)) for column, test in self.filters)

    def _project(self, row):
        result = {}
        for column in _split_columns(self.columns):
            if column == "*":
                result.update(row)
            elif "(" in column:
                relation, inner = column[:-1].split("(", 1)
                foreign_key = relation[:-1] + "_id" if relation.endswith("s") else relation + "_id"
                target = next(
                    (r for r in self.db.tables.get(relation, []) if r["id"] == row.get(foreign_key)),
                    None,
                )
                if target is None:
                    result[relation] = None
                else:
                    inner_cols = [c.strip() for c in inner.split(",")]
                    result[relation] = dict(target) if "*" in inner_cols else {c: target.get(c) for c in inner_cols}
            else:
                result[column] = row.get(column)
        return result

    def execute(self):
        self.db.calls.append((self.table, self.operation))
        if self.db.fail_next is not None and self.db.fail_table in (None, self.table):
            error, self.db.fail_next = self.db.fail_next, None
            raise error

        rows = self.db.tables.setdefault(self.table, [])

        if self.operation == "insert":
            batch = self.values if isinstance(self.values, list) else [self.values]
            created = []
            for values in batch:
                row = {"id": str(uuid.uuid4()), "created_at": self.db.next_timestamp()}
                row.update(values)
                rows.append(row)
                created.append(dict(row))
            return SimpleNamespace(data=created, count=None)

        matched = [r for r in rows if self._matches(r)]

        if self.operation == "update":
            for row in matched:
                row.update(self.values)
            return SimpleNamespace(data=[dict(r) for r in matched], count=None)

        if self.operation == "delete":
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return SimpleNamespace(data=[dict(r) for r in matched], count=None)

        for column, desc in reversed(self.orders):
            matched.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
        matched = matched[self._offset:]
        if self._limit is not None:
            matched = matched[:self._limit]
        return SimpleNamespace(data=[self._project(r) for r in matched], count=len(matched))


class FakeAuth:
    def __init__(self):
        self.tokens: Dict[str, Dict[str, Any]] = {}
        self.passwords: Dict[str, tuple] = {}

    def get_user(self, jwt=None):
        user = self.tokens.get(jwt)
        if user is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=SimpleNamespace(
            id=user["id"], email=user["email"], user_metadata={}, app_metadata={}
        ))

    def sign_in_with_password(self, credentials):
        entry = self.passwords.get(credentials["email"])
        if entry is None or entry[0] != credentials["password"]:
            raise Exception("Invalid login credentials")
        user_id, token = entry[1], entry[2]
        return SimpleNamespace(
            user=SimpleNamespace(id=user_id, email=credentials["email"]),
            session=SimpleNamespace(access_token=token),
        )

    def sign_out(self):
        return None


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.fail_next: Optional[Exception] = None
        self.fail_table: Optional[str] = None
        self.auth = FakeAuth()
        self._clock = itertools.count()

    def next_timestamp(self) -> str:
        base = datetime(2026, 1, 1, tzinfo=timezone.utc).timestamp()
        return datetime.fromtimestamp(base + next(self._clock), tz=timezone.utc).isoformat()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def add(self, table: str, **values) -> Dict[str, Any]:
        row = {"id": str(uuid.uuid4()), "created_at": self.next_timestamp()}
        row.update(values)
        self.tables.setdefault(table, []).append(row)
        return row

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])

    def fail_with(self, message: str = "connection reset", code: str = "08006", table: Optional[str] = None):
        """Make the next query (on `table`, when given) raise a PostgREST APIError."""
        self.fail_table = table
        self.fail_next = APIError({"message": message, "code": code, "hint": None, "details": None})
