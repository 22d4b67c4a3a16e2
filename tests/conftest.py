import io
import re
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from PIL import Image

from autodebate.core.dependencies import get_current_user_id, get_optional_user
from autodebate.database.supabase_client import get_service_supabase, get_supabase
from autodebate.main import app, limiter

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

TABLE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "profiles": {"points": 0, "level": 1, "privacy_settings": None},
    "group_members": {"role": "member"},
    "reports": {"status": "pending"},
}
TIMESTAMP_DEFAULTS = {
    "group_members": "joined_at",
    "user_achievements": "earned_at",
}


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


def _split_top_level(expr: str) -> List[str]:
    parts, depth, current = [], 0, ""
    for ch in expr:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append(current)
            current = ""
        else:
            current += ch
    if current:
        parts.append(current)
    return parts


def _parse_or(expr: str) -> Callable[[Dict[str, Any]], bool]:
    """PostgREST or=(...) filter: comma separated col.op.value items and and(...) groups"""
    predicates = []
    for item in _split_top_level(expr):
        item = item.strip()
        if item.startswith("and(") and item.endswith(")"):
            inner = [_parse_or(part) for part in _split_top_level(item[4:-1])]
            predicates.append(lambda r, inner=inner: all(p(r) for p in inner))
            continue
        column, op, value = item.split(".", 2)
        if op == "eq":
            predicates.append(lambda r, c=column, v=value: str(r.get(c)) == v)
        elif op == "neq":
            predicates.append(lambda r, c=column, v=value: str(r.get(c)) != v)
        elif op == "is" and value == "null":
            predicates.append(lambda r, c=column: r.get(c) is None)
        else:
            raise ValueError(f"unsupported or_ operator: {op}")
    return lambda r: any(p(r) for p in predicates)


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(actual, expected):
        if actual is None:
            return False
        return op(str(actual), str(expected)) if isinstance(actual, str) else op(actual, expected)
    return check


class FakeQuery:
    """Enough of the supabase-py query builder for the services under test."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.action = "select"
        self.payload: Any = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orders: List[tuple] = []
        self.count_mode: Optional[str] = None
        self._limit: Optional[int] = None
        self._offset = 0
        self._single: Optional[str] = None
        self._negate = False

    # actions
    def select(self, columns: str = "*", count: Optional[str] = None):
        self.count_mode = count
        return self

    def insert(self, payload):
        self.action, self.payload = "insert", payload
        return self

    def upsert(self, payload, **kwargs):
        self.action, self.payload = "upsert", payload
        return self

    def update(self, payload):
        self.action, self.payload = "update", payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    # filters
    @property
    def not_(self):
        self._negate = True
        return self

    def _add(self, predicate):
        if self._negate:
            self._negate = False
            self.filters.append(lambda r: not predicate(r))
        else:
            self.filters.append(predicate)
        return self

    def eq(self, column, value):
        return self._add(lambda r: r.get(column) == value)

    def neq(self, column, value):
        return self._add(lambda r: r.get(column) != value)

    def gt(self, column, value):
        return self._add(lambda r: _compare(lambda a, b: a > b)(r.get(column), value))

    def gte(self, column, value):
        return self._add(lambda r: _compare(lambda a, b: a >= b)(r.get(column), value))

    def lt(self, column, value):
        return self._add(lambda r: _compare(lambda a, b: a < b)(r.get(column), value))

    def lte(self, column, value):
        return self._add(lambda r: _compare(lambda a, b: a <= b)(r.get(column), value))

    def in_(self, column, values):
        values = list(values)
        return self._add(lambda r: r.get(column) in values)

    def is_(self, column, value):
        assert value == "null"
        return self._add(lambda r: r.get(column) is None)

    def ilike(self, column, pattern):
        regex = re.compile(re.escape(pattern).replace("%", ".*"), re.IGNORECASE)
        return self._add(lambda r: r.get(column) is not None and regex.fullmatch(str(r.get(column))) is not None)

    def or_(self, expr):
        return self._add(_parse_or(expr))

    # modifiers
    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def offset(self, n):
        self._offset = n
        return self

    def maybe_single(self):
        self._single = "maybe"
        return self

    def single(self):
        self._single = "single"
        return self

    def _matching(self) -> List[Dict[str, Any]]:
        return [r for r in self.db.tables[self.table] if all(f(r) for f in self.filters)]

    def execute(self):
        self.db.check_failure(self.action, self.table)
        handler = getattr(self, f"_execute_{self.action}")
        return handler()

    def _execute_select(self):
        rows = self._matching()
        for column, desc in reversed(self.orders):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=desc)
            rows = missing + present if desc else present + missing
        total = len(rows)
        rows = rows[self._offset:]
        if self._limit is not None:
            rows = rows[:self._limit]
        rows = [dict(r) for r in rows]
        if self._single == "maybe":
            return FakeResponse(rows[0], total) if rows else None
        if self._single == "single":
            if len(rows) != 1:
                raise Exception("JSON object requested, multiple (or no) rows returned")
            return FakeResponse(rows[0], total)
        return FakeResponse(rows, total if self.count_mode else None)

    def _execute_insert(self):
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        created = [self.db.add_row(self.table, row) for row in payload]
        return FakeResponse([dict(r) for r in created])

    def _execute_upsert(self):
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        result = []
        for row in payload:
            existing = next((r for r in self.db.tables[self.table] if row.get("id") and r.get("id") == row["id"]), None)
            if existing is not None:
                existing.update(row)
                result.append(dict(existing))
            else:
                result.append(dict(self.db.add_row(self.table, row)))
        return FakeResponse(result)

    def _execute_update(self):
        updated = []
        for row in self._matching():
            row.update(self.payload)
            updated.append(dict(row))
        for hook in self.db.after_update.get(self.table, []):
            hook(self.db, self.payload, updated)
        return FakeResponse(updated)

    def _execute_delete(self):
        doomed = self._matching()
        self.db.tables[self.table] = [r for r in self.db.tables[self.table] if r not in doomed]
        return FakeResponse([dict(r) for r in doomed])


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    @property
    def objects(self) -> Dict[str, bytes]:
        return self.storage.objects[self.name]

    def upload(self, path, content, file_options=None):
        if self.name in self.storage.fail_uploads or any(m in path for m in self.storage.fail_paths):
            raise Exception(f"upload to {self.name} failed")
        if path in self.objects:
            raise Exception("The resource already exists")
        self.objects[path] = content
        return {"Key": f"{self.name}/{path}"}

    def remove(self, paths):
        removed = []
        for path in paths:
            if self.objects.pop(path, None) is not None:
                removed.append({"name": path})
        return removed

    def create_signed_url(self, path, expires_in):
        if path not in self.objects:
            raise Exception("Object not found")
        return {"signedURL": f"https://fake.supabase.co/storage/v1/object/sign/{self.name}/{path}?expires_in={expires_in}"}

    def get_public_url(self, path):
        return f"https://fake.supabase.co/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.objects: Dict[str, Dict[str, bytes]] = defaultdict(dict)
        self.fail_uploads = set()
        self.fail_paths = set()

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabase:
    """In-memory stand-in for a supabase Client: tables, storage buckets and write hooks."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.storage = FakeStorage()
        self.failures = set()
        self.after_update: Dict[str, List[Callable]] = defaultdict(list)
        self._clock = count(1)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def now(self) -> str:
        return (BASE_TIME + timedelta(seconds=next(self._clock))).isoformat()

    def check_failure(self, action: str, table: str):
        if (action, table) in self.failures:
            raise Exception(f"{action} on {table} failed")

    def add_row(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        stored = {**TABLE_DEFAULTS.get(table, {}), **row}
        stored.setdefault("id", str(uuid.uuid4()))
        stored.setdefault("created_at", self.now())
        if table in TIMESTAMP_DEFAULTS:
            stored.setdefault(TIMESTAMP_DEFAULTS[table], stored["created_at"])
        self.tables[table].append(stored)
        return stored

    def rows(self, table: str, **filters) -> List[Dict[str, Any]]:
        return [r for r in self.tables[table] if all(r.get(k) == v for k, v in filters.items())]

    # seeding helpers
    def add_profile(self, username: str, **fields) -> Dict[str, Any]:
        return self.add_row("profiles", {"username": username, **fields})

    def grant(self, user_id: str, role: str) -> Dict[str, Any]:
        return self.add_row("user_roles", {"user_id": user_id, "role": role})


class AuthState:
    def __init__(self):
        self.user: Optional[Dict[str, Any]] = None

    def login(self, user_id: str, email: Optional[str] = None):
        self.user = {"id": user_id, "email": email or f"{user_id}@example.com", "user_metadata": {}}

    def logout(self):
        self.user = None


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def auth() -> AuthState:
    return AuthState()


@pytest.fixture
def client(db, auth):
    def current_user():
        if auth.user is None:
            raise HTTPException(status_code=403, detail="Not authenticated")
        return auth.user

    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_current_user_id] = current_user
    app.dependency_overrides[get_optional_user] = lambda: auth.user
    limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def users(db):
    """One profile per app role plus a user without any role row"""
    admin = db.add_profile("admin")
    copiloto = db.add_profile("copiloto")
    general = db.add_profile("general")
    nobody = db.add_profile("nobody")
    db.grant(admin["id"], "admin")
    db.grant(copiloto["id"], "copiloto")
    db.grant(general["id"], "general")
    return {"admin": admin, "copiloto": copiloto, "general": general, "nobody": nobody}


@pytest.fixture
def image_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (1200, 800), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()
