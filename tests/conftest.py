# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - FakeSupabase: an in-memory stand-in for the PostgREST query builder
# - API fixtures with authentication overridden
# =============================================================================

import copy
import itertools
import os
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("OPENAI_API_KEY", "")
os.environ.setdefault("POSTMARK_SERVER_TOKEN", "")
os.environ.setdefault("PAYPAL_WEBHOOK_ID", "")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test")
os.environ.setdefault("PUBLIC_APP_URL", "https://app.proposalkraft.test")
os.environ.setdefault("REQUIRE_SUBSCRIPTION", "false")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

NO_ROWS_ERROR = "PGRST116: JSON object requested, multiple (or no) rows returned"

USER_ID = "11111111-1111-4111-8111-111111111111"
OTHER_USER_ID = "22222222-2222-4222-8222-222222222222"


# =============================================================================
# In-memory Supabase
# =============================================================================

def _same(a, b) -> bool:
    if a == b:
        return True
    if a is None or b is None or isinstance(a, bool) or isinstance(b, bool):
        return False
    return str(a) == str(b)


class FakeQuery:
    """Chainable query over one FakeSupabase table."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.filters = []
        self.operation = "select"
        self.payload = None
        self.on_conflict = None
        self.count = None
        self.orders = []
        self.window = None
        self.max_rows = None
        self.want_single = False

    # Operations ---------------------------------------------------------

    def select(self, columns="*", count=None):
        self.operation = "select"
        self.count = count
        return self

    def insert(self, payload):
        self.operation, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.operation, self.payload = "update", payload
        return self

    def upsert(self, payload, on_conflict="id"):
        self.operation, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def delete(self):
        self.operation = "delete"
        return self

    # Filters ------------------------------------------------------------

    def eq(self, column, value):
        self.filters.append(lambda row: _same(row.get(column), value))
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: not _same(row.get(column), value))
        return self

    def gt(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) > value)
        return self

    def lt(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) < value)
        return self

    def in_(self, column, values):
        self.filters.append(lambda row: any(_same(row.get(column), v) for v in values))
        return self

    def contains(self, column, values):
        self.filters.append(lambda row: all(v in (row.get(column) or []) for v in values))
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def range(self, start, end):
        self.window = (start, end)
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    def single(self):
        self.want_single = True
        return self

    # Execution ----------------------------------------------------------

    def _matching(self):
        return [row for row in self.db.rows(self.table_name) if all(f(row) for f in self.filters)]

    def execute(self):
        self.db.calls.append((self.table_name, self.operation))
        if self.operation == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            data = [self.db.add(self.table_name, item) for item in items]
            return SimpleNamespace(data=copy.deepcopy(data), count=None)

        if self.operation == "upsert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            data = [self.db.upsert(self.table_name, item, self.on_conflict) for item in items]
            return SimpleNamespace(data=copy.deepcopy(data), count=None)

        rows = self._matching()

        if self.operation == "update":
            for row in rows:
                row.update(copy.deepcopy(self.payload))
            return SimpleNamespace(data=copy.deepcopy(rows), count=None)

        if self.operation == "delete":
            table = self.db.rows(self.table_name)
            table[:] = [row for row in table if row not in rows]
            return SimpleNamespace(data=copy.deepcopy(rows), count=None)

        for column, desc in reversed(self.orders):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            rows = sorted(present, key=lambda r: r[column], reverse=desc) + missing

        total = len(rows)
        if self.window:
            rows = rows[self.window[0]:self.window[1] + 1]
        if self.max_rows is not None:
            rows = rows[:self.max_rows]

        if self.want_single:
            if len(rows) != 1:
                raise Exception(NO_ROWS_ERROR)
            return SimpleNamespace(data=copy.deepcopy(rows[0]), count=None)

        return SimpleNamespace(
            data=copy.deepcopy(rows),
            count=total if self.count else None,
        )


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if self.storage.fail_uploads:
            raise Exception("bucket unavailable")
        self.storage.files[(self.name, path)] = file
        return {"Key": f"{self.name}/{path}"}

    def get_public_url(self, path):
        return f"https://test-project.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths):
        for path in paths:
            self.storage.files.pop((self.name, path), None)
        return paths


class FakeStorage:
    def __init__(self):
        self.files = {}
        self.fail_uploads = False

    def from_(self, name):
        return FakeBucket(self, name)

    def list_buckets(self):
        return [SimpleNamespace(name="logos")]


class FakeSupabase:
    """
    Minimal in-memory Supabase client.

    Inserted rows get a uuid id and increasing created_at timestamps so
    ordering by created_at follows insertion order.
    """

    def __init__(self):
        self.tables = {}
        self.calls = []
        self.storage = FakeStorage()
        self._clock = itertools.count()
        self._epoch = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

    def rows(self, table):
        return self.tables.setdefault(table, [])

    def table(self, name):
        return FakeQuery(self, name)

    def add(self, table, item):
        row = copy.deepcopy(item)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", (self._epoch + timedelta(seconds=next(self._clock))).isoformat())
        self.rows(table).append(row)
        return row

    def upsert(self, table, item, on_conflict):
        keys = [k.strip() for k in (on_conflict or "id").split(",")]
        for row in self.rows(table):
            if all(k in item and _same(row.get(k), item[k]) for k in keys):
                row.update(copy.deepcopy(item))
                return row
        return self.add(table, item)

    def seed(self, table, **row):
        """Insert a row directly and return it."""
        return copy.deepcopy(self.add(table, row))


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_db(monkeypatch):
    """Route every SupabaseClient.get_client() call to a fresh FakeSupabase."""
    from lib.supabase_client import SupabaseClient

    db = FakeSupabase()
    monkeypatch.setattr(SupabaseClient, "_instance", db)
    return db


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def other_user_id():
    return OTHER_USER_ID


@pytest.fixture
def proposal(fake_db):
    """A draft proposal owned by USER_ID with three sections."""
    return fake_db.seed(
        "proposals",
        user_id=USER_ID,
        title="Website Redesign",
        client_name="Acme Corp",
        client_email="cto@acme.test",
        worth=12000,
        status="draft",
        requires_signature=True,
        sharing_enabled=False,
        brand_kit_id=None,
        content={"sections": [
            {"type": "executive_summary", "title": "Executive Summary", "content": "We will rebuild the site."},
            {"type": "scope_of_work", "title": "Scope", "items": ["Design", "Build"]},
            {"type": "pricing", "title": "Pricing", "items": [{"name": "Design", "price": 4000}]},
        ]},
    )


@pytest.fixture
def queued(monkeypatch):
    """Capture Celery .delay() calls instead of talking to a broker."""
    from workers import tasks

    calls = {"webhooks": [], "emails": []}
    monkeypatch.setattr(tasks, "dispatch_webhook_event", SimpleNamespace(
        delay=lambda *args, **kwargs: calls["webhooks"].append((args, kwargs)),
    ))
    monkeypatch.setattr(tasks, "send_share_email", SimpleNamespace(
        delay=lambda *args, **kwargs: calls["emails"].append((args, kwargs)),
    ))
    return calls


@pytest.fixture
def client(fake_db, queued):
    """FastAPI TestClient authenticated as USER_ID."""
    from fastapi.testclient import TestClient

    from app.auth import AuthUser, get_current_user
    from app.main import app
    from lib.rate_limiter import billing_webhook_limiter

    app.dependency_overrides[get_current_user] = lambda: AuthUser(id=uuid.UUID(USER_ID), email="owner@studio.test")
    billing_webhook_limiter.reset()
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(fake_db, queued):
    """FastAPI TestClient with no authentication override."""
    from fastapi.testclient import TestClient

    from app.main import app

    app.dependency_overrides.clear()
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
