from collections import defaultdict
from datetime import date, timedelta
from itertools import count
from types import SimpleNamespace
from urllib.parse import unquote

import pytest
from fastapi.testclient import TestClient
from pywebpush import WebPushException

from auth import get_current_user
from errors import StorageError
from main import app
from services import push_service
from services.push_service import PushService, get_push_service
from services.schedule import get_today
from supabase_rest import get_store

TUESDAY = date(2024, 5, 7)
USER_ID = "user-1"

# (table) -> columns forming a unique key
UNIQUE_KEYS = {
    "intention_completions": ("task_id", "completed_at"),
    "push_subscriptions": ("user_id", "endpoint"),
    "habit_day_marks": ("task_id", "marked_date"),
}


def _coerce(row_value, raw: str):
    if isinstance(row_value, bool):
        return raw == "true"
    if isinstance(row_value, int):
        return int(raw)
    return raw


def _matches(row: dict, column: str, expr: str) -> bool:
    value = row.get(column)
    if expr == "not.is.null":
        return value is not None
    if expr == "is.null":
        return value is None
    op, _, raw = expr.partition(".")
    raw = unquote(raw)
    if value is None:
        return False
    if op == "in":
        return str(value) in {unquote(v) for v in raw.strip("()").split(",")}
    if isinstance(value, (int, bool)):
        current, other = value, _coerce(value, raw)
    else:
        current, other = str(value), raw
    return {
        "eq": current == other,
        "neq": current != other,
        "gt": current > other,
        "gte": current >= other,
        "lt": current < other,
        "lte": current <= other,
    }[op]


class FakeStore:
    """In-memory stand-in for SupabaseRest understanding the PostgREST operators the service uses."""

    def __init__(self):
        self.tables = defaultdict(list)
        self.calls = []
        self.failures = {}  # (method, table) -> predicate(filters) or True
        self._ids = count(1)

    # helpers ---------------------------------------------------------
    def seed(self, table: str, *rows: dict):
        for row in rows:
            row = dict(row)
            row.setdefault("id", f"{table}-{next(self._ids)}")
            self.tables[table].append(row)
        return self

    def rows(self, table: str) -> list[dict]:
        return self.tables[table]

    def fail(self, method: str, table: str, when=None, status: int = 500):
        self.failures[(method, table)] = (when, status)

    def _maybe_fail(self, method: str, table: str, filters=None):
        if (method, table) in self.failures:
            when, status = self.failures[(method, table)]
            if when is None or when(filters or {}):
                raise StorageError(upstream_status=status, detail="simulated failure")

    def _filter(self, table, filters=None, query_string=None):
        conditions = [(k, f"eq.{v}") for k, v in (filters or {}).items()]
        for part in (query_string or "").split("&"):
            if not part or part.startswith(("limit=", "select=")):
                continue
            column, _, expr = part.partition("=")
            conditions.append((column, expr))
        return [row for row in self.tables[table] if all(_matches(row, c, e) for c, e in conditions)]

    # SupabaseRest interface -----------------------------------------
    def select(self, table, filters=None, columns="*", query_string=None):
        self.calls.append(("select", table, filters, query_string))
        self._maybe_fail("select", table, filters)
        rows = self._filter(table, filters, query_string)
        if columns == "*":
            return [dict(r) for r in rows]
        wanted = [c.strip() for c in columns.split(",")]
        return [{c: r.get(c) for c in wanted} for r in rows]

    def select_one(self, table, filters, columns="*"):
        rows = self.select(table, filters=filters, columns=columns)
        return rows[0] if rows else None

    def insert(self, table, data):
        self.calls.append(("insert", table, data))
        self._maybe_fail("insert", table, data)
        key = UNIQUE_KEYS.get(table)
        if key and any(all(str(r.get(k)) == str(data.get(k)) for k in key) for r in self.tables[table]):
            raise StorageError(upstream_status=409, detail="duplicate key value violates unique constraint")
        row = dict(data)
        row.setdefault("id", f"{table}-{next(self._ids)}")
        self.tables[table].append(row)
        if table == "intention_completions":
            self._streak_trigger(row)
        return dict(row)

    def update(self, table, filters, data):
        self.calls.append(("update", table, filters, data))
        rows = self._filter(table, filters)
        for row in rows:
            row.update(data)
        return dict(rows[0]) if rows else {}

    def delete(self, table, filters):
        self.calls.append(("delete", table, filters))
        doomed = self._filter(table, filters)
        self.tables[table] = [r for r in self.tables[table] if r not in doomed]

    def delete_in(self, table, column, values):
        values = list(values)
        self.calls.append(("delete_in", table, column, values))
        self._maybe_fail("delete_in", table)
        self.tables[table] = [r for r in self.tables[table] if str(r.get(column)) not in set(map(str, values))]

    # emulates the database trigger that maintains tasks.current_streak / best_streak
    def _streak_trigger(self, completion: dict):
        task = next((t for t in self.tables["tasks"] if str(t["id"]) == str(completion["task_id"])), None)
        if task is None:
            return
        days = {date.fromisoformat(c["completed_at"]) for c in self.tables["intention_completions"]
                if str(c["task_id"]) == str(task["id"])}
        cursor = date.fromisoformat(completion["completed_at"])
        streak = 0
        while cursor in days:
            streak += 1
            cursor -= timedelta(days=1)
        task["current_streak"] = streak
        task["best_streak"] = max(task.get("best_streak") or 0, streak)
        task["last_completed_at"] = f"{completion['completed_at']}T12:00:00+00:00"


class RecordingWebPush:
    """Replaces pywebpush.webpush; answers per endpoint with a status code."""

    def __init__(self):
        self.sent = []
        self.statuses = {}  # endpoint -> HTTP status the push service answers

    def __call__(self, subscription_info, data, vapid_private_key, vapid_claims, ttl):
        endpoint = subscription_info["endpoint"]
        status = self.statuses.get(endpoint, 201)
        if status >= 400:
            raise WebPushException(f"Push failed: {status}", response=SimpleNamespace(status_code=status, text=""))
        self.sent.append((endpoint, data))


def subscription_row(user_id: str, n: int) -> dict:
    return {
        "id": f"sub-{user_id}-{n}",
        "user_id": user_id,
        "endpoint": f"https://push.example.com/{user_id}/{n}",
        "p256dh": "BKey",
        "auth": "secret",
    }


# ----------------------------------------------------------------------
@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def webpush(monkeypatch):
    recorder = RecordingWebPush()
    monkeypatch.setattr(push_service, "webpush", recorder)
    return recorder


@pytest.fixture
def push(webpush):
    return PushService(vapid_private_key="test-private-key", vapid_subject="mailto:test@example.com")


@pytest.fixture
def today():
    return TUESDAY


@pytest.fixture
def client(store, push, today):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_push_service] = lambda: push
    app.dependency_overrides[get_today] = lambda: today
    app.dependency_overrides[get_current_user] = lambda: USER_ID
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
